"""Services Layer — orchestrates IO around the pure core.

Invariants:
    - Services receive their session/store per call (no module-level handles)
    - Every pipeline write goes through the topology validator first

Design Decisions:
    - One service module per aggregate (workspace, pipeline) plus adapters
      for the store and the reference directory
"""
