"""Pipeline Control Plane Package — topology, naming, and identifiers for data pipelines.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
