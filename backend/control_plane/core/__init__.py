"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic (identifier_codes draws randomness only)

Design Decisions:
    - Functional core separated from imperative shell: the shell fetches
      everything a rule needs, then hands plain values to core functions
"""
