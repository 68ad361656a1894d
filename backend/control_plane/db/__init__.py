"""Database Package — SQLAlchemy declarative base shared by all ORM models.

Invariants:
    - All ORM models inherit from db.base.Base
"""
