"""ORM Models — SQLAlchemy declarative models for persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Pipelines reference their workspace by id; graph parts live inside the pipeline row

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata knows every table before
      create_all / alembic autogenerate runs
"""

from control_plane.models.workspace import Workspace  # noqa: F401
from control_plane.models.pipeline import Pipeline  # noqa: F401
from control_plane.models.client import Client  # noqa: F401
from control_plane.models.connection import Connection  # noqa: F401
