"""Pipeline ORM — persists one pipeline graph per row.

Invariants:
    - code is unique across ALL pipelines (not per workspace), fixed at insert
    - streams / source_connectors / sink_connectors / transforms hold camelCase
      documents exactly as produced by core.pipeline_graph
    - No column stores a wire name; wire names are computed on read

Design Decisions:
    - JSON columns for the graph parts: the graph is read and written whole,
      so a single-row update is the atomic unit of commit
    - workspace_id is an indexed reference, not a foreign key relationship
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from control_plane.db.base import Base


class Pipeline(Base):
    __tablename__ = "pipelines"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    workspace_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True,
    )
    code: Mapped[str] = mapped_column(String(4), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft", index=True,
    )
    streams: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    source_connectors: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    sink_connectors: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    transforms: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
