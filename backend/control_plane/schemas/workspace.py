"""Workspace Schemas — request/response models for workspace endpoints.

Invariants:
    - WorkspaceCreate never accepts a code; the server generates it
"""

from pydantic import ConfigDict, Field, field_validator

from control_plane.core.domain_types import WorkspaceStatus
from control_plane.schemas.pipeline import CamelModel


class WorkspaceCreate(CamelModel):
    id: str | None = Field(None, min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    description: str = Field("", max_length=2000)
    allowed_origins: list[str] = []

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class WorkspaceResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    name: str
    description: str
    status: WorkspaceStatus
    allowed_origins: list[str]
