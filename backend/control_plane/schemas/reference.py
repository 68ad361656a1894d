"""Reference Schemas — minimal client/connection payloads.

Invariants:
    - HTTP connections need config.url, S3 connections need config.bucket
"""

from pydantic import ConfigDict, Field, model_validator

from control_plane.core.domain_types import ConnectorType, ReferenceStatus
from control_plane.schemas.pipeline import CamelModel


class ClientCreate(CamelModel):
    id: str | None = Field(None, min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    workspace_id: str | None = None
    description: str = Field("", max_length=2000)


class ClientResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    workspace_id: str | None
    description: str
    status: ReferenceStatus


class ConnectionCreate(CamelModel):
    id: str | None = Field(None, min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    type: ConnectorType
    config: dict = {}
    description: str = Field("", max_length=2000)

    @model_validator(mode="after")
    def validate_config(self):
        if self.type == ConnectorType.HTTP and not isinstance(self.config.get("url"), str):
            raise ValueError("HTTP connection requires config.url")
        if self.type == ConnectorType.S3 and not isinstance(self.config.get("bucket"), str):
            raise ValueError("S3 connection requires config.bucket")
        return self


class ConnectionResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: ConnectorType
    status: ReferenceStatus
    description: str
