"""Pipeline Schemas — Pydantic models for pipeline and graph-edit endpoints.

Invariants:
    - Wire format is camelCase (streamName, sourceConnectors, ...), attributes snake_case
    - Every stream-name field (streams and the connector/transform references to them)
      is normalized here, at the boundary, before the validator sees it
    - Update bodies are partial: changes() returns only the fields the caller sent
    - Update bodies ignore `code` and `workspaceId` (extra fields are dropped)

Design Decisions:
    - Schemas check shape only (required fields, enums); references between graph parts
      are the topology validator's job so that all violations surface together
"""

from typing import Annotated, Any, ClassVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from control_plane.core.domain_types import (
    ConnectorType, PipelineStatus, StreamVariant, TransformType,
)
from control_plane.core.pipeline_graph import (
    SinkConnector, SourceConnector, Stream, Transform,
)
from control_plane.core.stream_names import normalize_stream_name

StreamName = Annotated[
    str, Field(max_length=500), AfterValidator(normalize_stream_name),
]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore",
    )


class PartialUpdate(CamelModel):
    _clearable: ClassVar[frozenset[str]] = frozenset({"description", "failure_queue"})

    def changes(self) -> dict[str, Any]:
        """Only the fields present in the request body; null clears optional fields only."""
        return {
            k: v for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k in self._clearable
        }


# --- Streams ------------------------------------------------------------------

class StreamIn(CamelModel):
    stream_name: StreamName
    variant: StreamVariant
    description: str | None = Field(None, max_length=2000)

    def to_domain(self) -> Stream:
        return Stream(self.stream_name, self.variant, self.description)


class StreamPairIn(CamelModel):
    """Adds `<name>.source` and `<name>.sink` in one call."""
    stream_name: StreamName
    description: str | None = Field(None, max_length=2000)


class StreamUpdate(PartialUpdate):
    stream_name: StreamName | None = None
    variant: StreamVariant | None = None
    description: str | None = Field(None, max_length=2000)


# --- Connectors ---------------------------------------------------------------

class SourceConnectorIn(CamelModel):
    client_id: str = Field(min_length=1)
    connector_type: ConnectorType
    stream_name: StreamName
    description: str | None = Field(None, max_length=2000)

    def to_domain(self) -> SourceConnector:
        return SourceConnector(
            client_id=self.client_id, connector_type=self.connector_type,
            stream_name=self.stream_name, description=self.description,
        )


class SourceConnectorUpdate(PartialUpdate):
    client_id: str | None = Field(None, min_length=1)
    connector_type: ConnectorType | None = None
    stream_name: StreamName | None = None
    description: str | None = Field(None, max_length=2000)


class SinkConnectorIn(CamelModel):
    connection_id: str = Field(min_length=1)
    connector_type: ConnectorType
    stream_name: StreamName
    description: str | None = Field(None, max_length=2000)

    def to_domain(self) -> SinkConnector:
        return SinkConnector(
            connection_id=self.connection_id, connector_type=self.connector_type,
            stream_name=self.stream_name, description=self.description,
        )


class SinkConnectorUpdate(PartialUpdate):
    connection_id: str | None = Field(None, min_length=1)
    connector_type: ConnectorType | None = None
    stream_name: StreamName | None = None
    description: str | None = Field(None, max_length=2000)


# --- Transforms ---------------------------------------------------------------

class TransformIn(CamelModel):
    type: TransformType = TransformType.JSONATA
    source_stream: StreamName
    target_stream: StreamName
    failure_queue: StreamName | None = None
    expression: str = Field(min_length=1)
    description: str | None = Field(None, max_length=2000)
    is_paused: bool = False

    @field_validator("expression")
    @classmethod
    def strip_expression(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("expression cannot be empty or whitespace")
        return v

    @field_validator("failure_queue")
    @classmethod
    def blank_failure_queue_is_none(cls, v: str | None) -> str | None:
        return v or None

    def to_domain(self) -> Transform:
        return Transform(
            type=self.type,
            source_stream=self.source_stream,
            target_stream=self.target_stream,
            failure_queue=self.failure_queue,
            expression=self.expression,
            description=self.description,
            is_paused=self.is_paused,
        )


class TransformUpdate(PartialUpdate):
    type: TransformType | None = None
    source_stream: StreamName | None = None
    target_stream: StreamName | None = None
    failure_queue: StreamName | None = None
    expression: str | None = Field(None, min_length=1)
    description: str | None = Field(None, max_length=2000)
    is_paused: bool | None = None

    @field_validator("failure_queue")
    @classmethod
    def blank_failure_queue_is_none(cls, v: str | None) -> str | None:
        return v or None


# --- Pipeline -----------------------------------------------------------------

class PipelineCreate(CamelModel):
    """Pipeline creation — code and status are assigned by the server."""
    id: str | None = Field(None, min_length=1, max_length=64)
    workspace_id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    description: str = Field("", max_length=2000)
    streams: list[StreamIn] = []
    source_connectors: list[SourceConnectorIn] = []
    sink_connectors: list[SinkConnectorIn] = []
    transforms: list[TransformIn] = []

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class PipelineUpdate(PartialUpdate):
    """Partial pipeline update — `code` and `workspaceId` are silently ignored."""
    _clearable: ClassVar[frozenset[str]] = frozenset()

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    status: PipelineStatus | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class SourceConnectorList(CamelModel):
    items: list[SourceConnectorIn]


class SinkConnectorList(CamelModel):
    items: list[SinkConnectorIn]


class TransformList(CamelModel):
    items: list[TransformIn]
