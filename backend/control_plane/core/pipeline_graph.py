"""Pipeline Graph — typed candidate graph and its persisted document shape.

Invariants:
    - Graph values are frozen: every mutation produces a new PipelineGraph
    - A stream's wire name is never a field here (computed by topic_names)
    - Document keys are camelCase and mirror the persisted pipeline exactly

Design Decisions:
    - Dataclasses over ORM rows: validator and mutations stay pure and testable
      without a database
    - Tuples for the four lists: hashable, and accidental in-place edits fail loudly
"""

from dataclasses import dataclass, field

from control_plane.core.domain_types import (
    ClientId, ConnectionId, ConnectorType, PipelineId, PipelineStatus,
    StreamVariant, TransformType, WorkspaceId,
)


@dataclass(frozen=True)
class Stream:
    stream_name: str
    variant: StreamVariant
    description: str | None = None

    @property
    def key(self) -> tuple[str, StreamVariant]:
        return (self.stream_name, self.variant)


@dataclass(frozen=True)
class SourceConnector:
    """Moves data from an external client into a `source` stream."""
    client_id: ClientId
    connector_type: ConnectorType
    stream_name: str
    description: str | None = None


@dataclass(frozen=True)
class SinkConnector:
    """Drains a `sink` stream into an external connection."""
    connection_id: ConnectionId
    connector_type: ConnectorType
    stream_name: str
    description: str | None = None


@dataclass(frozen=True)
class Transform:
    source_stream: str
    target_stream: str
    expression: str
    type: TransformType = TransformType.JSONATA
    failure_queue: str | None = None
    description: str | None = None
    is_paused: bool = False


@dataclass(frozen=True)
class PipelineGraph:
    """A pipeline and everything hanging off it — the unit of validation and commit."""
    id: PipelineId
    workspace_id: WorkspaceId
    code: str
    name: str
    description: str = ""
    status: PipelineStatus = PipelineStatus.DRAFT
    streams: tuple[Stream, ...] = field(default_factory=tuple)
    source_connectors: tuple[SourceConnector, ...] = field(default_factory=tuple)
    sink_connectors: tuple[SinkConnector, ...] = field(default_factory=tuple)
    transforms: tuple[Transform, ...] = field(default_factory=tuple)

    def streams_named(self, stream_name: str) -> list[Stream]:
        return [s for s in self.streams if s.stream_name == stream_name]

    def has_stream(self, stream_name: str, variant: StreamVariant) -> bool:
        return any(s.key == (stream_name, variant) for s in self.streams)


# ─── Document codec ─────────────────────────────────────────────

def stream_to_document(stream: Stream) -> dict:
    doc = {"streamName": stream.stream_name, "variant": stream.variant.value}
    if stream.description is not None:
        doc["description"] = stream.description
    return doc


def stream_from_document(doc: dict) -> Stream:
    return Stream(
        stream_name=doc["streamName"],
        variant=StreamVariant(doc["variant"]),
        description=doc.get("description"),
    )


def source_connector_to_document(connector: SourceConnector) -> dict:
    doc = {
        "clientId": connector.client_id,
        "connectorType": connector.connector_type.value,
        "streamName": connector.stream_name,
    }
    if connector.description is not None:
        doc["description"] = connector.description
    return doc


def source_connector_from_document(doc: dict) -> SourceConnector:
    return SourceConnector(
        client_id=ClientId(doc["clientId"]),
        connector_type=ConnectorType(doc["connectorType"]),
        stream_name=doc["streamName"],
        description=doc.get("description"),
    )


def sink_connector_to_document(connector: SinkConnector) -> dict:
    doc = {
        "connectionId": connector.connection_id,
        "connectorType": connector.connector_type.value,
        "streamName": connector.stream_name,
    }
    if connector.description is not None:
        doc["description"] = connector.description
    return doc


def sink_connector_from_document(doc: dict) -> SinkConnector:
    return SinkConnector(
        connection_id=ConnectionId(doc["connectionId"]),
        connector_type=ConnectorType(doc["connectorType"]),
        stream_name=doc["streamName"],
        description=doc.get("description"),
    )


def transform_to_document(transform: Transform) -> dict:
    doc = {
        "type": transform.type.value,
        "sourceStream": transform.source_stream,
        "targetStream": transform.target_stream,
        "expression": transform.expression,
        "isPaused": transform.is_paused,
    }
    if transform.failure_queue is not None:
        doc["failureQueue"] = transform.failure_queue
    if transform.description is not None:
        doc["description"] = transform.description
    return doc


def transform_from_document(doc: dict) -> Transform:
    return Transform(
        type=TransformType(doc.get("type", TransformType.JSONATA.value)),
        source_stream=doc["sourceStream"],
        target_stream=doc["targetStream"],
        expression=doc["expression"],
        failure_queue=doc.get("failureQueue"),
        description=doc.get("description"),
        is_paused=bool(doc.get("isPaused", False)),
    )


def graph_to_document(graph: PipelineGraph) -> dict:
    """Full persisted pipeline document (camelCase keys)."""
    return {
        "id": graph.id,
        "workspaceId": graph.workspace_id,
        "code": graph.code,
        "name": graph.name,
        "description": graph.description,
        "status": graph.status.value,
        "streams": [stream_to_document(s) for s in graph.streams],
        "sourceConnectors": [
            source_connector_to_document(c) for c in graph.source_connectors
        ],
        "sinkConnectors": [
            sink_connector_to_document(c) for c in graph.sink_connectors
        ],
        "transforms": [transform_to_document(t) for t in graph.transforms],
    }


def graph_from_document(doc: dict) -> PipelineGraph:
    return PipelineGraph(
        id=PipelineId(doc["id"]),
        workspace_id=WorkspaceId(doc["workspaceId"]),
        code=doc["code"],
        name=doc["name"],
        description=doc.get("description") or "",
        status=PipelineStatus(doc.get("status", PipelineStatus.DRAFT.value)),
        streams=tuple(stream_from_document(d) for d in doc.get("streams") or []),
        source_connectors=tuple(
            source_connector_from_document(d)
            for d in doc.get("sourceConnectors") or []
        ),
        sink_connectors=tuple(
            sink_connector_from_document(d)
            for d in doc.get("sinkConnectors") or []
        ),
        transforms=tuple(
            transform_from_document(d) for d in doc.get("transforms") or []
        ),
    )
