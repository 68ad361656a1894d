"""Topology Enforcement — referential-integrity rules for a candidate pipeline graph.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Every check returns a list of Violation (empty on success), never raises
    - validate_topology runs EVERY check and returns the union, so a caller can
      report all problems in one round trip
    - The whole candidate graph is checked on every mutation, not only the delta

Design Decisions:
    - Existence of clients/connections is external; the shell resolves it into
      a KnownReferences value before calling in, keeping this module pure
    - Transform target prefers a `sink` stream but accepts any non-source variant
      (dlq/replay) until product settles the rule
    - Stream names are checked as given; normalization belongs to the caller
"""

from dataclasses import dataclass, field

from control_plane.core.domain_types import (
    ClientId, ConnectionId, MAX_STREAM_NAME_LENGTH, STREAM_NAME_PATTERN, StreamVariant,
)
from control_plane.core.errors import Violation
from control_plane.core.pipeline_graph import PipelineGraph
from control_plane.core.stream_names import is_valid_stream_name


# --- Rule codes ---------------------------------------------------------------

DUPLICATE_STREAM = "DUPLICATE_STREAM"
INVALID_STREAM_NAME = "INVALID_STREAM_NAME"
SOURCE_CONNECTOR_STREAM = "SOURCE_CONNECTOR_STREAM"
SINK_CONNECTOR_STREAM = "SINK_CONNECTOR_STREAM"
TRANSFORM_SOURCE_STREAM = "TRANSFORM_SOURCE_STREAM"
TRANSFORM_TARGET_STREAM = "TRANSFORM_TARGET_STREAM"
TRANSFORM_FAILURE_QUEUE = "TRANSFORM_FAILURE_QUEUE"
CODE_IMMUTABLE = "CODE_IMMUTABLE"
WORKSPACE_IMMUTABLE = "WORKSPACE_IMMUTABLE"
UNKNOWN_CLIENT = "UNKNOWN_CLIENT"
UNKNOWN_CONNECTION = "UNKNOWN_CONNECTION"


@dataclass(frozen=True)
class KnownReferences:
    """Ids of external entities that exist, resolved by the shell."""
    client_ids: frozenset[ClientId] = field(default_factory=frozenset)
    connection_ids: frozenset[ConnectionId] = field(default_factory=frozenset)


# --- Rule 1-2: streams --------------------------------------------------------

def check_unique_streams(graph: PipelineGraph) -> list[Violation]:
    """Rule #1: (streamName, variant) is unique within the pipeline."""
    seen: set[tuple[str, StreamVariant]] = set()
    violations = []
    for i, stream in enumerate(graph.streams):
        if stream.key in seen:
            violations.append(_violation(
                DUPLICATE_STREAM, f"streams[{i}]",
                f"{stream.stream_name}.{stream.variant.value}",
                f"Stream '{stream.stream_name}' with variant "
                f"'{stream.variant.value}' is defined more than once.",
            ))
        seen.add(stream.key)
    return violations


def check_stream_names(graph: PipelineGraph) -> list[Violation]:
    """Rule #2: stream names match the pattern and the length bound."""
    return [
        _violation(
            INVALID_STREAM_NAME, f"streams[{i}].streamName", stream.stream_name,
            f"Stream name must match {STREAM_NAME_PATTERN} and be at most "
            f"{MAX_STREAM_NAME_LENGTH} characters.",
        )
        for i, stream in enumerate(graph.streams)
        if not is_valid_stream_name(stream.stream_name)
    ]


# --- Rule 3-4: connectors -----------------------------------------------------

def check_source_connectors(graph: PipelineGraph) -> list[Violation]:
    """Rule #3: each source connector feeds an existing `source` stream."""
    return [
        _violation(
            SOURCE_CONNECTOR_STREAM, f"sourceConnectors[{i}].streamName",
            connector.stream_name,
            f"No stream '{connector.stream_name}' with variant 'source'.",
        )
        for i, connector in enumerate(graph.source_connectors)
        if not graph.has_stream(connector.stream_name, StreamVariant.SOURCE)
    ]


def check_sink_connectors(graph: PipelineGraph) -> list[Violation]:
    """Rule #4: each sink connector drains an existing `sink` stream."""
    return [
        _violation(
            SINK_CONNECTOR_STREAM, f"sinkConnectors[{i}].streamName",
            connector.stream_name,
            f"No stream '{connector.stream_name}' with variant 'sink'.",
        )
        for i, connector in enumerate(graph.sink_connectors)
        if not graph.has_stream(connector.stream_name, StreamVariant.SINK)
    ]


# --- Rule 5-7: transforms -----------------------------------------------------

def check_transforms(graph: PipelineGraph) -> list[Violation]:
    """Rules #5, #6, #7 for every transform."""
    violations = []
    for i, transform in enumerate(graph.transforms):
        if not graph.has_stream(transform.source_stream, StreamVariant.SOURCE):
            violations.append(_violation(
                TRANSFORM_SOURCE_STREAM, f"transforms[{i}].sourceStream",
                transform.source_stream,
                f"No stream '{transform.source_stream}' with variant 'source'.",
            ))
        if not _is_valid_target(graph, transform.target_stream):
            violations.append(_violation(
                TRANSFORM_TARGET_STREAM, f"transforms[{i}].targetStream",
                transform.target_stream,
                f"No non-source stream '{transform.target_stream}' "
                "(expected variant 'sink').",
            ))
        if transform.failure_queue is not None and not graph.has_stream(
            transform.failure_queue, StreamVariant.DLQ,
        ):
            violations.append(_violation(
                TRANSFORM_FAILURE_QUEUE, f"transforms[{i}].failureQueue",
                transform.failure_queue,
                f"No stream '{transform.failure_queue}' with variant 'dlq'.",
            ))
    return violations


def _is_valid_target(graph: PipelineGraph, stream_name: str) -> bool:
    """Rule #6: a `sink` stream, else any non-source variant."""
    if graph.has_stream(stream_name, StreamVariant.SINK):
        return True
    return any(
        s.variant != StreamVariant.SOURCE for s in graph.streams_named(stream_name)
    )


# --- Rule 8: immutable identity -----------------------------------------------

def check_immutable_fields(
    candidate: PipelineGraph, previous: PipelineGraph | None,
) -> list[Violation]:
    """Rule #8: code (and owning workspace) never change once assigned."""
    if previous is None:
        return []
    violations = []
    if candidate.code != previous.code:
        violations.append(_violation(
            CODE_IMMUTABLE, "code", candidate.code,
            f"Pipeline code is immutable (assigned '{previous.code}').",
        ))
    if candidate.workspace_id != previous.workspace_id:
        violations.append(_violation(
            WORKSPACE_IMMUTABLE, "workspaceId", candidate.workspace_id,
            "Pipeline cannot move to another workspace.",
        ))
    return violations


# --- External references ------------------------------------------------------

def check_references(
    graph: PipelineGraph, references: KnownReferences,
) -> list[Violation]:
    """Every referenced client/connection exists."""
    violations = [
        _violation(
            UNKNOWN_CLIENT, f"sourceConnectors[{i}].clientId", connector.client_id,
            f"Client '{connector.client_id}' does not exist.",
        )
        for i, connector in enumerate(graph.source_connectors)
        if connector.client_id not in references.client_ids
    ]
    violations.extend(
        _violation(
            UNKNOWN_CONNECTION, f"sinkConnectors[{i}].connectionId",
            connector.connection_id,
            f"Connection '{connector.connection_id}' does not exist.",
        )
        for i, connector in enumerate(graph.sink_connectors)
        if connector.connection_id not in references.connection_ids
    )
    return violations


# --- Composite validator ------------------------------------------------------

def validate_topology(
    candidate: PipelineGraph,
    references: KnownReferences,
    previous: PipelineGraph | None = None,
) -> list[Violation]:
    """Run every rule against the full candidate graph. Empty list means valid."""
    return [
        *check_unique_streams(candidate),
        *check_stream_names(candidate),
        *check_source_connectors(candidate),
        *check_sink_connectors(candidate),
        *check_transforms(candidate),
        *check_immutable_fields(candidate, previous),
        *check_references(candidate, references),
    ]


# --- Helper -------------------------------------------------------------------

def _violation(rule: str, field_path: str, value: object, message: str) -> Violation:
    return Violation(rule=rule, field=field_path, value=value, message=message)
