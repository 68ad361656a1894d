"""Topology enforcement tests — pure tests for pipeline graph integrity rules.

Tests cover:
    Rule #1: check_unique_streams
    Rule #2: check_stream_names
    Rule #3-4: check_source_connectors, check_sink_connectors
    Rule #5-7: check_transforms
    Rule #8: check_immutable_fields
    External references: check_references
    Composite validator: validate_topology (reports ALL violations)
"""

from dataclasses import replace

from control_plane.core.domain_types import (
    ConnectorType, PipelineId, StreamVariant, WorkspaceId,
)
from control_plane.core.enforce_topology import (
    CODE_IMMUTABLE, DUPLICATE_STREAM, INVALID_STREAM_NAME, KnownReferences,
    SINK_CONNECTOR_STREAM, SOURCE_CONNECTOR_STREAM, TRANSFORM_FAILURE_QUEUE,
    TRANSFORM_SOURCE_STREAM, TRANSFORM_TARGET_STREAM, UNKNOWN_CLIENT,
    UNKNOWN_CONNECTION, WORKSPACE_IMMUTABLE,
    check_immutable_fields, check_references, check_sink_connectors,
    check_source_connectors, check_stream_names, check_transforms,
    check_unique_streams, validate_topology,
)
from control_plane.core.pipeline_graph import (
    PipelineGraph, SinkConnector, SourceConnector, Stream, Transform,
)

SOURCE = StreamVariant.SOURCE
SINK = StreamVariant.SINK
DLQ = StreamVariant.DLQ
REPLAY = StreamVariant.REPLAY

REFS = KnownReferences(
    client_ids=frozenset({"client-1"}), connection_ids=frozenset({"conn-1"}),
)


def _graph(**kwargs) -> PipelineGraph:
    defaults = dict(
        id=PipelineId("p-1"), workspace_id=WorkspaceId("ws-1"),
        code="AB12", name="Orders",
    )
    defaults.update(kwargs)
    return PipelineGraph(**defaults)


def _orders_pipeline() -> PipelineGraph:
    return _graph(
        streams=(
            Stream("orders", SOURCE),
            Stream("orders", SINK),
            Stream("orders", DLQ),
        ),
        source_connectors=(
            SourceConnector("client-1", ConnectorType.HTTP, "orders"),
        ),
        sink_connectors=(
            SinkConnector("conn-1", ConnectorType.S3, "orders"),
        ),
        transforms=(
            Transform("orders", "orders", "$", failure_queue="orders"),
        ),
    )


def _rules(violations) -> list[str]:
    return [v.rule for v in violations]


# --- Rule #1: unique streams --------------------------------------------------

def test_duplicate_stream_rejected():
    graph = _graph(streams=(Stream("orders", SOURCE), Stream("orders", SOURCE)))
    violations = check_unique_streams(graph)
    assert _rules(violations) == [DUPLICATE_STREAM]
    assert violations[0].field == "streams[1]"
    assert violations[0].value == "orders.source"


def test_same_name_different_variant_allowed():
    graph = _graph(streams=(Stream("orders", SOURCE), Stream("orders", SINK)))
    assert check_unique_streams(graph) == []


# --- Rule #2: stream names ----------------------------------------------------

def test_invalid_stream_name_rejected():
    graph = _graph(streams=(Stream("Orders Raw", SOURCE),))
    violations = check_stream_names(graph)
    assert _rules(violations) == [INVALID_STREAM_NAME]
    assert violations[0].field == "streams[0].streamName"


def test_overlong_stream_name_rejected():
    graph = _graph(streams=(Stream("a" * 101, SOURCE),))
    assert _rules(check_stream_names(graph)) == [INVALID_STREAM_NAME]


def test_dotted_stream_name_allowed():
    graph = _graph(streams=(Stream("orders.raw_v2-eu", SOURCE),))
    assert check_stream_names(graph) == []


# --- Rule #3-4: connectors ----------------------------------------------------

def test_source_connector_needs_source_stream():
    graph = _graph(
        streams=(Stream("orders", SINK),),
        source_connectors=(SourceConnector("client-1", ConnectorType.HTTP, "orders"),),
    )
    violations = check_source_connectors(graph)
    assert _rules(violations) == [SOURCE_CONNECTOR_STREAM]
    assert violations[0].field == "sourceConnectors[0].streamName"


def test_sink_connector_needs_sink_stream():
    graph = _graph(
        streams=(Stream("orders", SOURCE),),
        sink_connectors=(SinkConnector("conn-1", ConnectorType.S3, "orders"),),
    )
    assert _rules(check_sink_connectors(graph)) == [SINK_CONNECTOR_STREAM]


def test_connectors_on_matching_streams_pass():
    graph = _orders_pipeline()
    assert check_source_connectors(graph) == []
    assert check_sink_connectors(graph) == []


# --- Rule #5-7: transforms ----------------------------------------------------

def test_transform_source_must_be_source_variant():
    graph = _graph(
        streams=(Stream("orders", SINK),),
        transforms=(Transform("orders", "orders", "$"),),
    )
    assert TRANSFORM_SOURCE_STREAM in _rules(check_transforms(graph))


def test_transform_target_missing_rejected():
    graph = _graph(
        streams=(Stream("orders", SOURCE),),
        transforms=(Transform("orders", "billing", "$"),),
    )
    violations = check_transforms(graph)
    assert _rules(violations) == [TRANSFORM_TARGET_STREAM]
    assert violations[0].field == "transforms[0].targetStream"


def test_transform_target_only_source_variant_rejected():
    graph = _graph(
        streams=(Stream("orders", SOURCE), Stream("billing", SOURCE)),
        transforms=(Transform("orders", "billing", "$"),),
    )
    assert _rules(check_transforms(graph)) == [TRANSFORM_TARGET_STREAM]


def test_transform_target_sink_accepted():
    graph = _graph(
        streams=(Stream("orders", SOURCE), Stream("orders", SINK)),
        transforms=(Transform("orders", "orders", "$"),),
    )
    assert check_transforms(graph) == []


def test_transform_target_replay_accepted_without_sink():
    graph = _graph(
        streams=(Stream("orders", SOURCE), Stream("orders", REPLAY)),
        transforms=(Transform("orders", "orders", "$"),),
    )
    assert check_transforms(graph) == []


def test_failure_queue_must_be_dlq():
    graph = _graph(
        streams=(Stream("orders", SOURCE), Stream("orders", SINK)),
        transforms=(Transform("orders", "orders", "$", failure_queue="orders"),),
    )
    violations = check_transforms(graph)
    assert _rules(violations) == [TRANSFORM_FAILURE_QUEUE]
    assert violations[0].field == "transforms[0].failureQueue"


def test_failure_queue_optional():
    graph = _graph(
        streams=(Stream("orders", SOURCE), Stream("orders", SINK)),
        transforms=(Transform("orders", "orders", "$", failure_queue=None),),
    )
    assert check_transforms(graph) == []


# --- Rule #8: immutable identity ----------------------------------------------

def test_code_change_rejected():
    previous = _graph()
    violations = check_immutable_fields(replace(previous, code="ZZ99"), previous)
    assert _rules(violations) == [CODE_IMMUTABLE]


def test_workspace_change_rejected():
    previous = _graph()
    candidate = replace(previous, workspace_id=WorkspaceId("ws-2"))
    assert _rules(check_immutable_fields(candidate, previous)) == [WORKSPACE_IMMUTABLE]


def test_no_previous_means_creation():
    assert check_immutable_fields(_graph(), None) == []


# --- External references ------------------------------------------------------

def test_unknown_client_and_connection_reported():
    graph = _graph(
        source_connectors=(SourceConnector("client-x", ConnectorType.HTTP, "orders"),),
        sink_connectors=(SinkConnector("conn-x", ConnectorType.HTTP, "orders"),),
    )
    violations = check_references(graph, REFS)
    assert _rules(violations) == [UNKNOWN_CLIENT, UNKNOWN_CONNECTION]
    assert violations[0].field == "sourceConnectors[0].clientId"
    assert violations[1].field == "sinkConnectors[0].connectionId"


# --- Composite ----------------------------------------------------------------

def test_complete_orders_pipeline_is_valid():
    assert validate_topology(_orders_pipeline(), REFS) == []


def test_empty_pipeline_is_valid():
    assert validate_topology(_graph(), KnownReferences()) == []


def test_validate_reports_every_violation():
    graph = _graph(
        streams=(
            Stream("orders", SOURCE),
            Stream("orders", SOURCE),
            Stream("Bad Name", SINK),
        ),
        source_connectors=(SourceConnector("client-x", ConnectorType.HTTP, "missing"),),
        transforms=(Transform("orders", "nowhere", "$"),),
    )
    rules = set(_rules(validate_topology(graph, REFS)))
    assert rules == {
        DUPLICATE_STREAM, INVALID_STREAM_NAME, SOURCE_CONNECTOR_STREAM,
        TRANSFORM_TARGET_STREAM, UNKNOWN_CLIENT,
    }


def test_validate_checks_whole_graph_not_only_delta():
    """A stream removed from under an existing transform is caught."""
    previous = _orders_pipeline()
    candidate = replace(previous, streams=(Stream("orders", SOURCE),))
    rules = set(_rules(validate_topology(candidate, REFS, previous)))
    assert {SINK_CONNECTOR_STREAM, TRANSFORM_TARGET_STREAM, TRANSFORM_FAILURE_QUEUE} <= rules
