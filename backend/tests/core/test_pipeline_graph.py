"""Pipeline graph document codec — camelCase persisted shape."""

from control_plane.core.domain_types import (
    ConnectorType, PipelineId, StreamVariant, TransformType, WorkspaceId,
)
from control_plane.core.pipeline_graph import (
    PipelineGraph, Stream, Transform, graph_from_document, graph_to_document,
)


def test_document_uses_camel_case_keys():
    graph = PipelineGraph(
        id=PipelineId("p-1"), workspace_id=WorkspaceId("ws-1"),
        code="AB12", name="Orders",
        streams=(Stream("orders", StreamVariant.SOURCE),),
        transforms=(Transform("orders", "orders", "$.total"),),
    )
    doc = graph_to_document(graph)
    assert set(doc) == {
        "id", "workspaceId", "code", "name", "description", "status",
        "streams", "sourceConnectors", "sinkConnectors", "transforms",
    }
    assert doc["streams"] == [{"streamName": "orders", "variant": "source"}]
    assert doc["transforms"][0] == {
        "type": "jsonata", "sourceStream": "orders", "targetStream": "orders",
        "expression": "$.total", "isPaused": False,
    }


def test_from_document_fills_defaults():
    graph = graph_from_document({
        "id": "p-1", "workspaceId": "ws-1", "code": "AB12", "name": "Orders",
        "sourceConnectors": [
            {"clientId": "c-1", "connectorType": "HTTP", "streamName": "orders"},
        ],
        "transforms": [
            {"sourceStream": "orders", "targetStream": "orders", "expression": "$"},
        ],
    })
    assert graph.description == ""
    assert graph.streams == ()
    assert graph.source_connectors[0].connector_type is ConnectorType.HTTP
    assert graph.transforms[0].type is TransformType.JSONATA
    assert graph.transforms[0].failure_queue is None
