"""Pipeline routes — end-to-end graph edits over HTTP.

Invariants:
    - Rejected edits return 422 with every violation under error.details
    - Accepted edits return the persisted camelCase document
    - GET by id returns the enriched view (names, workspaceCode, topics)
"""

import pytest


@pytest.fixture
async def pipeline(client, seed_workspace, seed_references):
    res = await client.post("/api/v1/pipelines", json={
        "id": "p-1",
        "workspaceId": "ws-1",
        "name": "Orders",
        "streams": [
            {"streamName": "orders", "variant": "source"},
            {"streamName": "orders", "variant": "sink"},
        ],
        "sourceConnectors": [
            {"clientId": "client-1", "connectorType": "HTTP", "streamName": "orders"},
        ],
    })
    assert res.status_code == 201
    return res.json()


async def test_create_returns_draft_document(pipeline):
    assert pipeline["status"] == "draft"
    assert pipeline["workspaceId"] == "ws-1"
    assert len(pipeline["code"]) == 4


async def test_create_rejects_invalid_graph_with_all_violations(client, seed_workspace):
    res = await client.post("/api/v1/pipelines", json={
        "workspaceId": "ws-1",
        "name": "Broken",
        "sourceConnectors": [
            {"clientId": "missing", "connectorType": "HTTP", "streamName": "orders"},
        ],
    })
    assert res.status_code == 422
    details = res.json()["error"]["details"]
    assert {d["rule"] for d in details} == {"SOURCE_CONNECTOR_STREAM", "UNKNOWN_CLIENT"}


async def test_get_returns_enriched_view(client, pipeline):
    res = await client.get("/api/v1/pipelines/p-1")
    assert res.status_code == 200
    body = res.json()
    assert body["workspaceCode"] == "acme"
    assert body["environment"] == "dev"
    assert body["sourceConnectors"][0]["clientName"] == "Web Shop"
    assert body["streams"][0]["topic"] == f"dev.acme.{pipeline['code']}.orders.source"


async def test_get_environment_override(client, pipeline):
    res = await client.get("/api/v1/pipelines/p-1", params={"environment": "prod"})
    assert res.json()["streams"][1]["topic"].startswith("prod.acme.")


async def test_get_unknown_pipeline_returns_404(client):
    res = await client.get("/api/v1/pipelines/nope")
    assert res.status_code == 404


async def test_patch_ignores_code_and_workspace(client, pipeline):
    res = await client.patch("/api/v1/pipelines/p-1", json={
        "code": "ZZZZ", "workspaceId": "ws-2", "status": "active",
    })
    assert res.status_code == 200
    body = res.json()
    assert body["code"] == pipeline["code"]
    assert body["workspaceId"] == "ws-1"
    assert body["status"] == "active"


async def test_add_duplicate_stream_rejected(client, pipeline):
    res = await client.post(
        "/api/v1/pipelines/p-1/streams",
        json={"streamName": "orders", "variant": "source"},
    )
    assert res.status_code == 422
    assert res.json()["error"]["details"][0]["rule"] == "DUPLICATE_STREAM"

    stored = (await client.get("/api/v1/pipelines/p-1")).json()
    assert len(stored["streams"]) == 2


async def test_add_stream_normalizes_name(client, pipeline):
    res = await client.post(
        "/api/v1/pipelines/p-1/streams",
        json={"streamName": "Orders DLQ", "variant": "dlq"},
    )
    assert res.status_code == 201
    assert res.json()["streams"][-1] == {"streamName": "orders-dlq", "variant": "dlq"}


async def test_add_stream_pair(client, pipeline):
    res = await client.post(
        "/api/v1/pipelines/p-1/streams", params={"pair": "true"},
        json={"streamName": "billing"},
    )
    assert res.status_code == 201
    keys = [(s["streamName"], s["variant"]) for s in res.json()["streams"]]
    assert keys[-2:] == [("billing", "source"), ("billing", "sink")]


async def test_add_stream_missing_variant_is_validation_error(client, pipeline):
    res = await client.post(
        "/api/v1/pipelines/p-1/streams", json={"streamName": "billing"},
    )
    assert res.status_code == 400


async def test_add_transform_and_rename_target_rejected(client, pipeline):
    res = await client.post("/api/v1/pipelines/p-1/transforms", json={
        "sourceStream": "orders", "targetStream": "orders", "expression": "$",
    })
    assert res.status_code == 201

    res = await client.patch(
        "/api/v1/pipelines/p-1/streams/orders/sink", json={"streamName": "billing"},
    )
    assert res.status_code == 422
    assert "TRANSFORM_TARGET_STREAM" in {
        d["rule"] for d in res.json()["error"]["details"]
    }


async def test_patch_source_connector_by_index(client, pipeline):
    res = await client.patch(
        "/api/v1/pipelines/p-1/source-connectors/0",
        json={"description": "Checkout events"},
    )
    assert res.status_code == 200
    assert res.json()["sourceConnectors"][0]["description"] == "Checkout events"


async def test_patch_out_of_range_index_returns_404(client, pipeline):
    res = await client.patch(
        "/api/v1/pipelines/p-1/transforms/3", json={"expression": "$"},
    )
    assert res.status_code == 404


async def test_put_sink_connectors_replaces_list(client, pipeline):
    res = await client.put("/api/v1/pipelines/p-1/sink-connectors", json={"items": [
        {"connectionId": "conn-1", "connectorType": "S3", "streamName": "orders"},
    ]})
    assert res.status_code == 200
    assert [c["connectionId"] for c in res.json()["sinkConnectors"]] == ["conn-1"]


async def test_put_sink_connectors_unknown_connection_rejected(client, pipeline):
    res = await client.put("/api/v1/pipelines/p-1/sink-connectors", json={"items": [
        {"connectionId": "missing", "connectorType": "S3", "streamName": "orders"},
    ]})
    assert res.status_code == 422
    assert res.json()["error"]["details"][0]["field"] == "sinkConnectors[0].connectionId"


async def test_list_pipeline_topics(client, pipeline):
    res = await client.get("/api/v1/pipelines/p-1/topics")
    assert res.json()["items"] == [
        f"dev.acme.{pipeline['code']}.orders.source",
        f"dev.acme.{pipeline['code']}.orders.sink",
    ]


async def test_connector_and_transform_references_normalized_like_streams(
    client, seed_workspace, seed_references,
):
    res = await client.post("/api/v1/pipelines", json={
        "workspaceId": "ws-1",
        "name": "Web",
        "streams": [
            {"streamName": "Web Orders", "variant": "source"},
            {"streamName": "Web Orders", "variant": "sink"},
            {"streamName": "Web Orders", "variant": "dlq"},
        ],
        "sourceConnectors": [
            {"clientId": "client-1", "connectorType": "HTTP", "streamName": "Web Orders"},
        ],
        "sinkConnectors": [
            {"connectionId": "conn-1", "connectorType": "S3", "streamName": "Web Orders"},
        ],
        "transforms": [{
            "sourceStream": "Web Orders", "targetStream": "Web Orders",
            "failureQueue": "Web Orders", "expression": "$",
        }],
    })
    assert res.status_code == 201
    body = res.json()
    assert body["sourceConnectors"][0]["streamName"] == "web-orders"
    assert body["transforms"][0]["failureQueue"] == "web-orders"


async def test_patch_stream_path_name_normalized(client, pipeline):
    res = await client.patch(
        "/api/v1/pipelines/p-1/streams/ORDERS/sink", json={"description": "Out"},
    )
    assert res.status_code == 200
    assert res.json()["streams"][1]["description"] == "Out"
