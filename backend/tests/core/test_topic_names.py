"""Topic name codec — encode/decode of `env.workspace.pipeline.stream.variant`.

Tests cover:
    - Encoding joins the five components with '.'
    - Decoding rejoins the middle segments as the stream name
    - Malformed wire names raise MalformedTopicNameError
"""

import pytest

from control_plane.core.domain_types import PipelineId, StreamVariant, WorkspaceId
from control_plane.core.errors import MalformedTopicNameError
from control_plane.core.pipeline_graph import PipelineGraph, Stream
from control_plane.core.stream_names import is_valid_stream_name
from control_plane.core.topic_names import (
    decode_topic_name, encode_topic_name, pipeline_topic_names,
)


def test_encode_joins_components():
    wire = encode_topic_name("dev", "acme", "0042", "orders", StreamVariant.SOURCE)
    assert wire == "dev.acme.0042.orders.source"


def test_encode_accepts_variant_as_string():
    assert encode_topic_name("prod", "acme", "AB12", "orders", "dlq") == (
        "prod.acme.AB12.orders.dlq"
    )


def test_decode_simple_name():
    topic = decode_topic_name("dev.acme.0042.orders.source")
    assert topic.environment == "dev"
    assert topic.workspace_code == "acme"
    assert topic.pipeline_code == "0042"
    assert topic.stream_name == "orders"
    assert topic.variant is StreamVariant.SOURCE


def test_decode_dotted_stream_name():
    topic = decode_topic_name("dev.acme.0042.orders.raw.source")
    assert topic.stream_name == "orders.raw"
    assert topic.variant is StreamVariant.SOURCE


def test_decoded_topic_reencodes_to_same_wire_name():
    wire = "staging.wxyz.Q9Z1.eu.orders.raw.replay"
    assert decode_topic_name(wire).wire_name == wire


def test_stream_names_with_empty_dot_pieces_survive_decode():
    """Legal names like 'orders..raw' or '.orders' come back unchanged."""
    for name in ("orders..raw", ".orders", "orders.", "."):
        assert is_valid_stream_name(name)
        wire = encode_topic_name("dev", "acme", "0042", name, StreamVariant.SOURCE)
        topic = decode_topic_name(wire)
        assert topic.stream_name == name
        assert topic.wire_name == wire


def test_decode_rejects_empty_stream_name():
    with pytest.raises(MalformedTopicNameError):
        decode_topic_name("dev.acme.0042..source")


def test_decode_rejects_too_few_segments():
    with pytest.raises(MalformedTopicNameError) as exc_info:
        decode_topic_name("dev.acme.0042.source")
    assert exc_info.value.http_status == 400
    assert exc_info.value.wire_name == "dev.acme.0042.source"


def test_decode_rejects_empty_segment():
    with pytest.raises(MalformedTopicNameError):
        decode_topic_name("dev..0042.orders.source")


def test_decode_rejects_unknown_variant():
    with pytest.raises(MalformedTopicNameError) as exc_info:
        decode_topic_name("dev.acme.0042.orders.archive")
    assert "archive" in exc_info.value.message


def test_pipeline_topic_names_in_stream_order():
    graph = PipelineGraph(
        id=PipelineId("p-1"), workspace_id=WorkspaceId("ws-1"),
        code="AB12", name="Orders",
        streams=(
            Stream("orders", StreamVariant.SOURCE),
            Stream("orders", StreamVariant.SINK),
        ),
    )
    assert pipeline_topic_names(graph, "dev", "acme") == [
        "dev.acme.AB12.orders.source",
        "dev.acme.AB12.orders.sink",
    ]
