"""Topic Name Codec — wire names for stream variants.

Wire name format: ``<environment>.<workspaceCode>.<pipelineCode>.<streamName>.<variant>``

Invariants:
    - encode/decode are pure and stateless
    - First three segments and the last segment have fixed positions; everything
      in between is the stream name (stream names may contain '.')
    - decode never returns a partial result: malformed input raises MalformedTopicNameError

Design Decisions:
    - Empty environment/workspace/pipeline segments, an empty stream name and unknown
      variants are malformed, so a decoded TopicName always re-encodes to the same
      wire name; empty pieces inside a dotted stream name are kept as-is
"""

from dataclasses import dataclass

from control_plane.core.domain_types import (
    MIN_TOPIC_SEGMENTS, TOPIC_SEPARATOR, StreamVariant,
)
from control_plane.core.errors import MalformedTopicNameError
from control_plane.core.pipeline_graph import PipelineGraph


@dataclass(frozen=True)
class TopicName:
    environment: str
    workspace_code: str
    pipeline_code: str
    stream_name: str
    variant: StreamVariant

    @property
    def wire_name(self) -> str:
        return encode_topic_name(
            self.environment, self.workspace_code, self.pipeline_code,
            self.stream_name, self.variant,
        )


def encode_topic_name(
    environment: str,
    workspace_code: str,
    pipeline_code: str,
    stream_name: str,
    variant: StreamVariant | str,
) -> str:
    variant_value = variant.value if isinstance(variant, StreamVariant) else variant
    return TOPIC_SEPARATOR.join(
        (environment, workspace_code, pipeline_code, stream_name, variant_value),
    )


def decode_topic_name(wire_name: str) -> TopicName:
    """Split a wire name back into its components.

    >>> decode_topic_name("dev.acme.0042.orders.raw.source").stream_name
    'orders.raw'
    """
    parts = wire_name.split(TOPIC_SEPARATOR)
    if len(parts) < MIN_TOPIC_SEGMENTS:
        raise MalformedTopicNameError(
            wire_name,
            f"expected at least {MIN_TOPIC_SEGMENTS} '{TOPIC_SEPARATOR}'-separated "
            f"segments, got {len(parts)}",
        )
    environment, workspace_code, pipeline_code = parts[0], parts[1], parts[2]
    # Segments inside the stream name may be empty ('orders..raw', '.orders')
    stream_name = TOPIC_SEPARATOR.join(parts[3:-1])
    if not (environment and workspace_code and pipeline_code and stream_name):
        raise MalformedTopicNameError(wire_name, "empty segment")
    try:
        variant = StreamVariant(parts[-1])
    except ValueError:
        raise MalformedTopicNameError(
            wire_name, f"unknown variant '{parts[-1]}'",
        ) from None

    return TopicName(
        environment=environment,
        workspace_code=workspace_code,
        pipeline_code=pipeline_code,
        stream_name=stream_name,
        variant=variant,
    )


def pipeline_topic_names(
    graph: PipelineGraph, environment: str, workspace_code: str,
) -> list[str]:
    """Every wire name a pipeline needs provisioned, in stream order."""
    return [
        encode_topic_name(
            environment, workspace_code, graph.code, s.stream_name, s.variant,
        )
        for s in graph.streams
    ]
