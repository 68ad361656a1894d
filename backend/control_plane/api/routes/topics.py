"""Topic Routes — decode a wire name into its components.

Invariants:
    - A malformed wire name is reported verbatim (400), never guessed at
"""

from fastapi import APIRouter

from control_plane.core.topic_names import decode_topic_name

router = APIRouter(prefix="/api/v1/topics", tags=["topics"])


@router.get("/{wire_name}")
async def decode_topic(wire_name: str):
    topic = decode_topic_name(wire_name)
    return {
        "topic": topic.wire_name,
        "environment": topic.environment,
        "workspaceCode": topic.workspace_code,
        "pipelineCode": topic.pipeline_code,
        "streamName": topic.stream_name,
        "variant": topic.variant.value,
    }
