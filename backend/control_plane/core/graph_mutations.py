"""Graph Mutations — apply one requested delta to a pipeline graph.

Invariants:
    - All functions are PURE: they return a new PipelineGraph and never validate
    - Partial updates only touch the keys present in `changes`
    - `code` and `workspace_id` are not updatable here; such keys are dropped silently
    - Addressing a missing stream or an out-of-range index raises ResourceNotFoundError

Design Decisions:
    - Connectors and transforms are addressed by list index (they have no natural key);
      streams by their (stream_name, variant) identity
    - Validation is the caller's next step: mutations may produce an invalid graph on
      purpose so the validator can report every problem
"""

from dataclasses import fields, replace
from typing import Any, TypeVar

from control_plane.core.domain_types import StreamVariant
from control_plane.core.errors import ResourceNotFoundError
from control_plane.core.pipeline_graph import (
    PipelineGraph, SinkConnector, SourceConnector, Stream, Transform,
)

T = TypeVar("T")

PIPELINE_UPDATABLE_FIELDS = frozenset({"name", "description", "status"})


# --- Pipeline fields ----------------------------------------------------------

def update_pipeline_fields(graph: PipelineGraph, changes: dict[str, Any]) -> PipelineGraph:
    allowed = {k: v for k, v in changes.items() if k in PIPELINE_UPDATABLE_FIELDS}
    return replace(graph, **allowed) if allowed else graph


# --- Streams ------------------------------------------------------------------

def add_stream(graph: PipelineGraph, stream: Stream) -> PipelineGraph:
    return replace(graph, streams=(*graph.streams, stream))


def add_stream_pair(
    graph: PipelineGraph, stream_name: str, description: str | None = None,
) -> PipelineGraph:
    """Add the `source` and `sink` variants of one logical stream together."""
    pair = (
        Stream(stream_name, StreamVariant.SOURCE, description),
        Stream(stream_name, StreamVariant.SINK, description),
    )
    return replace(graph, streams=(*graph.streams, *pair))


def update_stream(
    graph: PipelineGraph,
    stream_name: str,
    variant: StreamVariant,
    changes: dict[str, Any],
) -> PipelineGraph:
    """Rename, re-tag or re-describe one stream.

    References to the old name are NOT rewritten: a transform still pointing at
    the old name is exactly what the validator must catch.
    """
    for i, stream in enumerate(graph.streams):
        if stream.key == (stream_name, variant):
            updated = _patch(stream, changes)
            return replace(graph, streams=_replace_at(graph.streams, i, updated))
    raise ResourceNotFoundError("Stream", f"{stream_name}.{variant.value}")


# --- Source connectors --------------------------------------------------------

def add_source_connector(graph: PipelineGraph, connector: SourceConnector) -> PipelineGraph:
    return replace(graph, source_connectors=(*graph.source_connectors, connector))


def update_source_connector(
    graph: PipelineGraph, index: int, changes: dict[str, Any],
) -> PipelineGraph:
    current = _item_at(graph.source_connectors, index, "SourceConnector")
    return replace(graph, source_connectors=_replace_at(
        graph.source_connectors, index, _patch(current, changes),
    ))


def replace_source_connectors(
    graph: PipelineGraph, connectors: list[SourceConnector],
) -> PipelineGraph:
    return replace(graph, source_connectors=tuple(connectors))


# --- Sink connectors ----------------------------------------------------------

def add_sink_connector(graph: PipelineGraph, connector: SinkConnector) -> PipelineGraph:
    return replace(graph, sink_connectors=(*graph.sink_connectors, connector))


def update_sink_connector(
    graph: PipelineGraph, index: int, changes: dict[str, Any],
) -> PipelineGraph:
    current = _item_at(graph.sink_connectors, index, "SinkConnector")
    return replace(graph, sink_connectors=_replace_at(
        graph.sink_connectors, index, _patch(current, changes),
    ))


def replace_sink_connectors(
    graph: PipelineGraph, connectors: list[SinkConnector],
) -> PipelineGraph:
    return replace(graph, sink_connectors=tuple(connectors))


# --- Transforms ---------------------------------------------------------------

def add_transform(graph: PipelineGraph, transform: Transform) -> PipelineGraph:
    return replace(graph, transforms=(*graph.transforms, transform))


def update_transform(
    graph: PipelineGraph, index: int, changes: dict[str, Any],
) -> PipelineGraph:
    current = _item_at(graph.transforms, index, "Transform")
    return replace(graph, transforms=_replace_at(
        graph.transforms, index, _patch(current, changes),
    ))


def replace_transforms(graph: PipelineGraph, transforms: list[Transform]) -> PipelineGraph:
    return replace(graph, transforms=tuple(transforms))


# --- Helpers ------------------------------------------------------------------

def _item_at(items: tuple[T, ...], index: int, resource_type: str) -> T:
    if index < 0 or index >= len(items):
        raise ResourceNotFoundError(resource_type, str(index))
    return items[index]


def _replace_at(items: tuple[T, ...], index: int, item: T) -> tuple[T, ...]:
    return (*items[:index], item, *items[index + 1:])


def _patch(item: T, changes: dict[str, Any]) -> T:
    """dataclasses.replace restricted to the item's own fields."""
    known = {f.name for f in fields(item)}
    return replace(item, **{k: v for k, v in changes.items() if k in known})
