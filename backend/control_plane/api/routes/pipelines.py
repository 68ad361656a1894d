"""Pipeline Routes — pipeline CRUD and graph edits.

Invariants:
    - Every edit goes through PipelineService (load -> delta -> validate -> commit)
    - Responses are the persisted camelCase document; GET by id returns the enriched view
    - `environment` defaults to the configured one; the query string may override it

Design Decisions:
    - Connectors and transforms are addressed by list index in the path
    - PUT on a collection replaces it wholesale; POST appends one item
"""

import logging

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from control_plane.api.dependencies import get_pipeline_service
from control_plane.config import Settings, get_settings
from control_plane.core.domain_types import PipelineId, StreamVariant, WorkspaceId
from control_plane.core.pipeline_graph import graph_to_document
from control_plane.core.stream_names import normalize_stream_name
from control_plane.schemas.pipeline import (
    PipelineCreate, PipelineUpdate,
    SinkConnectorIn, SinkConnectorList, SinkConnectorUpdate,
    SourceConnectorIn, SourceConnectorList, SourceConnectorUpdate,
    StreamIn, StreamPairIn, StreamUpdate,
    TransformIn, TransformList, TransformUpdate,
)
from control_plane.services.pipeline_service import PipelineService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/pipelines", tags=["pipelines"])


# --- Pipeline -----------------------------------------------------------------

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_pipeline(
    body: PipelineCreate,
    service: PipelineService = Depends(get_pipeline_service),
):
    """Create a DRAFT pipeline; the whole initial graph is validated up front."""
    graph = await service.create_pipeline(
        workspace_id=WorkspaceId(body.workspace_id),
        name=body.name,
        description=body.description,
        pipeline_id=body.id,
        streams=[s.to_domain() for s in body.streams],
        source_connectors=[c.to_domain() for c in body.source_connectors],
        sink_connectors=[c.to_domain() for c in body.sink_connectors],
        transforms=[t.to_domain() for t in body.transforms],
    )
    return graph_to_document(graph)


@router.get("")
async def list_pipelines(
    workspace_id: str | None = Query(None, alias="workspaceId"),
    service: PipelineService = Depends(get_pipeline_service),
):
    graphs = await service.list_pipelines(
        WorkspaceId(workspace_id) if workspace_id else None,
    )
    return {"items": [graph_to_document(g) for g in graphs]}


@router.get("/{pipeline_id}")
async def get_pipeline(
    pipeline_id: str,
    environment: str | None = Query(None),
    service: PipelineService = Depends(get_pipeline_service),
    settings: Settings = Depends(get_settings),
):
    """Enriched view: client/connection names, workspace code, per-stream topic."""
    return await service.get_enriched_pipeline(
        PipelineId(pipeline_id), environment or settings.environment,
    )


@router.patch("/{pipeline_id}")
async def update_pipeline(
    pipeline_id: str,
    body: PipelineUpdate,
    service: PipelineService = Depends(get_pipeline_service),
):
    graph = await service.update_pipeline(PipelineId(pipeline_id), body.changes())
    return graph_to_document(graph)


@router.get("/{pipeline_id}/topics")
async def list_pipeline_topics(
    pipeline_id: str,
    environment: str | None = Query(None),
    service: PipelineService = Depends(get_pipeline_service),
    settings: Settings = Depends(get_settings),
):
    topics = await service.list_topic_names(
        PipelineId(pipeline_id), environment or settings.environment,
    )
    return {"items": topics}


# --- Streams ------------------------------------------------------------------

@router.post("/{pipeline_id}/streams", status_code=status.HTTP_201_CREATED)
async def add_stream(
    pipeline_id: str,
    body: dict = Body(...),
    pair: bool = Query(False),
    service: PipelineService = Depends(get_pipeline_service),
):
    """Add one stream, or with ?pair=true its source and sink variants together."""
    try:
        if pair:
            pair_in = StreamPairIn.model_validate(body)
            graph = await service.add_stream_pair(
                PipelineId(pipeline_id), pair_in.stream_name, pair_in.description,
            )
            return graph_to_document(graph)
        stream_in = StreamIn.model_validate(body)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e
    graph = await service.add_stream(PipelineId(pipeline_id), stream_in.to_domain())
    return graph_to_document(graph)


@router.patch("/{pipeline_id}/streams/{stream_name}/{variant}")
async def update_stream(
    pipeline_id: str,
    stream_name: str,
    variant: StreamVariant,
    body: StreamUpdate,
    service: PipelineService = Depends(get_pipeline_service),
):
    graph = await service.update_stream(
        PipelineId(pipeline_id), normalize_stream_name(stream_name), variant,
        body.changes(),
    )
    return graph_to_document(graph)


# --- Source connectors --------------------------------------------------------

@router.post("/{pipeline_id}/source-connectors", status_code=status.HTTP_201_CREATED)
async def add_source_connector(
    pipeline_id: str,
    body: SourceConnectorIn,
    service: PipelineService = Depends(get_pipeline_service),
):
    graph = await service.add_source_connector(PipelineId(pipeline_id), body.to_domain())
    return graph_to_document(graph)


@router.put("/{pipeline_id}/source-connectors")
async def replace_source_connectors(
    pipeline_id: str,
    body: SourceConnectorList,
    service: PipelineService = Depends(get_pipeline_service),
):
    graph = await service.replace_source_connectors(
        PipelineId(pipeline_id), [c.to_domain() for c in body.items],
    )
    return graph_to_document(graph)


@router.patch("/{pipeline_id}/source-connectors/{index}")
async def update_source_connector(
    pipeline_id: str,
    index: int,
    body: SourceConnectorUpdate,
    service: PipelineService = Depends(get_pipeline_service),
):
    graph = await service.update_source_connector(
        PipelineId(pipeline_id), index, body.changes(),
    )
    return graph_to_document(graph)


# --- Sink connectors ----------------------------------------------------------

@router.post("/{pipeline_id}/sink-connectors", status_code=status.HTTP_201_CREATED)
async def add_sink_connector(
    pipeline_id: str,
    body: SinkConnectorIn,
    service: PipelineService = Depends(get_pipeline_service),
):
    graph = await service.add_sink_connector(PipelineId(pipeline_id), body.to_domain())
    return graph_to_document(graph)


@router.put("/{pipeline_id}/sink-connectors")
async def replace_sink_connectors(
    pipeline_id: str,
    body: SinkConnectorList,
    service: PipelineService = Depends(get_pipeline_service),
):
    graph = await service.replace_sink_connectors(
        PipelineId(pipeline_id), [c.to_domain() for c in body.items],
    )
    return graph_to_document(graph)


@router.patch("/{pipeline_id}/sink-connectors/{index}")
async def update_sink_connector(
    pipeline_id: str,
    index: int,
    body: SinkConnectorUpdate,
    service: PipelineService = Depends(get_pipeline_service),
):
    graph = await service.update_sink_connector(
        PipelineId(pipeline_id), index, body.changes(),
    )
    return graph_to_document(graph)


# --- Transforms ---------------------------------------------------------------

@router.post("/{pipeline_id}/transforms", status_code=status.HTTP_201_CREATED)
async def add_transform(
    pipeline_id: str,
    body: TransformIn,
    service: PipelineService = Depends(get_pipeline_service),
):
    graph = await service.add_transform(PipelineId(pipeline_id), body.to_domain())
    return graph_to_document(graph)


@router.put("/{pipeline_id}/transforms")
async def replace_transforms(
    pipeline_id: str,
    body: TransformList,
    service: PipelineService = Depends(get_pipeline_service),
):
    graph = await service.replace_transforms(
        PipelineId(pipeline_id), [t.to_domain() for t in body.items],
    )
    return graph_to_document(graph)


@router.patch("/{pipeline_id}/transforms/{index}")
async def update_transform(
    pipeline_id: str,
    index: int,
    body: TransformUpdate,
    service: PipelineService = Depends(get_pipeline_service),
):
    graph = await service.update_transform(
        PipelineId(pipeline_id), index, body.changes(),
    )
    return graph_to_document(graph)
