"""Workspace Routes — create, read, and list workspaces and their pipelines."""

import logging

from fastapi import APIRouter, Depends, status

from control_plane.api.dependencies import get_pipeline_service, get_workspace_service
from control_plane.core.domain_types import WorkspaceId
from control_plane.core.pipeline_graph import graph_to_document
from control_plane.schemas.workspace import WorkspaceCreate, WorkspaceResponse
from control_plane.services.pipeline_service import PipelineService
from control_plane.services.workspace_service import WorkspaceService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/workspaces", tags=["workspaces"])


@router.post(
    "", response_model=WorkspaceResponse, status_code=status.HTTP_201_CREATED,
)
async def create_workspace(
    body: WorkspaceCreate,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """Create a workspace; its short code is generated here, once."""
    workspace = await service.create_workspace(
        name=body.name, description=body.description,
        allowed_origins=body.allowed_origins, workspace_id=body.id,
    )
    return WorkspaceResponse.model_validate(workspace)


@router.get("")
async def list_workspaces(
    service: WorkspaceService = Depends(get_workspace_service),
):
    workspaces = await service.list_workspaces()
    return {
        "items": [
            WorkspaceResponse.model_validate(w).model_dump(by_alias=True, mode="json")
            for w in workspaces
        ],
    }


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
async def get_workspace(
    workspace_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
):
    workspace = await service.get_workspace(WorkspaceId(workspace_id))
    return WorkspaceResponse.model_validate(workspace)


@router.get("/{workspace_id}/pipelines")
async def list_workspace_pipelines(
    workspace_id: str,
    workspaces: WorkspaceService = Depends(get_workspace_service),
    pipelines: PipelineService = Depends(get_pipeline_service),
):
    await workspaces.get_workspace(WorkspaceId(workspace_id))
    graphs = await pipelines.list_pipelines(WorkspaceId(workspace_id))
    return {"items": [graph_to_document(g) for g in graphs]}
