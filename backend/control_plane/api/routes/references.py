"""Reference Routes — minimal client/connection registry used by connectors.

Only what connector validation and enrichment need: create, list.
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from control_plane.api.dependencies import get_reference_directory
from control_plane.schemas.reference import (
    ClientCreate, ClientResponse, ConnectionCreate, ConnectionResponse,
)
from control_plane.services.reference_directory import SqlReferenceDirectory

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["references"])


@router.post(
    "/clients", response_model=ClientResponse, status_code=status.HTTP_201_CREATED,
)
async def create_client(
    body: ClientCreate,
    directory: SqlReferenceDirectory = Depends(get_reference_directory),
):
    client = await directory.create_client(
        client_id=body.id, name=body.name.strip(),
        workspace_id=body.workspace_id, description=body.description,
    )
    return ClientResponse.model_validate(client)


@router.get("/clients")
async def list_clients(
    workspace_id: str | None = Query(None, alias="workspaceId"),
    directory: SqlReferenceDirectory = Depends(get_reference_directory),
):
    clients = await directory.list_clients(workspace_id)
    return {
        "items": [
            ClientResponse.model_validate(c).model_dump(by_alias=True, mode="json")
            for c in clients
        ],
    }


@router.post(
    "/connections", response_model=ConnectionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_connection(
    body: ConnectionCreate,
    directory: SqlReferenceDirectory = Depends(get_reference_directory),
):
    connection = await directory.create_connection(
        connection_id=body.id, name=body.name.strip(), type=body.type.value,
        config=body.config, description=body.description,
    )
    return ConnectionResponse.model_validate(connection)


@router.get("/connections")
async def list_connections(
    directory: SqlReferenceDirectory = Depends(get_reference_directory),
):
    connections = await directory.list_connections()
    return {
        "items": [
            ConnectionResponse.model_validate(c).model_dump(by_alias=True, mode="json")
            for c in connections
        ],
    }
