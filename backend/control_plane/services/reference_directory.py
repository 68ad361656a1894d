"""Reference Directory — clients and connections as seen by the topology core.

Invariants:
    - client_names / connection_names return only ids that exist
    - An empty id set never hits the database

Design Decisions:
    - One batched IN query per kind: validation and enrichment both need all
      ids of a graph at once
    - Minimal create/list lives here too; the full client/connection lifecycle
      (secrets, scopes) belongs to other services
"""

import logging
import uuid
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from control_plane.core.domain_types import ClientId, ConnectionId, ReferenceStatus
from control_plane.core.enforce_topology import KnownReferences
from control_plane.core.errors import ResourceConflictError
from control_plane.core.pipeline_graph import PipelineGraph
from control_plane.core.repository_protocols import ReferenceDirectory
from control_plane.models.client import Client as ClientModel
from control_plane.models.connection import Connection as ConnectionModel

logger = logging.getLogger(__name__)


class SqlReferenceDirectory:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def client_names(self, ids: Iterable[ClientId]) -> dict[str, str]:
        wanted = set(ids)
        if not wanted:
            return {}
        result = await self._session.execute(
            select(ClientModel.id, ClientModel.name)
            .where(ClientModel.id.in_(wanted)),
        )
        return {row.id: row.name for row in result}

    async def connection_names(
        self, ids: Iterable[ConnectionId],
    ) -> dict[str, str]:
        wanted = set(ids)
        if not wanted:
            return {}
        result = await self._session.execute(
            select(ConnectionModel.id, ConnectionModel.name)
            .where(ConnectionModel.id.in_(wanted)),
        )
        return {row.id: row.name for row in result}

    # --- minimal lifecycle ---

    async def create_client(
        self, *, client_id: str | None, name: str,
        workspace_id: str | None, description: str,
    ) -> ClientModel:
        client_id = client_id or str(uuid.uuid4())
        if await self._session.get(ClientModel, client_id) is not None:
            raise ResourceConflictError("Client", client_id)
        row = ClientModel(
            id=client_id, name=name, workspace_id=workspace_id,
            description=description, status=ReferenceStatus.ACTIVE.value,
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.commit()
        logger.info(f"Client {client_id} created", extra={"workspace_id": workspace_id})
        return row

    async def list_clients(self, workspace_id: str | None = None) -> list[ClientModel]:
        query = select(ClientModel).order_by(ClientModel.created_at)
        if workspace_id:
            query = query.where(ClientModel.workspace_id == workspace_id)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def create_connection(
        self, *, connection_id: str | None, name: str, type: str,
        config: dict, description: str,
    ) -> ConnectionModel:
        connection_id = connection_id or str(uuid.uuid4())
        if await self._session.get(ConnectionModel, connection_id) is not None:
            raise ResourceConflictError("Connection", connection_id)
        row = ConnectionModel(
            id=connection_id, name=name, type=type, config=config,
            description=description, status=ReferenceStatus.ACTIVE.value,
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.commit()
        logger.info(f"Connection {connection_id} created")
        return row

    async def list_connections(self) -> list[ConnectionModel]:
        result = await self._session.execute(
            select(ConnectionModel).order_by(ConnectionModel.created_at),
        )
        return list(result.scalars().all())


async def resolve_references(
    directory: ReferenceDirectory, graph: PipelineGraph,
) -> KnownReferences:
    """Existence of every client/connection a graph points at."""
    clients = await directory.client_names(
        c.client_id for c in graph.source_connectors
    )
    connections = await directory.connection_names(
        c.connection_id for c in graph.sink_connectors
    )
    return KnownReferences(
        client_ids=frozenset(clients), connection_ids=frozenset(connections),
    )
