"""Workspace Service — create and read workspaces.

Invariants:
    - A workspace code is generated exactly once, at creation
    - Codes come from the lowercase alphabet (CodeKind.WORKSPACE)
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from control_plane.core.domain_types import MAX_CODE_ATTEMPTS, CodeKind, WorkspaceId
from control_plane.core.errors import ResourceConflictError, ResourceNotFoundError
from control_plane.core.repository_protocols import WorkspaceRecord, WorkspaceStore
from control_plane.services.code_generator import generate_unique_code
from control_plane.services.workspace_store import SqlWorkspaceStore

logger = logging.getLogger(__name__)


class WorkspaceService:
    def __init__(
        self,
        session: AsyncSession,
        max_code_attempts: int = MAX_CODE_ATTEMPTS,
        *,
        store: WorkspaceStore | None = None,
    ):
        self._session = session
        self._store: WorkspaceStore = store or SqlWorkspaceStore(session)
        self._max_code_attempts = max_code_attempts

    async def create_workspace(
        self,
        *,
        name: str,
        description: str = "",
        allowed_origins: list[str] | None = None,
        workspace_id: str | None = None,
    ) -> WorkspaceRecord:
        workspace_id = WorkspaceId(workspace_id or str(uuid.uuid4()))
        if await self._store.get(workspace_id) is not None:
            raise ResourceConflictError("Workspace", workspace_id)
        code = await generate_unique_code(
            self._store.code_exists, CodeKind.WORKSPACE, self._max_code_attempts,
        )
        workspace = await self._store.create(
            workspace_id=workspace_id, code=code, name=name,
            description=description, allowed_origins=allowed_origins or [],
        )
        await self._session.commit()
        logger.info(
            f"Workspace {workspace_id} created",
            extra={"workspace_id": workspace_id, "code": code},
        )
        return workspace

    async def get_workspace(self, workspace_id: WorkspaceId) -> WorkspaceRecord:
        workspace = await self._store.get(workspace_id)
        if workspace is None:
            raise ResourceNotFoundError("Workspace", workspace_id)
        return workspace

    async def list_workspaces(self) -> list[WorkspaceRecord]:
        return await self._store.list_all()
