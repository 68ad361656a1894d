"""Workspace Store — SQL implementation of WorkspaceStore."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from control_plane.core.domain_types import WorkspaceId, WorkspaceStatus
from control_plane.models.workspace import Workspace as WorkspaceModel


class SqlWorkspaceStore:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, workspace_id: WorkspaceId) -> WorkspaceModel | None:
        return await self._session.get(WorkspaceModel, workspace_id)

    async def create(
        self,
        *,
        workspace_id: WorkspaceId,
        code: str,
        name: str,
        description: str,
        allowed_origins: list[str],
    ) -> WorkspaceModel:
        row = WorkspaceModel(
            id=workspace_id, code=code, name=name, description=description,
            status=WorkspaceStatus.ACTIVE.value,
            allowed_origins=list(allowed_origins),
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def code_exists(self, code: str) -> bool:
        result = await self._session.execute(
            select(WorkspaceModel.id).where(WorkspaceModel.code == code),
        )
        return result.first() is not None

    async def list_all(self) -> list[WorkspaceModel]:
        result = await self._session.execute(
            select(WorkspaceModel).order_by(WorkspaceModel.created_at),
        )
        return list(result.scalars().all())
