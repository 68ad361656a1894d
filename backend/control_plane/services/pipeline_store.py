"""Pipeline Graph Store Adapter — SQL implementation of PipelineStore.

Invariants:
    - commit() writes the whole graph in one row update, then re-reads it
    - commit() never changes `code` or `workspace_id` of a stored row
    - load() of an absent id raises ResourceNotFoundError
    - Only flush() here; the owning service decides when the transaction commits

Design Decisions:
    - load(for_update=True) takes a row lock on engines that support it, so two
      mutations of the same pipeline serialize on the row (last writer still wins)
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from control_plane.core.domain_types import PipelineId, WorkspaceId
from control_plane.core.errors import ResourceNotFoundError
from control_plane.core.pipeline_graph import (
    PipelineGraph, graph_from_document, graph_to_document,
)
from control_plane.models.pipeline import Pipeline as PipelineModel


class SqlPipelineStore:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def load(
        self, pipeline_id: PipelineId, for_update: bool = False,
    ) -> PipelineGraph:
        row = await self._get_row(pipeline_id, for_update)
        if row is None:
            raise ResourceNotFoundError("Pipeline", pipeline_id)
        return _row_to_graph(row)

    async def insert(self, graph: PipelineGraph) -> PipelineGraph:
        doc = graph_to_document(graph)
        row = PipelineModel(
            id=graph.id,
            workspace_id=graph.workspace_id,
            code=graph.code,
            name=doc["name"],
            description=doc["description"],
            status=doc["status"],
            streams=doc["streams"],
            source_connectors=doc["sourceConnectors"],
            sink_connectors=doc["sinkConnectors"],
            transforms=doc["transforms"],
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return _row_to_graph(row)

    async def commit(self, graph: PipelineGraph) -> PipelineGraph:
        row = await self._get_row(graph.id, for_update=False)
        if row is None:
            raise ResourceNotFoundError("Pipeline", graph.id)
        doc = graph_to_document(graph)
        row.name = doc["name"]
        row.description = doc["description"]
        row.status = doc["status"]
        row.streams = doc["streams"]
        row.source_connectors = doc["sourceConnectors"]
        row.sink_connectors = doc["sinkConnectors"]
        row.transforms = doc["transforms"]
        row.updated_at = datetime.now(timezone.utc)
        await self._session.flush()
        await self._session.refresh(row)
        return _row_to_graph(row)

    async def code_exists(self, code: str) -> bool:
        result = await self._session.execute(
            select(PipelineModel.id).where(PipelineModel.code == code),
        )
        return result.first() is not None

    async def list_all(self) -> list[PipelineGraph]:
        result = await self._session.execute(
            select(PipelineModel).order_by(PipelineModel.created_at),
        )
        return [_row_to_graph(row) for row in result.scalars().all()]

    async def list_for_workspace(
        self, workspace_id: WorkspaceId,
    ) -> list[PipelineGraph]:
        result = await self._session.execute(
            select(PipelineModel)
            .where(PipelineModel.workspace_id == workspace_id)
            .order_by(PipelineModel.created_at),
        )
        return [_row_to_graph(row) for row in result.scalars().all()]

    async def _get_row(
        self, pipeline_id: str, for_update: bool,
    ) -> PipelineModel | None:
        query = select(PipelineModel).where(PipelineModel.id == pipeline_id)
        if for_update:
            query = query.with_for_update()
        result = await self._session.execute(query)
        return result.scalar_one_or_none()


def _row_to_graph(row: PipelineModel) -> PipelineGraph:
    return graph_from_document({
        "id": row.id,
        "workspaceId": row.workspace_id,
        "code": row.code,
        "name": row.name,
        "description": row.description,
        "status": row.status,
        "streams": row.streams,
        "sourceConnectors": row.source_connectors,
        "sinkConnectors": row.sink_connectors,
        "transforms": row.transforms,
    })
