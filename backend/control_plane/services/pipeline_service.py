"""Pipeline Service — every pipeline create/update/read funnels through here.

Invariants:
    - Mutations re-read the persisted graph, apply ONE delta, validate the COMPLETE
      resulting graph, and only then write (validate-before-write)
    - A rejected mutation writes nothing and reports every violated rule at once
    - PipelineStore.commit is the only write path for an existing pipeline
    - `code` and `workspace_id` never change after creation

Design Decisions:
    - Impureim sandwich: IO (load, resolve references) -> pure (mutation, validation)
      -> IO (commit); core functions never see the session
    - Last-writer-wins: no version token; the row lock taken by load(for_update=True)
      only serializes writers, it does not detect lost updates
    - Each public mutation is a thin wrapper that hands a pure delta to _mutate
"""

import logging
import uuid
from collections.abc import Callable
from functools import partial
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from control_plane.core import graph_mutations
from control_plane.core.domain_types import (
    MAX_CODE_ATTEMPTS, CodeKind, PipelineId, PipelineStatus, StreamVariant, WorkspaceId,
)
from control_plane.core.enforce_topology import validate_topology
from control_plane.core.enrichment import enrich_pipeline
from control_plane.core.errors import (
    ErrorContext, ResourceConflictError, ResourceNotFoundError, TopologyValidationError,
)
from control_plane.core.pipeline_graph import (
    PipelineGraph, SinkConnector, SourceConnector, Stream, Transform,
)
from control_plane.core.repository_protocols import (
    PipelineStore, ReferenceDirectory, WorkspaceStore,
)
from control_plane.core.topic_names import pipeline_topic_names
from control_plane.services.code_generator import generate_unique_code
from control_plane.services.pipeline_store import SqlPipelineStore
from control_plane.services.reference_directory import (
    SqlReferenceDirectory, resolve_references,
)
from control_plane.services.workspace_store import SqlWorkspaceStore

logger = logging.getLogger(__name__)

Mutation = Callable[[PipelineGraph], PipelineGraph]


class PipelineService:
    """Stores default to the SQL adapters bound to `session`; pass others to swap them."""

    def __init__(
        self,
        session: AsyncSession,
        max_code_attempts: int = MAX_CODE_ATTEMPTS,
        *,
        pipelines: PipelineStore | None = None,
        workspaces: WorkspaceStore | None = None,
        directory: ReferenceDirectory | None = None,
    ):
        self._session = session
        self._pipelines: PipelineStore = pipelines or SqlPipelineStore(session)
        self._workspaces: WorkspaceStore = workspaces or SqlWorkspaceStore(session)
        self._directory: ReferenceDirectory = (
            directory or SqlReferenceDirectory(session)
        )
        self._max_code_attempts = max_code_attempts

    # --- create -------------------------------------------------------------

    async def create_pipeline(
        self,
        *,
        workspace_id: WorkspaceId,
        name: str,
        description: str = "",
        pipeline_id: str | None = None,
        streams: list[Stream] | None = None,
        source_connectors: list[SourceConnector] | None = None,
        sink_connectors: list[SinkConnector] | None = None,
        transforms: list[Transform] | None = None,
    ) -> PipelineGraph:
        """Create a pipeline in DRAFT with a freshly generated code."""
        if await self._workspaces.get(workspace_id) is None:
            raise ResourceNotFoundError("Workspace", workspace_id)
        pipeline_id = PipelineId(pipeline_id or str(uuid.uuid4()))
        if await self._exists(pipeline_id):
            raise ResourceConflictError("Pipeline", pipeline_id)

        code = await generate_unique_code(
            self._pipelines.code_exists, CodeKind.PIPELINE, self._max_code_attempts,
        )
        candidate = PipelineGraph(
            id=pipeline_id,
            workspace_id=workspace_id,
            code=code,
            name=name,
            description=description,
            status=PipelineStatus.DRAFT,
            streams=tuple(streams or ()),
            source_connectors=tuple(source_connectors or ()),
            sink_connectors=tuple(sink_connectors or ()),
            transforms=tuple(transforms or ()),
        )
        await self._ensure_valid(candidate, previous=None)

        created = await self._pipelines.insert(candidate)
        await self._session.commit()
        logger.info(
            f"Pipeline {pipeline_id} created",
            extra={
                "pipeline_id": pipeline_id, "workspace_id": workspace_id,
                "code": code,
            },
        )
        return created

    # --- reads --------------------------------------------------------------

    async def get_pipeline(self, pipeline_id: PipelineId) -> PipelineGraph:
        return await self._pipelines.load(pipeline_id)

    async def list_pipelines(
        self, workspace_id: WorkspaceId | None = None,
    ) -> list[PipelineGraph]:
        if workspace_id is None:
            return await self._pipelines.list_all()
        return await self._pipelines.list_for_workspace(workspace_id)

    async def get_enriched_pipeline(
        self, pipeline_id: PipelineId, environment: str,
    ) -> dict:
        graph = await self._pipelines.load(pipeline_id)
        client_names = await self._directory.client_names(
            c.client_id for c in graph.source_connectors
        )
        connection_names = await self._directory.connection_names(
            c.connection_id for c in graph.sink_connectors
        )
        return enrich_pipeline(
            graph, client_names, connection_names,
            workspace_code=await self._workspace_code(graph.workspace_id),
            environment=environment,
        )

    async def list_topic_names(
        self, pipeline_id: PipelineId, environment: str,
    ) -> list[str]:
        graph = await self._pipelines.load(pipeline_id)
        workspace_code = await self._workspace_code(graph.workspace_id)
        if not workspace_code:
            raise ResourceNotFoundError("Workspace", graph.workspace_id)
        return pipeline_topic_names(graph, environment, workspace_code)

    # --- mutations ----------------------------------------------------------

    async def update_pipeline(
        self, pipeline_id: PipelineId, changes: dict[str, Any],
    ) -> PipelineGraph:
        return await self._mutate(
            pipeline_id, partial(graph_mutations.update_pipeline_fields, changes=changes),
        )

    async def add_stream(self, pipeline_id: PipelineId, stream: Stream) -> PipelineGraph:
        return await self._mutate(
            pipeline_id, partial(graph_mutations.add_stream, stream=stream),
        )

    async def add_stream_pair(
        self, pipeline_id: PipelineId, stream_name: str, description: str | None = None,
    ) -> PipelineGraph:
        return await self._mutate(pipeline_id, partial(
            graph_mutations.add_stream_pair,
            stream_name=stream_name, description=description,
        ))

    async def update_stream(
        self,
        pipeline_id: PipelineId,
        stream_name: str,
        variant: StreamVariant,
        changes: dict[str, Any],
    ) -> PipelineGraph:
        return await self._mutate(pipeline_id, partial(
            graph_mutations.update_stream,
            stream_name=stream_name, variant=variant, changes=changes,
        ))

    async def add_source_connector(
        self, pipeline_id: PipelineId, connector: SourceConnector,
    ) -> PipelineGraph:
        return await self._mutate(pipeline_id, partial(
            graph_mutations.add_source_connector, connector=connector,
        ))

    async def update_source_connector(
        self, pipeline_id: PipelineId, index: int, changes: dict[str, Any],
    ) -> PipelineGraph:
        return await self._mutate(pipeline_id, partial(
            graph_mutations.update_source_connector, index=index, changes=changes,
        ))

    async def replace_source_connectors(
        self, pipeline_id: PipelineId, connectors: list[SourceConnector],
    ) -> PipelineGraph:
        return await self._mutate(pipeline_id, partial(
            graph_mutations.replace_source_connectors, connectors=connectors,
        ))

    async def add_sink_connector(
        self, pipeline_id: PipelineId, connector: SinkConnector,
    ) -> PipelineGraph:
        return await self._mutate(pipeline_id, partial(
            graph_mutations.add_sink_connector, connector=connector,
        ))

    async def update_sink_connector(
        self, pipeline_id: PipelineId, index: int, changes: dict[str, Any],
    ) -> PipelineGraph:
        return await self._mutate(pipeline_id, partial(
            graph_mutations.update_sink_connector, index=index, changes=changes,
        ))

    async def replace_sink_connectors(
        self, pipeline_id: PipelineId, connectors: list[SinkConnector],
    ) -> PipelineGraph:
        return await self._mutate(pipeline_id, partial(
            graph_mutations.replace_sink_connectors, connectors=connectors,
        ))

    async def add_transform(
        self, pipeline_id: PipelineId, transform: Transform,
    ) -> PipelineGraph:
        return await self._mutate(pipeline_id, partial(
            graph_mutations.add_transform, transform=transform,
        ))

    async def update_transform(
        self, pipeline_id: PipelineId, index: int, changes: dict[str, Any],
    ) -> PipelineGraph:
        return await self._mutate(pipeline_id, partial(
            graph_mutations.update_transform, index=index, changes=changes,
        ))

    async def replace_transforms(
        self, pipeline_id: PipelineId, transforms: list[Transform],
    ) -> PipelineGraph:
        return await self._mutate(pipeline_id, partial(
            graph_mutations.replace_transforms, transforms=transforms,
        ))

    # --- internals ----------------------------------------------------------

    async def _mutate(self, pipeline_id: PipelineId, mutation: Mutation) -> PipelineGraph:
        current = await self._pipelines.load(pipeline_id, for_update=True)
        candidate = mutation(current)
        await self._ensure_valid(candidate, previous=current)

        committed = await self._pipelines.commit(candidate)
        await self._session.commit()
        logger.info(
            f"Pipeline {pipeline_id} updated",
            extra={"pipeline_id": pipeline_id, "workspace_id": committed.workspace_id},
        )
        return committed

    async def _ensure_valid(
        self, candidate: PipelineGraph, previous: PipelineGraph | None,
    ) -> None:
        references = await resolve_references(self._directory, candidate)
        violations = validate_topology(candidate, references, previous)
        if violations:
            logger.warning(
                f"Rejected pipeline {candidate.id}: {len(violations)} violation(s)",
                extra={
                    "pipeline_id": candidate.id,
                    "error_code": "TOPOLOGY_INVALID",
                    "violations": [v.rule for v in violations],
                },
            )
            raise TopologyValidationError(
                violations,
                ErrorContext(
                    pipeline_id=candidate.id, workspace_id=candidate.workspace_id,
                ),
            )

    async def _exists(self, pipeline_id: PipelineId) -> bool:
        try:
            await self._pipelines.load(pipeline_id)
        except ResourceNotFoundError:
            return False
        return True

    async def _workspace_code(self, workspace_id: WorkspaceId) -> str:
        workspace = await self._workspaces.get(workspace_id)
        return workspace.code if workspace is not None else ""
