"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations are constructed per request from an injected session (no singletons)
    - Services accept any implementation; the SQL adapters are only the default

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: implementations do IO, but the core functions fed by these
      protocols are never async — the services orchestrate the calls around pure logic
    - PipelineStore.commit is the ONLY write path for an existing pipeline graph
"""

from collections.abc import Iterable
from typing import Protocol

from control_plane.core.domain_types import (
    ClientId, ConnectionId, PipelineId, WorkspaceId,
)
from control_plane.core.pipeline_graph import PipelineGraph


class WorkspaceRecord(Protocol):
    """Structural contract for a stored workspace."""
    id: str
    code: str
    name: str
    description: str
    status: str
    allowed_origins: list


class PipelineStore(Protocol):
    """Contract for pipeline graph persistence — implemented by shell."""
    async def load(
        self, pipeline_id: PipelineId, for_update: bool = False,
    ) -> PipelineGraph: ...
    async def insert(self, graph: PipelineGraph) -> PipelineGraph: ...
    async def commit(self, graph: PipelineGraph) -> PipelineGraph: ...
    async def code_exists(self, code: str) -> bool: ...
    async def list_all(self) -> list[PipelineGraph]: ...
    async def list_for_workspace(
        self, workspace_id: WorkspaceId,
    ) -> list[PipelineGraph]: ...


class WorkspaceStore(Protocol):
    """Contract for workspace persistence — implemented by shell."""
    async def get(self, workspace_id: WorkspaceId) -> WorkspaceRecord | None: ...
    async def create(
        self,
        *,
        workspace_id: WorkspaceId,
        code: str,
        name: str,
        description: str,
        allowed_origins: list[str],
    ) -> WorkspaceRecord: ...
    async def code_exists(self, code: str) -> bool: ...
    async def list_all(self) -> list[WorkspaceRecord]: ...


class ReferenceDirectory(Protocol):
    """Existence and display names of clients/connections.

    Ids absent from the returned mapping do not exist.
    """
    async def client_names(self, ids: Iterable[ClientId]) -> dict[str, str]: ...
    async def connection_names(
        self, ids: Iterable[ConnectionId],
    ) -> dict[str, str]: ...
