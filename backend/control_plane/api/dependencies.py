"""Dependency Factories — per-request services built from the injected session.

Invariants:
    - Every request gets its own service instances (no process-wide store handles)
    - Settings come from get_settings so tests can override them
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from control_plane.config import Settings, get_settings
from control_plane.infrastructure.database import get_db
from control_plane.services.pipeline_service import PipelineService
from control_plane.services.reference_directory import SqlReferenceDirectory
from control_plane.services.workspace_service import WorkspaceService


async def get_pipeline_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> PipelineService:
    return PipelineService(db, max_code_attempts=settings.code_max_attempts)


async def get_workspace_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> WorkspaceService:
    return WorkspaceService(db, max_code_attempts=settings.code_max_attempts)


async def get_reference_directory(
    db: AsyncSession = Depends(get_db),
) -> SqlReferenceDirectory:
    return SqlReferenceDirectory(db)
