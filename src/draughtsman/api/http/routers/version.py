"""Version endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from src.draughtsman import project
from src.draughtsman.api.http.schemas.health import VersionResponse

router = APIRouter(tags=["version"])


@router.get("/version", response_model=VersionResponse, summary="Build information")
async def version() -> VersionResponse:
    return VersionResponse(
        name=project.NAME,
        description=project.DESCRIPTION,
        git_commit=project.git_commit(),
        source=project.SOURCE,
        version=project.VERSION,
    )
