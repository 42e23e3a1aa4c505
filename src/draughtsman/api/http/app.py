"""FastAPI application exposing the agent's HTTP surface."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.draughtsman import project
from src.draughtsman.api.http.routers import health, version
from src.draughtsman.service.service import Service


def create_app(service: Service, *, boot: bool = True) -> FastAPI:
    """Create the application.

    Args:
        service: The service whose deployer loop the app manages
        boot: Whether to start the loop on start-up and stop it on shutdown
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if boot:
            service.boot()
        try:
            yield
        finally:
            if boot:
                await asyncio.to_thread(service.shutdown)

    app = FastAPI(
        title=project.NAME,
        description=project.DESCRIPTION,
        version=project.VERSION,
        lifespan=lifespan,
    )
    app.state.service = service
    app.include_router(health.router)
    app.include_router(version.router)
    return app
