# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Default publishing surface.

A small FastAPI application exposing the registry's read operations to the
hub, served by uvicorn inside the caller's event loop.
"""

import asyncio
import logging
from typing import List, Optional

import uvicorn
from fastapi import APIRouter, FastAPI, HTTPException, Query, Request, status
from pydantic import BaseModel

from .. import __version__
from ..config import settings
from ..devices.database import DeviceRegistry
from ..errors import NotFoundError

logger = logging.getLogger(__name__)

STARTUP_POLL_INTERVAL = 0.05

router = APIRouter(tags=["devices"])


class SearchHit(BaseModel):
    """One search result as returned to the hub."""
    item: dict
    score: float


def _registry(request: Request) -> DeviceRegistry:
    return request.app.state.registry


@router.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/db/search", response_model=List[SearchHit])
async def search_devices(request: Request, q: Optional[str] = Query(default=None)) -> List[SearchHit]:
    """Fuzzy device search."""
    results = _registry(request).search(q)
    return [SearchHit(item=result.item.to_dict(), score=result.score) for result in results]


@router.get("/db/adapter/{adapter_name}")
async def get_device_by_adapter(request: Request, adapter_name: str) -> dict:
    """First device of an adapter."""
    try:
        return _registry(request).get_device_by_adapter_name(adapter_name).to_dict()
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/db/{device_id}")
async def get_device(request: Request, device_id: int) -> dict:
    """Device record by id."""
    try:
        return _registry(request).get_device(device_id).to_dict()
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def create_app(registry: DeviceRegistry) -> FastAPI:
    """
    Create the publishing surface application.

    Args:
        registry: Registry whose devices are published

    Returns:
        FastAPI application
    """
    app = FastAPI(
        title="hubkit publishing surface",
        version=__version__,
    )
    app.state.registry = registry
    app.include_router(router)
    return app


class PublishingServer:
    """Running uvicorn server bound to one address and port."""

    def __init__(self, app: FastAPI, address: str, port: int):
        self.address = address
        self.port = port
        config = uvicorn.Config(
            app,
            host=address,
            port=port,
            log_level=settings.log_level.lower(),
            lifespan="off",
        )
        self._server = uvicorn.Server(config)
        self._task: Optional[asyncio.Task] = None

    @property
    def base_url(self) -> str:
        return f"http://{self.address}:{self.port}"

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _serve(self) -> None:
        try:
            await self._server.serve()
        except SystemExit as e:
            # uvicorn exits the process when it cannot bind
            raise OSError(f"Publishing server could not start on {self.base_url}") from e

    async def start(self) -> None:
        """Start serving and wait until the socket is bound."""
        self._task = asyncio.create_task(self._serve())
        while not self._server.started:
            if self._task.done():
                self._task.result()
                raise OSError(f"Publishing server exited during startup on {self.base_url}")
            await asyncio.sleep(STARTUP_POLL_INTERVAL)
        logger.info(f"Publishing server listening on {self.base_url}")

    async def stop(self) -> None:
        """Ask uvicorn to exit and wait for it."""
        if self._task is None:
            return
        self._server.should_exit = True
        try:
            await self._task
        finally:
            self._task = None
        logger.info(f"Publishing server on {self.base_url} stopped")


async def start_publishing_server(address: str, port: int, registry: DeviceRegistry) -> PublishingServer:
    """
    Default publishing-surface factory.

    Args:
        address: Bind address
        port: Bind port
        registry: Registry to publish

    Returns:
        Started PublishingServer
    """
    server = PublishingServer(create_app(registry), address, port)
    await server.start()
    return server
