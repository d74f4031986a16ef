# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Session with one remote hub.

The session checks the hub's firmware, resolves where the publishing surface
should listen, and owns at most one running publishing surface at a time.
"""

import asyncio
import logging
import re
import threading
from typing import Any, Awaitable, Callable, Optional, Protocol, Sequence

from ..config import settings
from ..devices.database import DeviceRegistry
from ..devices.lifecycle import AdapterLifecycleManager
from ..devices.models import AdapterDescriptor
from ..errors import AlreadyRunningError, HubRequestError, UnsupportedError
from .client import HubClient
from .network import resolve_bind_address
from .schemas import SystemInfo

logger = logging.getLogger(__name__)

MINIMUM_FIRMWARE_VERSION = 0.5
WEB_UI_PORT = 3200

_VERSION_PREFIX = re.compile(r"^(\d+)[.-](\d+)(?:[.-]|$)")


class ServerHandle(Protocol):
    """Running publishing surface."""

    base_url: str

    async def stop(self) -> None: ...


ServerFactory = Callable[[str, int, DeviceRegistry], Awaitable[ServerHandle]]


def parse_firmware_version(version: Optional[str]) -> Optional[float]:
    """
    Parse the leading MAJOR.MINOR of a firmware version string.

    "0.50.13-20180424" parses to 0.5, "1-2" to 1.2.

    Returns:
        The version as a number, or None if there is no numeric prefix
    """
    if not version:
        return None
    match = _VERSION_PREFIX.match(version.strip())
    if match is None:
        return None
    return float(f"{match.group(1)}.{match.group(2)}")


async def _default_server_factory(address: str, port: int, registry: DeviceRegistry) -> ServerHandle:
    # Imported lazily so the session can be used without the web stack loaded
    from ..server.app import start_publishing_server
    return await start_publishing_server(address, port, registry)


class HubSession:
    """One connection to a remote hub."""

    def __init__(
        self,
        address: str,
        port: int,
        name: str,
        host_name: str,
        firmware_version: str,
        region: str,
        client: Optional[HubClient] = None,
        server_factory: Optional[ServerFactory] = None,
    ):
        """
        Initialize hub session.

        Args:
            address: Hub IP address
            port: Hub API port
            name: User-assigned hub name
            host_name: Hub host name
            firmware_version: Hub firmware version string
            region: Firmware region, e.g. "US"
            client: Hub API client (default: HubClient for address/port)
            server_factory: Publishing surface factory (default: FastAPI server)
        """
        for field, value in (
            ("address", address),
            ("name", name),
            ("host_name", host_name),
            ("firmware_version", firmware_version),
            ("region", region),
        ):
            if value is None:
                raise ValueError(f"{field} cannot be None")

        self.address = address
        self.port = port
        self.name = name
        self.host_name = host_name
        self.firmware_version = firmware_version
        self.region = region
        self.client = client or HubClient(address, port)
        self.server_factory = server_factory or _default_server_factory

        self.registry: Optional[DeviceRegistry] = None
        self.server_name: Optional[str] = None
        self._server: Optional[ServerHandle] = None
        self._slot_lock = threading.Lock()
        self._start_lock = asyncio.Lock()

    @classmethod
    async def connect(cls, address: str, port: Optional[int] = None, **kwargs: Any) -> "HubSession":
        """
        Create a session from the hub's own system information.

        Args:
            address: Hub IP address
            port: Hub API port (defaults to config)

        Raises:
            HubRequestError: If the hub cannot be reached
        """
        port = port or settings.hub_port
        client = kwargs.pop("client", None) or HubClient(address, port)
        info = await client.fetch_system_info()
        return cls(
            address=address,
            port=port,
            name=info.name or info.hostname,
            host_name=info.hostname,
            firmware_version=info.firmware_version,
            region=info.region,
            client=client,
            **kwargs,
        )

    @property
    def has_compatible_firmware(self) -> bool:
        """Whether the hub runs firmware 0.50 or above."""
        version = parse_firmware_version(self.firmware_version)
        return version is not None and version >= MINIMUM_FIRMWARE_VERSION

    @property
    def is_running(self) -> bool:
        return self._server is not None

    @property
    def web_ui_url(self) -> str:
        return f"http://{self.address}:{WEB_UI_PORT}/eui"

    async def get_system_info(self) -> SystemInfo:
        """Fetch the hub's current system information."""
        return await self.client.fetch_system_info()

    def _take_server(self) -> Optional[ServerHandle]:
        with self._slot_lock:
            server, self._server = self._server, None
            return server

    async def start_server(
        self,
        name: str,
        devices: Sequence[AdapterDescriptor],
        address: Optional[str] = None,
        port: int = 9000,
    ) -> ServerHandle:
        """
        Start the publishing surface and register it on the hub.

        Args:
            name: Integration server name, stable across restarts
            devices: Adapters whose devices are published
            address: Bind address (default: first non-loopback IPv4)
            port: Bind port

        Returns:
            The running server handle

        Raises:
            AlreadyRunningError: If a server is already running
            UnsupportedError: If the hub firmware is incompatible
            InvalidArgumentError: If the adapter descriptors are invalid
            HubRequestError: If registration on the hub fails
        """
        async with self._start_lock:
            if self._server is not None:
                raise AlreadyRunningError("Server is already running")

            if not self.has_compatible_firmware:
                raise UnsupportedError(
                    f"Hub firmware {self.firmware_version!r} is not compatible, "
                    f"{MINIMUM_FIRMWARE_VERSION:.2f} or above is required"
                )

            async def fetch_device_ids(adapter_name: str) -> Sequence[str]:
                return await self.client.fetch_device_ids(name, adapter_name)

            registry = DeviceRegistry(
                devices,
                lifecycle=AdapterLifecycleManager(
                    device_id_provider=fetch_device_ids,
                    init_timeout=settings.adapter_init_timeout,
                ),
            )
            # Host name resolution blocks, keep it off the event loop
            bind_address = address or await asyncio.to_thread(resolve_bind_address, self.address)

            logger.info(f"Starting server {name!r} on {bind_address}:{port}")
            server = await self.server_factory(bind_address, port, registry)

            try:
                await self.client.register_server(name, server.base_url)
            except BaseException:
                logger.error(f"Registering server {name!r} on hub failed, shutting it down")
                await server.stop()
                raise

            with self._slot_lock:
                self._server = server
            self.registry = registry
            self.server_name = name
            return server

    async def stop_server(self) -> None:
        """
        Unregister and stop the publishing surface.

        A no-op when no server is running.
        """
        server = self._take_server()
        if server is None:
            return

        name = self.server_name
        self.server_name = None
        try:
            if name is not None:
                await self.client.unregister_server(name)
        except HubRequestError as e:
            logger.warning(f"Unregistering server {name!r} failed: {e}")
        finally:
            await server.stop()
            logger.info(f"Server {name!r} stopped")

    async def __aenter__(self) -> "HubSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop_server()
