# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Remote hub HTTP client."""

import logging
from typing import Any, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..config import settings
from ..errors import HubRequestError
from .schemas import DeviceIdList, ServerRegistration, ServerUnregistration, SystemInfo

logger = logging.getLogger(__name__)

SYSTEM_INFO_PATH = "/v1/systeminfo"
REGISTER_PATH = "/v1/api/registerSdkDeviceAdapter"
UNREGISTER_PATH = "/v1/api/unregisterSdkDeviceAdapter"
SUBSCRIPTIONS_PATH = "/v1/api/subscriptions/{sdk_name}/{adapter_name}"


class HubClient:
    """Client for the remote hub's REST API."""

    def __init__(
        self,
        address: str,
        port: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize hub client.

        Args:
            address: Hub IP address or host name
            port: Hub API port (defaults to config)
            timeout: Request timeout in seconds (defaults to config)
            transport: Optional httpx transport (used by tests)
        """
        self.address = address
        self.port = port or settings.hub_port
        self.timeout = timeout or settings.hub_request_timeout
        self.base_url = f"http://{address}:{self.port}"
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=json)
                response.raise_for_status()
                if not response.content:
                    return None
                return response.json()

        except httpx.TimeoutException as e:
            logger.error(f"Hub request {method} {path} timed out after {self.timeout}s")
            raise HubRequestError(f"Hub request timed out: {method} {path}") from e

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"Hub request {method} {path} failed with HTTP {status_code}")
            raise HubRequestError(
                f"Hub returned HTTP {status_code} for {method} {path}",
                status_code=status_code,
            ) from e

        except httpx.HTTPError as e:
            logger.error(f"Hub request {method} {path} HTTP error: {e}")
            raise HubRequestError(f"Hub HTTP error: {e}") from e

        except ValueError as e:
            logger.error(f"Hub request {method} {path} returned invalid JSON: {e}")
            raise HubRequestError(f"Invalid JSON from hub for {method} {path}") from e

    async def fetch_system_info(self) -> SystemInfo:
        """
        Fetch hub system information.

        Returns:
            Parsed SystemInfo

        Raises:
            HubRequestError: If the request fails or the body is malformed
        """
        data = await self._request("GET", SYSTEM_INFO_PATH)
        try:
            return SystemInfo.model_validate(data or {})
        except ValidationError as e:
            raise HubRequestError(f"Malformed system info from hub: {e}") from e

    async def register_server(self, name: str, base_url: str) -> None:
        """
        Register a publishing surface on the hub.

        Args:
            name: Integration server name
            base_url: URL where the hub can reach the publishing surface

        Raises:
            HubRequestError: If the hub rejects the registration
        """
        body = ServerRegistration(name=name, base_url=base_url)
        await self._request("POST", REGISTER_PATH, json=body.model_dump(by_alias=True))
        logger.info(f"Registered server {name!r} at {body.base_url} on hub {self.address}")

    async def unregister_server(self, name: str) -> None:
        """Unregister a publishing surface from the hub."""
        body = ServerUnregistration(name=name)
        await self._request("POST", UNREGISTER_PATH, json=body.model_dump())
        logger.info(f"Unregistered server {name!r} from hub {self.address}")

    async def fetch_device_ids(self, sdk_name: str, adapter_name: str) -> List[str]:
        """
        Fetch the device ids the hub already has for an adapter.

        Args:
            sdk_name: Name the publishing surface was registered under
            adapter_name: Adapter name

        Returns:
            Device id strings (empty if the hub has none)
        """
        path = SUBSCRIPTIONS_PATH.format(
            sdk_name=quote(sdk_name, safe=""),
            adapter_name=quote(adapter_name, safe=""),
        )
        data = await self._request("GET", path)
        try:
            return DeviceIdList(device_ids=data or []).device_ids
        except ValidationError as e:
            raise HubRequestError(f"Malformed device id list from hub: {e}") from e
