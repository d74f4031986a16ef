# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Device registry.

Flattens adapter descriptors into device records with stable ids, indexes
them for fuzzy search, and hands out adapters once their initializer has run.

Ids are assigned in a single pass: adapters in the order supplied, then the
devices of each adapter in the order supplied. The same input always yields
the same ids, and ids never change for the registry's lifetime.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..config import settings
from ..errors import InvalidArgumentError, NotFoundError
from .lifecycle import AdapterLifecycleManager, AdapterState
from .models import AdapterDescriptor, DeviceRecord
from .token_search import SearchResult, TokenIndex

logger = logging.getLogger(__name__)

DELIMITER = " "
SEARCH_FIELDS = ("manufacturer", "name", "device_type", "tokens")
MAX_SEARCH_RESULTS = 10


class DeviceRegistry:
    """
    Read-only device database built from adapter descriptors.

    Construct once at startup; rebuild by constructing a new registry.
    """

    def __init__(
        self,
        adapters: Iterable[AdapterDescriptor],
        lifecycle: Optional[AdapterLifecycleManager] = None,
        threshold: Optional[float] = None,
        max_results: Optional[int] = None,
    ):
        """
        Build the registry.

        Args:
            adapters: Adapter descriptors, in id-assignment order
            lifecycle: Lifecycle manager used by get_adapter()
            threshold: Search acceptance threshold (defaults to config)
            max_results: Maximum search results (defaults to config, at most 10)

        Raises:
            InvalidArgumentError: If a descriptor is invalid, two adapters
                share a name, or max_results is below 1
        """
        if max_results is None:
            max_results = settings.search_max_results
        if isinstance(max_results, bool) or not isinstance(max_results, int) or max_results < 1:
            raise InvalidArgumentError(f"max_results must be a positive integer, got {max_results!r}")

        self.lifecycle = lifecycle or AdapterLifecycleManager()
        self.max_results = min(max_results, MAX_SEARCH_RESULTS)
        self._adapters: Dict[str, AdapterDescriptor] = {}

        records: List[DeviceRecord] = []
        for adapter in adapters:
            adapter.validate()
            if adapter.name in self._adapters:
                raise InvalidArgumentError(f"Duplicate adapter name {adapter.name!r}")
            self._adapters[adapter.name] = adapter

            for device in adapter.devices:
                records.append(DeviceRecord(
                    id=len(records),
                    adapter_name=adapter.name,
                    device_type=adapter.device_type,
                    name=device.name,
                    driver_version=adapter.driver_version,
                    manufacturer=adapter.manufacturer,
                    tokens=DELIMITER.join(device.tokens),
                ))

        self._devices: Tuple[DeviceRecord, ...] = tuple(records)
        self._index: TokenIndex[DeviceRecord] = TokenIndex(
            self._devices,
            SEARCH_FIELDS,
            delimiter=DELIMITER,
            threshold=settings.search_threshold if threshold is None else threshold,
            unique=True,
        )

        logger.info(
            f"Device registry built: {len(self._adapters)} adapters, {len(self._devices)} devices"
        )

    @classmethod
    def build(cls, adapters: Iterable[AdapterDescriptor], **kwargs) -> "DeviceRegistry":
        """Build a registry from adapter descriptors."""
        return cls(adapters, **kwargs)

    def __len__(self) -> int:
        return len(self._devices)

    @property
    def devices(self) -> Tuple[DeviceRecord, ...]:
        """All device records, ordered by id."""
        return self._devices

    @property
    def adapter_names(self) -> Tuple[str, ...]:
        """Adapter names in the order supplied."""
        return tuple(self._adapters)

    def get_device(self, device_id: int) -> DeviceRecord:
        """
        Look up a device by id.

        Args:
            device_id: Id in [0, len(registry))

        Returns:
            The matching DeviceRecord

        Raises:
            NotFoundError: If the id is out of range
        """
        if (
            isinstance(device_id, bool)
            or not isinstance(device_id, int)
            or not 0 <= device_id < len(self._devices)
        ):
            raise NotFoundError(f"No matching device with id {device_id!r}")
        return self._devices[device_id]

    def get_device_by_adapter_name(self, adapter_name: str) -> DeviceRecord:
        """
        First device record belonging to an adapter.

        Raises:
            NotFoundError: If the adapter has no devices or does not exist
        """
        for record in self._devices:
            if record.adapter_name == adapter_name:
                return record
        raise NotFoundError(f"No matching device with adapter name {adapter_name!r}")

    async def get_adapter(self, adapter_name: str) -> AdapterDescriptor:
        """
        Look up an adapter, running its initializer on first access.

        Initializer failures are logged by the lifecycle manager and do not
        fail this call; the adapter is returned either way.

        Args:
            adapter_name: Name of the adapter

        Returns:
            The adapter descriptor

        Raises:
            InvalidArgumentError: If the name is empty or unknown
        """
        adapter = self._adapters.get(adapter_name) if adapter_name else None
        if adapter is None:
            raise InvalidArgumentError(f"No matching adapter with name {adapter_name!r}")

        await self.lifecycle.ensure_initialized(adapter)
        return adapter

    def adapter_state(self, adapter_name: str) -> AdapterState:
        """Lifecycle state of a known adapter."""
        if adapter_name not in self._adapters:
            raise InvalidArgumentError(f"No matching adapter with name {adapter_name!r}")
        return self.lifecycle.state(adapter_name)

    def search(self, query: Optional[str]) -> List[SearchResult[DeviceRecord]]:
        """
        Fuzzy search over manufacturer, name, type and tokens.

        Args:
            query: Free text; empty or None returns no results

        Returns:
            At most max_results hits, best first
        """
        if not query:
            return []
        return self._index.search(query, self.max_results)
