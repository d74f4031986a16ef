# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Lazy, one-time adapter initialization.

Each adapter moves UNINITIALIZED -> INITIALIZING -> INITIALIZED the first
time it is requested. A failing initializer is logged and the adapter goes
back to UNINITIALIZED so the next request retries it. Concurrent first
requests share a single in-flight initialization, which runs until it
finishes or its last waiter is cancelled.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Sequence, Set

from ..errors import InitializationFailedError
from .models import AdapterDescriptor

logger = logging.getLogger(__name__)

# Returns the device ids the hub already holds for an adapter.
DeviceIdProvider = Callable[[str], Awaitable[Sequence[str]]]


class AdapterState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"


async def _no_device_ids(adapter_name: str) -> Sequence[str]:
    return []


class AdapterLifecycleManager:
    """Tracks which adapters have completed their initializer."""

    def __init__(
        self,
        device_id_provider: Optional[DeviceIdProvider] = None,
        init_timeout: Optional[float] = None,
    ):
        """
        Initialize lifecycle manager.

        Args:
            device_id_provider: Coroutine returning the hub's existing device
                ids for an adapter name (defaults to no ids)
            init_timeout: Upper bound in seconds for one initializer run
        """
        self.device_id_provider = device_id_provider or _no_device_ids
        self.init_timeout = init_timeout
        self._initialized: Set[str] = set()
        self._inflight: Dict[str, asyncio.Task] = {}
        self._waiters: Dict[asyncio.Task, int] = {}

    def state(self, adapter_name: str) -> AdapterState:
        """Current state of an adapter (unknown names are uninitialized)."""
        if adapter_name in self._initialized:
            return AdapterState.INITIALIZED
        task = self._inflight.get(adapter_name)
        if task is not None and not task.done():
            return AdapterState.INITIALIZING
        return AdapterState.UNINITIALIZED

    def is_initialized(self, adapter_name: str) -> bool:
        return adapter_name in self._initialized

    async def ensure_initialized(self, adapter: AdapterDescriptor) -> bool:
        """
        Run the adapter's initializer unless it already succeeded.

        Failures are logged and absorbed; the adapter stays uninitialized and
        is retried on the next call. If every caller waiting on an in-flight
        initialization is cancelled, the initialization is cancelled too.

        Args:
            adapter: Adapter to initialize

        Returns:
            True if the adapter is initialized after this call

        Raises:
            asyncio.CancelledError: If the calling task itself is cancelled
        """
        name = adapter.name
        if name in self._initialized:
            return True

        if adapter.initializer is None:
            self._initialized.add(name)
            return True

        task = self._inflight.get(name)
        if task is None or task.done():
            task = asyncio.ensure_future(self._initialize(adapter))
            self._inflight[name] = task
            task.add_done_callback(lambda done: self._forget_task(name, done))

        self._waiters[task] = self._waiters.get(task, 0) + 1
        try:
            # Shielded: one waiter's cancellation leaves the shared run going
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                logger.warning(f"Initialization of adapter {name!r} was cancelled")
            else:
                if self._waiters[task] == 1 and not task.done():
                    # No waiters left
                    logger.warning(f"Initialization of adapter {name!r} abandoned, cancelling")
                    task.cancel()
                raise
        finally:
            remaining = self._waiters.pop(task) - 1
            if remaining:
                self._waiters[task] = remaining

        return name in self._initialized

    def _forget_task(self, name: str, task: asyncio.Task) -> None:
        if self._inflight.get(name) is task:
            del self._inflight[name]

    async def _initialize(self, adapter: AdapterDescriptor) -> None:
        name = adapter.name
        logger.debug(f"Initializing adapter {name!r}")
        try:
            try:
                await self._run_initializer(adapter)
            except asyncio.TimeoutError:
                raise InitializationFailedError(
                    name, f"timed out after {self.init_timeout}s"
                ) from None
            except InitializationFailedError:
                raise
            except Exception as e:
                raise InitializationFailedError(name, str(e) or type(e).__name__) from e
        except InitializationFailedError as e:
            logger.error(str(e))
            return

        self._initialized.add(name)
        logger.info(f"Adapter {name!r} initialized")

    async def _run_initializer(self, adapter: AdapterDescriptor) -> None:
        async def run() -> None:
            device_ids = await self.device_id_provider(adapter.name)
            await adapter.initializer(list(device_ids))

        if self.init_timeout is None:
            await run()
        else:
            await asyncio.wait_for(run(), timeout=self.init_timeout)

    def cancel(self, adapter_name: str) -> bool:
        """
        Cancel an in-flight initialization.

        The adapter reverts to uninitialized and is retried on next access.

        Returns:
            True if an initialization was running and has been cancelled
        """
        task = self._inflight.get(adapter_name)
        if task is None or task.done():
            return False
        return task.cancel()

    def reset(self, adapter_name: str) -> None:
        """Forget a successful initialization so the next access reruns it."""
        self._initialized.discard(adapter_name)
