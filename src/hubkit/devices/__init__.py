# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Device registry, lifecycle management and fuzzy search."""

from .database import DeviceRegistry
from .lifecycle import AdapterLifecycleManager, AdapterState
from .models import (
    AdapterDescriptor,
    DeviceEntry,
    DeviceRecord,
    DeviceType,
    load_adapters,
)
from .token_search import SearchResult, TokenIndex

__all__ = [
    "AdapterDescriptor",
    "AdapterLifecycleManager",
    "AdapterState",
    "DeviceEntry",
    "DeviceRecord",
    "DeviceRegistry",
    "DeviceType",
    "SearchResult",
    "TokenIndex",
    "load_adapters",
]
