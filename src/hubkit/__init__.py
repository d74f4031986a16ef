# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
hubkit

Control plane for a device-integration hub: adapter registry, stable device
ids, lazy adapter initialization, fuzzy device search, and the session that
publishes the registry to a remote hub.
"""

__version__ = "0.1.0"

from .errors import (
    AlreadyRunningError,
    HubkitError,
    HubRequestError,
    InitializationFailedError,
    InvalidArgumentError,
    NotFoundError,
    UnsupportedError,
)

from .devices import (
    AdapterDescriptor,
    AdapterLifecycleManager,
    AdapterState,
    DeviceEntry,
    DeviceRecord,
    DeviceRegistry,
    DeviceType,
    SearchResult,
    TokenIndex,
    load_adapters,
)

from .hub import HubClient, HubSession

__all__ = [
    # Version
    '__version__',

    # Errors
    'AlreadyRunningError',
    'HubkitError',
    'HubRequestError',
    'InitializationFailedError',
    'InvalidArgumentError',
    'NotFoundError',
    'UnsupportedError',

    # Devices
    'AdapterDescriptor',
    'AdapterLifecycleManager',
    'AdapterState',
    'DeviceEntry',
    'DeviceRecord',
    'DeviceRegistry',
    'DeviceType',
    'SearchResult',
    'TokenIndex',
    'load_adapters',

    # Hub
    'HubClient',
    'HubSession',
]
