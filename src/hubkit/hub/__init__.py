# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Remote hub client and session management."""

from .client import HubClient
from .network import local_ipv4_addresses, resolve_bind_address
from .schemas import SystemInfo
from .session import HubSession, parse_firmware_version

__all__ = [
    "HubClient",
    "HubSession",
    "SystemInfo",
    "local_ipv4_addresses",
    "parse_firmware_version",
    "resolve_bind_address",
]
