# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Local address discovery for binding the publishing surface."""

import ipaddress
import logging
import socket
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

LOOPBACK = "127.0.0.1"


def local_ipv4_addresses() -> List[str]:
    """
    IPv4 addresses the local host name resolves to, in resolver order.

    Returns an empty list if the host name cannot be resolved.
    """
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except OSError as e:
        logger.warning(f"Could not resolve local host name: {e}")
        return []

    addresses: List[str] = []
    for info in infos:
        address = info[4][0]
        if address not in addresses:
            addresses.append(address)
    return addresses


def _is_loopback(address: str) -> bool:
    try:
        return ipaddress.ip_address(address).is_loopback
    except ValueError:
        return address == "localhost"


def resolve_bind_address(
    hub_address: Optional[str],
    candidates: Optional[Sequence[str]] = None,
) -> str:
    """
    Choose the address the publishing surface binds to.

    Picks the first non-loopback local IPv4 address. Falls back to loopback
    when the hub itself is on loopback, when the hub runs on this machine,
    or when no other address exists.

    Args:
        hub_address: The hub's address
        candidates: Local addresses to choose from (default: resolved)

    Returns:
        IPv4 address string
    """
    if hub_address and _is_loopback(hub_address):
        return LOOPBACK

    if candidates is None:
        candidates = local_ipv4_addresses()

    if hub_address and hub_address in candidates:
        logger.debug(f"Hub {hub_address} runs on this machine, binding to loopback")
        return LOOPBACK

    for address in candidates:
        try:
            parsed = ipaddress.ip_address(address)
        except ValueError:
            continue
        if parsed.version == 4 and not parsed.is_loopback:
            return address

    logger.warning("No non-loopback IPv4 address found, binding to loopback")
    return LOOPBACK
