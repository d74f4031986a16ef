# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
hubkit - Main CLI Application

Lists and searches the devices described by an adapters file, and publishes
them to a remote hub.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import settings
from .devices import AdapterDescriptor, DeviceRegistry, load_adapters
from .errors import HubkitError
from .hub import HubSession

logger = logging.getLogger("hubkit")

SERVER_POLL_INTERVAL = 1.0


def _load(path: Optional[Path]) -> List[AdapterDescriptor]:
    if path is None:
        if not settings.adapters_file:
            raise HubkitError("No adapters file given (use --adapters or ADAPTERS_FILE)")
        path = Path(settings.adapters_file)
    return load_adapters(path)


def list_devices(registry: DeviceRegistry) -> None:
    """Print every device with its id."""
    for record in registry.devices:
        print(f"{record.id:>4}  {record.name}  [{record.adapter_name}, {record.manufacturer}, {record.device_type.value}]")


def search_devices(registry: DeviceRegistry, query: str) -> None:
    """Print search results, best first."""
    results = registry.search(query)
    if not results:
        print("No matching devices")
        return
    for result in results:
        record = result.item
        print(f"{result.score:.3f}  {record.id:>4}  {record.name}  [{record.adapter_name}]")


async def serve(
    adapters: List[AdapterDescriptor],
    hub_address: str,
    hub_port: Optional[int],
    name: str,
    host: Optional[str],
    port: int,
) -> None:
    """Publish adapters to the hub until the server exits or is interrupted."""
    session = await HubSession.connect(hub_address, hub_port)
    logger.info(
        f"Connected to hub {session.name!r} ({session.host_name}, "
        f"firmware {session.firmware_version}, region {session.region})"
    )

    async with session:
        server = await session.start_server(name, adapters, address=host, port=port)
        print(f"✓ Publishing {len(session.registry)} devices at {server.base_url}")
        print(f"  Hub web UI: {session.web_ui_url}")
        while session.is_running and getattr(server, "running", True):
            await asyncio.sleep(SERVER_POLL_INTERVAL)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='hubkit device-integration hub',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List devices and their ids
  python -m hubkit list --adapters adapters.json

  # Fuzzy search
  python -m hubkit search "lamp" --adapters adapters.json

  # Publish to a hub
  python -m hubkit serve --adapters adapters.json --hub 192.168.1.20
        """
    )

    parser.add_argument(
        'command',
        choices=['list', 'search', 'serve'],
        help='Command to execute'
    )

    parser.add_argument(
        'query',
        nargs='?',
        default='',
        help='Search text (search command)'
    )

    parser.add_argument(
        '--adapters',
        type=Path,
        help='Path to adapters JSON file (default: ADAPTERS_FILE setting)'
    )

    parser.add_argument(
        '--hub',
        default=settings.hub_address,
        help='Hub IP address (serve command)'
    )

    parser.add_argument(
        '--hub-port',
        type=int,
        default=settings.hub_port,
        help=f'Hub API port (default: {settings.hub_port})'
    )

    parser.add_argument(
        '--name',
        default=settings.server_name,
        help=f'Integration server name (default: {settings.server_name})'
    )

    parser.add_argument(
        '--host',
        default=settings.server_host,
        help='Bind address (default: first non-loopback IPv4)'
    )

    parser.add_argument(
        '--port',
        type=int,
        default=settings.server_port,
        help=f'Bind port (default: {settings.server_port})'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        adapters = _load(args.adapters)

        if args.command == 'list':
            list_devices(DeviceRegistry(adapters))

        elif args.command == 'search':
            search_devices(DeviceRegistry(adapters), args.query)

        elif args.command == 'serve':
            if not args.hub:
                parser.error("serve requires --hub (or HUB_ADDRESS)")
            asyncio.run(serve(adapters, args.hub, args.hub_port, args.name, args.host, args.port))

    except KeyboardInterrupt:
        print("\n✓ Stopped")

    except (HubkitError, OSError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
