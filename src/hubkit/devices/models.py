# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Adapter descriptors and device records.

An adapter descriptor is the caller-supplied description of one driver and
the devices it exposes. The device registry flattens descriptors into
DeviceRecord instances, one per device, each with a stable integer id.

Descriptors are usually built in code (so they can carry an initializer
callback) but can also be loaded from a JSON file:

    [
        {
            "name": "living-room-lights",
            "type": "light",
            "manufacturer": "Acme",
            "driverVersion": "1.2.0",
            "devices": [{"name": "Lamp", "tokens": ["light", "lamp"]}]
        }
    ]
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from ..errors import InvalidArgumentError


# Called once per adapter with the device ids the hub already has for it.
DeviceListInitializer = Callable[[Sequence[str]], Awaitable[None]]


class DeviceType(str, Enum):
    """Device-type tags understood by the hub."""

    ACCESSORY = "accessory"
    AVRECEIVER = "avreceiver"
    CLIMA = "clima"
    DVB = "dvb"
    DVD = "dvd"
    GAMECONSOLE = "gameconsole"
    HDMISWITCH = "hdmiswitch"
    LIGHT = "light"
    MEDIAPLAYER = "mediaplayer"
    MUSICPLAYER = "musicplayer"
    PROJECTOR = "projector"
    SONOS = "sonos"
    SOUNDBAR = "soundbar"
    THERMOSTAT = "thermostat"
    TUNER = "tuner"
    TV = "tv"
    VOD = "vod"

    @classmethod
    def parse(cls, value: "str | DeviceType") -> "DeviceType":
        """
        Parse a device-type tag (case-insensitive).

        Raises:
            InvalidArgumentError: If the tag is unknown
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidArgumentError(f"Unknown device type: {value!r}") from None


@dataclass(frozen=True)
class DeviceEntry:
    """One device exposed by an adapter."""
    name: str
    tokens: Tuple[str, ...] = ()

    def __post_init__(self):
        tokens = self.tokens.split() if isinstance(self.tokens, str) else self.tokens
        object.__setattr__(self, "tokens", tuple(tokens))


@dataclass(frozen=True)
class AdapterDescriptor:
    """
    Caller-supplied description of one device adapter.

    The registry references descriptors (it does not copy them) and hands
    them back from get_adapter().
    """
    name: str
    device_type: DeviceType = DeviceType.ACCESSORY
    driver_version: str = ""
    manufacturer: str = ""
    devices: Tuple[DeviceEntry, ...] = ()
    initializer: Optional[DeviceListInitializer] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "device_type", DeviceType.parse(self.device_type))
        object.__setattr__(self, "devices", tuple(self.devices))

    def validate(self) -> bool:
        """
        Validate descriptor data.

        Returns:
            True if valid, raises InvalidArgumentError if invalid
        """
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidArgumentError("Adapter name must be a non-empty string")

        if not isinstance(self.manufacturer, str) or not isinstance(self.driver_version, str):
            raise InvalidArgumentError(
                f"Adapter {self.name!r} manufacturer and driver version must be strings"
            )

        for index, device in enumerate(self.devices):
            if not isinstance(device, DeviceEntry):
                raise InvalidArgumentError(
                    f"Adapter {self.name!r} device #{index} is not a DeviceEntry"
                )
            if not isinstance(device.name, str) or not device.name.strip():
                raise InvalidArgumentError(
                    f"Adapter {self.name!r} device #{index} has an empty name"
                )
            if not all(isinstance(token, str) for token in device.tokens):
                raise InvalidArgumentError(
                    f"Adapter {self.name!r} device #{index} tokens must be strings"
                )

        if self.initializer is not None and not callable(self.initializer):
            raise InvalidArgumentError(f"Adapter {self.name!r} initializer must be callable")

        return True

    @classmethod
    def from_dict(cls, data: dict) -> "AdapterDescriptor":
        """
        Create from dictionary (JSON deserialization).

        Raises:
            InvalidArgumentError: If a field is missing or has the wrong type
        """
        try:
            devices = tuple(
                DeviceEntry(name=item["name"], tokens=item.get("tokens") or ())
                for item in data.get("devices") or []
            )
            adapter = cls(
                name=data["name"],
                device_type=data.get("type", data.get("device_type", DeviceType.ACCESSORY)),
                driver_version=str(data.get("driverVersion", data.get("driver_version", ""))),
                manufacturer=data.get("manufacturer") or "",
                devices=devices,
            )
        except KeyError as e:
            raise InvalidArgumentError(f"Adapter descriptor is missing field {e}") from None
        except (TypeError, AttributeError) as e:
            raise InvalidArgumentError(f"Malformed adapter descriptor: {e}") from None

        adapter.validate()
        return adapter


@dataclass(frozen=True)
class DeviceRecord:
    """Flattened, indexed representation of one device."""
    id: int
    adapter_name: str
    device_type: DeviceType
    name: str
    driver_version: str
    manufacturer: str
    tokens: str  # device tokens joined by a single space

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "adapterName": self.adapter_name,
            "type": self.device_type.value,
            "name": self.name,
            "driverVersion": self.driver_version,
            "manufacturer": self.manufacturer,
            "tokens": self.tokens,
        }


def load_adapters(path: Path) -> List[AdapterDescriptor]:
    """
    Load adapter descriptors from a JSON file.

    Args:
        path: JSON file holding a list of adapter objects

    Returns:
        Descriptors in file order

    Raises:
        InvalidArgumentError: If the document is not a list of adapter objects
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise InvalidArgumentError(f"{path}: expected a list of adapters")

    adapters = []
    for item in data:
        if not isinstance(item, dict):
            raise InvalidArgumentError(f"{path}: adapter entries must be objects")
        adapters.append(AdapterDescriptor.from_dict(item))
    return adapters
