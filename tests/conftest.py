"""Pytest configuration and fixtures."""

import pytest

from hubkit.devices import AdapterDescriptor, DeviceEntry, DeviceRegistry, DeviceType


@pytest.fixture
def example_adapters():
    """Two adapters: A with a lamp, B with a fan."""
    return [
        AdapterDescriptor(
            name="A",
            devices=[DeviceEntry(name="Lamp", tokens=["light", "lamp"])],
        ),
        AdapterDescriptor(
            name="B",
            devices=[DeviceEntry(name="Fan")],
        ),
    ]


@pytest.fixture
def example_registry(example_adapters):
    return DeviceRegistry(example_adapters)


@pytest.fixture
def living_room_adapters():
    """Adapters with manufacturers and several devices each."""
    return [
        AdapterDescriptor(
            name="acme-lights",
            device_type=DeviceType.LIGHT,
            driver_version="1.2.0",
            manufacturer="Acme Lighting",
            devices=[
                DeviceEntry(name="Ceiling Light", tokens=["ceiling", "dimmer"]),
                DeviceEntry(name="Floor Lamp", tokens=["lamp", "reading"]),
            ],
        ),
        AdapterDescriptor(
            name="sonic-tv",
            device_type=DeviceType.TV,
            driver_version="3.0",
            manufacturer="Sonic Electronics",
            devices=[DeviceEntry(name="Bedroom Television", tokens=["tv", "oled"])],
        ),
        AdapterDescriptor(
            name="thermo",
            device_type=DeviceType.THERMOSTAT,
            driver_version="0.9",
            manufacturer="Heatwave",
            devices=[DeviceEntry(name="Hallway Thermostat", tokens=["heating"])],
        ),
    ]
