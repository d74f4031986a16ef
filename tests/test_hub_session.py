"""Tests for the hub session lifecycle."""

import asyncio
import threading

import pytest

from hubkit.devices import AdapterDescriptor, AdapterState, DeviceEntry
from hubkit.errors import AlreadyRunningError, HubRequestError, UnsupportedError
from hubkit.hub.schemas import SystemInfo
from hubkit.hub.session import HubSession, parse_firmware_version


class FakeHubClient:
    """In-memory stand-in for HubClient."""

    def __init__(self, device_ids=None, fail_register=False, fail_unregister=False):
        self.device_ids = device_ids or {}
        self.fail_register = fail_register
        self.fail_unregister = fail_unregister
        self.registered = []
        self.unregistered = []
        self.device_id_requests = []

    async def fetch_system_info(self):
        return SystemInfo(
            hostname="hub-4e2a",
            firmwareVersion="0.53.8",
            region="EU",
            user="Living Room",
        )

    async def register_server(self, name, base_url):
        if self.fail_register:
            raise HubRequestError("rejected", status_code=500)
        self.registered.append((name, base_url))

    async def unregister_server(self, name):
        self.unregistered.append(name)
        if self.fail_unregister:
            raise HubRequestError("gone")

    async def fetch_device_ids(self, sdk_name, adapter_name):
        self.device_id_requests.append((sdk_name, adapter_name))
        return self.device_ids.get(adapter_name, [])


class FakeServer:
    def __init__(self, address, port, registry):
        self.address = address
        self.port = port
        self.registry = registry
        self.base_url = f"http://{address}:{port}"
        self.stop_calls = 0

    async def stop(self):
        self.stop_calls += 1


class FakeServerFactory:
    def __init__(self):
        self.servers = []

    async def __call__(self, address, port, registry):
        server = FakeServer(address, port, registry)
        self.servers.append(server)
        return server


def make_session(firmware="0.53.8-20180424", address="192.168.1.20", **client_kwargs):
    client = FakeHubClient(**client_kwargs)
    factory = FakeServerFactory()
    session = HubSession(
        address=address,
        port=3000,
        name="Living Room",
        host_name="hub-4e2a",
        firmware_version=firmware,
        region="US",
        client=client,
        server_factory=factory,
    )
    return session, client, factory


ADAPTERS = [AdapterDescriptor(name="A", devices=[DeviceEntry(name="Lamp", tokens=["light"])])]


class TestFirmwareVersion:
    """Test firmware version parsing and the compatibility gate."""

    @pytest.mark.parametrize("version,expected", [
        ("0.50.13-20180424", 0.5),
        ("0.49.5", 0.49),
        ("1.0", 1.0),
        ("1-2", 1.2),
        ("0.53-beta", 0.53),
        ("12.7.1", 12.7),
    ])
    def test_parse(self, version, expected):
        assert parse_firmware_version(version) == pytest.approx(expected)

    @pytest.mark.parametrize("version", ["", None, "v0.50", "beta", "0", "0.50x"])
    def test_parse_failure(self, version):
        assert parse_firmware_version(version) is None

    @pytest.mark.parametrize("version,compatible", [
        ("0.50.0", True),
        ("0.5", True),
        ("0.53.8", True),
        ("1.0.0", True),
        ("0.49.9", False),
        ("0.4.2", False),
        ("unknown", False),
    ])
    def test_has_compatible_firmware(self, version, compatible):
        session, _, _ = make_session(firmware=version)
        assert session.has_compatible_firmware is compatible


@pytest.mark.asyncio
class TestStartServer:
    """Test starting the publishing surface."""

    async def test_start_registers_on_hub(self):
        session, client, factory = make_session()

        server = await session.start_server("hubkit", ADAPTERS, address="10.0.0.5", port=9100)

        assert session.is_running
        assert factory.servers == [server]
        assert (server.address, server.port) == ("10.0.0.5", 9100)
        assert client.registered == [("hubkit", "http://10.0.0.5:9100")]
        assert session.registry is server.registry
        assert session.registry.get_device(0).name == "Lamp"

    async def test_default_port(self):
        session, _, factory = make_session()
        await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")
        assert factory.servers[0].port == 9000

    async def test_loopback_hub_binds_loopback(self):
        session, _, factory = make_session(address="127.0.0.1")
        await session.start_server("hubkit", ADAPTERS)
        assert factory.servers[0].address == "127.0.0.1"

    async def test_default_address_resolution(self, monkeypatch):
        monkeypatch.setattr(
            "hubkit.hub.network.local_ipv4_addresses",
            lambda: ["127.0.1.1", "192.168.1.5"],
        )
        session, _, factory = make_session()
        await session.start_server("hubkit", ADAPTERS)
        assert factory.servers[0].address == "192.168.1.5"

    async def test_address_resolved_off_event_loop(self, monkeypatch):
        threads = []

        def fake_resolve(hub_address):
            threads.append(threading.current_thread())
            return "10.0.0.8"

        monkeypatch.setattr("hubkit.hub.session.resolve_bind_address", fake_resolve)
        session, _, factory = make_session()
        await session.start_server("hubkit", ADAPTERS)

        assert factory.servers[0].address == "10.0.0.8"
        assert threads and threads[0] is not threading.main_thread()

    async def test_explicit_address_skips_resolution(self, monkeypatch):
        def fail(hub_address):
            raise AssertionError("resolution should not run")

        monkeypatch.setattr("hubkit.hub.session.resolve_bind_address", fail)
        session, _, factory = make_session()
        await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")

        assert factory.servers[0].address == "10.0.0.5"

    async def test_second_start_fails(self):
        session, _, factory = make_session()
        await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")

        with pytest.raises(AlreadyRunningError):
            await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")
        assert len(factory.servers) == 1

    async def test_concurrent_starts_create_one_server(self):
        session, _, factory = make_session()

        results = await asyncio.gather(
            session.start_server("hubkit", ADAPTERS, address="10.0.0.5"),
            session.start_server("hubkit", ADAPTERS, address="10.0.0.5"),
            return_exceptions=True,
        )

        assert len(factory.servers) == 1
        assert sum(isinstance(r, AlreadyRunningError) for r in results) == 1

    @pytest.mark.parametrize("firmware", ["0.42.1", "garbage"])
    async def test_incompatible_firmware(self, firmware):
        session, client, factory = make_session(firmware=firmware)

        with pytest.raises(UnsupportedError):
            await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")
        assert factory.servers == []
        assert client.registered == []
        assert not session.is_running

    async def test_registration_failure_stops_server(self):
        session, _, factory = make_session(fail_register=True)

        with pytest.raises(HubRequestError):
            await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")

        assert factory.servers[0].stop_calls == 1
        assert not session.is_running

    async def test_adapter_initializer_gets_hub_device_ids(self):
        received = []

        async def initializer(device_ids):
            received.append(list(device_ids))

        adapters = [AdapterDescriptor(name="A", initializer=initializer)]
        session, client, _ = make_session(device_ids={"A": ["dev-7"]})
        await session.start_server("hubkit", adapters, address="10.0.0.5")

        await session.registry.get_adapter("A")

        assert client.device_id_requests == [("hubkit", "A")]
        assert received == [["dev-7"]]
        assert session.registry.adapter_state("A") == AdapterState.INITIALIZED


@pytest.mark.asyncio
class TestStopServer:
    """Test stopping the publishing surface."""

    async def test_stop_unregisters_and_stops(self):
        session, client, factory = make_session()
        await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")

        await session.stop_server()

        assert not session.is_running
        assert client.unregistered == ["hubkit"]
        assert factory.servers[0].stop_calls == 1

    async def test_second_stop_is_noop(self):
        session, client, factory = make_session()
        await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")

        await session.stop_server()
        await session.stop_server()

        assert client.unregistered == ["hubkit"]
        assert factory.servers[0].stop_calls == 1

    async def test_stop_without_start(self):
        session, client, _ = make_session()
        await session.stop_server()
        assert client.unregistered == []

    async def test_concurrent_stops_stop_once(self):
        session, _, factory = make_session()
        await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")

        await asyncio.gather(session.stop_server(), session.stop_server())

        assert factory.servers[0].stop_calls == 1

    async def test_unregister_failure_still_stops(self):
        session, _, factory = make_session(fail_unregister=True)
        await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")

        await session.stop_server()

        assert factory.servers[0].stop_calls == 1
        assert not session.is_running

    async def test_restart_after_stop(self):
        session, _, factory = make_session()
        await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")
        await session.stop_server()
        await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")

        assert len(factory.servers) == 2
        assert session.is_running

    async def test_context_manager_stops(self):
        session, _, factory = make_session()
        async with session:
            await session.start_server("hubkit", ADAPTERS, address="10.0.0.5")

        assert not session.is_running
        assert factory.servers[0].stop_calls == 1


@pytest.mark.asyncio
class TestSessionInfo:
    """Test hub information helpers."""

    async def test_connect_uses_system_info(self):
        session = await HubSession.connect("192.168.1.20", 3000, client=FakeHubClient())

        assert session.name == "Living Room"
        assert session.host_name == "hub-4e2a"
        assert session.firmware_version == "0.53.8"
        assert session.region == "EU"
        assert session.has_compatible_firmware

    async def test_get_system_info(self):
        session, _, _ = make_session()
        info = await session.get_system_info()
        assert info.hostname == "hub-4e2a"

    async def test_web_ui_url(self):
        session, _, _ = make_session()
        assert session.web_ui_url == "http://192.168.1.20:3200/eui"


class TestSessionConstruction:
    """Test session argument checks."""

    def test_missing_fields_rejected(self):
        with pytest.raises(ValueError):
            HubSession(None, 3000, "n", "h", "0.50.0", "US")
