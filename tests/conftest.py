"""Shared pytest fixtures."""

import pytest
from unifi_exporter.models import Device, Site


class FakeClient:
    """Device source returning canned snapshots, or raising per site."""

    def __init__(self, devices_by_site: dict[str, list[Device] | Exception]):
        self.devices_by_site = devices_by_site
        self.calls: list[str] = []

    def devices(self, site_name: str) -> list[Device]:
        self.calls.append(site_name)
        result = self.devices_by_site[site_name]
        if isinstance(result, Exception):
            raise result
        return result


def make_device(
    id: str = 'dev1',
    name: str = 'AP Lobby',
    mac: str = 'aa:bb:cc:dd:ee:ff',
    adopted: bool = True,
    uptime: int = 3600,
    stat: dict | None = None,
    uplink: dict | None = None,
    radios: list[dict] | None = None,
    nics: list[dict] | None = None,
) -> Device:
    """Build a Device from controller-shaped JSON."""
    return Device.from_api(
        {
            '_id': id,
            'name': name,
            'mac': mac,
            'adopted': adopted,
            'uptime': uptime,
            'ethernet_table': [{'mac': mac, 'name': 'eth0'}] if nics is None else nics,
            'stat': stat or {},
            'uplink': uplink or {},
            'radio_table_stats': radios or [],
        }
    )


@pytest.fixture
def sample_mac() -> str:
    """Sample MAC address for testing."""
    return 'aa:bb:cc:dd:ee:ff'


@pytest.fixture
def sample_sites() -> list[Site]:
    return [
        Site(name='default', description='Foo'),
        Site(name='abc123', description='Bar'),
        Site(name='def456', description='Baz'),
    ]


@pytest.fixture
def sample_device_json() -> dict:
    """Device record as returned by stat/device."""
    return {
        '_id': '5a1b2c3d4e5f',
        'mac': '80:2A:A8:00:00:01',
        'name': 'AP Lobby',
        'adopted': True,
        'uptime': 86461,
        'ethernet_table': [
            {'mac': '80-2A-A8-00-00-01', 'name': 'eth0', 'num_port': 1},
            {'mac': '802aa8000002', 'name': 'eth1', 'num_port': 1},
        ],
        'stat': {
            'ap': {
                'rx_bytes': 100,
                'tx_bytes': 50,
                'rx_packets': 10,
                'tx_packets': 5,
                'tx_dropped': 1,
            }
        },
        'uplink': {
            'rx_bytes': 20,
            'tx_bytes': 10,
            'rx_packets': 2,
            'tx_packets': 1,
            'tx_dropped': 99,
            'speed': 1000,
        },
        'radio_table_stats': [
            {'name': 'wifi0', 'radio': 'ng', 'user-num_sta': 4, 'guest-num_sta': 1},
            {'name': 'wifi1', 'radio': 'na', 'user-num_sta': 7, 'guest-num_sta': 0},
        ],
    }


@pytest.fixture
def fake_client_factory():
    return FakeClient


@pytest.fixture
def device_factory():
    return make_device


# Pytest markers for test organization
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line('markers', 'integration: marks tests that test component integration')
