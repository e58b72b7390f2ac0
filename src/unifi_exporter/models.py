"""Domain models for UniFi controller snapshots.

Built from the controller's JSON with ``Site.from_api`` and ``Device.from_api``.
"""

import re
from datetime import timedelta
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any
from unifi_exporter.exceptions import MalformedDeviceError


_MAC_DIGITS = re.compile(r'^[0-9a-f]{12}$')

# Role-specific blocks newer controllers nest device counters under
_STAT_ROLES = ('ap', 'sw', 'gw')


def format_mac(value: str) -> str:
    """Normalize a MAC address to lower-case colon-separated hex.

    Accepts ``:``, ``-`` or ``.`` separators, or none at all.
    """
    digits = re.sub(r'[:\-.]', '', value.strip().lower())
    if not _MAC_DIGITS.match(digits):
        raise ValueError(f'invalid MAC address: {value!r}')
    return ':'.join(digits[i : i + 2] for i in range(0, 12, 2))


class Site(BaseModel):
    """A managed network instance on the controller."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description='Internal identifier used in API paths')
    description: str = Field(description='Human description, exported as the site label')

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> 'Site':
        return cls(name=data['name'], description=data.get('desc') or data['name'])


class NIC(BaseModel):
    """A wired network interface of a device."""

    mac: str = Field(description='Hardware address')
    name: str | None = Field(default=None, description='Interface name (e.g., eth0)')

    @field_validator('mac')
    @classmethod
    def _normalize_mac(cls, value: str) -> str:
        return format_mac(value)


class TrafficStats(BaseModel):
    """Byte and packet counters for one traffic scope."""

    receive_bytes: int = Field(default=0, alias='rx_bytes')
    transmit_bytes: int = Field(default=0, alias='tx_bytes')
    receive_packets: int = Field(default=0, alias='rx_packets')
    transmit_packets: int = Field(default=0, alias='tx_packets')
    transmit_dropped: int | None = Field(
        default=None,
        alias='tx_dropped',
        description='Not tracked by the controller for every scope',
    )

    model_config = ConfigDict(populate_by_name=True)


class DeviceStats(BaseModel):
    """Traffic counters of a device split by connection scope."""

    all: TrafficStats = Field(default_factory=TrafficStats, description='User traffic')
    uplink: TrafficStats = Field(default_factory=TrafficStats, description='Backhaul traffic')

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> 'DeviceStats':
        stat = data.get('stat') or {}
        if not isinstance(stat, dict):
            raise TypeError(f'stat must be an object, got {type(stat).__name__}')
        for role in _STAT_ROLES:
            if isinstance(stat.get(role), dict):
                stat = stat[role]
                break

        uplink = data.get('uplink') or {}
        if not isinstance(uplink, dict):
            raise TypeError(f'uplink must be an object, got {type(uplink).__name__}')
        uplink = dict(uplink)
        # The controller does not track drops for the uplink scope
        uplink.pop('tx_dropped', None)

        return cls(all=TrafficStats.model_validate(stat), uplink=TrafficStats.model_validate(uplink))


class Radio(BaseModel):
    """A wireless interface bound to one band."""

    name: str = Field(description='Interface name (e.g., wifi0)')
    radio: str = Field(description='Band identifier (e.g., ng, na)')
    user_stations: int = Field(default=0, alias='user-num_sta')
    guest_stations: int = Field(default=0, alias='guest-num_sta')

    model_config = ConfigDict(populate_by_name=True)


class Device(BaseModel):
    """A managed network node (access point, switch, gateway)."""

    id: str = Field(alias='_id', description='Controller device ID')
    mac: str | None = Field(default=None, description='Primary MAC as reported by the controller')
    name: str = Field(default='', description='Display name')
    adopted: bool = Field(default=False)
    uptime: timedelta = Field(default=timedelta(0), description='Time since last boot')
    nics: list[NIC] = Field(default_factory=list, alias='ethernet_table')
    stats: DeviceStats = Field(default_factory=DeviceStats)
    radios: list[Radio] = Field(default_factory=list, alias='radio_table_stats')

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('mac')
    @classmethod
    def _normalize_mac(cls, value: str | None) -> str | None:
        return format_mac(value) if value else None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> 'Device':
        payload = {key: value for key, value in data.items() if key not in ('stat', 'uplink')}
        payload['name'] = data.get('name') or data.get('mac') or ''
        payload['stats'] = DeviceStats.from_api(data)
        return cls.model_validate(payload)

    @property
    def primary_mac(self) -> str:
        """MAC address of the first NIC."""
        if not self.nics:
            raise MalformedDeviceError(
                f'device {self.id!r} ({self.name}) has no network interfaces',
                device_id=self.id,
            )
        return self.nics[0].mac

    @property
    def uptime_seconds(self) -> int:
        """Uptime truncated to whole seconds."""
        return int(self.uptime.total_seconds())
