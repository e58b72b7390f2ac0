"""Collector for metrics regarding UniFi devices."""

from collections.abc import Iterator, Sequence
from typing import Protocol
from unifi_exporter.collector import Collector
from unifi_exporter.exceptions import CollectionError, MalformedDeviceError, UniFiApiError
from unifi_exporter.metrics import (
    DeviceDescriptors,
    Emit,
    MetricDescriptor,
    MetricsConfig,
    Observation,
)
from unifi_exporter.models import Device, Site, TrafficStats


class DeviceSource(Protocol):
    """Anything that can return a site's device snapshot."""

    def devices(self, site_name: str) -> list[Device]: ...


class DeviceCollector(Collector):
    """Emits device counts, uptime, traffic and station metrics for each site."""

    def __init__(
        self,
        client: DeviceSource,
        sites: Sequence[Site],
        config: MetricsConfig | None = None,
    ):
        """Initialize the collector.

        Args:
            client: Source of device snapshots
            sites: Sites to collect, in collection order
            config: Metric naming; defaults to the ``unifi`` namespace
        """
        self.descriptors = DeviceDescriptors.build(config)
        self._client = client
        self._sites = tuple(sites)

    @property
    def name(self) -> str:
        return 'devices'

    @property
    def sites(self) -> tuple[Site, ...]:
        return self._sites

    def describe(self) -> Iterator[MetricDescriptor]:
        yield from self.descriptors.all()

    def _collect(self, emit: Emit) -> None:
        d = self.descriptors

        for site in self._sites:
            try:
                devices = self._client.devices(site.name)
            except UniFiApiError as e:
                raise CollectionError(d.devices, e) from e

            # Every series below is labeled with the first NIC's MAC
            for device in devices:
                try:
                    device.primary_mac
                except MalformedDeviceError as e:
                    raise CollectionError(d.uptime_seconds_total, e) from e

            emit(Observation(d.devices, float(len(devices)), (site.description,)))

            self._collect_adoptions(emit, site.description, devices)
            self._collect_uptime(emit, site.description, devices)
            self._collect_traffic(emit, site.description, devices)
            self._collect_stations(emit, site.description, devices)

    def _collect_adoptions(self, emit: Emit, site_label: str, devices: list[Device]) -> None:
        adopted = sum(1 for device in devices if device.adopted)
        unadopted = len(devices) - adopted

        emit(Observation(self.descriptors.adopted_devices, float(adopted), (site_label,)))
        emit(Observation(self.descriptors.unadopted_devices, float(unadopted), (site_label,)))

    def _collect_uptime(self, emit: Emit, site_label: str, devices: list[Device]) -> None:
        for device in devices:
            emit(
                Observation(
                    self.descriptors.uptime_seconds_total,
                    float(device.uptime_seconds),
                    _device_labels(site_label, device),
                )
            )

    def _collect_traffic(self, emit: Emit, site_label: str, devices: list[Device]) -> None:
        d = self.descriptors

        for device in devices:
            labels = _device_labels(site_label, device)

            self._emit_scope(emit, labels + ('user',), device.stats.all)
            emit(
                Observation(
                    d.transmitted_dropped_total,
                    float(device.stats.all.transmit_dropped or 0),
                    labels + ('user',),
                )
            )
            self._emit_scope(emit, labels + ('uplink',), device.stats.uplink)

    def _emit_scope(self, emit: Emit, labels: tuple[str, ...], stats: TrafficStats) -> None:
        d = self.descriptors

        emit(Observation(d.received_bytes_total, float(stats.receive_bytes), labels))
        emit(Observation(d.transmitted_bytes_total, float(stats.transmit_bytes), labels))
        emit(Observation(d.received_packets_total, float(stats.receive_packets), labels))
        emit(Observation(d.transmitted_packets_total, float(stats.transmit_packets), labels))

    def _collect_stations(self, emit: Emit, site_label: str, devices: list[Device]) -> None:
        for device in devices:
            labels = _device_labels(site_label, device)

            for radio in device.radios:
                radio_labels = labels + (radio.name, radio.radio)

                emit(
                    Observation(
                        self.descriptors.stations,
                        float(radio.user_stations),
                        radio_labels + ('private',),
                    )
                )
                emit(
                    Observation(
                        self.descriptors.stations,
                        float(radio.guest_stations),
                        radio_labels + ('guest',),
                    )
                )


def _device_labels(site_label: str, device: Device) -> tuple[str, ...]:
    # Tuples so each emission owns its label values
    return (site_label, device.id, device.primary_mac, device.name)
