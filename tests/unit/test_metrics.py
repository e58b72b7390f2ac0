"""Unit tests for metric descriptors and observations."""

import pytest
from dataclasses import FrozenInstanceError
from unifi_exporter.metrics import (
    DeviceDescriptors,
    MetricKind,
    MetricsConfig,
    Observation,
    build_fq_name,
)


class TestBuildFqName:
    def test_all_parts(self):
        assert build_fq_name('unifi', 'devices', 'adopted') == 'unifi_devices_adopted'

    def test_empty_parts_skipped(self):
        assert build_fq_name('unifi', '', 'devices') == 'unifi_devices'
        assert build_fq_name('unifi', 'devices', '') == 'unifi_devices'
        assert build_fq_name('', '', 'up') == 'up'


class TestDeviceDescriptors:
    """Test the device metric catalog."""

    def test_catalog(self):
        descriptors = list(DeviceDescriptors.build().all())

        assert [(d.name, d.labels, d.kind) for d in descriptors] == [
            ('unifi_devices', ('site',), MetricKind.GAUGE),
            ('unifi_devices_adopted', ('site',), MetricKind.GAUGE),
            ('unifi_devices_unadopted', ('site',), MetricKind.GAUGE),
            ('unifi_devices_uptime_seconds_total', ('site', 'id', 'mac', 'name'), MetricKind.COUNTER),
            (
                'unifi_devices_received_bytes_total',
                ('site', 'id', 'mac', 'name', 'connection'),
                MetricKind.COUNTER,
            ),
            (
                'unifi_devices_transmitted_bytes_total',
                ('site', 'id', 'mac', 'name', 'connection'),
                MetricKind.COUNTER,
            ),
            (
                'unifi_devices_received_packets_total',
                ('site', 'id', 'mac', 'name', 'connection'),
                MetricKind.COUNTER,
            ),
            (
                'unifi_devices_transmitted_packets_total',
                ('site', 'id', 'mac', 'name', 'connection'),
                MetricKind.COUNTER,
            ),
            (
                'unifi_devices_transmitted_packets_dropped_total',
                ('site', 'id', 'mac', 'name', 'connection'),
                MetricKind.COUNTER,
            ),
            (
                'unifi_devices_stations',
                ('site', 'id', 'mac', 'name', 'interface', 'radio', 'user_type'),
                MetricKind.GAUGE,
            ),
        ]

    def test_every_descriptor_has_help(self):
        assert all(d.help for d in DeviceDescriptors.build().all())

    def test_build_is_deterministic(self):
        assert DeviceDescriptors.build() == DeviceDescriptors.build()

    def test_custom_namespace(self):
        descriptors = DeviceDescriptors.build(MetricsConfig(namespace='lab'))
        assert descriptors.devices.name == 'lab_devices'
        assert descriptors.stations.name == 'lab_devices_stations'

    def test_immutable(self):
        descriptors = DeviceDescriptors.build()
        with pytest.raises(FrozenInstanceError):
            descriptors.devices = descriptors.stations


class TestObservation:
    def test_labels(self):
        d = DeviceDescriptors.build()
        obs = Observation(d.uptime_seconds_total, 12.0, ('Foo', 'id1', 'aa:bb:cc:dd:ee:ff', 'AP'))
        assert obs.labels == {
            'site': 'Foo',
            'id': 'id1',
            'mac': 'aa:bb:cc:dd:ee:ff',
            'name': 'AP',
        }

    def test_label_count_must_match(self):
        d = DeviceDescriptors.build()
        with pytest.raises(ValueError, match='expected 1 label values, got 2'):
            Observation(d.devices, 1.0, ('Foo', 'extra'))
