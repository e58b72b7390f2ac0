"""Metric descriptors and the observations emitted by collectors.

Descriptors are built once at startup from a small immutable ``MetricsConfig``
and never depend on collected data. Observations pair a descriptor with a value
and its label values, in the order the descriptor declares them.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass, fields
from enum import Enum


class MetricKind(str, Enum):
    """Exposition type of a metric."""

    GAUGE = 'gauge'
    COUNTER = 'counter'


@dataclass(frozen=True)
class MetricsConfig:
    """Process-wide naming for exported metrics."""

    namespace: str = 'unifi'


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty name parts with underscores."""
    return '_'.join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class MetricDescriptor:
    """Fully-qualified name, help text, ordered label names and kind of a metric."""

    name: str
    help: str
    labels: tuple[str, ...]
    kind: MetricKind

    def __str__(self) -> str:
        return f'{self.name}{{{", ".join(self.labels)}}}'


@dataclass(frozen=True)
class Observation:
    """One sample of a metric."""

    descriptor: MetricDescriptor
    value: float
    label_values: tuple[str, ...]

    def __post_init__(self):
        if len(self.label_values) != len(self.descriptor.labels):
            raise ValueError(
                f'{self.descriptor.name}: expected {len(self.descriptor.labels)} '
                f'label values, got {len(self.label_values)}'
            )

    @property
    def labels(self) -> dict[str, str]:
        """Label names mapped to their values."""
        return dict(zip(self.descriptor.labels, self.label_values))


@dataclass(frozen=True)
class InvalidMetric:
    """Marker for a metric family whose collection failed."""

    descriptor: MetricDescriptor
    error: Exception


Metric = Observation | InvalidMetric
Emit = Callable[[Metric], None]


LABELS_SITE_ONLY = ('site',)
LABELS_UPTIME = ('site', 'id', 'mac', 'name')
LABELS_DEVICE = ('site', 'id', 'mac', 'name', 'connection')
LABELS_DEVICE_STATIONS = ('site', 'id', 'mac', 'name', 'interface', 'radio', 'user_type')


@dataclass(frozen=True)
class DeviceDescriptors:
    """The fixed catalog of device metrics."""

    devices: MetricDescriptor
    adopted_devices: MetricDescriptor
    unadopted_devices: MetricDescriptor

    uptime_seconds_total: MetricDescriptor

    received_bytes_total: MetricDescriptor
    transmitted_bytes_total: MetricDescriptor
    received_packets_total: MetricDescriptor
    transmitted_packets_total: MetricDescriptor
    transmitted_dropped_total: MetricDescriptor

    stations: MetricDescriptor

    @classmethod
    def build(cls, config: MetricsConfig | None = None) -> 'DeviceDescriptors':
        """Build the catalog under the configured namespace."""
        namespace = (config or MetricsConfig()).namespace
        subsystem = 'devices'

        def desc(name: str, help: str, labels: tuple[str, ...], kind: MetricKind):
            return MetricDescriptor(build_fq_name(namespace, subsystem, name), help, labels, kind)

        gauge, counter = MetricKind.GAUGE, MetricKind.COUNTER

        return cls(
            # Subsystem doubles as the name, giving "unifi_devices"
            devices=desc('', 'Total number of devices', LABELS_SITE_ONLY, gauge),
            adopted_devices=desc(
                'adopted', 'Number of devices which are adopted', LABELS_SITE_ONLY, gauge
            ),
            unadopted_devices=desc(
                'unadopted', 'Number of devices which are not adopted', LABELS_SITE_ONLY, gauge
            ),
            uptime_seconds_total=desc(
                'uptime_seconds_total', 'Device uptime in seconds', LABELS_UPTIME, counter
            ),
            received_bytes_total=desc(
                'received_bytes_total',
                'Number of bytes received by devices',
                LABELS_DEVICE,
                counter,
            ),
            transmitted_bytes_total=desc(
                'transmitted_bytes_total',
                'Number of bytes transmitted by devices',
                LABELS_DEVICE,
                counter,
            ),
            received_packets_total=desc(
                'received_packets_total',
                'Number of packets received by devices',
                LABELS_DEVICE,
                counter,
            ),
            transmitted_packets_total=desc(
                'transmitted_packets_total',
                'Number of packets transmitted by devices',
                LABELS_DEVICE,
                counter,
            ),
            transmitted_dropped_total=desc(
                'transmitted_packets_dropped_total',
                'Number of packets which are dropped on transmission by devices',
                LABELS_DEVICE,
                counter,
            ),
            stations=desc(
                'stations',
                'Total number of stations (clients) connected to devices',
                LABELS_DEVICE_STATIONS,
                gauge,
            ),
        )

    def all(self) -> Iterator[MetricDescriptor]:
        """Yield every descriptor exactly once, in catalog order."""
        for field in fields(self):
            yield getattr(self, field.name)
