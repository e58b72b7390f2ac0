"""Collection orchestration and the Prometheus client adapter.

``Exporter`` fans a scrape out to every resource collector. ``PrometheusCollector``
turns the emitted observations into ``prometheus_client`` metric families so the
exporter can be registered with a ``CollectorRegistry``.
"""

from collections.abc import Iterable, Iterator, Sequence
from loguru import logger
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.metrics_core import Metric as MetricFamily
from unifi_exporter.collector import Collector
from unifi_exporter.device_collector import DeviceCollector, DeviceSource
from unifi_exporter.metrics import (
    Emit,
    InvalidMetric,
    Metric,
    MetricDescriptor,
    MetricKind,
    MetricsConfig,
    build_fq_name,
)
from unifi_exporter.models import Site
from unifi_exporter.sites import sites_string


class Exporter:
    """Runs every collector once per scrape."""

    def __init__(self, collectors: Iterable[Collector]):
        self.collectors = tuple(collectors)

    @classmethod
    def for_sites(
        cls,
        client: DeviceSource,
        sites: Sequence[Site],
        config: MetricsConfig | None = None,
    ) -> 'Exporter':
        """Build the default collector set for the selected sites."""
        logger.info(f'Monitoring sites: {sites_string(sites)}')
        return cls([DeviceCollector(client, sites, config)])

    def describe(self) -> Iterator[MetricDescriptor]:
        for collector in self.collectors:
            yield from collector.describe()

    def collect(self, emit: Emit) -> None:
        """Run every collector; failures are logged and marked, never raised."""
        for collector in self.collectors:
            collector.collect(emit)

    def collect_errors(self, emit: Emit) -> list[Exception]:
        """Run every collector and return the errors they reported."""
        errors = []
        for collector in self.collectors:
            error = collector.collect_error(emit)
            if error is not None:
                errors.append(error)
        return errors


class PrometheusCollector:
    """Custom ``prometheus_client`` collector backed by an ``Exporter``."""

    def __init__(self, exporter: Exporter, config: MetricsConfig | None = None):
        self.exporter = exporter
        namespace = (config or MetricsConfig()).namespace
        self.invalid_metric_name = build_fq_name(namespace, 'collector', 'invalid_metric')

    def describe(self) -> Iterator[MetricFamily]:
        for descriptor in self.exporter.describe():
            yield _family(descriptor)
        yield self._invalid_family()

    def collect(self) -> Iterator[MetricFamily]:
        emitted: list[Metric] = []
        self.exporter.collect(emitted.append)

        families: dict[MetricDescriptor, MetricFamily] = {
            descriptor: _family(descriptor) for descriptor in self.exporter.describe()
        }
        invalid = self._invalid_family()

        for metric in emitted:
            if isinstance(metric, InvalidMetric):
                invalid.add_metric([metric.descriptor.name, str(metric.error)], 1.0)
                continue
            family = families.get(metric.descriptor)
            if family is None:
                family = families[metric.descriptor] = _family(metric.descriptor)
            family.add_metric(list(metric.label_values), metric.value)

        yield from families.values()
        if invalid.samples:
            yield invalid

    def _invalid_family(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(
            self.invalid_metric_name,
            'Metric families whose collection failed during this scrape',
            labels=['metric', 'error'],
        )


def _family(descriptor: MetricDescriptor) -> MetricFamily:
    if descriptor.kind is MetricKind.COUNTER:
        return CounterMetricFamily(descriptor.name, descriptor.help, labels=list(descriptor.labels))
    return GaugeMetricFamily(descriptor.name, descriptor.help, labels=list(descriptor.labels))
