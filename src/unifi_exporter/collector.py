"""Base interface for metric collectors, one implementation per resource family."""

import abc
from collections.abc import Iterator
from loguru import logger
from unifi_exporter.exceptions import CollectionError
from unifi_exporter.metrics import Emit, InvalidMetric, MetricDescriptor


class Collector(abc.ABC):
    """Produces observations for one family of controller resources."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Collector name used in log output."""

    @abc.abstractmethod
    def describe(self) -> Iterator[MetricDescriptor]:
        """Yield every descriptor this collector can emit, independent of collected data."""

    @abc.abstractmethod
    def _collect(self, emit: Emit) -> None:
        """Emit observations for a full pass.

        Raises:
            CollectionError: On the first failure, after everything collected
                up to that point has been emitted
        """

    def collect_error(self, emit: Emit) -> Exception | None:
        """Run a collection pass and return the first error, if any.

        A failure is logged and marked by emitting one ``InvalidMetric`` for
        the descriptor it is attributed to.
        """
        try:
            self._collect(emit)
        except CollectionError as e:
            emit(InvalidMetric(e.descriptor, e.cause))
            logger.bind(collector=self.name, metric=e.descriptor.name).error(
                f'failed collecting {self.name} metric {e.descriptor.name}: {e.cause}'
            )
            return e.cause
        return None

    def collect(self, emit: Emit) -> None:
        """Same as ``collect_error`` with the error discarded (it is already logged and marked)."""
        self.collect_error(emit)
