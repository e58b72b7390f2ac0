"""Exception hierarchy for the UniFi exporter.

Controller API errors carry a retry/no-retry classification. Collection errors
describe why a scrape pass stopped and which metric family it is attributed to.
"""

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from unifi_exporter.metrics import MetricDescriptor


class UniFiExporterError(Exception):
    """Base exception for all exporter errors."""

    pass


class UniFiApiError(UniFiExporterError):
    """The controller could not supply the requested data."""

    pass


class UniFiRetryableError(UniFiApiError):
    """Errors that may succeed on a later attempt (5xx, timeouts, connection issues)."""

    pass


class UniFiPermanentError(UniFiApiError):
    """Errors that should not be retried (4xx client errors)."""

    pass


class UniFiAuthenticationError(UniFiPermanentError):
    """Authentication failures (401, 403)."""

    def __init__(self, message: str, auth_method: str | None = None, status_code: int | None = None):
        """Initialize authentication error with context.

        Args:
            message: Error message
            auth_method: Authentication method that failed (token, password)
            status_code: HTTP status code (401, 403)
        """
        super().__init__(message)
        self.auth_method = auth_method
        self.status_code = status_code


class UniFiConnectionError(UniFiRetryableError):
    """Network connectivity issues (connection refused, DNS failures, TLS)."""

    pass


class UniFiTimeoutError(UniFiRetryableError):
    """Request timeout errors."""

    pass


class UniFiServerError(UniFiRetryableError):
    """Controller-side failures (5xx)."""

    pass


class UniFiDecodeError(UniFiPermanentError):
    """Response payload could not be decoded into domain models."""

    pass


class SiteNotFoundError(UniFiExporterError):
    """Requested site description matches no site known to the controller."""

    def __init__(self, requested: str, known: str = ''):
        self.requested = requested
        self.known = known
        message = f'site {requested!r} was not found in UniFi Controller'
        if known:
            message += f' (known sites: {known})'
        super().__init__(message)


class MalformedDeviceError(UniFiExporterError):
    """A device violates a collection precondition, such as having no NICs."""

    def __init__(self, message: str, device_id: str | None = None):
        super().__init__(message)
        self.device_id = device_id


class CollectionError(UniFiExporterError):
    """A collection pass failed; attributed to the metric family being produced."""

    def __init__(self, descriptor: 'MetricDescriptor', cause: Exception):
        self.descriptor = descriptor
        self.cause = cause
        super().__init__(f'failed collecting metric {descriptor.name}: {cause}')
