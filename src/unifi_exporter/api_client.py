"""API client for the UniFi Controller.

Supplies site and device snapshots to the collectors. Supports UniFi OS
consoles (UDM, UDR, paths under ``/proxy/network``) and legacy controllers,
with token (``X-API-KEY``) or username/password authentication.
"""

import requests
import time
import urllib3
from collections.abc import Callable
from requests.exceptions import ConnectionError, RequestException, SSLError, Timeout
from typing import Any
from unifi_exporter.exceptions import (
    UniFiApiError,
    UniFiAuthenticationError,
    UniFiConnectionError,
    UniFiDecodeError,
    UniFiPermanentError,
    UniFiRetryableError,
    UniFiServerError,
    UniFiTimeoutError,
)
from unifi_exporter.logging import get_logger
from unifi_exporter.models import Device, Site


log = get_logger(component='api_client')

USER_AGENT = 'UnifiExporter/1.0'


def _sanitize_for_logging(value: str, max_chars: int = 4) -> str:
    """Show only the first/last few characters of a sensitive value."""
    if not value or len(value) <= max_chars * 2:
        return '*' * len(value) if value else ''
    return f'{value[:max_chars]}...{value[-max_chars:]}'


class UnifiApiClient:
    """Read-only client for the controller endpoints the exporter needs."""

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        api_token: str | None = None,
        verify_ssl: bool = False,
        timeout: int = 5,
        max_retries: int = 1,
        retry_delay: float = 1.0,
        session: requests.Session | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Controller URL (e.g., https://unifi.local:8443)
            username: Admin username (password authentication)
            password: Admin password (password authentication)
            api_token: API token (token authentication, preferred when set)
            verify_ssl: Whether to verify TLS certificates
            timeout: Per-request timeout in seconds
            max_retries: Attempts per request for retryable failures
            retry_delay: Base delay between attempts, doubled on each retry
            session: Optional preconfigured session
        """
        if not base_url:
            raise ValueError('Base URL is required')
        if not base_url.startswith(('http://', 'https://')):
            raise ValueError('Base URL must start with http:// or https://')

        self.base_url = base_url.rstrip('/')
        self._username = username
        self._password = password
        self._api_token = api_token
        self.auth_method = 'token' if api_token else 'password'

        self.verify_ssl = verify_ssl
        self.timeout = max(1, min(timeout, 300))
        self.max_retries = max(1, min(max_retries, 10))
        self.retry_delay = max(0.1, min(retry_delay, 10.0))

        self.session = session or requests.Session()
        self.session.verify = verify_ssl
        self.session.headers.update(
            {
                'User-Agent': USER_AGENT,
                'Content-Type': 'application/json',
                'Accept': 'application/json',
            }
        )
        if not verify_ssl:
            # Controllers commonly ship self-signed certificates
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        self.is_authenticated = False
        self.is_unifi_os = False

        log.info(f'Initializing UniFi API client for {_sanitize_for_logging(self.base_url, 8)}')
        log.debug(f'SSL verify: {self.verify_ssl}, timeout: {self.timeout}s, auth: {self.auth_method}')

    def __enter__(self) -> 'UnifiApiClient':
        self.login()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def prefix(self) -> str:
        return '/proxy/network' if self.is_unifi_os else ''

    def _url(self, path: str) -> str:
        return f'{self.base_url}{self.prefix}{path}'

    def _login_url(self) -> str:
        return f'{self.base_url}/api/auth/login' if self.is_unifi_os else f'{self.base_url}/api/login'

    def _logout_url(self) -> str:
        return f'{self.base_url}/api/auth/logout' if self.is_unifi_os else f'{self.base_url}/api/logout'

    def login(self) -> None:
        """Detect the controller type and authenticate.

        Raises:
            UniFiAuthenticationError: When the controller rejects the credentials
            UniFiApiError: When the controller cannot be reached
        """
        if self.is_authenticated:
            return

        self._detect_unifi_os()

        if self.auth_method == 'token':
            self.session.headers['X-API-KEY'] = self._api_token
            try:
                self._retry_request(lambda: self._send('GET', self._url('/api/self')))
            except UniFiAuthenticationError as e:
                self.session.headers.pop('X-API-KEY', None)
                raise UniFiAuthenticationError(
                    f'API token rejected by controller: {e}',
                    auth_method='token',
                    status_code=e.status_code,
                ) from e
        else:
            if not self._username or not self._password:
                raise UniFiAuthenticationError(
                    'Username/password authentication selected but credentials missing',
                    auth_method='password',
                )
            login_data = {'username': self._username, 'password': self._password}
            try:
                self._retry_request(lambda: self._send('POST', self._login_url(), json=login_data))
            except UniFiAuthenticationError as e:
                raise UniFiAuthenticationError(
                    f'Login failed for user {self._username!r}: {e}',
                    auth_method='password',
                    status_code=e.status_code,
                ) from e

        self.is_authenticated = True
        log.info(f'Authenticated with {self.auth_method} (UniFi OS: {self.is_unifi_os})')

    def _detect_unifi_os(self) -> None:
        # Only UniFi OS consoles answer /api/system with 200
        try:
            response = self.session.get(f'{self.base_url}/api/system', timeout=self.timeout)
            self.is_unifi_os = response.status_code == 200
        except RequestException as e:
            log.debug(f'UniFi OS detection failed, assuming legacy controller: {e}')
            self.is_unifi_os = False
        log.debug(f'UniFi OS detection: {self.is_unifi_os}')

    def close(self) -> None:
        """End the session, logging out password sessions."""
        try:
            if self.is_authenticated and self.auth_method == 'password':
                self._send('POST', self._logout_url())
        except UniFiApiError as e:
            log.debug(f'Logout failed: {e}')
        finally:
            self.is_authenticated = False
            self.session.close()

    def sites(self) -> list[Site]:
        """Return every site known to the controller."""
        data = self._get('/api/self/sites')
        try:
            return [Site.from_api(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise UniFiDecodeError(f'Invalid site data: {e}') from e

    def devices(self, site_name: str) -> list[Device]:
        """Return the current device snapshot of one site.

        Args:
            site_name: Internal site name (e.g., 'default')
        """
        data = self._get(f'/api/s/{site_name}/stat/device')
        try:
            return [Device.from_api(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise UniFiDecodeError(f'Invalid device data for site {site_name!r}: {e}') from e

    def _get(self, path: str) -> list[dict[str, Any]]:
        """Authenticated GET returning the ``data`` list of the UniFi envelope."""
        self.login()

        try:
            response = self._retry_request(lambda: self._send('GET', self._url(path)))
        except UniFiAuthenticationError as e:
            if e.status_code != 401 or self.auth_method != 'password':
                raise
            # Session cookie expired; log in again and replay once
            log.info('Session expired, re-authenticating')
            self.is_authenticated = False
            self.login()
            response = self._retry_request(lambda: self._send('GET', self._url(path)))

        return self._unwrap(response)

    def _unwrap(self, response: requests.Response) -> list[dict[str, Any]]:
        try:
            payload = response.json()
        except ValueError as e:
            raise UniFiDecodeError(f'Invalid JSON from controller: {e}') from e

        if isinstance(payload, dict) and 'meta' in payload:
            meta = payload['meta']
            if not isinstance(meta, dict):
                raise UniFiDecodeError(f'Expected meta to be an object, got {type(meta).__name__}')
            if meta.get('rc') == 'error':
                message = meta.get('msg', 'Unknown API error')
                raise UniFiPermanentError(f'UniFi API error: {message}')
            payload = payload.get('data', [])

        if not isinstance(payload, list):
            raise UniFiDecodeError(f'Expected a list of records, got {type(payload).__name__}')
        for item in payload:
            if not isinstance(item, dict):
                raise UniFiDecodeError(f'Expected records to be objects, got {type(item).__name__}')
        return payload

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Perform one request, mapping failures onto the exception hierarchy."""
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except Timeout as e:
            raise UniFiTimeoutError(f'Request timed out after {self.timeout}s: {e}') from e
        except (SSLError, ConnectionError) as e:
            raise UniFiConnectionError(f'Connection failed: {e}') from e
        except RequestException as e:
            raise UniFiApiError(f'Request failed: {e}') from e

        status = response.status_code
        if status in (401, 403):
            raise UniFiAuthenticationError(
                f'HTTP {status} from {method} {url}', auth_method=self.auth_method, status_code=status
            )
        if status in (408, 429):
            raise UniFiServerError(f'HTTP {status} from {method} {url}')
        if 400 <= status < 500:
            raise UniFiPermanentError(f'HTTP {status} from {method} {url}')
        if status >= 500:
            raise UniFiServerError(f'HTTP {status} from {method} {url}')
        return response

    def _retry_request(self, func: Callable[[], requests.Response]) -> requests.Response:
        """Call ``func``, retrying retryable failures with exponential backoff."""
        for attempt in range(self.max_retries):
            try:
                return func()
            except UniFiRetryableError as e:
                if attempt == self.max_retries - 1:
                    raise
                delay = self.retry_delay * (2**attempt)
                log.warning(
                    f'Request failed (attempt {attempt + 1}/{self.max_retries}): {e}. '
                    f'Retrying in {delay:.1f}s...'
                )
                time.sleep(delay)
        raise UniFiApiError('Request failed: no attempts made')
