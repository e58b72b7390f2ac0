"""Configuration management for the UniFi exporter.

Centralizes configuration loading and validation.
"""

import os
from dataclasses import asdict, dataclass
from dotenv import load_dotenv
from loguru import logger
from pathlib import Path
from unifi_exporter.metrics import MetricsConfig


@dataclass
class ExporterConfig:
    """Controller connection, HTTP listener and metric naming settings."""

    base_url: str
    username: str | None = None
    password: str | None = None
    api_token: str | None = None
    site: str = ''
    verify_ssl: bool = False
    timeout: int = 5
    max_retries: int = 1
    retry_delay: float = 1.0

    listen_address: str = ':9130'
    metrics_path: str = '/metrics'
    namespace: str = 'unifi'
    log_level: str = 'INFO'

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.base_url:
            raise ValueError('base_url is required')

        if not self.base_url.startswith(('http://', 'https://')):
            raise ValueError('base_url must start with http:// or https://')

        if not self.api_token and not (self.username and self.password):
            raise ValueError('Either api_token or username+password required for authentication')

        # Clamp numeric values to safe ranges
        self.timeout = max(1, min(self.timeout, 300))
        self.max_retries = max(1, min(self.max_retries, 10))
        self.retry_delay = max(0.1, min(self.retry_delay, 10.0))

        self.base_url = self.base_url.rstrip('/')
        # Site descriptions are matched exactly
        self.site = self.site or ''

        if not self.metrics_path.startswith('/'):
            self.metrics_path = '/' + self.metrics_path
        if not self.namespace:
            raise ValueError('namespace must not be empty')
        self.log_level = self.log_level.upper()

        self.listen_host_port()

    @classmethod
    def from_env(cls, env_file: str | None = '.env', **overrides) -> 'ExporterConfig':
        """Load configuration from the environment, after reading ``env_file``.

        Variables already set in the environment take precedence over the file.
        Keyword overrides that are not ``None`` take precedence over both.

        Raises:
            ValueError: If required values are missing or invalid
        """
        if env_file:
            env_path = Path(env_file).expanduser()
            if env_path.exists():
                load_dotenv(env_path, override=False)
                logger.debug(f'Loaded environment from {env_path}')

        values = {
            'base_url': os.environ.get('UNIFI_URL', ''),
            'username': os.environ.get('UNIFI_USERNAME'),
            'password': os.environ.get('UNIFI_PASSWORD'),
            'api_token': os.environ.get('UNIFI_CONSOLE_API_TOKEN'),
            'site': os.environ.get('UNIFI_SITE', ''),
            'verify_ssl': os.environ.get('UNIFI_VERIFY_SSL', 'false').lower() == 'true',
            'timeout': int(os.environ.get('UNIFI_TIMEOUT', '5')),
            'max_retries': int(os.environ.get('UNIFI_MAX_RETRIES', '1')),
            'retry_delay': float(os.environ.get('UNIFI_RETRY_DELAY', '1.0')),
            'listen_address': os.environ.get('UNIFI_EXPORTER_LISTEN_ADDRESS', ':9130'),
            'metrics_path': os.environ.get('UNIFI_EXPORTER_METRICS_PATH', '/metrics'),
            'namespace': os.environ.get('UNIFI_EXPORTER_NAMESPACE', 'unifi'),
            'log_level': os.environ.get('UNIFI_EXPORTER_LOG_LEVEL', 'INFO'),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})

        if not values['base_url']:
            raise ValueError(f'UNIFI_URL environment variable required. Check {env_file}')

        return cls(**values)

    def listen_host_port(self) -> tuple[str, int]:
        """Split ``listen_address`` into host and port; an empty host binds all interfaces."""
        host, sep, port = self.listen_address.rpartition(':')
        if not sep or not port.isdigit():
            raise ValueError(f'listen_address must be host:port, got {self.listen_address!r}')
        return host or '0.0.0.0', int(port)

    @property
    def metrics(self) -> MetricsConfig:
        return MetricsConfig(namespace=self.namespace)

    def client_kwargs(self) -> dict:
        """Keyword arguments for ``UnifiApiClient``."""
        return {
            'base_url': self.base_url,
            'username': self.username,
            'password': self.password,
            'api_token': self.api_token,
            'verify_ssl': self.verify_ssl,
            'timeout': self.timeout,
            'max_retries': self.max_retries,
            'retry_delay': self.retry_delay,
        }

    def to_dict(self) -> dict:
        """Export configuration as a dictionary, with secrets masked."""
        data = asdict(self)
        for secret in ('password', 'api_token'):
            if data[secret]:
                data[secret] = '***'
        return data
