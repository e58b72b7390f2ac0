"""Command line entry point for the UniFi exporter.

Loads configuration, selects the monitored sites and serves Prometheus metrics
over HTTP.
"""

import argparse
import sys
from collections.abc import Callable, Iterable
from loguru import logger
from prometheus_client import CollectorRegistry, make_wsgi_app
from typing import Any
from unifi_exporter import __version__
from unifi_exporter.api_client import UnifiApiClient
from unifi_exporter.config import ExporterConfig
from unifi_exporter.exceptions import UniFiExporterError
from unifi_exporter.exporter import Exporter, PrometheusCollector
from unifi_exporter.logging import configure_logging
from unifi_exporter.sites import select_sites
from wsgiref.simple_server import WSGIRequestHandler, make_server


LANDING_PAGE = """<html>
<head><title>UniFi Exporter</title></head>
<body>
<h1>UniFi Exporter</h1>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='unifi-exporter',
        description='Prometheus exporter for UniFi Controller devices',
        epilog='Example: unifi-exporter --config ~/.config/unifi_exporter/prod.env --site "Main Office"',
    )
    parser.add_argument(
        '--config', '-c', default='.env', help='Path to .env configuration file (default: .env)'
    )
    parser.add_argument('--unifi-addr', dest='base_url', help='Controller URL (UNIFI_URL)')
    parser.add_argument('--username', help='Controller username (UNIFI_USERNAME)')
    parser.add_argument('--password', help='Controller password (UNIFI_PASSWORD)')
    parser.add_argument('--api-token', help='Controller API token (UNIFI_CONSOLE_API_TOKEN)')
    parser.add_argument(
        '--site', help='Site description to monitor; all sites when empty (UNIFI_SITE)'
    )
    tls = parser.add_mutually_exclusive_group()
    tls.add_argument(
        '--verify-ssl',
        dest='verify_ssl',
        action='store_const',
        const=True,
        default=None,
        help='Verify the controller TLS certificate (UNIFI_VERIFY_SSL)',
    )
    tls.add_argument(
        '--insecure',
        dest='verify_ssl',
        action='store_const',
        const=False,
        help='Skip TLS certificate verification, overriding UNIFI_VERIFY_SSL',
    )
    parser.add_argument('--timeout', type=int, help='Controller request timeout in seconds')
    parser.add_argument('--listen-address', help='Address for the metrics listener (default: :9130)')
    parser.add_argument('--metrics-path', help='Path under which metrics are served (default: /metrics)')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def make_app(registry: CollectorRegistry, metrics_path: str) -> Callable:
    """WSGI app serving metrics at ``metrics_path`` and a landing page at ``/``."""
    metrics_app = make_wsgi_app(registry)
    landing = LANDING_PAGE.format(path=metrics_path).encode('utf-8')

    def app(environ: dict[str, Any], start_response: Callable) -> Iterable[bytes]:
        path = environ.get('PATH_INFO', '/')
        if path == metrics_path:
            return metrics_app(environ, start_response)
        if path == '/':
            start_response('200 OK', [('Content-Type', 'text/html; charset=utf-8')])
            return [landing]
        start_response('404 Not Found', [('Content-Type', 'text/plain; charset=utf-8')])
        return [b'Not Found\n']

    return app


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(f'{self.address_string()} - {format % args}')


def build_registry(config: ExporterConfig, client: UnifiApiClient) -> CollectorRegistry:
    """Select sites and register the exporter's collector.

    Raises:
        SiteNotFoundError: If the configured site is unknown to the controller
    """
    sites = select_sites(config.site, client.sites())
    exporter = Exporter.for_sites(client, sites, config.metrics)
    registry = CollectorRegistry()
    registry.register(PrometheusCollector(exporter, config.metrics))
    return registry


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging('DEBUG' if args.debug else 'INFO')

    try:
        config = ExporterConfig.from_env(
            args.config,
            base_url=args.base_url,
            username=args.username,
            password=args.password,
            api_token=args.api_token,
            site=args.site,
            verify_ssl=args.verify_ssl,
            timeout=args.timeout,
            listen_address=args.listen_address,
            metrics_path=args.metrics_path,
            log_level='DEBUG' if args.debug else None,
        )
    except ValueError as e:
        logger.error(f'Invalid configuration: {e}')
        return 1

    configure_logging(config.log_level)

    client = UnifiApiClient(**config.client_kwargs())
    try:
        client.login()
        registry = build_registry(config, client)
    except UniFiExporterError as e:
        logger.error(f'Startup failed: {e}')
        client.close()
        return 1

    host, port = config.listen_host_port()
    httpd = make_server(
        host, port, make_app(registry, config.metrics_path), handler_class=_QuietHandler
    )
    logger.info(f'Starting UniFi exporter on {host}:{port}{config.metrics_path}')

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info('Shutting down')
    finally:
        httpd.server_close()
        client.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
