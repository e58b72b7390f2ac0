"""
UniFi Exporter package.
Exposes UniFi Controller device metrics for Prometheus.
"""

__version__ = '1.0.0'
__license__ = 'MIT'
