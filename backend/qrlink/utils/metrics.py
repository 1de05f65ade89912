"""
Prometheus metrics definitions for the API.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Short link metrics
short_links_created_total = Counter(
    'short_links_created_total',
    'Total short links created',
    ['type']
)

short_links_resolved_total = Counter(
    'short_links_resolved_total',
    'Total short link lookups',
    ['outcome']
)

# Storage metrics
presigned_urls_total = Counter(
    'presigned_urls_total',
    'Total presigned or public URLs issued',
    ['action']
)

# Provider metrics
upstream_failures_total = Counter(
    'upstream_failures_total',
    'Total failed calls to storage/KV providers',
    ['service']
)
