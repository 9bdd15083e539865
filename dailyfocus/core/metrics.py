from prometheus_client import Counter, Histogram, Info, CollectorRegistry, generate_latest
from prometheus_client.multiprocess import MultiProcessCollector
import os


registry = CollectorRegistry()
if os.getenv('prometheus_multiproc_dir'):
    MultiProcessCollector(registry)


http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0],
    registry=registry
)

http_errors_total = Counter(
    'http_errors_total',
    'Total HTTP errors',
    ['method', 'endpoint', 'status'],
    registry=registry
)

recommendations_generated_total = Counter(
    'recommendations_generated_total',
    'Daily focus generations by outcome',
    ['outcome'],
    registry=registry
)

catalog_mismatches_total = Counter(
    'catalog_mismatches_total',
    'Scored exercise ids missing from the catalog',
    registry=registry
)

cache_hits_total = Counter(
    'cache_hits_total',
    'Total cache hits',
    ['cache_type'],
    registry=registry
)

cache_misses_total = Counter(
    'cache_misses_total',
    'Total cache misses',
    ['cache_type'],
    registry=registry
)

stale_generations_discarded_total = Counter(
    'stale_generations_discarded_total',
    'Superseded generations whose result was dropped',
    registry=registry
)

completion_source_failures_total = Counter(
    'completion_source_failures_total',
    'Completion source query failures',
    ['source_id'],
    registry=registry
)

favorite_toggles_total = Counter(
    'favorite_toggles_total',
    'Favorite toggles by result',
    ['result'],
    registry=registry
)

app_info = Info(
    'app_info',
    'Application information',
    registry=registry
)


def track_http_request(method: str, endpoint: str, status: int, duration: float):
    http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

    if status >= 400:
        http_errors_total.labels(method=method, endpoint=endpoint, status=status).inc()


def track_generation(outcome: str):
    recommendations_generated_total.labels(outcome=outcome).inc()


def track_catalog_mismatch():
    catalog_mismatches_total.inc()


def track_cache_hit(cache_type: str):
    cache_hits_total.labels(cache_type=cache_type).inc()


def track_cache_miss(cache_type: str):
    cache_misses_total.labels(cache_type=cache_type).inc()


def track_stale_generation():
    stale_generations_discarded_total.inc()


def track_source_failure(source_id: str):
    completion_source_failures_total.labels(source_id=source_id).inc()


def track_favorite_toggle(result: str):
    favorite_toggles_total.labels(result=result).inc()


def get_metrics() -> bytes:
    return generate_latest(registry)


def set_app_info(version: str, environment: str):
    app_info.info({
        'version': version,
        'environment': environment
    })
