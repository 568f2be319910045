from prometheus_client import Counter, Histogram, make_asgi_app

# HTTP metrics are labelled with the route template, never the raw key
REQUESTS = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"],
)

LATENCY = Histogram(
    "http_request_duration_seconds",
    "Request latency in seconds",
    ["method", "route"],
)

STORAGE_OPERATIONS = Counter(
    "cube_storage_operations_total",
    "Object storage operations issued by the facade",
    ["operation", "outcome"],
)

STORAGE_LATENCY = Histogram(
    "cube_storage_operation_duration_seconds",
    "Driver call latency in seconds, including failed calls",
    ["operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


def observe_storage(operation: str, outcome: str, seconds: float) -> None:
    STORAGE_OPERATIONS.labels(operation, outcome).inc()
    STORAGE_LATENCY.labels(operation).observe(seconds)


metrics_app = make_asgi_app()
