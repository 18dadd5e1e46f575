"""Prometheus metrics for the resale estimator."""

from prometheus_client import Counter, Histogram, Info

# Application info
app_info = Info("resale_estimator", "Resale estimator application info")
app_info.info({"version": "0.1.0", "name": "resale-estimator"})

# Source query metrics
source_queries_total = Counter(
    "source_queries_total",
    "Total number of marketplace source queries",
    ["source", "status"],
)

source_query_duration_seconds = Histogram(
    "source_query_duration_seconds",
    "Time spent querying a marketplace source",
    ["source"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 15.0],
)

source_items_returned = Histogram(
    "source_items_returned",
    "Canonical items returned per source query",
    ["source"],
    buckets=[0, 1, 5, 10, 25, 50, 100, 200],
)

# Token metrics
token_mints_total = Counter(
    "token_mints_total",
    "Total number of credential exchanges",
    ["scope", "status"],
)

# Orchestrator metrics
cascade_fallbacks_total = Counter(
    "cascade_fallbacks_total",
    "Number of times a branch fell through to a secondary source",
    ["branch", "to_source"],
)

estimate_requests_total = Counter(
    "estimate_requests_total",
    "Total number of estimate requests",
    ["status"],
)

response_cache_total = Counter(
    "response_cache_total",
    "Response cache lookups",
    ["result"],
)


def record_source_success(source: str, duration: float, item_count: int):
    """Record a successful source query."""
    status = "success" if item_count else "empty"
    source_queries_total.labels(source=source, status=status).inc()
    source_query_duration_seconds.labels(source=source).observe(duration)
    source_items_returned.labels(source=source).observe(item_count)


def record_source_error(source: str, error_type: str, duration: float):
    """Record a failed source query."""
    source_queries_total.labels(source=source, status=error_type).inc()
    source_query_duration_seconds.labels(source=source).observe(duration)


def record_token_mint(scope: str, success: bool):
    """Record a credential exchange."""
    status = "success" if success else "error"
    token_mints_total.labels(scope=scope, status=status).inc()


def record_cascade(branch: str, to_source: str):
    """Record a fallback to a secondary source."""
    cascade_fallbacks_total.labels(branch=branch, to_source=to_source).inc()


def record_estimate(status: str):
    """Record an estimate request outcome."""
    estimate_requests_total.labels(status=status).inc()


def record_cache_lookup(hit: bool):
    """Record a response cache lookup."""
    response_cache_total.labels(result="hit" if hit else "miss").inc()
