"""
Metrics Collector with Prometheus Integration

Counters for the caching engine:
- Cache hits and misses per model, split by primary / index lookups
- Record store queries per model and operation
- Store query latency
- Invalidated records and tidied all-index entries per model

Metrics live in the default prometheus_client registry and are process-wide.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)

from pantry.core.logging import get_logger

logger = get_logger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

CACHE_HITS = Counter(
    'pantry_cache_hits_total',
    'Total cache hits',
    ['model', 'kind']  # primary or index
)

CACHE_MISSES = Counter(
    'pantry_cache_misses_total',
    'Total cache misses',
    ['model', 'kind']
)

STORE_QUERIES = Counter(
    'pantry_store_queries_total',
    'Total queries sent to the backing record store',
    ['model', 'operation']  # find_by_ids, find_by_attribute, find_all
)

STORE_QUERY_DURATION = Histogram(
    'pantry_store_query_duration_seconds',
    'Backing record store query latency',
    ['model', 'operation'],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)
)

INVALIDATIONS = Counter(
    'pantry_invalidated_records_total',
    'Total records invalidated',
    ['model']
)

TIDIED_ENTRIES = Counter(
    'pantry_tidied_entries_total',
    'Total expired all-index entries removed',
    ['model']
)


# ============================================================================
# Metrics Collector
# ============================================================================


class MetricsCollector:
    """
    Thin wrapper over the pantry counters.

    Usage:
        metrics = get_metrics_collector()
        metrics.record_cache_hit("user", "primary", count=3)
        output = metrics.get_prometheus_metrics()
    """

    # =========================================================================
    # Cache Metrics
    # =========================================================================

    def record_cache_hit(self, model: str, kind: str, count: int = 1) -> None:
        """Record cache hits."""
        if count:
            CACHE_HITS.labels(model=model, kind=kind).inc(count)

    def record_cache_miss(self, model: str, kind: str, count: int = 1) -> None:
        """Record cache misses."""
        if count:
            CACHE_MISSES.labels(model=model, kind=kind).inc(count)

    # =========================================================================
    # Store Metrics
    # =========================================================================

    def record_store_query(self, model: str, operation: str, duration_seconds: float) -> None:
        """Record one backing store query and its latency."""
        STORE_QUERIES.labels(model=model, operation=operation).inc()
        STORE_QUERY_DURATION.labels(model=model, operation=operation).observe(duration_seconds)

    # =========================================================================
    # Maintenance Metrics
    # =========================================================================

    def record_invalidation(self, model: str, count: int = 1) -> None:
        if count:
            INVALIDATIONS.labels(model=model).inc(count)

    def record_tidied(self, model: str, count: int) -> None:
        if count:
            TIDIED_ENTRIES.labels(model=model).inc(count)

    # =========================================================================
    # Export
    # =========================================================================

    def get_prometheus_metrics(self) -> bytes:
        """
        Get Prometheus metrics output.

        Returns:
            bytes: Prometheus text format metrics
        """
        return generate_latest(REGISTRY)

    def get_content_type(self) -> str:
        """Get Prometheus content type."""
        return CONTENT_TYPE_LATEST


_metrics: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get the process-wide metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
        logger.debug("Metrics collector initialized", stage="M.0")
    return _metrics
