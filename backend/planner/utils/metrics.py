"""Prometheus metrics for rate refresh and itinerary operations."""

from prometheus_client import Counter, Histogram

fx_refresh_total = Counter(
    "fx_refresh_total",
    "Exchange rate refresh attempts",
    ["outcome"],
)

fx_refresh_latency_ms = Histogram(
    "fx_refresh_latency_ms",
    "Exchange rate provider latency in milliseconds",
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

itinerary_builds_total = Counter(
    "itinerary_builds_total",
    "Itinerary build attempts",
    ["outcome"],
)

day_edits_total = Counter(
    "day_edits_total",
    "Day activity edit attempts",
    ["outcome"],
)


class PrometheusPlannerMetrics:
    """Prometheus-based planner metrics implementation."""

    def record_fx_refresh(self, outcome: str, latency_ms: float) -> None:
        """Record one rate refresh with its provider latency."""
        fx_refresh_total.labels(outcome=outcome).inc()
        fx_refresh_latency_ms.observe(latency_ms)

    def inc_build(self, outcome: str) -> None:
        """Increment itinerary build counter."""
        itinerary_builds_total.labels(outcome=outcome).inc()

    def inc_day_edit(self, outcome: str) -> None:
        """Increment day edit counter."""
        day_edits_total.labels(outcome=outcome).inc()
