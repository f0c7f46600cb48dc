"""
Prometheus-based metrics for production monitoring.
Provides /metrics endpoint for scraping.
"""
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response


# Counters
artifacts_created_total = Counter(
    "artifacts_created_total",
    "Total number of artifacts stored after successful processing",
)

artifacts_delivered_total = Counter(
    "artifacts_delivered_total",
    "Total number of artifacts handed out (single delivery)",
)

artifacts_expired_total = Counter(
    "artifacts_expired_total",
    "Total number of artifacts removed by TTL",
)

payment_confirmations_total = Counter(
    "payment_confirmations_total",
    "Payment confirmations applied to artifacts",
    ["source", "outcome"],  # source: verify, webhook; outcome: confirmed, already_paid
)

upstream_failures_total = Counter(
    "upstream_failures_total",
    "Failed calls to external collaborators",
    ["collaborator", "operation"],
)

circuit_breaker_state = Gauge(
    "circuit_breaker_state",
    "Circuit breaker state (0=closed, 1=open)",
    ["name"],
)

# Histograms
processing_duration_seconds = Histogram(
    "processing_duration_seconds",
    "Document processing duration",
    buckets=[0.5, 1, 2, 5, 10, 30, 60],
)

# Gauges
artifacts_live = Gauge(
    "artifacts_live",
    "Artifacts currently held in the store",
)


# Metrics endpoint router
router = APIRouter()


@router.get("/metrics")
def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint for scraping."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
