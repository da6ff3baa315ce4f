"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking mutation attempts',
    ['operation', 'status']  # create/update x success, rejected, conflict
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking mutation latency',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

room_claim_retries = Counter(
    'room_claim_retries_total',
    'Room capacity claims retried after a version conflict'
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(operation: str, status: str):
    """Record booking attempt. Status: success, rejected, conflict"""
    booking_attempts.labels(operation=operation, status=status).inc()


def record_room_claim_retry():
    room_claim_retries.inc()
