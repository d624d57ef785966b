"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Reservation metrics
reservation_attempts = Counter(
    'eventaro_reservation_attempts_total',
    'Total reservation attempts',
    ['result']  # created, not_found, unavailable, full, duplicate
)

reservation_transitions = Counter(
    'eventaro_reservation_transitions_total',
    'Reservation status transitions',
    ['from_status', 'to_status']
)

# Auth metrics
auth_attempts = Counter(
    'eventaro_auth_attempts_total',
    'Authentication attempts',
    ['action', 'result']  # register/login/refresh, success/failure
)

# Ticket metrics
tickets_rendered = Counter(
    'eventaro_tickets_rendered_total',
    'PDF tickets rendered'
)

ticket_render_latency = Histogram(
    'eventaro_ticket_render_seconds',
    'PDF ticket render latency',
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_reservation_attempt(result: str):
    """Record reservation attempt. Result: created, not_found, unavailable, full, duplicate"""
    reservation_attempts.labels(result=result).inc()


def record_transition(from_status: str, to_status: str):
    reservation_transitions.labels(from_status=from_status, to_status=to_status).inc()


def record_auth_attempt(action: str, success: bool):
    result = "success" if success else "failure"
    auth_attempts.labels(action=action, result=result).inc()
