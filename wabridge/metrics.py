"""
Prometheus metrics for the bridge.

This module provides:
- HTTP request counter (method, path, status)
- Request latency histogram (method, path)
- Outbound send outcome counter (result)
- Inbound message counter (kind)

Metrics are stored in-memory using prometheus-client.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST


# =============================================================================
# Metric Definitions
# =============================================================================

# HTTP request counter with labels for method, path, and status code
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    labelnames=["method", "path", "status"]
)

# Request latency histogram in seconds
request_latency_seconds = Histogram(
    "request_latency_seconds",
    "Request latency in seconds",
    labelnames=["method", "path"]
)

# result: sent, validation_error, timeout, error
send_requests_total = Counter(
    "send_requests_total",
    "Total outbound send outcomes",
    labelnames=["result"]
)

# kind: MessageKind value, or "dropped" when media could not be stored
inbound_messages_total = Counter(
    "inbound_messages_total",
    "Total inbound messages processed",
    labelnames=["kind"]
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_http_request(method: str, path: str, status: int, latency_seconds: float) -> None:
    """
    Record an HTTP request in metrics.

    Args:
        method: HTTP method (GET, POST, etc.)
        path: Request path
        status: HTTP status code
        latency_seconds: Request processing time in seconds
    """
    normalized_path = path.split("?")[0]

    http_requests_total.labels(
        method=method,
        path=normalized_path,
        status=str(status)
    ).inc()

    request_latency_seconds.labels(
        method=method,
        path=normalized_path
    ).observe(latency_seconds)


def record_send_outcome(result: str) -> None:
    """
    Record an outbound send outcome.

    Args:
        result: One of "sent", "validation_error", "timeout", "error"
    """
    send_requests_total.labels(result=result).inc()


def record_inbound_message(kind: str) -> None:
    inbound_messages_total.labels(kind=kind).inc()


def get_metrics() -> bytes:
    """Generate Prometheus exposition format metrics."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
