"""Prometheus metrics middleware and lifecycle counters."""
import time
from typing import Callable

from prometheus_client import Counter, Gauge, Histogram, generate_latest
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


# =============================================================================
# Prometheus Metrics Definitions
# =============================================================================

# Request metrics
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_requests_active",
    "Number of active HTTP requests",
)

# Lifecycle metrics
DELIVERY_CLAIMS = Counter(
    "delivery_claims_total",
    "Delivery claim attempts by riders",
    ["result"],  # won, lost, missing
)

BORROW_REQUESTS = Counter(
    "borrow_requests_total",
    "Borrow request submissions",
    ["result"],  # created, overlap, rejected_input
)

ORDER_TRANSITIONS = Counter(
    "order_transitions_total",
    "Order status transitions",
    ["transition"],
)


# =============================================================================
# Metrics Middleware
# =============================================================================

class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for all HTTP requests."""

    # Prefixes kept as metric labels; anything else collapses to /other
    ENDPOINT_PREFIXES = (
        "/api/v1/auth",
        "/api/v1/items",
        "/api/v1/orders",
        "/api/v1/deliveries",
        "/api/v1/borrow",
        "/api/v1/riders",
        "/api/v1/admin",
    )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        ACTIVE_REQUESTS.inc()
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            ACTIVE_REQUESTS.dec()
            latency = time.perf_counter() - start_time
            endpoint = self._normalize_endpoint(request.url.path)

            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status=status_code,
            ).inc()
            REQUEST_LATENCY.labels(
                method=request.method,
                endpoint=endpoint,
            ).observe(latency)

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce metric cardinality."""
        for prefix in self.ENDPOINT_PREFIXES:
            if path.startswith(prefix):
                return prefix

        if path == "/health":
            return path

        return "/other"


async def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics scrape endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


# =============================================================================
# Helper Functions for Manual Metric Recording
# =============================================================================

def record_delivery_claim(result: str) -> None:
    DELIVERY_CLAIMS.labels(result=result).inc()


def record_borrow_request(result: str) -> None:
    BORROW_REQUESTS.labels(result=result).inc()


def record_order_transition(transition: str) -> None:
    ORDER_TRANSITIONS.labels(transition=transition).inc()
