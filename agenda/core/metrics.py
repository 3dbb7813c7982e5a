"""Prometheus metrics for HTTP traffic and booking activity."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from time import perf_counter

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

HTTP_REQUESTS_TOTAL = Counter(
    "agenda_http_requests_total",
    "Total number of HTTP requests handled by the API.",
    ["method", "path", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "agenda_http_request_duration_seconds",
    "HTTP request latency in seconds.",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

APPOINTMENT_TRANSITIONS_TOTAL = Counter(
    "agenda_appointment_transitions_total",
    "Appointment lifecycle transitions applied, by transition.",
    ["transition"],
)

BULK_SLOT_REQUESTS_TOTAL = Counter(
    "agenda_bulk_slot_requests_total",
    "Slot creation requests submitted by bulk generation, by outcome.",
    ["outcome"],
)


def _request_path_label(request: Request) -> str:
    route = request.scope.get("route")
    route_path = getattr(route, "path", None)
    if route_path:
        return str(route_path)
    return request.url.path


async def instrument_http_request(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Track request count and latency for each endpoint."""
    started_at = perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        path_label = _request_path_label(request)
        method_label = request.method.upper()

        HTTP_REQUESTS_TOTAL.labels(
            method=method_label,
            path=path_label,
            status_code=str(status_code),
        ).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(
            method=method_label,
            path=path_label,
        ).observe(perf_counter() - started_at)


def record_transition(transition: str) -> None:
    """Count one applied appointment transition."""
    APPOINTMENT_TRANSITIONS_TOTAL.labels(transition=transition).inc()


def record_bulk_outcome(created: int, failed: int) -> None:
    """Count bulk slot creation results."""
    if created:
        BULK_SLOT_REQUESTS_TOTAL.labels(outcome="created").inc(created)
    if failed:
        BULK_SLOT_REQUESTS_TOTAL.labels(outcome="failed").inc(failed)


def build_metrics_response() -> Response:
    """Return metrics payload in Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
