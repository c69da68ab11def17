from __future__ import annotations

import re

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.requests import Request


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)

activity_write_failures_total = Counter(
    "activity_write_failures_total",
    "Activity records that could not be written, by parent family",
    ["family"],
)

account_compensation_failures_total = Counter(
    "account_compensation_failures_total",
    "Compensating deletes that failed during account provisioning or deletion",
    ["step"],
)

sequence_identifiers_issued_total = Counter(
    "sequence_identifiers_issued_total",
    "Sequenced identifiers issued by prefix",
    ["prefix"],
)

access_denied_total = Counter(
    "access_denied_total",
    "Requests denied by owner access checks, by family",
    ["family"],
)


_UUID_RE = re.compile(
    r"\b[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[1-5][0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}\b"
)
_INT_RE = re.compile(r"/\d+\b")
_PATH_PARAM_RE = re.compile(r"\{[^{}]+\}")


def _normalize_route_template(path: str) -> str:
    return _PATH_PARAM_RE.sub("{id}", path)


def _sanitize_path(path: str) -> str:
    without_uuids = _UUID_RE.sub("{id}", path)
    return _INT_RE.sub("/{id}", without_uuids)


def resolve_http_path_label(request: Request) -> str:
    route = request.scope.get("route")
    if route is not None:
        path_format = getattr(route, "path_format", None)
        if isinstance(path_format, str) and path_format:
            return _normalize_route_template(path_format)
        route_path = getattr(route, "path", None)
        if isinstance(route_path, str) and route_path:
            return _normalize_route_template(route_path)
    return _sanitize_path(request.url.path)


def observe_http_request(method: str, path: str, status: int, duration: float) -> None:
    status_str = str(status)
    http_requests_total.labels(method=method, path=path, status=status_str).inc()
    http_request_duration_seconds.labels(method=method, path=path).observe(duration)


def observe_activity_write_failure(family: str) -> None:
    activity_write_failures_total.labels(family=family).inc()


def observe_compensation_failure(step: str) -> None:
    account_compensation_failures_total.labels(step=step).inc()


def observe_sequence_issued(prefix: str) -> None:
    sequence_identifiers_issued_total.labels(prefix=prefix).inc()


def observe_access_denied(family: str) -> None:
    access_denied_total.labels(family=family).inc()


def generate_metrics_payload() -> bytes:
    return generate_latest()


def metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
