"""Prometheus instrumentation for Reporteer.

Startup outcome gauges are set once by the startup sequence; the request
counter is bumped by the HTTP layer. Labels are kept to route/status only.
"""
from __future__ import annotations
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

from ..state import ApplicationState, NoReport

REGISTRY = CollectorRegistry()

DERIVED_KEY_DEGRADED = Gauge(
    "reporteer_derived_key_degraded",
    "1 when the derived key could not be fetched and the sentinel fingerprint is served.",
    registry=REGISTRY,
)
ATTESTATION_STATUS = Gauge(
    "reporteer_attestation_status",
    "1 for the current attestation status (none, generated, verified).",
    ["status"],
    registry=REGISTRY,
)
HTTP_REQUESTS = Counter(
    "reporteer_http_requests_total",
    "HTTP requests served by route.",
    ["route"],
    registry=REGISTRY,
)

_STATUSES = ("none", "generated", "verified")


def observe_state(state: ApplicationState, degraded: bool):
    DERIVED_KEY_DEGRADED.set(1 if degraded else 0)
    current = "none" if isinstance(state.report, NoReport) else state.report.status
    for s in _STATUSES:
        ATTESTATION_STATUS.labels(status=s).set(1 if s == current else 0)


def observe_request(route: str):
    HTTP_REQUESTS.labels(route=route).inc()


def prometheus_latest() -> tuple[bytes, str]:
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
