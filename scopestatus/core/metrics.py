"""Prometheus instruments for ingestion and sky rendering."""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram, start_http_server

from scopestatus.core.config import Settings

logger = logging.getLogger(__name__)

_METRICS_SERVER_STARTED = False

SNAPSHOTS_INGESTED = Counter(
    "scope_status_snapshots_ingested_total",
    "Snapshots appended to the store.",
)
STORAGE_FAILURES = Counter(
    "scope_status_storage_failures_total",
    "Snapshot writes rejected by the database, by failing stage.",
    ["stage"],
)
RENDER_SECONDS = Histogram(
    "scope_status_render_seconds",
    "Wall-clock time spent in the external sky renderer.",
)
RENDER_SUCCESS = Counter(
    "scope_status_render_success_total",
    "Renderer invocations that produced an image.",
)
RENDER_FAILURE = Counter(
    "scope_status_render_failure_total",
    "Renderer invocations that produced a diagnostic instead of an image.",
    ["reason"],
)


def start_metrics_server(settings: Settings) -> None:
    """Expose the default registry over HTTP once per process."""

    global _METRICS_SERVER_STARTED
    if _METRICS_SERVER_STARTED or not settings.metrics_enabled:
        return
    start_http_server(settings.metrics_port, addr=settings.metrics_host)
    _METRICS_SERVER_STARTED = True
    logger.info(
        "Prometheus metrics exporter listening",
        extra={"host": settings.metrics_host, "port": settings.metrics_port},
    )


__all__ = [
    "SNAPSHOTS_INGESTED",
    "STORAGE_FAILURES",
    "RENDER_SECONDS",
    "RENDER_SUCCESS",
    "RENDER_FAILURE",
    "start_metrics_server",
]
