"""Prometheus metrics instrumentation for the KOL campaign backend.

Provides:
- ``setup_metrics(app)``: Attach prometheus-fastapi-instrumentator to a FastAPI app,
  exposing ``/metrics`` with HTTP request duration/count plus custom business counters.
- ``CONDITIONAL_UPDATES``: Counter of conditional updates by entity and outcome
  (``updated`` or ``no_changes``).
- ``REPORTS_INSERTED``: Counter of report rows inserted by batch creation.

Business metrics are updated where the writes happen (not by polling the database).
"""

from __future__ import annotations

from fastapi import FastAPI
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator

CONDITIONAL_UPDATES: Counter = Counter(
    "kolhub_conditional_updates_total",
    "Conditional updates processed, by entity and outcome",
    ["entity", "outcome"],
)

REPORTS_INSERTED: Counter = Counter(
    "kolhub_reports_inserted_total",
    "Total number of KOL report rows inserted",
)


def setup_metrics(app: FastAPI) -> None:
    """Instrument *app* with Prometheus HTTP metrics and expose ``/metrics``.

    Excludes health/ready/metrics endpoints from instrumentation to avoid
    noise in dashboards.

    Args:
        app: The FastAPI application to instrument.
    """
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/health", "/ready", "/metrics", "/api/healthcheck"],
    ).instrument(app).expose(app, include_in_schema=False, should_gzip=True)
