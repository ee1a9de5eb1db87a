"""Health and readiness endpoints for container orchestration.

Provides:

- ``GET /health`` -- Liveness probe.  Returns 200 if the process is alive.
- ``GET /ready``  -- Readiness probe.  Returns 200 only when the database
  answers a trivial query; 503 with per-check details otherwise.
- ``GET /api/healthcheck`` -- API status message with a UTC timestamp.
- ``GET /api/`` -- Plain-text welcome banner.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from kolhub.domain.errors import GatewayError


def register_health_routes(app: FastAPI) -> None:
    """Register the health, readiness, and API status endpoints on *app*.

    Args:
        app: The FastAPI application instance.
    """

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe -- always returns 200 if the process is running."""
        return {"status": "healthy"}

    @app.get("/ready")
    async def ready(request: Request) -> JSONResponse:
        """Readiness probe -- checks the database connection."""
        services: dict[str, Any] = request.app.state.services
        checks: dict[str, str] = {}

        gateway = services.get("gateway")
        if gateway is not None:
            try:
                await asyncio.to_thread(gateway.ping)
                checks["database"] = "ok"
            except GatewayError:
                checks["database"] = "fail"
        else:
            checks["database"] = "fail"

        all_ok = all(v == "ok" for v in checks.values())
        status = "ready" if all_ok else "not_ready"
        code = 200 if all_ok else 503

        return JSONResponse(content={"status": status, "checks": checks}, status_code=code)

    @app.get("/api/healthcheck")
    async def healthcheck() -> dict[str, str]:
        timestamp = datetime.now(tz=UTC).isoformat(timespec="milliseconds")
        return {
            "message": "API running",
            "timestamp": timestamp.replace("+00:00", "Z"),
            "status": "healthy",
        }

    @app.get("/api/", response_class=PlainTextResponse)
    async def welcome() -> str:
        return "Welcome to the API!"
