"""FastAPI application entrypoint."""

from __future__ import annotations

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse

from core.logging import setup_logging
from web import routers

setup_logging()

app = FastAPI(
    title="Support Pulse API",
    description="Customer ticket tracking with day-over-day Zendesk and Jira differences.",
    version="0.1.0",
)


@app.get("/", summary="Health Check", tags=["Default"])
def health_check():
    return {"status": "ok", "message": "Support Pulse API is running."}


@app.get("/healthz", include_in_schema=False)
def liveness_probe():
    """Lightweight probe that also checks database connectivity."""
    db_ok, db_error = routers.health.ping_database()
    payload = {"status": "ok" if db_ok else "unhealthy", "database": {"ok": db_ok}}
    if db_error:
        payload["database"]["error"] = db_error
    status_code = status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=payload)


app.include_router(routers.customers.router, prefix="/api/v1")
app.include_router(routers.differences.router, prefix="/api/v1")
app.include_router(routers.health.router, prefix="/api/v1")
