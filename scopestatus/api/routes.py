"""Root API routers."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from scopestatus.api.deps import get_status_service
from scopestatus.core.logging_config import get_log_buffer
from scopestatus.services.status import StatusService

health_router = APIRouter(tags=["system"])


@health_router.get("/health", summary="Service health probe")
def healthcheck(service: StatusService = Depends(get_status_service)) -> dict[str, Any]:
    """Return a heartbeat plus the number of recorded snapshots."""

    return {"status": "ok", "snapshots": service.store.count()}


@health_router.get("/logs", summary="Recent log records")
def list_logs(limit: int = Query(100, ge=1, le=500)) -> dict[str, list[dict[str, Any]]]:
    return {"logs": get_log_buffer(limit=limit)}
