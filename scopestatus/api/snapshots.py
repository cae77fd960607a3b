"""Snapshot ingestion and status readout endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status

from scopestatus.api.deps import get_settings, get_status_service
from scopestatus.core.config import Settings
from scopestatus.services.status import ResolvedSnapshot, StatusService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["snapshots"])


@router.post("/snapshots", status_code=status.HTTP_201_CREATED)
def ingest_snapshot(
    fields: dict[str, Any] = Body(...),
    service: StatusService = Depends(get_status_service),
) -> dict[str, int]:
    """Record one status report from the telescope control system."""

    return {"id": service.ingest(fields)}


@router.get("/status")
def snapshot_status(
    id: int | None = Query(None, description="Snapshot id; omit or pass <= 0 for the latest"),
    service: StatusService = Depends(get_status_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    resolved = service.resolve_snapshot(id)
    record = service.format_display(resolved.snapshot)
    request = service.build_render_request(resolved.snapshot)
    return {
        **asdict(record),
        "previous_id": resolved.previous_id,
        "next_id": resolved.next_id,
        "refresh_seconds": request.refresh_seconds,
        "image_url": _image_url(settings, resolved),
    }


def _image_url(settings: Settings, resolved: ResolvedSnapshot) -> str:
    base = f"{settings.api_prefix}/image"
    if resolved.is_latest:
        return base
    return f"{base}?id={resolved.snapshot.id}"


__all__ = ["router"]
