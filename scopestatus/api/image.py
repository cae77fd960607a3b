"""Rendered sky-visibility image endpoint."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from scopestatus.api.deps import get_settings, get_status_service
from scopestatus.core.config import Settings
from scopestatus.core.errors import RenderFailure
from scopestatus.core.logging_config import log_context
from scopestatus.models import SnapshotRead
from scopestatus.services.status import RenderedImage, StatusService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["image"])

# Non-standard status used when the client went away before the image was ready.
CLIENT_CLOSED_REQUEST = 499


@router.get("/image", response_class=Response)
async def sky_image(
    request: Request,
    id: int | None = Query(None, description="Snapshot id; omit or pass <= 0 for the latest"),
    service: StatusService = Depends(get_status_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    resolved = await run_in_threadpool(service.resolve_snapshot, id)
    try:
        with log_context(snapshot_id=resolved.snapshot.id):
            image = await _render_while_connected(
                request, service, resolved.snapshot, settings.disconnect_poll_seconds
            )
    except RenderFailure as exc:
        return PlainTextResponse(exc.diagnostic.as_text(), status_code=502)
    if image is None:
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    refresh = str(image.refresh_seconds)
    return Response(
        content=image.content,
        media_type="image/png",
        headers={"Refresh": refresh, "Cache-Control": f"max-age={refresh}"},
    )


async def _render_while_connected(
    request: Request, service: StatusService, snapshot: SnapshotRead, poll_seconds: float
) -> RenderedImage | None:
    """Render, cancelling the renderer if the client disconnects first."""

    task = asyncio.ensure_future(service.render_image(snapshot))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_seconds)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Client disconnected during render", extra={"snapshot_id": snapshot.id})
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                return None
    finally:
        if not task.done():
            task.cancel()


__all__ = ["router"]
