"""Snapshot resolution, display formatting and render orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

import pydantic

from scopestatus.core.config import Settings
from scopestatus.core.errors import RenderFailure, ValidationError
from scopestatus.models import FilterName, SnapshotIngest, SnapshotRead
from scopestatus.services.coordinates import (
    format_declination,
    format_latitude,
    format_longitude,
    format_right_ascension,
)
from scopestatus.services.renderer import RenderDiagnostic, RenderParams, SkyRenderer
from scopestatus.services.store import SnapshotStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSnapshot:
    snapshot: SnapshotRead
    requested_id: int | None
    previous_id: int
    next_id: int

    @property
    def is_latest(self) -> bool:
        return self.requested_id is None or self.requested_id <= 0


@dataclass(frozen=True)
class DisplayRecord:
    id: int
    instrument: str
    project: str
    update_time: datetime
    avg_guide_error: float
    ccd_temperature: float
    last_image_start: datetime
    exposure_time: int
    current_task_id: int
    right_ascension: str
    declination: str
    pier_side: str
    filter: str
    site_longitude: str
    site_latitude: str
    focus: int


@dataclass(frozen=True)
class RenderRequest:
    params: RenderParams
    refresh_seconds: int
    timeout_seconds: float


@dataclass(frozen=True)
class RenderedImage:
    content: bytes
    refresh_seconds: int


def effective_exposure(exposure_time: float, floor_seconds: float = 10.0) -> float:
    """Exposure used for refresh cadence and render timeouts; never stored."""

    return max(exposure_time, floor_seconds)


def display_exposure(exposure_time: float, floor_seconds: float = 10.0) -> int:
    return int(round(effective_exposure(exposure_time, floor_seconds)))


def epoch_seconds(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


class StatusService:
    """Stateless per-request orchestration on top of the snapshot store."""

    def __init__(self, store: SnapshotStore, renderer: SkyRenderer, settings: Settings) -> None:
        self.store = store
        self.renderer = renderer
        self.settings = settings

    def ingest(self, fields: Mapping[str, Any]) -> int:
        try:
            payload = SnapshotIngest.model_validate(dict(fields))
        except pydantic.ValidationError as exc:
            errors = exc.errors(include_url=False, include_context=False, include_input=False)
            logger.warning("Rejected snapshot payload", extra={"errors": len(errors)})
            raise ValidationError(errors) from exc
        return self.store.append(payload)

    def resolve_snapshot(self, snapshot_id: int | None = None) -> ResolvedSnapshot:
        """Look up a snapshot by id; ``None`` or a non-positive id means the latest."""

        if snapshot_id is None or snapshot_id <= 0:
            snapshot = self.store.get_latest()
        else:
            snapshot = self.store.get_by_id(snapshot_id)
        # Neighbours are not checked; paging past either end yields NotFound later.
        return ResolvedSnapshot(
            snapshot=snapshot,
            requested_id=snapshot_id,
            previous_id=snapshot.id - 1,
            next_id=snapshot.id + 1,
        )

    def format_display(self, snapshot: SnapshotRead) -> DisplayRecord:
        digits = self.settings.display_second_digits
        floor = self.settings.exposure_floor_seconds
        return DisplayRecord(
            id=snapshot.id,
            instrument=snapshot.instrument,
            project=snapshot.project,
            update_time=snapshot.update_time,
            avg_guide_error=snapshot.avg_guide_error,
            ccd_temperature=snapshot.ccd_temperature,
            last_image_start=snapshot.last_image_start,
            exposure_time=display_exposure(snapshot.exposure_time, floor),
            current_task_id=snapshot.current_task_id,
            right_ascension=format_right_ascension(snapshot.right_ascension, digits),
            declination=format_declination(snapshot.declination, digits),
            pier_side="west" if snapshot.pier_side else "east",
            filter=FilterName.from_code(snapshot.filter).label,
            site_longitude=format_longitude(snapshot.site_longitude),
            site_latitude=format_latitude(snapshot.site_latitude),
            focus=snapshot.focus,
        )

    def build_render_request(self, snapshot: SnapshotRead) -> RenderRequest:
        floor = self.settings.exposure_floor_seconds
        params = RenderParams(
            epoch_seconds=epoch_seconds(snapshot.last_image_start),
            right_ascension_deg=snapshot.right_ascension,
            declination_deg=snapshot.declination,
            site_latitude_deg=snapshot.site_latitude,
            site_longitude_deg=snapshot.site_longitude,
            size_px=self.settings.renderer_image_size,
            cardinal_markers=self.settings.renderer_cardinal_markers,
            debug=self.settings.renderer_debug,
        )
        return RenderRequest(
            params=params,
            refresh_seconds=display_exposure(snapshot.exposure_time, floor),
            timeout_seconds=effective_exposure(snapshot.exposure_time, floor),
        )

    async def render_image(self, snapshot: SnapshotRead) -> RenderedImage:
        request = self.build_render_request(snapshot)
        result = await self.renderer.render(request.params, timeout=request.timeout_seconds)
        if result.image is None:
            diagnostic = result.diagnostic or RenderDiagnostic(
                command=(), reason="renderer returned neither an image nor a diagnostic"
            )
            raise RenderFailure(diagnostic)
        return RenderedImage(content=result.image, refresh_seconds=request.refresh_seconds)


__all__ = [
    "DisplayRecord",
    "RenderRequest",
    "RenderedImage",
    "ResolvedSnapshot",
    "StatusService",
    "display_exposure",
    "effective_exposure",
    "epoch_seconds",
]
