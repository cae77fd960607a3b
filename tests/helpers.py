"""Test doubles and payload builders."""

from __future__ import annotations

from typing import Any

from scopestatus.services.renderer import RenderDiagnostic, RenderParams, RenderResult

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 17


class StubSkyRenderer:
    """Canned renderer that records every request it receives."""

    def __init__(self, image: bytes | None = PNG_BYTES, diagnostic: RenderDiagnostic | None = None) -> None:
        self.image = image
        self.diagnostic = diagnostic
        self.calls: list[tuple[RenderParams, float | None]] = []

    async def render(self, params: RenderParams, timeout: float | None = None) -> RenderResult:
        self.calls.append((params, timeout))
        if self.diagnostic is not None:
            return RenderResult(diagnostic=self.diagnostic)
        return RenderResult(image=self.image)


def snapshot_fields(**overrides: Any) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "instrument": "GUIDESCOPE",
        "project": "M51",
        "update_time": "2024-03-10T21:15:00",
        "avg_guide_error": 0.42,
        "ccd_temperature": -15.3,
        "last_image_start": "2024-03-10T21:14:00",
        "exposure_time": 120.0,
        "current_task_id": 7,
        "right_ascension": 202.4696,
        "declination": 47.1952,
        "pier_side": "yes",
        "filter": 4,
        "site_longitude": 8.8167,
        "site_latitude": 47.2267,
        "focus": 31250,
    }
    fields.update(overrides)
    return fields
