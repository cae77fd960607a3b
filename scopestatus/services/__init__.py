"""Service-layer utilities."""

from .renderer import (
    RenderDiagnostic,
    RenderParams,
    RenderResult,
    SkyRenderer,
    SubprocessSkyRenderer,
)
from .status import DisplayRecord, RenderedImage, ResolvedSnapshot, StatusService
from .store import SnapshotStore

__all__ = [
    "DisplayRecord",
    "RenderDiagnostic",
    "RenderParams",
    "RenderResult",
    "RenderedImage",
    "ResolvedSnapshot",
    "SkyRenderer",
    "SnapshotStore",
    "StatusService",
    "SubprocessSkyRenderer",
]
