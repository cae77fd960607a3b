"""Error taxonomy shared by the store, the renderer and the API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:  # pragma: no cover
    from scopestatus.services.renderer import RenderDiagnostic

StorageStage = Literal["prepare", "bind", "execute"]


class StatusError(Exception):
    """Base class for every failure the service reports to callers."""


class ValidationError(StatusError):
    """Ingestion payload is malformed, incomplete or carries unknown fields."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        fields = ", ".join(".".join(str(p) for p in err.get("loc", ())) for err in errors)
        super().__init__(f"invalid snapshot fields: {fields or 'payload'}")


class NotFound(StatusError):
    def __init__(self, snapshot_id: int | None = None) -> None:
        self.snapshot_id = snapshot_id
        if snapshot_id is None:
            super().__init__("no snapshots recorded yet")
        else:
            super().__init__(f"snapshot {snapshot_id} not found")


class StorageError(StatusError):
    """Persistence failed at a specific stage of the write."""

    def __init__(self, stage: StorageStage, message: str) -> None:
        self.stage = stage
        self.message = message
        super().__init__(f"{stage} failed: {message}")


class UnknownFilter(StatusError):
    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"unknown filter code {value!r}")


class RenderFailure(StatusError):
    def __init__(self, diagnostic: "RenderDiagnostic") -> None:
        self.diagnostic = diagnostic
        super().__init__(diagnostic.reason)


__all__ = [
    "StatusError",
    "ValidationError",
    "NotFound",
    "StorageError",
    "StorageStage",
    "UnknownFilter",
    "RenderFailure",
]
