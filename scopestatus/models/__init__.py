"""Database models."""

from .snapshot import (
    FILTER_LABELS,
    FilterName,
    SnapshotFields,
    SnapshotIngest,
    SnapshotRead,
    StatusSnapshot,
)

__all__ = [
    "FILTER_LABELS",
    "FilterName",
    "SnapshotFields",
    "SnapshotIngest",
    "SnapshotRead",
    "StatusSnapshot",
]
