"""Telescope status snapshot models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from scopestatus.core.errors import UnknownFilter


class FilterName(IntEnum):
    """Filter wheel positions reported by the control system."""

    LUMINANCE = 0
    RED = 1
    GREEN = 2
    BLUE = 3
    H_ALPHA = 4
    O_III = 5
    S_II = 6

    @property
    def label(self) -> str:
        return FILTER_LABELS[self]

    @classmethod
    def from_code(cls, code: Any) -> "FilterName":
        """Resolve a stored code; anything outside the wheel raises UnknownFilter."""

        if isinstance(code, bool) or not isinstance(code, int):
            raise UnknownFilter(code)
        try:
            return cls(code)
        except ValueError:
            raise UnknownFilter(code) from None


FILTER_LABELS: dict[FilterName, str] = {
    FilterName.LUMINANCE: "Luminance",
    FilterName.RED: "Red",
    FilterName.GREEN: "Green",
    FilterName.BLUE: "Blue",
    FilterName.H_ALPHA: "H-alpha",
    FilterName.O_III: "O-III",
    FilterName.S_II: "S-II",
}

_PIER_WEST = {"yes", "y", "true", "1", "west", "w"}
_PIER_EAST = {"no", "n", "false", "0", "east", "e"}


class StatusSnapshot(SQLModel, table=True):
    """One row per status report; rows are never updated or deleted."""

    # AUTOINCREMENT keeps SQLite from ever handing out an id twice.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    instrument: str = Field(max_length=128, index=True)
    project: str = Field(max_length=128, index=True)
    update_time: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False, index=True))
    avg_guide_error: float = Field(description="Average guide error (arcsec)")
    ccd_temperature: float = Field(description="CCD temperature (deg C)")
    last_image_start: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    exposure_time: float = Field(description="Exposure time as reported (seconds)")
    current_task_id: int
    right_ascension: float = Field(description="Telescope RA (decimal degrees)")
    declination: float = Field(description="Telescope Dec (decimal degrees)")
    pier_side: bool = Field(description="True when the tube is on the west side")
    filter: int = Field(description="Filter wheel code, see FilterName")
    site_longitude: float
    site_latitude: float
    focus: int


class SnapshotFields(BaseModel):
    instrument: str
    project: str
    update_time: datetime
    avg_guide_error: float
    ccd_temperature: float
    last_image_start: datetime
    exposure_time: float
    current_task_id: int
    right_ascension: float
    declination: float
    pier_side: bool
    filter: int
    site_longitude: float
    site_latitude: float
    focus: int

    @field_validator("update_time", "last_image_start")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are UTC; SQLite hands them back without an offset.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class SnapshotIngest(SnapshotFields):
    """Validated ingestion payload; unknown, missing or non-finite fields are rejected."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, allow_inf_nan=False)

    @field_validator("pier_side", mode="before")
    @classmethod
    def _normalize_pier_side(cls, value: Any) -> Any:
        if isinstance(value, str):
            token = value.strip().lower()
            if token in _PIER_WEST:
                return True
            if token in _PIER_EAST:
                return False
            raise ValueError(f"pier side must be yes/no or west/east, got {value!r}")
        return value


class SnapshotRead(SnapshotFields):
    """Immutable view of a stored snapshot."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int

    @property
    def filter_name(self) -> FilterName:
        return FilterName.from_code(self.filter)


__all__ = [
    "FilterName",
    "FILTER_LABELS",
    "StatusSnapshot",
    "SnapshotFields",
    "SnapshotIngest",
    "SnapshotRead",
]
