"""Sexagesimal formatting of angles for the status readout."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Sexagesimal:
    sign: str
    degrees: int
    minutes: int
    seconds: float  # continuous, not floored

    def to_degrees(self) -> float:
        value = self.degrees + self.minutes / 60.0 + self.seconds / 3600.0
        return -value if self.sign == "-" else value


# Sub-microarcsecond float error is rounded away before flooring.
_ARCSEC_DECIMALS = 6


def decompose(angle_deg: float) -> Sexagesimal:
    """Split a decimal angle into sign, whole degrees, whole minutes and seconds.

    The angle is not reduced modulo 360.
    """

    sign = "+" if angle_deg >= 0 else "-"
    total = round(abs(angle_deg) * 3600.0, _ARCSEC_DECIMALS)
    degrees, remainder = divmod(total, 3600.0)
    minutes, seconds = divmod(remainder, 60.0)
    return Sexagesimal(sign=sign, degrees=int(degrees), minutes=int(minutes), seconds=seconds)


def format_sexagesimal(angle_deg: float, fractional_second_digits: int = 0) -> str:
    """Format ``angle_deg`` as ``+DD:MM:SS[.fff]``.

    Fractional seconds are truncated to ``fractional_second_digits`` digits so
    the seconds field never rounds up to 60.
    """

    if fractional_second_digits < 0:
        raise ValueError("fractional_second_digits must be >= 0")
    parts = decompose(angle_deg)
    whole_seconds = math.floor(parts.seconds)
    text = f"{parts.sign}{parts.degrees:02d}:{parts.minutes:02d}:{whole_seconds:02d}"
    if fractional_second_digits:
        scale = 10**fractional_second_digits
        fraction = math.floor(round((parts.seconds - whole_seconds) * scale, _ARCSEC_DECIMALS))
        text += f".{fraction:0{fractional_second_digits}d}"
    return text


def _with_hemisphere(deg: float, positive: str, negative: str) -> str:
    return (positive if deg >= 0 else negative) + format_sexagesimal(abs(deg), 0)[1:]


def format_longitude(deg: float) -> str:
    return _with_hemisphere(deg, "E", "W")


def format_latitude(deg: float) -> str:
    return _with_hemisphere(deg, "N", "S")


def format_right_ascension(deg: float, fractional_second_digits: int = 0) -> str:
    """Right ascension as unsigned hours:minutes:seconds."""

    return format_sexagesimal(deg / 15.0, fractional_second_digits)[1:]


def format_declination(deg: float, fractional_second_digits: int = 0) -> str:
    return format_sexagesimal(deg, fractional_second_digits)


__all__ = [
    "Sexagesimal",
    "decompose",
    "format_sexagesimal",
    "format_longitude",
    "format_latitude",
    "format_right_ascension",
    "format_declination",
]
