import pytest

from scopestatus.services.coordinates import (
    decompose,
    format_declination,
    format_latitude,
    format_longitude,
    format_right_ascension,
    format_sexagesimal,
)


ONE_ARCSECOND = 1.0 / 3600.0 + 1e-12


def _recompose(text: str) -> float:
    sign = -1.0 if text[0] == "-" else 1.0
    d, m, s = text[1:].split(":")
    return sign * (int(d) + int(m) / 60.0 + float(s) / 3600.0)


@pytest.mark.parametrize("angle", [x * 0.3719 for x in range(-484, 485)])
def test_declination_range_recomposes_within_one_arcsecond(angle):
    assert abs(_recompose(format_sexagesimal(angle, 0)) - angle) <= ONE_ARCSECOND


@pytest.mark.parametrize("angle", [x * 0.7517 for x in range(-239, 240)])
def test_longitude_range_recomposes_within_one_arcsecond(angle):
    assert abs(_recompose(format_sexagesimal(angle, 0)) - angle) <= ONE_ARCSECOND


def test_hemisphere_examples():
    assert format_longitude(-122.5) == "W122:30:00"
    assert format_latitude(37.25) == "N37:15:00"
    assert format_longitude(8.5) == "E08:30:00"
    assert format_latitude(-33.5) == "S33:30:00"


def test_sign_comes_from_original_angle():
    assert format_sexagesimal(-0.5) == "-00:30:00"
    assert format_sexagesimal(0.5) == "+00:30:00"
    assert format_sexagesimal(0.0) == "+00:00:00"


def test_no_modulo_360_normalization():
    assert format_sexagesimal(400.0) == "+400:00:00"
    assert format_sexagesimal(-400.25) == "-400:15:00"


def test_fractional_seconds_are_truncated_to_requested_digits():
    # 10.5078125 deg is exactly 10 deg 30' 28.125"
    angle = 10.5078125
    assert format_sexagesimal(angle, 3) == "+10:30:28.125"
    assert format_sexagesimal(angle, 2) == "+10:30:28.12"
    assert format_sexagesimal(angle, 1) == "+10:30:28.1"
    assert format_sexagesimal(angle, 0) == "+10:30:28"


def test_negative_digits_rejected():
    with pytest.raises(ValueError):
        format_sexagesimal(1.0, -1)


def test_decompose_keeps_continuous_seconds():
    parts = decompose(-12.5125)
    assert parts.sign == "-"
    assert (parts.degrees, parts.minutes) == (12, 30)
    assert parts.seconds == pytest.approx(45.0)
    assert parts.to_degrees() == pytest.approx(-12.5125)


def test_right_ascension_is_unsigned_hours():
    # 202.5 deg == 13h 30m
    assert format_right_ascension(202.5) == "13:30:00"
    assert format_right_ascension(202.5, 1) == "13:30:00.0"


def test_declination_keeps_sign():
    assert format_declination(-5.25) == "-05:15:00"


@pytest.mark.parametrize(
    "angle, text",
    [(10.1, "+10:06:00"), (0.1, "+00:06:00"), (-47.3, "-47:18:00"), (359.9, "+359:54:00")],
)
def test_binary_float_error_does_not_drop_a_second(angle, text):
    assert format_sexagesimal(angle) == text
    assert format_sexagesimal(angle, 1) == text + ".0"


def test_hemisphere_forms_round_decimal_inputs_cleanly():
    assert format_longitude(-122.1) == "W122:06:00"
    assert format_latitude(47.2) == "N47:12:00"
