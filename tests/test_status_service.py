import asyncio
from datetime import datetime, timezone

import pytest

from scopestatus.core.errors import NotFound, RenderFailure, UnknownFilter, ValidationError
from scopestatus.models import FilterName
from scopestatus.services.renderer import RenderDiagnostic
from scopestatus.services.status import (
    StatusService,
    display_exposure,
    effective_exposure,
    epoch_seconds,
)
from tests.helpers import PNG_BYTES, StubSkyRenderer, snapshot_fields


@pytest.mark.parametrize("exposure", [0.0, 0.5, 3.0, 9.0, 9.99])
def test_short_exposures_clamp_to_ten(exposure):
    assert effective_exposure(exposure) == 10
    assert display_exposure(exposure) == 10


@pytest.mark.parametrize(
    "exposure, effective, shown",
    [(10.0, 10.0, 10), (10.4, 10.4, 10), (10.6, 10.6, 11), (300.0, 300.0, 300)],
)
def test_long_exposures_pass_through_then_round(exposure, effective, shown):
    assert effective_exposure(exposure) == effective
    assert display_exposure(exposure) == shown


def test_naive_timestamps_are_utc():
    assert epoch_seconds(datetime(1970, 1, 1, 0, 1)) == 60
    assert epoch_seconds(datetime(1970, 1, 1, 1, 0, tzinfo=timezone.utc)) == 3600


class TestIngest:
    def test_ingest_returns_new_id(self, service):
        assert service.ingest(snapshot_fields()) == 1
        assert service.ingest(snapshot_fields()) == 2

    @pytest.mark.parametrize("flag, expected", [("yes", True), ("no", False), ("WEST", True), (False, False)])
    def test_pier_side_normalized(self, service, flag, expected):
        snapshot_id = service.ingest(snapshot_fields(pier_side=flag))
        assert service.store.get_by_id(snapshot_id).pier_side is expected

    def test_missing_field_rejected(self, service):
        fields = snapshot_fields()
        del fields["focus"]
        with pytest.raises(ValidationError) as excinfo:
            service.ingest(fields)
        assert excinfo.value.errors[0]["loc"] == ("focus",)

    def test_unknown_field_rejected(self, service):
        with pytest.raises(ValidationError):
            service.ingest(snapshot_fields(weather="cloudy"))

    def test_garbage_pier_side_rejected(self, service):
        with pytest.raises(ValidationError):
            service.ingest(snapshot_fields(pier_side="maybe"))
        assert service.store.count() == 0

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    @pytest.mark.parametrize("field", ["right_ascension", "declination", "site_longitude", "exposure_time"])
    def test_non_finite_numbers_rejected(self, service, field, value):
        with pytest.raises(ValidationError) as excinfo:
            service.ingest(snapshot_fields(**{field: value}))
        assert excinfo.value.errors[0]["loc"] == (field,)
        assert "input" not in excinfo.value.errors[0]
        assert service.store.count() == 0

    def test_offset_timestamps_are_kept_as_utc(self, service):
        snapshot_id = service.ingest(snapshot_fields(last_image_start="2024-03-10T23:14:00+02:00"))
        snap = service.store.get_by_id(snapshot_id)
        assert snap.last_image_start == datetime(2024, 3, 10, 21, 14, tzinfo=timezone.utc)
        request = service.build_render_request(snap)
        assert request.params.epoch_seconds == int(snap.last_image_start.timestamp())


class TestResolve:
    def test_latest_sentinels(self, service):
        for _ in range(3):
            service.ingest(snapshot_fields())
        for sentinel in (None, 0, -1):
            resolved = service.resolve_snapshot(sentinel)
            assert resolved.snapshot.id == 3
            assert resolved.is_latest

    def test_neighbours_are_not_bounds_checked(self, service):
        service.ingest(snapshot_fields())
        resolved = service.resolve_snapshot(1)
        assert (resolved.previous_id, resolved.next_id) == (0, 2)
        assert not resolved.is_latest
        with pytest.raises(NotFound):
            service.resolve_snapshot(resolved.next_id)

    def test_empty_store(self, service):
        with pytest.raises(NotFound):
            service.resolve_snapshot(None)


class TestFormatDisplay:
    def test_fields(self, service):
        service.ingest(
            snapshot_fields(
                right_ascension=202.5,
                declination=-5.25,
                site_longitude=-122.5,
                site_latitude=37.25,
                exposure_time=4.0,
                filter=FilterName.O_III.value,
                pier_side="no",
            )
        )
        record = service.format_display(service.resolve_snapshot().snapshot)
        assert record.right_ascension == "13:30:00.0"
        assert record.declination == "-05:15:00.0"
        assert record.site_longitude == "W122:30:00"
        assert record.site_latitude == "N37:15:00"
        assert record.exposure_time == 10
        assert record.filter == "O-III"
        assert record.pier_side == "east"
        # The stored value is untouched by the display clamp.
        assert service.store.get_latest().exposure_time == 4.0

    @pytest.mark.parametrize("code", [7, -1, 42])
    def test_unknown_filter_is_reported(self, service, code):
        service.ingest(snapshot_fields(filter=code))
        with pytest.raises(UnknownFilter) as excinfo:
            service.format_display(service.resolve_snapshot().snapshot)
        assert excinfo.value.value == code

    def test_every_filter_has_a_label(self):
        labels = {f.label for f in FilterName}
        assert labels == {"Luminance", "Red", "Green", "Blue", "H-alpha", "O-III", "S-II"}


class TestRender:
    def test_build_render_request(self, service, settings):
        service.ingest(snapshot_fields(exposure_time=2.0))
        snapshot = service.resolve_snapshot().snapshot
        request = service.build_render_request(snapshot)
        params = request.params
        assert params.epoch_seconds == int(datetime(2024, 3, 10, 21, 14, tzinfo=timezone.utc).timestamp())
        assert params.right_ascension_deg == snapshot.right_ascension
        assert params.declination_deg == snapshot.declination
        assert params.site_latitude_deg == snapshot.site_latitude
        assert params.site_longitude_deg == snapshot.site_longitude
        assert params.size_px == settings.renderer_image_size
        assert params.cardinal_markers is True
        assert request.refresh_seconds == 10
        assert request.timeout_seconds == 10

    def test_render_image_uses_clamped_timeout(self, service, stub_renderer):
        service.ingest(snapshot_fields(exposure_time=45.4))
        image = asyncio.run(service.render_image(service.resolve_snapshot().snapshot))
        assert image.content == PNG_BYTES
        assert image.refresh_seconds == 45
        assert stub_renderer.calls[0][1] == 45.4

    def test_render_failure_carries_diagnostic(self, store, settings):
        diagnostic = RenderDiagnostic(("astrosky", "out.png"), "renderer exited with status 3", 3, "boom")
        failing = StatusService(store, StubSkyRenderer(diagnostic=diagnostic), settings)
        failing.ingest(snapshot_fields())
        with pytest.raises(RenderFailure) as excinfo:
            asyncio.run(failing.render_image(failing.resolve_snapshot().snapshot))
        assert excinfo.value.diagnostic is diagnostic
