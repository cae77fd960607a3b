"""Shared fixtures: temporary SQLite store, stub renderer and API client."""

from __future__ import annotations

import pytest

from scopestatus.core.config import Settings
from scopestatus.db.session import Database
from scopestatus.services.status import StatusService
from scopestatus.services.store import SnapshotStore
from tests.helpers import StubSkyRenderer


@pytest.fixture
def settings(tmp_path) -> Settings:
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'status.db'}",
        render_scratch_dir=str(scratch),
        renderer_image_size=256,
        disconnect_poll_seconds=0.05,
    )


@pytest.fixture
def database(settings):
    db = Database.from_settings(settings)
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def store(database) -> SnapshotStore:
    return SnapshotStore(database)


@pytest.fixture
def stub_renderer() -> StubSkyRenderer:
    return StubSkyRenderer()


@pytest.fixture
def service(store, stub_renderer, settings) -> StatusService:
    return StatusService(store, stub_renderer, settings)


@pytest.fixture
def client(settings, stub_renderer):
    from fastapi.testclient import TestClient

    from scopestatus import create_app

    app = create_app(settings, renderer=stub_renderer)
    with TestClient(app) as c:
        yield c
