"""API dependencies."""

from __future__ import annotations

from fastapi import Request

from scopestatus.core.config import Settings
from scopestatus.services.status import StatusService


def get_status_service(request: Request) -> StatusService:
    return request.app.state.status_service


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
