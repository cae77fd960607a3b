"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "scope-status"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    database_url: str = "sqlite:///./scope_status.db"
    database_echo: bool = False
    # External sky renderer (astrosky) invocation
    renderer_command: str = "astrosky"
    renderer_image_size: int = 512
    renderer_cardinal_markers: bool = True
    renderer_debug: bool = False
    render_scratch_dir: str | None = None  # None uses the system temp dir
    # Exposures shorter than this are treated as this long for refresh/timeouts
    exposure_floor_seconds: float = 10.0
    display_second_digits: int = 1
    disconnect_poll_seconds: float = 0.5
    metrics_enabled: bool = False
    metrics_host: str = "0.0.0.0"
    metrics_port: int = 9510

    model_config = SettingsConfigDict(
        env_prefix="SCOPE_STATUS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

__all__ = ["settings", "Settings"]
