import json
from functools import lru_cache
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    app_name: str = "Cutroom API"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Database (SQLite for local development, asyncpg URL in production)
    database_url: str = "sqlite+aiosqlite:///./cutroom.db"
    database_echo: bool = False

    # CORS - stored as string, parsed via computed property
    cors_origins_raw: str = "http://localhost:3000,http://localhost:5173"

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string or JSON array."""
        v = self.cors_origins_raw
        if v.startswith("["):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    # Local media storage
    uploads_root: str = "uploads"
    uploads_url_prefix: str = "/uploads"
    # Media URLs sent by the editor are either absolute on this host or relative
    media_base_url: str = "http://localhost:8080/"
    media_root: str = "."

    # FFmpeg
    ffmpeg_path: str = "ffmpeg"
    # None = wait for ffmpeg indefinitely
    engine_timeout_seconds: float | None = None

    # Render settings
    render_fps: int = 30
    render_audio_bitrate: str = "128k"

    # Job queue / notifications
    job_queue_capacity: int = 100
    hub_send_buffer_size: int = 256


@lru_cache
def get_settings() -> Settings:
    return Settings()
