"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    siteplan_env: str = "development"
    siteplan_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Restriction GeoJSON files; empty disables restrictions
    restrictions_data_dir: str = ""

    # Generation
    request_timeout_s: float = 300.0
    default_seed: int = 1

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
