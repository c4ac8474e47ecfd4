"""Application configuration."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from .env and UMLFLOW_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="UMLFLOW_", env_file=".env", env_file_encoding="utf-8",
                                      extra="ignore")

    canvas_width: int = Field(default=800, gt=0)
    canvas_height: int = Field(default=600, gt=0)
    animation_speed: float = 1.0
    default_sample: str = "default"
    log_level: str = "INFO"
    output_dir: str = "outputs"


settings = Settings()
