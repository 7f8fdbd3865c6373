"""
Application Configuration

Runtime settings loaded from the environment (prefix ``ONCOPLAN_``) or a
project-level ``.env`` file. Clinical thresholds live beside the rules that
use them and are deliberately not configurable here.
"""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Environment variables:
        ONCOPLAN_LOG_LEVEL=DEBUG
        ONCOPLAN_LOG_FILE=logs/oncoplan.log
        ONCOPLAN_CORS_ORIGINS=["http://localhost:5173"]
    """

    model_config = SettingsConfigDict(
        env_prefix="ONCOPLAN_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "OncoPlan Regimen Decision API"
    version: str = "1.0.0"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # HTTP
    cors_origins: List[str] = ["*"]


settings = Settings()
