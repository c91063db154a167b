from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to the project root (two levels up from this file)
_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    """
    Harness Configuration.
    Reads from environment variables and .env file.
    """
    model_config = SettingsConfigDict(env_file=str(_ENV_FILE), env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    ENVIRONMENT: Literal["development", "production", "testing"] = "development"
    LOG_LEVEL: str = "INFO"

    # Seconds to wait for a killed service process to exit before reporting a stop failure
    STOP_TIMEOUT: float = 5.0

    # Seconds allowed for a single HTTP readiness check request
    HTTP_CHECK_TIMEOUT: float = 5.0


settings = Settings()
