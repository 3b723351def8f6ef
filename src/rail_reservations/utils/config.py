"""Configuration"""

import logging
from typing import Optional
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "resources" / "catalog.json"


class Settings(BaseSettings):
    """Application settings"""
    server_host: str = Field(default="0.0.0.0", description="Server host")
    server_port: int = Field(default=8000, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Log level")

    local_timezone: str = Field(default="Asia/Kolkata", description="Zone the evaluation clock is read in")
    min_age_years: int = Field(default=3, description="Passengers must be older than this")
    max_age_years: int = Field(default=130, description="Passengers must be younger than this")
    phone_mask: str = Field(default="******", description="Prefix replacing all but the last 4 phone digits")
    catalog_path: str = Field(default=str(DEFAULT_CATALOG_PATH), description="Catalog JSON file")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the shared settings instance"""
    global _settings
    if _settings is None:
        env_file_path = Path(".env")
        if not env_file_path.exists():
            logger.warning(f"Env file {env_file_path.absolute()} not found, using defaults")
        else:
            logger.info(f"Loading env file: {env_file_path.absolute()}")

        try:
            _settings = Settings()
            logger.info(f"Settings loaded - timezone: {_settings.local_timezone}, age window: "
                        f"{_settings.min_age_years}-{_settings.max_age_years}, log level: {_settings.log_level}")
        except Exception as e:
            logger.error(f"Failed to load settings: {e}, using defaults")
            _settings = Settings.model_validate({})

    return _settings
