"""AppFunctions Pilot settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PilotSettings(BaseSettings):
    """Settings read from PILOT_* environment variables (or a .env file)."""

    target_package: str = Field(default="dev.filipfan.appfunctionspilot.tool")
    log_level: str = Field(default="INFO")
    strict_derivation: bool = Field(default=False)
    metadata_path: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="PILOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> PilotSettings:
    """Get cached settings instance."""
    return PilotSettings()
