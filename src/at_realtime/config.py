"""Client configuration via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Auckland Transport API
    at_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("AT_API_KEY", "AT_SUBSCRIPTION_KEY"),
    )
    at_api_base_url: str = Field(
        default="https://api.at.govt.nz/v2",
        validation_alias=AliasChoices("AT_API_BASE_URL"),
    )

    # Realtime feed endpoints (relative to the base URL)
    trip_updates_path: str = Field(
        default="/public/realtime/tripupdates",
        validation_alias=AliasChoices("AT_TRIP_UPDATES_PATH"),
    )
    vehicle_positions_path: str = Field(
        default="/public/realtime/vehiclelocations",
        validation_alias=AliasChoices("AT_VEHICLE_POSITIONS_PATH"),
    )

    fetch_timeout_sec: int = Field(
        default=30,
        ge=1,
        validation_alias=AliasChoices("AT_FETCH_TIMEOUT_SEC"),
    )

    def missing_required_env(self) -> list[str]:
        """Return required environment variables that are missing or empty."""
        missing: list[str] = []

        if not self.at_api_key:
            missing.append("AT_API_KEY")

        return missing

    @property
    def trip_updates_url(self) -> str:
        """Get full trip updates feed URL."""
        return _join_url(self.at_api_base_url, self.trip_updates_path)

    @property
    def vehicle_positions_url(self) -> str:
        """Get full vehicle positions feed URL."""
        return _join_url(self.at_api_base_url, self.vehicle_positions_path)


def _join_url(base: str, path: str) -> str:
    """Join base URL and path with exactly one slash between them."""
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
