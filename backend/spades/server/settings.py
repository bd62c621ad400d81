"""Spades server configuration via environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from shared.validators import StringListEnvSettingsSource, parse_string_list

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class SpadesServerSettings(BaseSettings):
    model_config = {"env_prefix": "SPADES_"}

    log_dir: str | None = "backend/logs/spades"
    database_path: str = Field(default="backend/storage.db", min_length=1)  # ":memory:" for a throwaway store
    cors_origins: list[str] = ["http://localhost:3000"]
    legacy_data_dir: str | None = None  # import games/, player_profiles/ and players/ on startup
    online_window_seconds: int = Field(default=300, ge=1)
    history_limit: int = Field(default=10, ge=1)
    code_generation_attempts: int = Field(default=50, ge=1)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v, allow_empty=True)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, StringListEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings)
