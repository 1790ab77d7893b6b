"""Lightweight configuration for the Warlords services."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, overridable through ``WARLORDS_*`` variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="WARLORDS_"
    )

    data_dir: Path = Field(default=Path("saves"), description="Where game snapshots live")
    rules_version: str = Field(default="1.0", description="Ruleset version used by the domain")
    narrative_timeout_seconds: float = Field(
        default=10.0,
        description="Upper bound for a single narrative call before the event is kept bare",
        gt=0.0,
    )
    autosave_enabled: bool = Field(
        default=True, description="Write an autosave after every resolved turn"
    )
    rng_seed: str | None = Field(
        default=None,
        description="Fixed seed prefix for turn randomness; unset draws a fresh seed per game",
    )
    default_player_faction: str = Field(
        default="caocao", description="Faction controlled by the player in new games"
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    settings = Settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings
