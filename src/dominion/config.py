"""Application settings for the Nexus Dominion tools."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dominion.domain.enums import Ruleset


class Settings(BaseSettings):
    """Runtime settings read from the environment or ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="DOMINION_"
    )

    data_dir: Path = Field(default=Path("games"), description="Where game snapshots live")
    rules_path: Path | None = Field(
        default=None, description="Optional JSON rules document overriding the defaults"
    )
    default_ruleset: Ruleset = Field(
        default=Ruleset.UNIFIED, description="Combat ruleset for newly created games"
    )
    turn_limit: int = Field(default=200, description="Default final turn for new games", ge=1)
    protection_turns: int = Field(
        default=20, description="Turns during which attacks are disabled", ge=0
    )
    max_empires: int = Field(
        default=100, description="Upper bound on empires per game accepted by the API", ge=2
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )
    log_level: str = Field(default="INFO", description="Root logging level for the CLI")


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    settings = Settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings
