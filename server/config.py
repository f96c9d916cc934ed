"""
Configuration management for the game server.
"""
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from simulation.config import EntityConfig, default_entities


class GameSettings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service configuration
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = True
    log_level: str = "INFO"

    # Simulation timing
    tick_interval_ms: int = Field(100, gt=0)  # live tick cadence
    save_interval_seconds: float = Field(10.0, gt=0)  # periodic save cadence
    offline_progress: bool = True  # apply catch-up for time spent offline on startup

    # Entity table, as JSON in RAT_ENTITIES
    entities: List[EntityConfig] = Field(default_factory=default_entities)

    model_config = SettingsConfigDict(
        env_prefix="RAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


def get_settings() -> GameSettings:
    """Get application settings instance."""
    return GameSettings()


def settings_summary(settings: GameSettings) -> str:
    """One-line description of the entity table, e.g. "Grass (1/min, +1%/kill)"."""
    return ", ".join(
        f"{entity.label} ({entity.base_per_minute}/min, +{entity.speed_bonus_percent}%/kill)"
        for entity in settings.entities
    )
