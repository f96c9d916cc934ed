"""
Shared schemas for game state exchange.

Counters travel as decimal strings so values beyond the float range survive
JSON round trips unchanged.
"""
from typing import Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .accumulator import PRECISION


class EntityState(BaseModel):
    """Exact counters for one entity."""
    kills: str = Field("0", description="Total kills as a decimal string")
    accumulated: str = Field("0", description="Fixed-point progress toward the next kill (1.0 = 10**18)")

    @field_validator("kills", "accumulated", mode="before")
    @classmethod
    def coerce_integer_text(cls, value):
        # Older saves may carry plain JSON integers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("kills")
    @classmethod
    def validate_kills(cls, value: str) -> str:
        if not value.isdigit():
            raise ValueError(f"kills must be a nonnegative decimal integer, got {value!r}")
        return str(int(value))

    @field_validator("accumulated")
    @classmethod
    def validate_accumulated(cls, value: str) -> str:
        if not value.isdigit():
            raise ValueError(f"accumulated must be a nonnegative decimal integer, got {value!r}")
        if int(value) >= PRECISION:
            raise ValueError(f"accumulated must be below {PRECISION}, got {value}")
        return str(int(value))

    @property
    def kills_value(self) -> int:
        return int(self.kills)

    @property
    def accumulated_value(self) -> int:
        return int(self.accumulated)


class GameState(BaseModel):
    """Serializable snapshot of the whole game."""
    model_config = ConfigDict(populate_by_name=True)

    entities: Dict[str, EntityState] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("entities", "enemies"),
        description="Per-entity counters keyed by entity name"
    )
    last_update: int = Field(
        ...,
        ge=0,
        alias="lastUpdate",
        validation_alias=AliasChoices("lastUpdate", "last_update"),
        description="Milliseconds since the Unix epoch of the last processed tick"
    )


class EntityStatus(BaseModel):
    """Display values for one entity."""
    name: str
    label: str
    kills: str
    kills_display: str
    progress: float = Field(..., ge=0.0, lt=1.0)
    production_rate: float = Field(..., description="Kills per second before the global multiplier")
    effective_rate: float = Field(..., description="Kills per second including the global multiplier")
    rate_per_minute: float
    next_kill_seconds: Optional[float] = Field(None, description="Seconds until the next kill, None if stalled")


class GameStatus(BaseModel):
    """Display values for the whole game."""
    entities: Dict[str, EntityStatus]
    global_multiplier: float
    speed_percent: float
    total_kills: str
    total_kills_display: str
    last_update: int
