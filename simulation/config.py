"""
Entity table for the simulation.

Rates are configured per minute, the way the game is balanced, and converted
exactly to per-second Fractions when the accumulators are built.
"""
from fractions import Fraction
from typing import List

from pydantic import BaseModel, Field, field_validator

from .accumulator import Accumulator, to_fraction


class EntityConfig(BaseModel):
    """Static configuration of one entity type."""
    name: str = Field(..., min_length=1, description="Entity key (e.g. 'grass')")
    label: str = Field(..., min_length=1, description="Display name (e.g. 'Grass')")
    base_per_minute: str = Field("1", description="Kills per minute at zero kills")
    bonus_per_minute: str = Field("0.1", description="Extra kills per minute per kill")
    speed_bonus_percent: str = Field("1", description="Global speed bonus per kill, in percent")

    @field_validator("base_per_minute", "bonus_per_minute", "speed_bonus_percent", mode="before")
    @classmethod
    def validate_rational(cls, value):
        # Keep the literal text so "0.1" stays exactly 1/10
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = repr(value)
        to_fraction(value, "rate")
        return value

    @property
    def base_rate(self) -> Fraction:
        """Kills per second at zero kills."""
        return Fraction(self.base_per_minute) / 60

    @property
    def bonus_per_kill(self) -> Fraction:
        """Extra kills per second per kill."""
        return Fraction(self.bonus_per_minute) / 60

    @property
    def speed_bonus(self) -> Fraction:
        """Global speed bonus per kill as a fraction (1% -> 1/100)."""
        return Fraction(self.speed_bonus_percent) / 100

    def build(self) -> Accumulator:
        return Accumulator(
            name=self.name,
            label=self.label,
            base_rate=self.base_rate,
            bonus_per_kill=self.bonus_per_kill
        )


def default_entities() -> List[EntityConfig]:
    """Grass and Stick: 1 kill/min base, +0.1 kill/min per kill, 1% and 2% speed per kill."""
    return [
        EntityConfig(name="grass", label="Grass", base_per_minute="1",
                     bonus_per_minute="0.1", speed_bonus_percent="1"),
        EntityConfig(name="stick", label="Stick", base_per_minute="1",
                     bonus_per_minute="0.1", speed_bonus_percent="2"),
    ]
