"""
Simulation Module

Progress-accrual core of The Rat and The Time.

Components:
- accumulator.py - Fixed-point kill accumulator for one entity type
- aggregator.py - Shared clock, global speed multiplier and catch-up
- config.py - Entity table (rates and speed bonuses)
- schemas.py - Serializable game state and display models
- display.py - Formatting helpers for unbounded counters
"""

from .accumulator import PRECISION, Accumulator
from .aggregator import Aggregator, now_ms
from .config import EntityConfig, default_entities
from .schemas import EntityState, EntityStatus, GameState, GameStatus

__all__ = [
    "PRECISION",
    "Accumulator",
    "Aggregator",
    "now_ms",
    "EntityConfig",
    "default_entities",
    "EntityState",
    "EntityStatus",
    "GameState",
    "GameStatus"
]
