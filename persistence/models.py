"""
Database models for persisted game state.

One row per entity, counters stored as decimal text so they stay exact past
the 64-bit integer range.
"""
from sqlalchemy import BigInteger, Column, String, Text

from .database import Base


class GameStateRecord(Base):
    """Saved counters for one entity."""

    __tablename__ = "game_state"

    enemy_name = Column(String, primary_key=True)  # e.g., "grass"
    kills = Column(Text, nullable=False, default="0")  # decimal string
    accumulated = Column(Text, nullable=False, default="0")  # fixed-point units, decimal string
    last_update = Column(BigInteger, nullable=False, default=0)  # ms since epoch

    def __repr__(self):
        return f"<GameStateRecord(enemy_name='{self.enemy_name}', kills='{self.kills}', last_update={self.last_update})>"
