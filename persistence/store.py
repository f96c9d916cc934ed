"""
Load and save operations for persisted game state.

Persistence is best effort: failures are logged and reported through return
values so the running simulation is never interrupted.
"""
import logging
import threading
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from simulation.schemas import EntityState, GameState

from .models import GameStateRecord

logger = logging.getLogger(__name__)


class GameStateStore:
    """Upsert-by-name storage for entity counters."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self._write_lock = threading.Lock()

    def load(self) -> Optional[GameState]:
        """
        Read the saved game.

        Returns:
            The saved state, or None when nothing is saved or the saved rows
            cannot be read
        """
        db: Session = self.session_factory()
        try:
            records = db.query(GameStateRecord).all()
            if not records:
                logger.info("No saved game state found")
                return None

            state = GameState(
                entities={
                    record.enemy_name: EntityState(
                        kills=record.kills,
                        accumulated=record.accumulated
                    )
                    for record in records
                },
                last_update=max(record.last_update or 0 for record in records)
            )
            logger.info(f"Loaded saved state for {len(records)} entities")
            return state

        except ValidationError as e:
            logger.error(f"Saved game state is malformed, starting fresh: {e}")
            return None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load game state: {e}")
            return None
        finally:
            db.close()

    def save(self, state: GameState) -> bool:
        """
        Write every entity in ``state``, replacing any earlier values.

        Returns:
            True if the state was committed
        """
        with self._write_lock:
            db: Session = self.session_factory()
            try:
                for name, entity in state.entities.items():
                    db.merge(GameStateRecord(
                        enemy_name=name,
                        kills=entity.kills,
                        accumulated=entity.accumulated,
                        last_update=state.last_update
                    ))
                db.commit()
                logger.debug(f"Saved game state for {len(state.entities)} entities")
                return True

            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Failed to save game state: {e}")
                return False
            finally:
                db.close()

