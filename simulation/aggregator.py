"""
Simulation clock.

Owns every entity accumulator, derives the global speed multiplier from their
kill counts and advances them all by elapsed wall-clock time.
"""
import logging
import sys
import time
from fractions import Fraction
from typing import Callable, Dict, Iterable, List, Optional

from .accumulator import PRECISION, Accumulator, Number, to_fraction
from .config import EntityConfig, default_entities
from .display import format_count
from .schemas import EntityState, EntityStatus, GameState, GameStatus

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Wall-clock time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


class Aggregator:
    """Advances all entities on a shared clock."""

    def __init__(
        self,
        entities: Optional[Iterable[EntityConfig]] = None,
        last_update: Optional[int] = None,
        clock: Callable[[], int] = now_ms
    ):
        """
        Args:
            entities: Entity table, defaults to Grass and Stick
            last_update: Timestamp (ms) of the last processed tick, defaults to now
            clock: Millisecond wall clock used when tick() is called without a time
        """
        configs = list(entities) if entities is not None else default_entities()

        self.entities: Dict[str, Accumulator] = {}
        self._speed_bonus: Dict[str, Fraction] = {}
        for config in configs:
            if config.name in self.entities:
                raise ValueError(f"Duplicate entity name: {config.name}")
            self.entities[config.name] = config.build()
            self._speed_bonus[config.name] = config.speed_bonus

        self.clock = clock
        self.last_update = last_update if last_update is not None else clock()
        self.tick_count = 0

    @property
    def names(self) -> List[str]:
        return list(self.entities)

    def global_multiplier(self) -> Fraction:
        """Product over all entities of (1 + bonus * kills)."""
        multiplier = Fraction(1)
        for name, entity in self.entities.items():
            multiplier *= 1 + self._speed_bonus[name] * entity.total_kills()
        return multiplier

    def total_kills(self) -> int:
        return sum(entity.total_kills() for entity in self.entities.values())

    def _advance_all(self, delta: Fraction) -> int:
        # One multiplier snapshot for the whole pass
        multiplier = self.global_multiplier()
        gained = 0
        for entity in self.entities.values():
            gained += entity.advance(delta, multiplier)
        return gained

    def tick(self, now: Optional[int] = None) -> int:
        """
        Advance every entity by the time elapsed since the last tick.

        Args:
            now: Current time in ms since the epoch, read from the clock if omitted

        Returns:
            Kills gained across all entities
        """
        if now is None:
            now = self.clock()
        now = int(now)

        elapsed_ms = now - self.last_update
        if elapsed_ms < 0:
            logger.warning(f"Clock went backwards by {-elapsed_ms} ms, treating tick as zero elapsed")
            elapsed_ms = 0

        self.last_update = now
        self.tick_count += 1
        return self._advance_all(Fraction(elapsed_ms, 1000))

    def catch_up(self, elapsed_seconds: Number) -> int:
        """
        Apply progress for time that passed while the simulation was not running.

        Behaves like a single tick of ``elapsed_seconds`` but leaves
        ``last_update`` alone.
        """
        try:
            delta = to_fraction(elapsed_seconds, "elapsed_seconds")
        except ValueError as e:
            logger.warning(f"Ignoring catch-up: {e}")
            return 0

        gained = self._advance_all(delta)
        logger.info(f"Caught up {float(delta):.1f}s of progress: {gained} kills")
        return gained

    def manual_advance(self, name: str) -> bool:
        """Give the named entity one instant kill. Returns False for unknown names."""
        entity = self.entities.get(name)
        if entity is None:
            logger.warning(f"Manual advance for unknown entity: {name}")
            return False
        entity.manual_advance()
        return True

    def progress(self, name: str, seconds: Number = 1) -> bool:
        """Advance one entity by ``seconds`` at the current global multiplier."""
        entity = self.entities.get(name)
        if entity is None:
            logger.warning(f"Progress for unknown entity: {name}")
            return False
        entity.progress(seconds, self.global_multiplier())
        return True

    def reset(self):
        for entity in self.entities.values():
            entity.reset()
        logger.info("All progress reset")

    def snapshot(self) -> GameState:
        """Exact, serializable copy of all counters."""
        return GameState(
            entities={
                name: EntityState(
                    kills=str(entity.total_kills()),
                    accumulated=str(entity.accumulated_units())
                )
                for name, entity in self.entities.items()
            },
            last_update=self.last_update
        )

    def restore(self, state: GameState):
        """Load counters from a snapshot. Unknown entity names are ignored."""
        for name, entity_state in state.entities.items():
            entity = self.entities.get(name)
            if entity is None:
                logger.debug(f"Skipping unknown entity in saved state: {name}")
                continue
            entity.restore(entity_state.kills_value, entity_state.accumulated_value)
        self.last_update = state.last_update

    # Presentation

    def effective_rate(self, name: str) -> Fraction:
        """Kills per second for the entity including the global multiplier."""
        return self.entities[name].production_rate() * self.global_multiplier()

    def time_to_next_kill(self, name: str) -> Optional[float]:
        """Seconds until the entity's next automatic kill, None if its rate is zero."""
        entity = self.entities[name]
        rate = self.effective_rate(name)
        if rate == 0:
            return None
        return _as_float((1 - Fraction(entity.accumulated_units(), PRECISION)) / rate)

    def status(self) -> GameStatus:
        multiplier = self.global_multiplier()
        entities = {}
        for name, entity in self.entities.items():
            production = entity.production_rate()
            effective = production * multiplier
            entities[name] = EntityStatus(
                name=name,
                label=entity.label,
                kills=str(entity.total_kills()),
                kills_display=format_count(entity.total_kills()),
                progress=entity.progress_fraction(),
                production_rate=_as_float(production),
                effective_rate=_as_float(effective),
                rate_per_minute=_as_float(effective * 60),
                next_kill_seconds=self.time_to_next_kill(name)
            )

        total = self.total_kills()
        return GameStatus(
            entities=entities,
            global_multiplier=_as_float(multiplier),
            speed_percent=_as_float(multiplier * 100),
            total_kills=str(total),
            total_kills_display=format_count(total),
            last_update=self.last_update
        )


def _as_float(value: Fraction) -> float:
    try:
        return float(value)
    except OverflowError:
        return sys.float_info.max
