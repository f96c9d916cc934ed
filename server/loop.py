"""
Game loop - APScheduler-driven ticking and periodic saving.

All state changes (ticks, player commands, restores) go through one asyncio
lock so no command ever lands in the middle of a tick.
"""
import asyncio
import logging
from fractions import Fraction
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.events import EVENT_JOB_ERROR

from persistence.store import GameStateStore
from simulation import Aggregator, GameState, GameStatus
from simulation.display import format_count, format_rate_per_minute, format_seconds

logger = logging.getLogger(__name__)


class GameLoop:
    """Owns the live simulation and its schedule."""

    def __init__(
        self,
        aggregator: Aggregator,
        store: Optional[GameStateStore] = None,
        tick_interval_ms: int = 100,
        save_interval_seconds: float = 10.0,
        offline_progress: bool = True
    ):
        self.aggregator = aggregator
        self.store = store
        self.tick_interval_ms = tick_interval_ms
        self.save_interval_seconds = save_interval_seconds
        self.offline_progress = offline_progress

        self.lock = asyncio.Lock()
        # Held from snapshot to write so saves reach the store in snapshot order
        self._save_lock = asyncio.Lock()
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.last_save_ok: Optional[bool] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def load(self) -> bool:
        """
        Restore saved state and apply offline progress.

        Returns:
            True if saved state was found and restored
        """
        state = self.store.load() if self.store else None
        now = self.aggregator.clock()

        if state is None:
            self.aggregator.last_update = now
            logger.info("Starting a fresh game")
            return False

        self.aggregator.restore(state)

        offline_ms = now - state.last_update
        if self.offline_progress and offline_ms > 0:
            self.aggregator.catch_up(Fraction(offline_ms, 1000))
        elif offline_ms < 0:
            logger.warning(f"Saved state is {-offline_ms} ms in the future, skipping offline progress")

        self.aggregator.last_update = now
        logger.info(f"Restored game with {format_count(self.aggregator.total_kills())} total kills")
        return True

    async def start(self, run_scheduler: bool = True):
        """Load saved state and start ticking."""
        if self._running:
            return

        async with self.lock:
            await asyncio.to_thread(self.load)

        if run_scheduler:
            self.scheduler = AsyncIOScheduler(
                event_loop=asyncio.get_running_loop(),
                job_defaults={
                    'coalesce': True,  # Combine multiple pending executions into one
                    'max_instances': 1,  # Prevent overlapping ticks and saves
                    'misfire_grace_time': 5
                }
            )
            self.scheduler.add_listener(self._job_error_listener, EVENT_JOB_ERROR)
            self.scheduler.add_job(
                self.tick,
                'interval',
                seconds=self.tick_interval_ms / 1000,
                id='tick'
            )
            if self.store is not None:
                self.scheduler.add_job(
                    self.save,
                    'interval',
                    seconds=self.save_interval_seconds,
                    id='save'
                )
            self.scheduler.start()

        self._running = True
        logger.info(
            f"Game loop started: tick every {self.tick_interval_ms} ms, "
            f"save every {self.save_interval_seconds} s"
        )

    async def stop(self):
        """Stop ticking and write a final save."""
        if not self._running:
            return

        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None

        self._running = False
        await self.tick()
        await self.save()
        logger.info("Game loop stopped")

    def _job_error_listener(self, event):
        logger.error(f"Scheduled job {event.job_id} failed: {event.exception}")

    async def tick(self) -> int:
        async with self.lock:
            return self.aggregator.tick()

    async def save(self) -> bool:
        """Persist a snapshot. Failures are logged and leave the game running."""
        if self.store is None:
            return False

        async with self._save_lock:
            async with self.lock:
                state = self.aggregator.snapshot()
                if logger.isEnabledFor(logging.DEBUG):
                    self._log_summary()

            self.last_save_ok = await asyncio.to_thread(self.store.save, state)
            return self.last_save_ok

    def _log_summary(self):
        for name in self.aggregator.names:
            entity = self.aggregator.entities[name]
            logger.debug(
                f"{entity.label}: {format_count(entity.total_kills())} kills, "
                f"{format_rate_per_minute(float(self.aggregator.effective_rate(name)))}, "
                f"next in {format_seconds(self.aggregator.time_to_next_kill(name))}"
            )

    async def manual_advance(self, name: str) -> bool:
        async with self.lock:
            return self.aggregator.manual_advance(name)

    async def progress(self, name: str, seconds: float = 1) -> bool:
        async with self.lock:
            return self.aggregator.progress(name, seconds)

    async def reset(self):
        """Reset all progress and save immediately."""
        async with self.lock:
            self.aggregator.reset()
        await self.save()

    async def restore(self, state: GameState):
        """Replace live counters with ``state`` and save it."""
        async with self.lock:
            self.aggregator.restore(state)
        await self.save()

    async def snapshot(self) -> GameState:
        async with self.lock:
            return self.aggregator.snapshot()

    async def status(self) -> GameStatus:
        async with self.lock:
            return self.aggregator.status()
