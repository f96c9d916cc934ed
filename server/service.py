"""
Game Service.

HTTP surface of The Rat and The Time: exposes the live game state, accepts
player commands and persists progress through the game loop.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request

from persistence.database import (
    DatabaseSettings,
    create_database_engine,
    create_session_factory,
    create_tables,
)
from persistence.store import GameStateStore
from simulation import Aggregator, GameState, GameStatus, now_ms

from .config import GameSettings, get_settings
from .loop import GameLoop

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def get_game_loop(request: Request) -> GameLoop:
    return request.app.state.game_loop


def create_app(
    settings: Optional[GameSettings] = None,
    db_settings: Optional[DatabaseSettings] = None,
    clock: Callable[[], int] = now_ms,
    run_scheduler: bool = True
) -> FastAPI:
    """
    Build the game service.

    Args:
        settings: Game settings, read from the environment if omitted
        db_settings: Database settings, read from the environment if omitted
        clock: Millisecond wall clock driving the simulation
        run_scheduler: Start the periodic tick/save jobs on startup
    """
    settings = settings or get_settings()
    db_settings = db_settings or DatabaseSettings()
    logging.getLogger().setLevel(settings.log_level.upper())

    engine = create_database_engine(db_settings.url, echo=db_settings.echo)
    store = GameStateStore(create_session_factory(engine))
    aggregator = Aggregator(settings.entities, clock=clock)
    game_loop = GameLoop(
        aggregator,
        store=store,
        tick_interval_ms=settings.tick_interval_ms,
        save_interval_seconds=settings.save_interval_seconds,
        offline_progress=settings.offline_progress
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: create tables, restore saved progress, start ticking
        create_tables(engine)
        await game_loop.start(run_scheduler=run_scheduler)
        logger.info("Game service started successfully")
        yield
        # Shutdown: final tick and save
        await game_loop.stop()
        engine.dispose()
        logger.info("Game service stopped")

    app = FastAPI(
        title="The Rat and The Time",
        description="Idle game server: the Rat kills Grass and Sticks, faster with every kill",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.game_loop = game_loop

    @app.get("/api/game-state", response_model=GameState)
    async def get_game_state(request: Request):
        """Current exact counters in save format."""
        return await get_game_loop(request).snapshot()

    @app.post("/api/save-state", response_model=Dict[str, Any])
    async def save_game_state(state: GameState, request: Request):
        """
        Replace the live game with the supplied state and persist it.

        Entities the game does not know are ignored. Time between the
        supplied lastUpdate and now is applied on the next tick.
        """
        game_loop = get_game_loop(request)
        await game_loop.restore(state)
        return {
            "status": "saved",
            "persisted": bool(game_loop.last_save_ok)
        }

    @app.get("/api/status", response_model=GameStatus)
    async def get_status(request: Request):
        """Display values: kills, progress, rates and time to next kill."""
        return await get_game_loop(request).status()

    @app.post("/api/entities/{name}/kill", response_model=Dict[str, Any])
    async def manual_kill(name: str, request: Request):
        """Kill one instantly."""
        game_loop = get_game_loop(request)
        if not await game_loop.manual_advance(name):
            raise HTTPException(status_code=404, detail=f"Unknown entity: {name}")

        return {
            "status": "killed",
            "entity": name,
            "kills": str(game_loop.aggregator.entities[name].total_kills())
        }

    @app.post("/api/entities/{name}/progress", response_model=Dict[str, Any])
    async def progress_entity(
        name: str,
        request: Request,
        seconds: float = Query(1.0, ge=0, le=86400, description="Seconds of progress to apply")
    ):
        """Advance one entity as if ``seconds`` had passed."""
        game_loop = get_game_loop(request)
        try:
            found = await game_loop.progress(name, seconds)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        if not found:
            raise HTTPException(status_code=404, detail=f"Unknown entity: {name}")

        entity = game_loop.aggregator.entities[name]
        return {
            "status": "progressed",
            "entity": name,
            "seconds": seconds,
            "kills": str(entity.total_kills()),
            "progress": entity.progress_fraction()
        }

    @app.post("/api/reset", response_model=Dict[str, Any])
    async def reset_progress(request: Request):
        """Reset all progress. This cannot be undone."""
        game_loop = get_game_loop(request)
        await game_loop.reset()
        return {
            "status": "reset",
            "persisted": bool(game_loop.last_save_ok)
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        game_loop = get_game_loop(request)
        return {
            "status": "healthy",
            "service": "game",
            "loop_status": "running" if game_loop.running else "stopped",
            "tick_count": game_loop.aggregator.tick_count,
            "last_update": game_loop.aggregator.last_update,
            "last_save_ok": game_loop.last_save_ok,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    return app


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
