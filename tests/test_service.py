"""
Test suite for the game service HTTP endpoints.

Each test runs the app against its own SQLite file with a fixed clock and
without the background scheduler, so results do not depend on timing.
"""
import pytest
from fastapi.testclient import TestClient

from persistence.database import DatabaseSettings
from server.config import GameSettings
from server.service import create_app
from simulation import PRECISION


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now


START = 1_700_000_000_000


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
def db_settings(tmp_path):
    return DatabaseSettings(url=f"sqlite:///{tmp_path / 'game.db'}")


@pytest.fixture
def settings():
    return GameSettings(log_level="DEBUG")


@pytest.fixture
def client(settings, db_settings, clock):
    app = create_app(settings, db_settings, clock=clock, run_scheduler=False)
    with TestClient(app) as client:
        yield client


class TestHealth:
    """Test service health."""

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["loop_status"] == "running"
        assert data["last_update"] == START


class TestGameState:
    """Test state export and import."""

    def test_fresh_game_state(self, client):
        """A fresh game has zero counters for every entity."""
        response = client.get("/api/game-state")

        assert response.status_code == 200
        assert response.json() == {
            "entities": {
                "grass": {"kills": "0", "accumulated": "0"},
                "stick": {"kills": "0", "accumulated": "0"}
            },
            "lastUpdate": START
        }

    def test_save_state_round_trip(self, client):
        """Posted state becomes the live state exactly."""
        payload = {
            "enemies": {
                "grass": {"kills": str(10 ** 30), "accumulated": str(PRECISION - 1)},
                "stick": {"kills": "12", "accumulated": "500"},
                "boulder": {"kills": "1", "accumulated": "0"}
            },
            "lastUpdate": START
        }

        response = client.post("/api/save-state", json=payload)
        assert response.status_code == 200
        assert response.json() == {"status": "saved", "persisted": True}

        state = client.get("/api/game-state").json()
        assert state["entities"]["grass"] == {"kills": str(10 ** 30), "accumulated": str(PRECISION - 1)}
        assert state["entities"]["stick"] == {"kills": "12", "accumulated": "500"}
        assert "boulder" not in state["entities"]

    @pytest.mark.parametrize("entity", [
        {"kills": "-3", "accumulated": "0"},
        {"kills": "3", "accumulated": str(PRECISION)},
        {"kills": "three", "accumulated": "0"},
    ])
    def test_save_state_rejects_malformed(self, client, entity):
        """Malformed counters are rejected and the game is untouched."""
        response = client.post("/api/save-state", json={"entities": {"grass": entity}, "lastUpdate": START})

        assert response.status_code == 422
        assert client.get("/api/game-state").json()["entities"]["grass"]["kills"] == "0"

    def test_save_state_requires_last_update(self, client, clock):
        """A state without lastUpdate is rejected instead of restarting the clock at the epoch."""
        clock.now += 60_000
        payload = {"entities": {"grass": {"kills": "0", "accumulated": "0"}}}

        response = client.post("/api/save-state", json=payload)

        assert response.status_code == 422
        assert client.get("/api/game-state").json()["lastUpdate"] == START


class TestCommands:
    """Test player commands."""

    def test_manual_kill(self, client):
        """Manual kill adds one to the entity."""
        response = client.post("/api/entities/grass/kill")

        assert response.status_code == 200
        assert response.json()["kills"] == "1"

        status = client.get("/api/status").json()
        assert status["entities"]["grass"]["kills"] == "1"
        assert status["global_multiplier"] == pytest.approx(1.01)

    def test_manual_kill_unknown_entity(self, client):
        response = client.post("/api/entities/boulder/kill")

        assert response.status_code == 404
        assert "boulder" in response.json()["detail"]

    def test_progress_default_one_second(self, client):
        """Progress without parameters advances one second."""
        response = client.post("/api/entities/stick/progress")

        assert response.status_code == 200
        data = response.json()
        assert data["seconds"] == 1.0
        assert data["kills"] == "0"
        assert data["progress"] == pytest.approx(1 / 60)

    def test_progress_one_minute(self, client):
        response = client.post("/api/entities/grass/progress", params={"seconds": 60})

        assert response.status_code == 200
        assert response.json()["kills"] == "1"

    def test_progress_validation(self, client):
        """Negative durations are rejected; unknown entities are 404."""
        assert client.post("/api/entities/grass/progress", params={"seconds": -1}).status_code == 422
        assert client.post("/api/entities/boulder/progress").status_code == 404

    def test_reset(self, client):
        """Reset clears all progress and persists it."""
        client.post("/api/entities/grass/kill")
        client.post("/api/entities/stick/progress", params={"seconds": 90})

        response = client.post("/api/reset")

        assert response.status_code == 200
        assert response.json() == {"status": "reset", "persisted": True}
        state = client.get("/api/game-state").json()
        for entity in state["entities"].values():
            assert entity == {"kills": "0", "accumulated": "0"}


class TestStatus:
    """Test display values."""

    def test_fresh_status(self, client):
        response = client.get("/api/status")

        assert response.status_code == 200
        data = response.json()
        assert data["global_multiplier"] == 1.0
        assert data["speed_percent"] == 100.0
        assert data["total_kills"] == "0"
        grass = data["entities"]["grass"]
        assert grass["label"] == "Grass"
        assert grass["rate_per_minute"] == pytest.approx(1.0)
        assert grass["next_kill_seconds"] == pytest.approx(60.0)


class TestPersistence:
    """Test progress across restarts."""

    def test_progress_survives_restart_with_offline_catch_up(self, settings, db_settings, clock):
        """Kills are saved on shutdown and offline time is applied on startup."""
        with TestClient(create_app(settings, db_settings, clock=clock, run_scheduler=False)) as client:
            for _ in range(3):
                client.post("/api/entities/grass/kill")

        clock.now += 60_000

        with TestClient(create_app(settings, db_settings, clock=clock, run_scheduler=False)) as client:
            state = client.get("/api/game-state").json()

        # One offline minute at a 1.03x multiplier:
        # grass 1/min + 3 * 0.1/min = 1.3/min -> 1.339 kills, stick 1.03 kills
        assert state["entities"]["grass"]["kills"] == "4"
        assert state["entities"]["stick"]["kills"] == "1"
        assert state["lastUpdate"] == clock.now

    def test_reset_persists_across_restart(self, settings, db_settings, clock):
        with TestClient(create_app(settings, db_settings, clock=clock, run_scheduler=False)) as client:
            client.post("/api/entities/grass/kill")
            client.post("/api/reset")

        with TestClient(create_app(settings, db_settings, clock=clock, run_scheduler=False)) as client:
            state = client.get("/api/game-state").json()

        assert state["entities"]["grass"]["kills"] == "0"
