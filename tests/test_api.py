"""Integration tests for the job trigger, stats and ESPN passthrough endpoints.

Uses FastAPI TestClient backed by a fresh temp-file SQLite database. The app
lifespan's init_db() and logging setup are mocked out and the scheduler is
disabled, so nothing touches the production DB, the log directory or ESPN.
"""

import os
import tempfile
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session

import espn_scrape.models  # noqa: F401
from espn_scrape.config import settings
from espn_scrape.database import Base
from espn_scrape.dependencies import ServiceContainer, get_container, get_store
from espn_scrape.main import app
from espn_scrape.models import Player, PlayerStat, Team
from espn_scrape.services.team_mapper import all_teams
from tests.conftest import CORE, FakeEspn

# ---------------------------------------------------------------------------
# Test client fixture
# ---------------------------------------------------------------------------

ESPN_ROUTES = {
    f"{CORE}/seasons/2025/teams": {
        "count": 2,
        "pageCount": 1,
        "items": [
            {"id": "12", "abbreviation": "KC", "displayName": "Kansas City Chiefs"},
            {"id": "28", "abbreviation": "WSH", "displayName": "Washington Commanders"},
        ],
    },
    f"{CORE}/seasons/2025/types/2/weeks/1/events": {
        "count": 1,
        "pageCount": 1,
        "items": [{"id": "401", "name": "Buffalo Bills at Arizona Cardinals", "shortName": "BUF @ ARI",
                   "date": "2025-09-07T17:00Z"}],
    },
    f"{CORE}/events/401": {"id": "401", "name": "Buffalo Bills at Arizona Cardinals", "shortName": "BUF @ ARI",
                           "date": "2025-09-07T17:00Z", "competitions": []},
    f"{CORE}/athletes/3917315": {
        "id": "3917315", "firstName": "Kyler", "lastName": "Murray", "displayName": "Kyler Murray",
        "position": {"abbreviation": "QB"},
        "headshot": {"href": "https://a.espncdn.com/i/headshots/nfl/players/full/3917315.png", "alt": ""},
    },
}


@pytest.fixture(scope="module")
def container():
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # ── synchronous setup ────────────────────────────────────────────────
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    with Session(sync_engine) as session:
        for team in all_teams():
            session.add(Team(id=team.internal_id, abbreviation=team.abbreviation,
                             full_name=team.full_name, espn_team_id=team.espn_id))
        session.add(Player(id=1, first_name="Kyler", last_name="Murray", team_id=1,
                           position="QB", espn_player_id="3917315"))
        session.add(Player(id=2, first_name="No", last_name="Stats", team_id=1, position="WR"))
        session.flush()
        session.add(PlayerStat(
            player_code="ESPN_3917315", name="Kyler Murray", team="Arizona Cardinals",
            game_date=datetime(2025, 9, 7, 17, 0), game_location="",
            passing={"completions": 21, "passingattempts": 28, "passingyards": 220},
            rushing={"rushingattempts": 6, "rushingyards": 41},
            receiving=None, fumbles=1, fumbles_lost=0,
            player_id=1, espn_player_id="3917315", espn_game_id="401", season=2025, week=1,
        ))
        session.commit()
    sync_engine.dispose()

    client_engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    ClientSession = async_sessionmaker(client_engine, expire_on_commit=False, class_=AsyncSession)
    yield ServiceContainer(session_factory=ClientSession, espn=FakeEspn(ESPN_ROUTES).service())

    try:
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture(scope="module")
def client(container):
    app.dependency_overrides[get_container] = lambda: container
    app.dependency_overrides[get_store] = lambda: container.store

    with (
        patch("espn_scrape.main.init_db", new=AsyncMock()),
        patch("espn_scrape.main.configure_logging"),
        patch.object(settings, "scheduler_enabled", False),
    ):
        with TestClient(app) as c:
            yield c

    app.dependency_overrides.clear()


def stub_job(running=False):
    job = MagicMock()
    job.is_running = running
    job.run = AsyncMock()
    return job


# ===========================================================================
# Health
# ===========================================================================

def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


# ===========================================================================
# Stats
# ===========================================================================

class TestPlayerStats:
    BASE = "/api/v1/stats/players"

    def test_returns_decoded_blobs(self, client):
        r = client.get(f"{self.BASE}/1")
        assert r.status_code == 200
        data = r.json()
        assert data["total"] == 1
        stat = data["stats"][0]
        assert stat["espn_game_id"] == "401"
        assert stat["passing"]["completions"] == 21
        assert stat["rushing"]["rushingyards"] == 41
        assert stat["receiving"] is None
        assert stat["fumbles"] == 1

    def test_player_without_stats(self, client):
        r = client.get(f"{self.BASE}/2")
        assert r.status_code == 200
        assert r.json() == {"player_id": 2, "total": 0, "stats": []}

    def test_unknown_player(self, client):
        r = client.get(f"{self.BASE}/999")
        assert r.status_code == 404


# ===========================================================================
# Job triggers
# ===========================================================================

class TestJobTriggers:
    BASE = "/api/v1/jobs"

    def test_trigger_starts_job_with_params(self, client, container):
        job = stub_job()
        with patch.object(container, "job", return_value=job):
            r = client.post(f"{self.BASE}/stats", params={"season": 2025, "start_week": 3, "end_week": 4})

        assert r.status_code == 202
        assert r.json()["status"] == "started"
        job.run.assert_awaited_once_with(season=2025, start_week=3, end_week=4)

    def test_params_filtered_per_job(self, client, container):
        job = stub_job()
        with patch.object(container, "job", return_value=job):
            r = client.post(f"{self.BASE}/headshots", params={"season": 2025, "start_week": 3,
                                                               "force_refresh": "true"})

        assert r.status_code == 202
        job.run.assert_awaited_once_with(season=2025, force_refresh=True)

    def test_running_job_is_skipped(self, client, container):
        job = stub_job(running=True)
        with patch.object(container, "job", return_value=job):
            r = client.post(f"{self.BASE}/players")

        assert r.status_code == 202
        assert r.json() == {"job": "players", "status": "skipped", "detail": "already running"}
        job.run.assert_not_awaited()

    def test_unknown_job(self, client):
        assert client.post(f"{self.BASE}/draft").status_code == 404

    def test_status(self, client):
        r = client.get(f"{self.BASE}/")
        assert r.status_code == 200
        assert r.json() == {kind: {"running": False} for kind in ("stats", "schedule", "players", "headshots")}


# ===========================================================================
# ESPN passthrough
# ===========================================================================

class TestEspnEndpoints:
    def test_teams_with_mapping(self, client):
        r = client.get("/api/v1/espn/teams/2025")
        assert r.status_code == 200
        data = r.json()
        assert data["count"] == 2
        assert data["teams"][0] == {"espn_id": "12", "internal_id": 16, "abbreviation": "KAN",
                                    "display_name": "Kansas City Chiefs"}
        assert data["teams"][1]["abbreviation"] == "WAS"

    def test_week_schedule(self, client):
        r = client.get("/api/v1/espn/schedule/2025/1")
        assert r.status_code == 200
        assert r.json()["games"][0]["short_name"] == "BUF @ ARI"

    def test_bad_week(self, client):
        assert client.get("/api/v1/espn/schedule/2025/30").status_code == 422

    def test_game(self, client):
        r = client.get("/api/v1/espn/games/401")
        assert r.status_code == 200
        assert r.json() == {"id": "401", "name": "Buffalo Bills at Arizona Cardinals",
                            "short_name": "BUF @ ARI", "date": "2025-09-07T17:00Z"}

    def test_unknown_game(self, client):
        assert client.get("/api/v1/espn/games/999").status_code == 404

    def test_athlete_with_linked_player(self, client):
        r = client.get("/api/v1/espn/athletes/3917315")
        assert r.status_code == 200
        data = r.json()
        assert data["display_name"] == "Kyler Murray"
        assert data["position"] == "QB"
        assert data["player_id"] == 1

    def test_unknown_athlete(self, client):
        assert client.get("/api/v1/espn/athletes/1").status_code == 404
