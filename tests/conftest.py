"""
Pytest fixtures for the ESPN ingestion tests.
"""
from typing import Any, Dict, List, Optional

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session

import espn_scrape.models  # noqa: F401 - registers all models with Base
from espn_scrape.database import Base
from espn_scrape.models import Player, Team
from espn_scrape.services.espn_data_service import EspnDataService
from espn_scrape.services.store_service import StoreService
from espn_scrape.services.team_mapper import all_teams

CORE = "http://core.test/nfl"
SITE = "http://site.test/nfl"


class FakeEspn:
    """
    Canned ESPN responses for httpx.MockTransport.

    Routes are keyed by URL without query string; ``?page=N`` and ``?event=ID``
    variants can be registered explicitly and take precedence. A route value may
    be a JSON body, an int status code or a ready httpx.Response.
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        base = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        keys = []
        for param in ("page", "event"):
            value = request.url.params.get(param)
            if value is not None:
                keys.append(f"{base}?{param}={value}")
        keys.append(base)

        for key in keys:
            if key in self.routes:
                body = self.routes[key]
                if isinstance(body, httpx.Response):
                    return body
                if isinstance(body, int):
                    return httpx.Response(body, json={"error": "canned failure"})
                return httpx.Response(200, json=body)
        return httpx.Response(404, json={"error": f"no route for {request.url}"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    def service(self) -> EspnDataService:
        return EspnDataService.with_client(self.client(), core_api_url=CORE, site_api_url=SITE)

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


def envelope(refs: List[str], page_count: int = 1, count: Optional[int] = None) -> Dict[str, Any]:
    return {
        "count": count if count is not None else len(refs),
        "pageIndex": 1,
        "pageSize": 25,
        "pageCount": page_count,
        "items": [{"$ref": url} for url in refs],
    }


def make_player(**overrides) -> Player:
    data = dict(first_name="Test", last_name="Player", team_id=None, position="QB", active=True)
    data.update(overrides)
    return Player(**data)


@pytest.fixture
def fake_espn():
    return FakeEspn()


@pytest.fixture
async def session_factory(tmp_path):
    """
    async_sessionmaker over a fresh temp-file SQLite DB with the 32 teams seeded.
    Function-scoped so each test gets a clean slate.
    """
    db_path = str(tmp_path / "test_espn_scrape.db")

    # ── sync setup (no event loop dependency) ─────────────────────────────
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    with Session(sync_engine) as sess:
        for team in all_teams():
            sess.add(Team(
                id=team.internal_id,
                abbreviation=team.abbreviation,
                full_name=team.full_name,
                espn_team_id=team.espn_id,
            ))
        sess.commit()
    sync_engine.dispose()

    # ── async session factory ─────────────────────────────────────────────
    async_engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    yield factory

    await async_engine.dispose()


@pytest.fixture
async def store(session_factory):
    return StoreService(session_factory)


@pytest.fixture
def add_players(session_factory):
    """Insert players and return them with ids populated."""

    async def _add(*players: Player) -> List[Player]:
        async with session_factory() as db:
            db.add_all(players)
            await db.commit()
        return list(players)

    return _add
