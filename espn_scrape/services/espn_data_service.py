import logging
import re
from typing import List, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from espn_scrape.config import settings
from espn_scrape.schemas.espn import (
    EspnAthlete,
    EspnGame,
    EspnTeam,
    GameSummary,
    Link,
    Odds,
    Reference,
    ReferenceEnvelope,
    to_link,
)
from espn_scrape.services.pacing import Pacer
from espn_scrape.services.reference_fetcher import ReferenceFetcher

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

REGULAR_SEASON = 2
TEAM_REF_PATTERN = re.compile(r"/teams/(\d+)(?:\?|$)")


class EspnDataService:
    """
    Typed access to the ESPN NFL endpoints used by the ingestion jobs.

    Collections go through the ReferenceFetcher and degrade to an empty list on
    failure; single-entity lookups return None on failure.
    """

    def __init__(
        self,
        fetcher: Optional[ReferenceFetcher] = None,
        core_api_url: Optional[str] = None,
        site_api_url: Optional[str] = None,
    ):
        self.fetcher = fetcher or ReferenceFetcher()
        self.core_api_url = (core_api_url or settings.espn_core_api_url).rstrip("/")
        self.site_api_url = (site_api_url or settings.espn_site_api_url).rstrip("/")

    @classmethod
    def with_client(cls, client: httpx.AsyncClient, pacer_interval: float = 0.0, **kwargs) -> "EspnDataService":
        fetcher = ReferenceFetcher(
            client=client,
            item_pacer=Pacer(pacer_interval, name="espn-item"),
            page_pacer=Pacer(pacer_interval, name="espn-page"),
        )
        return cls(fetcher=fetcher, **kwargs)

    async def close(self) -> None:
        await self.fetcher.close()

    async def resolve(self, link: Optional[Link]) -> Optional[T]:
        """Materialize a Reference (HTTP fetch) or unwrap an Inline value."""
        if link is None:
            return None
        return await link.resolve(self.fetcher)

    async def resolve_team_id(self, link: Optional[Link]) -> Optional[str]:
        """
        ESPN team id behind a team link. Reference URLs end in ``/teams/{id}``,
        so the id is read from the URL without a fetch when possible.
        """
        if link is None:
            return None
        if isinstance(link, Reference):
            match = TEAM_REF_PATTERN.search(link.url)
            if match:
                return match.group(1)
        team = await self.resolve(link)
        return team.id if team else None

    # Collections

    async def get_teams(self) -> List[EspnTeam]:
        return await self.fetcher.fetch_collection(f"{self.core_api_url}/teams", EspnTeam)

    async def get_season_teams(self, season: int) -> List[EspnTeam]:
        return await self.fetcher.fetch_collection(
            f"{self.core_api_url}/seasons/{season}/teams", EspnTeam
        )

    async def get_week_games(self, season: int, week: int, season_type: int = REGULAR_SEASON) -> List[EspnGame]:
        url = f"{self.core_api_url}/seasons/{season}/types/{season_type}/weeks/{week}/events"
        games = await self.fetcher.fetch_collection(url, EspnGame)
        logger.info(f"Fetched {len(games)} games for {season} type {season_type} week {week}")
        return games

    async def get_team_roster(self, season: int, espn_team_id: str) -> List[EspnAthlete]:
        url = f"{self.core_api_url}/seasons/{season}/teams/{espn_team_id}/athletes"
        return await self.fetcher.fetch_collection(url, EspnAthlete)

    # Single entities

    async def get_game(self, game_id: str) -> Optional[EspnGame]:
        return await self.fetcher.fetch_entity(f"{self.core_api_url}/events/{game_id}", EspnGame)

    async def get_athlete(self, athlete_id: str) -> Optional[EspnAthlete]:
        return await self.fetcher.fetch_entity(f"{self.core_api_url}/athletes/{athlete_id}", EspnAthlete)

    async def get_game_summary(self, game_id: str) -> Optional[GameSummary]:
        """Box score for one game from the site API."""
        try:
            data = await self.fetcher.fetch_json(f"{self.site_api_url}/summary", params={"event": game_id})
            return GameSummary.model_validate(data)
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch game summary for {game_id}: {e}")
        except (ValidationError, ValueError) as e:
            logger.error(f"Failed to decode game summary for {game_id}: {e}")
        return None

    async def get_odds(self, odds_url: str) -> Optional[Odds]:
        """First provider's line from a competition odds collection."""
        try:
            data = await self.fetcher.fetch_json(odds_url)
            envelope = ReferenceEnvelope.model_validate(data)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch odds from {odds_url}: {e}")
            return None
        except (ValidationError, ValueError) as e:
            logger.warning(f"Failed to decode odds from {odds_url}: {e}")
            return None

        if not envelope.items:
            return None
        try:
            return await self.resolve(to_link(envelope.items[0], Odds))
        except ValidationError as e:
            logger.warning(f"Failed to decode odds item from {odds_url}: {e}")
            return None
