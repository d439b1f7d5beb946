import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from espn_scrape.config import settings
from espn_scrape.jobs.base import SingleRunJob
from espn_scrape.models import Schedule
from espn_scrape.schemas.espn import Competition, EspnGame
from espn_scrape.services.espn_data_service import EspnDataService, REGULAR_SEASON
from espn_scrape.services.pacing import Pacer
from espn_scrape.services.team_mapper import get_internal_team_id
from espn_scrape.utils import (
    POSTSEASON_WEEKS,
    REGULAR_SEASON_WEEKS,
    current_nfl_season,
    last_week_of,
    parse_espn_datetime,
)

logger = logging.getLogger(__name__)

POSTSEASON = 3

SEASON_TYPE_NAMES = {
    1: "Preseason",
    2: "Regular Season",
    3: "Playoffs",
}

CREATED = "created"
UPDATED = "updated"


def implied_points(total: float, spread: float) -> Tuple[float, float]:
    """
    Expected (home, away) points from the over/under and the home spread.

    A home spread of -3 on a total of 45 gives (24.0, 21.0).
    """
    home = round((total - spread) / 2, 1)
    away = round((total + spread) / 2, 1)
    return home, away


@dataclass(frozen=True)
class ScheduleSyncSummary:
    processed: int = 0
    created: int = 0
    updated: int = 0
    errors: int = 0


class ScheduleSyncJob(SingleRunJob):
    name = "schedule-sync"

    def __init__(self, espn: EspnDataService, store, week_pacer: Optional[Pacer] = None):
        super().__init__()
        self.espn = espn
        self.store = store
        self.week_pacer = week_pacer or Pacer(settings.week_interval, name="week")

    def _plan(
        self,
        start_week: Optional[int],
        end_week: Optional[int],
        season_type: Optional[int],
    ) -> List[Tuple[int, int]]:
        if season_type is None and start_week is None and end_week is None:
            weeks = [(REGULAR_SEASON, w) for w in range(1, REGULAR_SEASON_WEEKS + 1)]
            weeks += [(POSTSEASON, w) for w in range(1, POSTSEASON_WEEKS + 1)]
            return weeks

        season_type = season_type or REGULAR_SEASON
        start_week = start_week or 1
        end_week = end_week or last_week_of(season_type)
        if start_week > end_week:
            raise ValueError(f"start_week {start_week} is after end_week {end_week}")
        return [(season_type, w) for w in range(start_week, end_week + 1)]

    async def execute(
        self,
        season: Optional[int] = None,
        start_week: Optional[int] = None,
        end_week: Optional[int] = None,
        season_type: Optional[int] = None,
    ) -> ScheduleSyncSummary:
        season = season or current_nfl_season()
        processed = created = updated = errors = 0

        for current_type, week in self._plan(start_week, end_week, season_type):
            await self.week_pacer.wait()
            type_name = SEASON_TYPE_NAMES.get(current_type, f"type {current_type}")
            games = await self.espn.get_week_games(season, week, current_type)
            logger.info(f"{season} {type_name} week {week}: {len(games)} games")

            for game in games:
                processed += 1
                try:
                    outcome = await self.sync_game(game, season, week, current_type)
                except Exception as e:
                    errors += 1
                    logger.error(f"Error syncing game {game.id} ({season} {type_name} week {week}): {e}")
                    continue
                if outcome == CREATED:
                    created += 1
                elif outcome == UPDATED:
                    updated += 1

        summary = ScheduleSyncSummary(processed=processed, created=created, updated=updated, errors=errors)
        logger.info(
            f"Schedule sync complete for {season}: {processed} processed, {created} created, "
            f"{updated} updated, {errors} errors"
        )
        return summary

    async def sync_game(self, game: EspnGame, season: int, week: int, season_type: int) -> str:
        """Create or update the schedule row for one game. Raises on bad input."""
        if not game.competitions:
            raise ValueError("game has no competitions")
        competition = game.competitions[0]
        values = await self.schedule_values(game, competition, season, week, season_type)

        existing = await self.store.get_schedule_by_espn_game_id(game.id)
        if existing is not None:
            await self.store.update_schedule(existing.id, values)
            logger.debug(f"Updated schedule for game {game.id}")
            return UPDATED

        try:
            await self.store.create_schedule(Schedule(espn_game_id=game.id, **values))
        except IntegrityError:
            # Another writer created the row between our lookup and insert
            existing = await self.store.get_schedule_by_espn_game_id(game.id)
            if existing is None:
                raise
            await self.store.update_schedule(existing.id, values)
            return UPDATED
        logger.debug(f"Created schedule for game {game.id}")
        return CREATED

    async def schedule_values(
        self,
        game: EspnGame,
        competition: Competition,
        season: int,
        week: int,
        season_type: int,
    ) -> Dict[str, Any]:
        home_team_id = away_team_id = None
        for competitor in competition.competitors:
            espn_team_id = await self.espn.resolve_team_id(competitor.team_link)
            internal_id = get_internal_team_id(espn_team_id)
            if internal_id is None:
                logger.warning(f"Game {game.id}: no team mapping for ESPN team {espn_team_id}")
            side = (competitor.home_away or "").lower()
            if side == "home":
                home_team_id = internal_id
            elif side == "away":
                away_team_id = internal_id

        values: Dict[str, Any] = {
            "home_team_id": home_team_id,
            "away_team_id": away_team_id,
            "game_time": parse_espn_datetime(competition.date) or parse_espn_datetime(game.date),
            "week": week,
            "year": season,
            "season_type": season_type,
        }
        values.update(await self.betting_values(competition))
        return values

    async def betting_values(self, competition: Competition) -> Dict[str, Any]:
        odds_url = competition.odds_ref
        if not odds_url:
            return {}
        odds = await self.espn.get_odds(odds_url)
        if odds is None:
            return {}

        values: Dict[str, Any] = {}
        if odds.over_under > 0:
            values["over_under"] = odds.over_under
        if odds.spread != 0:
            values["betting_line"] = odds.spread
        if "over_under" in values and "betting_line" in values:
            home, away = implied_points(odds.over_under, odds.spread)
            values["home_implied_points"] = home
            values["away_implied_points"] = away
        return values
