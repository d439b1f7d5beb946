"""
Weekly NFL stats ingestion.

For every game in a week range: resolve the two competitors, fetch the box
score, decode the offensive stat categories per athlete, map each athlete to an
existing player, merge the categories into one record per player and upsert
the records team by team.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from espn_scrape.config import settings
from espn_scrape.jobs.base import SingleRunJob
from espn_scrape.models import Player
from espn_scrape.schemas.espn import Competitor, EspnGame, TeamPlayerStats
from espn_scrape.services.espn_data_service import EspnDataService, REGULAR_SEASON
from espn_scrape.services.pacing import Pacer
from espn_scrape.services.player_mapping_service import PlayerMappingService
from espn_scrape.services.player_stats_service import GameStatAccumulator, PlayerStatsService
from espn_scrape.services.stat_decoder import DECODED_KINDS, StatKind, decode_stat_values
from espn_scrape.services.team_mapper import get_internal_team_id
from espn_scrape.utils import (
    current_nfl_season,
    default_week_range,
    last_week_of,
    parse_espn_datetime,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeeklyStatsSummary:
    games: int = 0
    found: int = 0
    matched: int = 0
    processed: int = 0

    def __add__(self, other: "WeeklyStatsSummary") -> "WeeklyStatsSummary":
        return WeeklyStatsSummary(
            games=self.games + other.games,
            found=self.found + other.found,
            matched=self.matched + other.matched,
            processed=self.processed + other.processed,
        )


class WeeklyStatsJob(SingleRunJob):
    name = "weekly-stats"

    def __init__(
        self,
        espn: EspnDataService,
        mapper: PlayerMappingService,
        stats_service: PlayerStatsService,
        week_pacer: Optional[Pacer] = None,
    ):
        super().__init__()
        self.espn = espn
        self.mapper = mapper
        self.stats_service = stats_service
        self.week_pacer = week_pacer or Pacer(settings.week_interval, name="week")

    async def execute(
        self,
        season: Optional[int] = None,
        start_week: Optional[int] = None,
        end_week: Optional[int] = None,
        season_type: int = REGULAR_SEASON,
    ) -> WeeklyStatsSummary:
        if season is None and start_week is None and end_week is None:
            season = current_nfl_season()
            start_week, end_week = default_week_range()
        else:
            season = season or current_nfl_season()
            start_week = start_week or 1
            end_week = end_week or last_week_of(season_type)
        if start_week > end_week:
            raise ValueError(f"start_week {start_week} is after end_week {end_week}")

        logger.info(f"Processing {season} season type {season_type}, weeks {start_week}-{end_week}")
        total = WeeklyStatsSummary()
        for week in range(start_week, end_week + 1):
            await self.week_pacer.wait()
            week_summary = await self.process_week(season, week, season_type)
            logger.info(
                f"Week {week}: {week_summary.games} games, {week_summary.found} players found, "
                f"{week_summary.matched} matched, {week_summary.processed} records processed"
            )
            total = total + week_summary

        logger.info(
            f"Stats run complete for {season}: {total.games} games, {total.found} players found, "
            f"{total.matched} matched, {total.processed} records processed"
        )
        return total

    async def process_week(self, season: int, week: int, season_type: int = REGULAR_SEASON) -> WeeklyStatsSummary:
        games = await self.espn.get_week_games(season, week, season_type)
        if not games:
            # Either no games this week or the fetch failed; both were logged upstream
            logger.info(f"No games returned for {season} week {week}")
            return WeeklyStatsSummary()

        summary = WeeklyStatsSummary()
        for game in games:
            summary = summary + await self.process_game(game, season, week)
        return summary

    async def process_game(self, game: EspnGame, season: int, week: int) -> WeeklyStatsSummary:
        if not game.competitions:
            logger.warning(f"Game {game.id} has no competitions; skipping")
            return WeeklyStatsSummary()

        competition = game.competitions[0]
        if len(competition.competitors) != 2:
            logger.warning(f"Game {game.id} has {len(competition.competitors)} competitors; skipping")
            return WeeklyStatsSummary()

        home, away = _home_and_away(competition.competitors)
        if home is None or away is None:
            logger.warning(f"Game {game.id} is missing a home or away competitor; skipping")
            return WeeklyStatsSummary()

        home_team = await self.espn.resolve(home.team_link)
        away_team = await self.espn.resolve(away.team_link)
        matchup = (
            f"{away_team.abbreviation if away_team else '?'} @ "
            f"{home_team.abbreviation if home_team else '?'}"
        )

        game_summary = await self.espn.get_game_summary(game.id)
        if game_summary is None or game_summary.boxscore is None or not game_summary.boxscore.players:
            logger.warning(f"No box score for game {game.id} ({matchup}); skipping")
            return WeeklyStatsSummary(games=1)

        game_date = (
            parse_espn_datetime(competition.date)
            or parse_espn_datetime(game.date)
            or datetime.now(timezone.utc)
        )
        identities: Dict[str, Optional[Player]] = {}
        found = matched = processed = 0

        for team_stats in game_summary.boxscore.players:
            accumulator = GameStatAccumulator(game.id, game_date, season, week)
            team_found, team_matched = await self._collect_team_stats(team_stats, accumulator, identities)
            found += team_found
            matched += team_matched
            if len(accumulator):
                processed += await self.stats_service.upsert_batch(accumulator.records())

        logger.info(f"Game {game.id} ({matchup}): {found} found, {matched} matched, {processed} processed")
        return WeeklyStatsSummary(games=1, found=found, matched=matched, processed=processed)

    async def _collect_team_stats(
        self,
        team_stats: TeamPlayerStats,
        accumulator: GameStatAccumulator,
        identities: Dict[str, Optional[Player]],
    ) -> Tuple[int, int]:
        team = team_stats.team
        team_name = team.display_name if team else None
        team_id = get_internal_team_id(team.id) if team else None
        found = matched = 0

        for category in team_stats.statistics:
            kind = StatKind.from_category(category.name)
            if kind not in DECODED_KINDS:
                continue

            for line in category.athletes:
                athlete = line.athlete
                if not athlete.id:
                    continue

                if athlete.id not in identities:
                    found += 1
                    player = await self.mapper.map_espn_player(athlete, team_id=team_id)
                    identities[athlete.id] = player
                    if player is not None:
                        matched += 1
                    else:
                        logger.info(
                            f"Skipping stats for unmatched athlete {athlete.display_name} "
                            f"(ESPN {athlete.id}, {team_name})"
                        )

                player = identities[athlete.id]
                if player is None:
                    continue

                values = decode_stat_values(kind, category.keys, line.stats)
                accumulator.add(athlete, kind, values, team_name=team_name, player_id=player.id)

        return found, matched


def _home_and_away(competitors) -> Tuple[Optional[Competitor], Optional[Competitor]]:
    home = next((c for c in competitors if (c.home_away or "").lower() == "home"), None)
    away = next((c for c in competitors if (c.home_away or "").lower() == "away"), None)
    return home, away
