import logging
from dataclasses import dataclass
from typing import Optional

from espn_scrape.config import settings
from espn_scrape.jobs.base import SingleRunJob
from espn_scrape.schemas.espn import EspnAthlete
from espn_scrape.services.espn_data_service import EspnDataService
from espn_scrape.services.pacing import Pacer
from espn_scrape.services.team_mapper import get_internal_team_id
from espn_scrape.utils import current_nfl_season, find_player_by_name

logger = logging.getLogger(__name__)


@dataclass
class PlayerSyncSummary:
    processed: int = 0
    matched: int = 0
    updated: int = 0
    unmatched: int = 0
    errors: int = 0


class PlayerSyncJob(SingleRunJob):
    """
    Links ESPN athlete ids to existing players, one team roster at a time.

    Uses the looser team-scoped name matcher (nickname prefixes, middle names)
    since candidates are limited to one team's players.
    """

    name = "player-sync"

    def __init__(
        self,
        espn: EspnDataService,
        store,
        team_pacer: Optional[Pacer] = None,
        player_pacer: Optional[Pacer] = None,
    ):
        super().__init__()
        self.espn = espn
        self.store = store
        self.team_pacer = team_pacer or Pacer(settings.team_interval, name="team")
        self.player_pacer = player_pacer or Pacer(settings.roster_player_interval, name="roster-player")

    async def execute(self, season: Optional[int] = None) -> PlayerSyncSummary:
        season = season or current_nfl_season()
        summary = PlayerSyncSummary()

        teams = await self.espn.get_season_teams(season)
        logger.info(f"Syncing ESPN player ids for {len(teams)} teams ({season})")

        for team in teams:
            await self.team_pacer.wait()
            team_id = get_internal_team_id(team.id)
            if team_id is None:
                logger.warning(f"No team mapping for ESPN team {team.id} ({team.display_name}); skipping")
                continue

            roster = await self.espn.get_team_roster(season, team.id)
            db_players = await self.store.get_players_by_team(team_id)
            logger.info(f"{team.display_name}: {len(roster)} ESPN athletes, {len(db_players)} players in store")

            for athlete in roster:
                await self.player_pacer.wait()
                summary.processed += 1
                try:
                    await self._sync_athlete(athlete, db_players, team.display_name, summary)
                except Exception as e:
                    summary.errors += 1
                    logger.error(f"Error syncing ESPN athlete {athlete.id} ({athlete.display_name}): {e}")

        logger.info(
            f"Player sync complete: {summary.processed} processed, {summary.matched} matched, "
            f"{summary.updated} updated, {summary.unmatched} unmatched, {summary.errors} errors"
        )
        return summary

    async def _sync_athlete(self, athlete: EspnAthlete, db_players, team_name: Optional[str], summary: PlayerSyncSummary):
        if not athlete.id:
            return

        existing = await self.store.get_player_by_espn_id(athlete.id)
        if existing is not None:
            logger.debug(f"ESPN {athlete.id} already linked to player {existing.id}")
            return

        # Players already linked to another ESPN id are not candidates
        candidates = [p for p in db_players if not p.espn_player_id]
        player = find_player_by_name(athlete.first_name, athlete.last_name, candidates)
        if player is None:
            summary.unmatched += 1
            logger.debug(f"No match for {athlete.display_name} (ESPN {athlete.id}) on {team_name}")
            return

        summary.matched += 1
        if await self.store.update_player_espn_id(player.id, athlete.id):
            summary.updated += 1
            player.espn_player_id = athlete.id
            logger.info(
                f"Linked {athlete.display_name} (ESPN {athlete.id}) to player {player.id} "
                f"({player.first_name} {player.last_name})"
            )
        else:
            logger.error(f"Failed to link ESPN {athlete.id} to player {player.id}")
