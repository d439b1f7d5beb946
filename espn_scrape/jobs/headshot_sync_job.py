import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from espn_scrape.config import settings
from espn_scrape.jobs.base import SingleRunJob
from espn_scrape.models import Player
from espn_scrape.schemas.espn import EspnAthlete
from espn_scrape.services.espn_data_service import EspnDataService
from espn_scrape.services.pacing import Pacer
from espn_scrape.services.storage_service import BlobStorage, extension_for
from espn_scrape.services.team_mapper import get_team_by_espn_id, map_abbreviation
from espn_scrape.utils import as_utc, current_nfl_season

logger = logging.getLogger(__name__)

HEADSHOT_PREFIX = "player-headshots"
FULL_SIZE = "full"


def headshot_path(season: int, team_abbreviation: str, athlete: EspnAthlete, extension: str = ".png") -> str:
    """player-headshots/<season>/<TEAM>/full/<first_last>_<espnId><extension>"""
    name = athlete.display_name or f"{athlete.first_name} {athlete.last_name}"
    slug = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_") or "player"
    return f"{HEADSHOT_PREFIX}/{season}/{team_abbreviation}/{FULL_SIZE}/{slug}_{athlete.id}{extension}"


def is_headshot_fresh(player: Player, max_age_days: int, now: Optional[datetime] = None) -> bool:
    if not player.headshot_url or player.headshot_updated_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now - as_utc(player.headshot_updated_at) < timedelta(days=max_age_days)


@dataclass
class HeadshotSyncSummary:
    processed: int = 0
    uploaded: int = 0
    skipped: int = 0
    errors: int = 0


class HeadshotSyncJob(SingleRunJob):
    """Copies ESPN headshots into blob storage for players already in the store."""

    name = "headshot-sync"

    def __init__(
        self,
        espn: EspnDataService,
        store,
        storage: BlobStorage,
        bucket: Optional[str] = None,
        refresh_days: Optional[int] = None,
        team_pacer: Optional[Pacer] = None,
        player_pacer: Optional[Pacer] = None,
    ):
        super().__init__()
        self.espn = espn
        self.store = store
        self.storage = storage
        self.bucket = bucket or settings.storage_bucket
        self.refresh_days = refresh_days if refresh_days is not None else settings.headshot_refresh_days
        self.team_pacer = team_pacer or Pacer(settings.team_interval, name="team")
        self.player_pacer = player_pacer or Pacer(settings.headshot_interval, name="headshot")

    async def execute(self, season: Optional[int] = None, force_refresh: bool = False) -> HeadshotSyncSummary:
        season = season or current_nfl_season()
        summary = HeadshotSyncSummary()
        if force_refresh:
            logger.info("Force refresh enabled; ignoring headshot freshness")

        teams = await self.espn.get_season_teams(season)
        for team in teams:
            await self.team_pacer.wait()
            known = get_team_by_espn_id(team.id)
            abbreviation = known.abbreviation if known else map_abbreviation(team.abbreviation) or team.id

            roster = await self.espn.get_team_roster(season, team.id)
            logger.info(f"{team.display_name}: {len(roster)} athletes")
            for athlete in roster:
                summary.processed += 1
                try:
                    stored = await self._sync_athlete(athlete, season, abbreviation, force_refresh)
                except (httpx.HTTPError, OSError, ValueError) as e:
                    summary.errors += 1
                    logger.error(f"Headshot failed for {athlete.display_name} (ESPN {athlete.id}): {e}")
                    continue
                if stored:
                    summary.uploaded += 1
                else:
                    summary.skipped += 1

        logger.info(
            f"Headshot sync complete: {summary.processed} processed, {summary.uploaded} uploaded, "
            f"{summary.skipped} skipped, {summary.errors} errors"
        )
        return summary

    async def _sync_athlete(self, athlete: EspnAthlete, season: int, team_abbreviation: str, force_refresh: bool) -> bool:
        href = athlete.headshot.href if athlete.headshot else ""
        if not athlete.id or not href:
            return False

        player = await self.store.get_player_by_espn_id(athlete.id)
        if player is None:
            logger.debug(f"No player linked to ESPN {athlete.id}; skipping headshot")
            return False
        if not force_refresh and is_headshot_fresh(player, self.refresh_days):
            logger.debug(f"Headshot for player {player.id} is fresh; skipping")
            return False

        await self.player_pacer.wait()
        response = await self.espn.fetcher.fetch_bytes(href)
        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not content_type.startswith("image/"):
            raise ValueError(f"unexpected content type {content_type!r} from {href}")

        path = headshot_path(season, team_abbreviation, athlete, extension_for(content_type))
        url = await self.storage.upload(self.bucket, path, response.content, content_type=content_type)
        await self.store.update_player_headshot(player.id, {
            "headshot_url": url,
            "headshot_alt": athlete.headshot.alt or athlete.display_name,
            "storage_path": f"{self.bucket}/{path}",
            "headshot_sizes": {FULL_SIZE: {"url": url, "path": path}},
            "headshot_updated_at": datetime.now(timezone.utc),
        })
        logger.info(f"Stored headshot for player {player.id} ({athlete.display_name}) at {path}")
        return True
