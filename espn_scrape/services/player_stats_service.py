import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from espn_scrape.config import settings
from espn_scrape.models import PlayerStat
from espn_scrape.schemas.espn import EspnAthlete
from espn_scrape.services.pacing import Pacer
from espn_scrape.services.stat_decoder import StatKind, StatValue
from espn_scrape.services.store_service import INSERTED

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "23503"


def player_code_for(espn_player_id: str) -> str:
    return f"ESPN_{espn_player_id}"


def is_foreign_key_violation(error: IntegrityError) -> bool:
    orig = getattr(error, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == FOREIGN_KEY_VIOLATION:
        return True
    return "foreign key" in str(orig or error).lower()


class GameStatAccumulator:
    """
    Merges decoded stat categories into one PlayerStat per ESPN player for a game.

    Passing/rushing/receiving become nested blobs; the fumbles category sets the
    scalar fumble counters on the record instead.
    """

    def __init__(self, espn_game_id: str, game_date: datetime, season: int, week: int):
        self.espn_game_id = espn_game_id
        self.game_date = game_date
        self.season = season
        self.week = week
        self._records: Dict[str, PlayerStat] = {}

    def __len__(self) -> int:
        return len(self._records)

    def _record_for(self, athlete: EspnAthlete, team_name: Optional[str], player_id: Optional[int]) -> PlayerStat:
        record = self._records.get(athlete.id)
        if record is None:
            record = PlayerStat(
                player_code=player_code_for(athlete.id),
                name=athlete.display_name or f"{athlete.first_name} {athlete.last_name}".strip(),
                team=team_name,
                game_date=self.game_date,
                game_location="",
                passing=None,
                rushing=None,
                receiving=None,
                fumbles=0,
                fumbles_lost=0,
                player_id=player_id,
                espn_player_id=athlete.id,
                espn_game_id=self.espn_game_id,
                season=self.season,
                week=self.week,
            )
            self._records[athlete.id] = record
        return record

    def add(
        self,
        athlete: EspnAthlete,
        kind: StatKind,
        values: Optional[Dict[str, StatValue]],
        team_name: Optional[str] = None,
        player_id: Optional[int] = None,
    ) -> PlayerStat:
        record = self._record_for(athlete, team_name, player_id)
        if kind == StatKind.PASSING:
            record.passing = values
        elif kind == StatKind.RUSHING:
            record.rushing = values
        elif kind == StatKind.RECEIVING:
            record.receiving = values
        elif kind == StatKind.FUMBLES and values:
            record.fumbles = int(values.get("fumbles", record.fumbles or 0))
            record.fumbles_lost = int(values.get("fumbles_lost", record.fumbles_lost or 0))
        return record

    def records(self) -> List[PlayerStat]:
        return list(self._records.values())


@dataclass
class BatchResult:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def persisted(self) -> int:
        return self.inserted + self.updated


class PlayerStatsService:
    """Sequential, paced upsert of consolidated stat records."""

    def __init__(self, store, pacer: Optional[Pacer] = None):
        self.store = store
        self.pacer = pacer or Pacer(settings.store_write_interval, name="store-write")

    async def upsert_batch(self, records: List[PlayerStat]) -> int:
        """
        Upsert each record in order. Returns how many were inserted or updated.

        Foreign-key violations are counted as skipped, other database errors as
        failed; neither stops the batch. The counts are only logged.
        """
        result = await self.upsert_batch_detailed(records)
        return result.persisted

    async def upsert_batch_detailed(self, records: List[PlayerStat]) -> BatchResult:
        result = BatchResult()
        for record in records:
            await self.pacer.wait()
            try:
                outcome = await self.store.upsert_player_stat(record)
            except IntegrityError as e:
                if is_foreign_key_violation(e):
                    result.skipped += 1
                    logger.warning(
                        f"Skipped stats for {record.name} (ESPN {record.espn_player_id}, "
                        f"game {record.espn_game_id}): referenced player does not exist"
                    )
                else:
                    result.failed += 1
                    logger.error(f"Failed to upsert stats for {record.name} (ESPN {record.espn_player_id}): {e}")
                continue
            except SQLAlchemyError as e:
                result.failed += 1
                logger.error(f"Failed to upsert stats for {record.name} (ESPN {record.espn_player_id}): {e}")
                continue

            if outcome == INSERTED:
                result.inserted += 1
            else:
                result.updated += 1

        if records:
            logger.info(
                f"Upserted {result.persisted}/{len(records)} stat records "
                f"({result.inserted} inserted, {result.updated} updated, "
                f"{result.skipped} skipped, {result.failed} failed)"
            )
        return result
