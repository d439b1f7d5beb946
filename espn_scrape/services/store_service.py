import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from espn_scrape.models import Player, PlayerStat, Schedule, Team
from espn_scrape.services.team_mapper import all_teams
from espn_scrape.utils import normalize_name

logger = logging.getLogger(__name__)

INSERTED = "inserted"
UPDATED = "updated"

# Stat fields overwritten when an existing (player, game) row is upserted
MUTABLE_STAT_FIELDS = ("passing", "rushing", "receiving", "fumbles", "fumbles_lost")

SCHEDULE_FIELDS = (
    "home_team_id", "away_team_id", "game_time", "week", "year", "season_type",
    "betting_line", "over_under", "home_implied_points", "away_implied_points",
)


class StoreService:
    """
    Relational store access for the ingestion jobs.

    Every operation opens its own session so a failed write never poisons
    the next one. Nothing here deletes rows and nothing creates players.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    # Teams

    async def seed_teams(self) -> int:
        """Insert any of the 32 static teams that are missing. Returns rows added."""
        added = 0
        async with self._session_factory() as db:
            existing = set((await db.execute(select(Team.id))).scalars().all())
            for team in all_teams():
                if team.internal_id in existing:
                    continue
                db.add(Team(
                    id=team.internal_id,
                    abbreviation=team.abbreviation,
                    full_name=team.full_name,
                    espn_team_id=team.espn_id,
                ))
                added += 1
            await db.commit()
        if added:
            logger.info(f"Seeded {added} teams")
        return added

    # Players

    async def get_player_by_id(self, player_id: int) -> Optional[Player]:
        async with self._session_factory() as db:
            return await db.get(Player, player_id)

    async def get_player_by_espn_id(self, espn_player_id: str) -> Optional[Player]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(Player).where(Player.espn_player_id == str(espn_player_id))
            )
            return result.scalar_one_or_none()

    async def get_players_by_team(self, team_id: int) -> List[Player]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(Player).where(Player.team_id == team_id).order_by(Player.id)
            )
            return list(result.scalars().all())

    async def search_players_by_name(
        self,
        first_name: str,
        last_name: str,
        team_id: Optional[int] = None,
    ) -> List[Player]:
        """
        Players whose normalized first and last names both equal the given ones.

        Normalization (accents, periods, suffixes) is applied in Python, not in
        SQL: SQLite folds case for ASCII only, so a stored "Élie" could never
        be narrowed by a query for "E". With a ``team_id`` only that roster is
        compared; otherwise every player is.
        """
        target_first = normalize_name(first_name)
        target_last = normalize_name(last_name)
        if not target_first or not target_last:
            return []

        query = select(Player)
        if team_id is not None:
            query = query.where(Player.team_id == team_id)

        async with self._session_factory() as db:
            result = await db.execute(query.order_by(Player.id))
            candidates = result.scalars().all()

        return [
            p for p in candidates
            if normalize_name(p.first_name) == target_first and normalize_name(p.last_name) == target_last
        ]

    async def update_player_espn_id(self, player_id: int, espn_player_id: str) -> bool:
        """
        Link an ESPN id to an existing player.

        Refuses (returns False) when the player does not exist, when another row
        already holds the ESPN id, or when the player is linked to a different
        ESPN id. An existing link is never overwritten.
        """
        espn_player_id = str(espn_player_id)
        async with self._session_factory() as db:
            holder = (await db.execute(
                select(Player).where(Player.espn_player_id == espn_player_id)
            )).scalar_one_or_none()
            if holder is not None and holder.id != player_id:
                logger.warning(
                    f"ESPN id {espn_player_id} already belongs to player {holder.id}; "
                    f"not assigning it to player {player_id}"
                )
                return False

            player = await db.get(Player, player_id)
            if player is None:
                logger.warning(f"Player {player_id} not found while setting ESPN id {espn_player_id}")
                return False
            if player.espn_player_id and player.espn_player_id != espn_player_id:
                logger.warning(
                    f"Player {player_id} is already linked to ESPN id {player.espn_player_id}; "
                    f"not replacing it with {espn_player_id}"
                )
                return False

            player.espn_player_id = espn_player_id
            player.updated_at = datetime.now(timezone.utc)
            await db.commit()
            return True

    async def update_player_headshot(self, player_id: int, fields: Dict[str, Any]) -> bool:
        async with self._session_factory() as db:
            player = await db.get(Player, player_id)
            if player is None:
                return False
            for name, value in fields.items():
                setattr(player, name, value)
            player.updated_at = datetime.now(timezone.utc)
            await db.commit()
            return True

    # Player stats

    async def get_player_stat(self, espn_player_id: str, espn_game_id: str) -> Optional[PlayerStat]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(PlayerStat).where(
                    PlayerStat.espn_player_id == str(espn_player_id),
                    PlayerStat.espn_game_id == str(espn_game_id),
                )
            )
            return result.scalar_one_or_none()

    async def get_stats_for_player(self, player_id: int) -> List[PlayerStat]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(PlayerStat)
                .where(PlayerStat.player_id == player_id)
                .order_by(PlayerStat.season, PlayerStat.week)
            )
            return list(result.scalars().all())

    async def upsert_player_stat(self, record: PlayerStat) -> str:
        """
        Insert-or-update one stat row keyed by (espn_player_id, espn_game_id).

        An existing row keeps its id, player_code and created_at; only the
        stat fields and updated_at change. Database errors propagate.
        """
        now = datetime.now(timezone.utc)
        async with self._session_factory() as db:
            existing = (await db.execute(
                select(PlayerStat).where(
                    PlayerStat.espn_player_id == record.espn_player_id,
                    PlayerStat.espn_game_id == record.espn_game_id,
                )
            )).scalar_one_or_none()

            if existing is not None:
                for field in MUTABLE_STAT_FIELDS:
                    setattr(existing, field, getattr(record, field))
                existing.updated_at = now
                outcome = UPDATED
            else:
                record.created_at = now
                record.updated_at = now
                db.add(record)
                outcome = INSERTED

            await db.commit()
        return outcome

    # Schedules

    async def get_schedule_by_espn_game_id(self, espn_game_id: str) -> Optional[Schedule]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(Schedule).where(Schedule.espn_game_id == str(espn_game_id))
            )
            return result.scalar_one_or_none()

    async def create_schedule(self, schedule: Schedule) -> Schedule:
        async with self._session_factory() as db:
            db.add(schedule)
            await db.commit()
            await db.refresh(schedule)
            return schedule

    async def update_schedule(self, schedule_id: int, values: Dict[str, Any]) -> Optional[Schedule]:
        async with self._session_factory() as db:
            schedule = await db.get(Schedule, schedule_id)
            if schedule is None:
                return None
            for field in SCHEDULE_FIELDS:
                if field in values:
                    setattr(schedule, field, values[field])
            schedule.updated_at = datetime.now(timezone.utc)
            await db.commit()
            await db.refresh(schedule)
            return schedule
