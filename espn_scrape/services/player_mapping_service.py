import logging
from typing import Optional

from espn_scrape.models import Player
from espn_scrape.schemas.espn import EspnAthlete
from espn_scrape.utils import split_display_name

logger = logging.getLogger(__name__)


class PlayerMappingService:
    """
    Resolves ESPN athletes to existing Player rows.

    1. Lookup by ESPN id.
    2. Otherwise search by normalized first/last name, scoped to the team when
       one is known (falling back to an unscoped search if the team has no hit).
    3. Players already linked to a different ESPN id are never candidates.
       Exactly one candidate is a match and gets the ESPN id written back
       (best-effort). Zero or several candidates are reported as unmatched.

    Never creates players.
    """

    def __init__(self, store):
        self.store = store

    async def map_espn_player(self, athlete: EspnAthlete, team_id: Optional[int] = None) -> Optional[Player]:
        espn_id = (athlete.id or "").strip()
        if not espn_id:
            return None

        player = await self.store.get_player_by_espn_id(espn_id)
        if player is not None:
            logger.debug(f"ESPN {espn_id} already mapped to player {player.id}")
            return player

        first_name, last_name = athlete.first_name, athlete.last_name
        if not first_name or not last_name:
            first_name, last_name = split_display_name(athlete.display_name)
        if not first_name or not last_name:
            logger.info(f"ESPN athlete {espn_id} has no usable name; cannot match")
            return None

        candidates = await self.store.search_players_by_name(first_name, last_name, team_id=team_id)
        if not candidates and team_id is not None:
            candidates = await self.store.search_players_by_name(first_name, last_name)

        linked_elsewhere = [c for c in candidates if c.espn_player_id and c.espn_player_id != espn_id]
        if linked_elsewhere:
            ids = ", ".join(f"{c.id}->{c.espn_player_id}" for c in linked_elsewhere)
            logger.info(f"Ignoring players already linked to other ESPN ids for {first_name} {last_name}: [{ids}]")
            candidates = [c for c in candidates if c not in linked_elsewhere]

        if not candidates:
            logger.info(f"No player found for {first_name} {last_name} (ESPN {espn_id})")
            return None

        if len(candidates) > 1:
            ids = ", ".join(str(c.id) for c in candidates)
            logger.warning(
                f"Multiple players match {first_name} {last_name} (ESPN {espn_id}): [{ids}]; "
                f"needs manual review"
            )
            return None

        player = candidates[0]
        try:
            linked = await self.store.update_player_espn_id(player.id, espn_id)
        except Exception as e:
            logger.warning(f"Failed to save ESPN id {espn_id} on player {player.id}: {e}")
        else:
            if linked:
                logger.info(f"Linked ESPN {espn_id} to player {player.id} ({first_name} {last_name})")
            else:
                logger.warning(f"Could not save ESPN id {espn_id} on player {player.id}")
        return player
