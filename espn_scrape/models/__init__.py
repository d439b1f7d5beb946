from espn_scrape.models.player import Player, PlayerStat
from espn_scrape.models.team import Team, Schedule

__all__ = [
    "Player",
    "PlayerStat",
    "Team",
    "Schedule",
]
