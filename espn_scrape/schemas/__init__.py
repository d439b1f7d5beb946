from espn_scrape.schemas.player_stat import (
    PlayerStatResponse,
    PlayerStatsListResponse,
    JobTriggerResponse,
)
from espn_scrape.schemas.stats import PassingStats, RushingStats, ReceivingStats

__all__ = [
    "PlayerStatResponse",
    "PlayerStatsListResponse",
    "JobTriggerResponse",
    "PassingStats",
    "RushingStats",
    "ReceivingStats",
]
