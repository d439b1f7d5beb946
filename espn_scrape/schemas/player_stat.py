from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel

from espn_scrape.schemas.stats import PassingStats, RushingStats, ReceivingStats


class PlayerStatResponse(BaseModel):
    id: int
    player_id: Optional[int] = None
    player_code: str
    name: str
    team: Optional[str] = None
    game_date: datetime
    season: Optional[int] = None
    week: Optional[int] = None
    espn_player_id: str
    espn_game_id: str
    passing: Optional[PassingStats] = None
    rushing: Optional[RushingStats] = None
    receiving: Optional[ReceivingStats] = None
    fumbles: int = 0
    fumbles_lost: int = 0
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PlayerStatsListResponse(BaseModel):
    player_id: int
    total: int
    stats: List[PlayerStatResponse]


class JobTriggerResponse(BaseModel):
    job: str
    status: str
    detail: Optional[str] = None
