from fastapi import APIRouter, Depends, HTTPException

from espn_scrape.dependencies import get_store
from espn_scrape.schemas import PlayerStatResponse, PlayerStatsListResponse
from espn_scrape.services.store_service import StoreService

router = APIRouter()


@router.get("/players/{player_id}", response_model=PlayerStatsListResponse)
async def get_player_stats(player_id: int, store: StoreService = Depends(get_store)):
    """All stored game stat lines for a player, blobs decoded."""
    player = await store.get_player_by_id(player_id)
    if player is None:
        raise HTTPException(status_code=404, detail="Player not found")

    rows = await store.get_stats_for_player(player_id)
    return PlayerStatsListResponse(
        player_id=player_id,
        total=len(rows),
        stats=[PlayerStatResponse.model_validate(row) for row in rows],
    )
