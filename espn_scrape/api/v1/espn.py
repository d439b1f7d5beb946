import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from espn_scrape.config import settings
from espn_scrape.dependencies import JOB_KINDS, ServiceContainer, get_container
from espn_scrape.services.team_mapper import get_internal_team_id, map_abbreviation

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/teams/{season}")
async def get_teams(
    season: int = Path(..., ge=2000, le=2100),
    container: ServiceContainer = Depends(get_container),
):
    """ESPN teams for a season with their internal mapping."""
    teams = await container.espn.get_season_teams(season)
    return {
        "season": season,
        "count": len(teams),
        "teams": [
            {
                "espn_id": t.id,
                "internal_id": get_internal_team_id(t.id),
                "abbreviation": map_abbreviation(t.abbreviation),
                "display_name": t.display_name,
            }
            for t in teams
        ],
    }


@router.get("/schedule/{season}/{week}")
async def get_schedule(
    season: int = Path(..., ge=2000, le=2100),
    week: int = Path(..., ge=1, le=22),
    season_type: int = Query(2, ge=1, le=4),
    container: ServiceContainer = Depends(get_container),
):
    """Games ESPN lists for one week."""
    games = await container.espn.get_week_games(season, week, season_type)
    return {
        "season": season,
        "week": week,
        "season_type": season_type,
        "count": len(games),
        "games": [
            {"id": g.id, "name": g.name, "short_name": g.short_name, "date": g.date}
            for g in games
        ],
    }


@router.get("/games/{game_id}")
async def get_game(game_id: str, container: ServiceContainer = Depends(get_container)):
    game = await container.espn.get_game(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail=f"ESPN game {game_id} not found")
    return {"id": game.id, "name": game.name, "short_name": game.short_name, "date": game.date}


@router.get("/athletes/{athlete_id}")
async def get_athlete(athlete_id: str, container: ServiceContainer = Depends(get_container)):
    """One ESPN athlete, with the stored player it is linked to (if any)."""
    athlete = await container.espn.get_athlete(athlete_id)
    if athlete is None:
        raise HTTPException(status_code=404, detail=f"ESPN athlete {athlete_id} not found")
    player = await container.store.get_player_by_espn_id(athlete.id)
    return {
        "id": athlete.id,
        "display_name": athlete.display_name,
        "position": athlete.position.abbreviation if athlete.position else None,
        "headshot": athlete.headshot.href if athlete.headshot else None,
        "player_id": player.id if player else None,
    }


@router.get("/status")
async def get_status(container: ServiceContainer = Depends(get_container)):
    return {
        "status": "ok",
        "core_api": settings.espn_core_api_url,
        "site_api": settings.espn_site_api_url,
        "jobs": {kind: container.job(kind).is_running for kind in JOB_KINDS},
    }
