import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from espn_scrape.dependencies import JOB_KINDS, ServiceContainer, get_container
from espn_scrape.schemas import JobTriggerResponse

logger = logging.getLogger(__name__)
router = APIRouter()

# Parameters each job kind accepts
JOB_PARAMS = {
    "stats": ("season", "start_week", "end_week", "season_type"),
    "schedule": ("season", "start_week", "end_week", "season_type"),
    "players": ("season",),
    "headshots": ("season", "force_refresh"),
}


@router.post("/{kind}", status_code=202, response_model=JobTriggerResponse)
async def trigger_job(
    kind: str,
    background_tasks: BackgroundTasks,
    season: Optional[int] = Query(None, ge=2000, le=2100),
    start_week: Optional[int] = Query(None, ge=1, le=22),
    end_week: Optional[int] = Query(None, ge=1, le=22),
    season_type: Optional[int] = Query(None, ge=1, le=4),
    force_refresh: bool = False,
    container: ServiceContainer = Depends(get_container),
):
    """Start a job run in the background. Reports 'skipped' if that job is already running."""
    if kind not in JOB_KINDS:
        raise HTTPException(status_code=404, detail=f"Unknown job '{kind}'")

    job = container.job(kind)
    if job.is_running:
        return JobTriggerResponse(job=kind, status="skipped", detail="already running")

    supplied: Dict[str, Any] = {
        "season": season,
        "start_week": start_week,
        "end_week": end_week,
        "season_type": season_type,
        "force_refresh": force_refresh or None,
    }
    params = {k: v for k, v in supplied.items() if k in JOB_PARAMS[kind] and v is not None}

    background_tasks.add_task(job.run, **params)
    logger.info(f"Queued {kind} job with {params or 'defaults'}")
    return JobTriggerResponse(job=kind, status="started")


@router.get("/")
async def job_status(container: ServiceContainer = Depends(get_container)):
    """Whether each job kind is currently running."""
    return {kind: {"running": container.job(kind).is_running} for kind in JOB_KINDS}
