from fastapi import APIRouter

from espn_scrape.api.v1 import jobs, espn, stats

api_router = APIRouter()

api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_router.include_router(espn.router, prefix="/espn", tags=["espn"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
