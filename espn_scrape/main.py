import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from espn_scrape.config import settings
from espn_scrape.database import init_db
from espn_scrape.api.v1.router import api_router
from espn_scrape.dependencies import ServiceContainer
from espn_scrape.logging_config import configure_logging
from espn_scrape.scheduler import create_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging()
    await init_db()
    # Shared services and job instances live on app.state
    app.state.container = ServiceContainer()

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = create_scheduler(app.state.container)
        scheduler.start()
        logger.info("Scheduler started")
    else:
        logger.info("Scheduler disabled")

    yield

    if scheduler is not None:
        scheduler.shutdown(wait=False)
    # Shutdown - cleanup HTTP clients
    if getattr(app.state, "container", None) is not None:
        await app.state.container.close()


app = FastAPI(
    title=settings.app_name,
    description="NFL stats, schedule, player identity and headshot ingestion from ESPN",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.app_name}
