"""
Service container shared by the FastAPI app, the scheduler and the CLI.

Services and jobs are created lazily on first access. Each job instance
carries its own non-concurrency guard, so every host must reuse one container.
"""
from typing import Dict, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import async_sessionmaker

from espn_scrape.database import async_session
from espn_scrape.jobs.base import SingleRunJob
from espn_scrape.jobs.headshot_sync_job import HeadshotSyncJob
from espn_scrape.jobs.player_sync_job import PlayerSyncJob
from espn_scrape.jobs.schedule_sync_job import ScheduleSyncJob
from espn_scrape.jobs.weekly_stats_job import WeeklyStatsJob
from espn_scrape.services.espn_data_service import EspnDataService
from espn_scrape.services.player_mapping_service import PlayerMappingService
from espn_scrape.services.player_stats_service import PlayerStatsService
from espn_scrape.services.storage_service import BlobStorage, LocalBlobStorage
from espn_scrape.services.store_service import StoreService

JOB_KINDS = ("stats", "schedule", "players", "headshots")


class ServiceContainer:
    """Lazily built services and the four job instances."""

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker] = None,
        espn: Optional[EspnDataService] = None,
        storage: Optional[BlobStorage] = None,
    ):
        self.session_factory = session_factory or async_session
        self._espn = espn
        self._storage = storage
        self._store: Optional[StoreService] = None
        self._jobs: Dict[str, SingleRunJob] = {}

    @property
    def espn(self) -> EspnDataService:
        if self._espn is None:
            self._espn = EspnDataService()
        return self._espn

    @property
    def store(self) -> StoreService:
        if self._store is None:
            self._store = StoreService(self.session_factory)
        return self._store

    @property
    def storage(self) -> BlobStorage:
        if self._storage is None:
            self._storage = LocalBlobStorage()
        return self._storage

    def _build_job(self, kind: str) -> SingleRunJob:
        if kind == "stats":
            return WeeklyStatsJob(
                espn=self.espn,
                mapper=PlayerMappingService(self.store),
                stats_service=PlayerStatsService(self.store),
            )
        if kind == "schedule":
            return ScheduleSyncJob(espn=self.espn, store=self.store)
        if kind == "players":
            return PlayerSyncJob(espn=self.espn, store=self.store)
        if kind == "headshots":
            return HeadshotSyncJob(espn=self.espn, store=self.store, storage=self.storage)
        raise KeyError(f"Unknown job kind: {kind}")

    def job(self, kind: str) -> SingleRunJob:
        """Get or create the job instance for a kind (stats, schedule, players, headshots)."""
        if kind not in self._jobs:
            self._jobs[kind] = self._build_job(kind)
        return self._jobs[kind]

    async def close(self) -> None:
        """Close the ESPN HTTP client if one was created."""
        if self._espn is not None:
            await self._espn.close()


def get_container(request: Request) -> ServiceContainer:
    """Get the shared ServiceContainer from app.state."""
    return request.app.state.container


def get_store(request: Request) -> StoreService:
    return get_container(request).store
