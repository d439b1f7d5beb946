import asyncio
import logging
import time
from typing import Any, Optional

logger = logging.getLogger(__name__)


class SingleRunJob:
    """
    A job kind that never runs concurrently with itself.

    A trigger that arrives while a run is in progress is skipped (``run``
    returns None), not queued. Exceptions from ``execute`` are logged and
    re-raised so the caller can mark the run failed.
    """

    name = "job"

    def __init__(self):
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def run(self, **params: Any) -> Optional[Any]:
        if self._lock.locked():
            logger.warning(f"{self.name} is already running; skipping this trigger")
            return None

        async with self._lock:
            started = time.monotonic()
            logger.info(f"{self.name} started with {params or 'defaults'}")
            try:
                summary = await self.execute(**params)
            except Exception:
                logger.exception(f"{self.name} failed after {time.monotonic() - started:.1f}s")
                raise
            logger.info(f"{self.name} finished in {time.monotonic() - started:.1f}s: {summary}")
            return summary

    async def execute(self, **params: Any) -> Any:
        raise NotImplementedError
