import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from espn_scrape.config import settings
from espn_scrape.schemas.espn import ReferenceEnvelope, to_link, Reference
from espn_scrape.services.pacing import Pacer

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class ReferenceFetcher:
    """
    Materializes ESPN ``$ref`` collections.

    A collection endpoint returns an envelope ``{count, pageCount, items}`` whose
    items are mostly ``{"$ref": url}`` pointers; each pointer costs one extra GET.
    All calls are sequential. Every GET of a collection waits on the item pacer,
    and envelope GETs also wait on the page pacer.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        item_pacer: Optional[Pacer] = None,
        page_pacer: Optional[Pacer] = None,
    ):
        self._http_client = client
        self._owns_client = client is None
        self.item_pacer = item_pacer or Pacer(settings.espn_item_interval, name="espn-item")
        self.page_pacer = page_pacer or Pacer(settings.espn_page_interval, name="espn-page")

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=settings.http_timeout_espn,
                headers={"User-Agent": settings.http_user_agent},
                follow_redirects=True,
            )
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None
            logger.info("ReferenceFetcher HTTP client closed")

    async def fetch_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a URL and decode the JSON body. HTTP errors propagate."""
        client = await self._get_client()
        response = await client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    async def fetch_bytes(self, url: str) -> httpx.Response:
        client = await self._get_client()
        response = await client.get(url)
        response.raise_for_status()
        return response

    async def fetch_entity(self, url: str, model: Type[T]) -> Optional[T]:
        """Fetch and decode one entity. Returns None (and logs) on failure."""
        try:
            data = await self.fetch_json(url)
            return model.model_validate(data)
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch {model.__name__} from {url}: {e}")
        except (ValidationError, ValueError) as e:
            logger.error(f"Failed to decode {model.__name__} from {url}: {e}")
        return None

    async def fetch_collection(self, url: str, model: Type[T]) -> List[T]:
        """
        Fetch every page of a ``$ref`` collection and resolve each item.

        Returns an empty list if any envelope request fails; a failed item is
        skipped with a warning and the rest of the page continues.
        """
        results: List[T] = []
        page = 1
        total_pages = 1

        try:
            while page <= total_pages:
                # envelopes are paced against each other and against item GETs
                await self.page_pacer.wait()
                await self.item_pacer.wait()
                data = await self.fetch_json(url, params={"page": page})
                envelope = ReferenceEnvelope.model_validate(data)

                if page == 1:
                    total_pages = max(1, envelope.page_count)
                    logger.debug(f"{url}: {envelope.count} items across {total_pages} page(s)")

                if envelope.items is None:
                    break

                for raw_item in envelope.items:
                    item = await self._resolve_item(raw_item, model, url)
                    if item is not None:
                        results.append(item)

                page += 1
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            logger.error(f"Failed to fetch collection {url} (page {page}): {e}")
            return []

        return results

    async def _resolve_item(self, raw_item: Dict[str, Any], model: Type[T], source_url: str) -> Optional[T]:
        try:
            link = to_link(raw_item, model)
        except ValidationError as e:
            logger.warning(f"Skipping malformed inline item in {source_url}: {e}")
            return None
        if link is None:
            logger.warning(f"Skipping unrecognized item in {source_url}: {raw_item!r}")
            return None
        if not isinstance(link, Reference):
            return link.value

        await self.item_pacer.wait()
        try:
            data = await self.fetch_json(link.url)
            return model.model_validate(data)
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            logger.warning(f"Skipping item {link.url}: {e}")
            return None
