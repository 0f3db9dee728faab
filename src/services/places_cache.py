"""
Per-widget memo of place details keyed by place id.

Entries live as long as the owning widget; there is no TTL and no eviction.
Failed lookups are not memoised, so the next request tries again.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from src.services.google_places_service import PlacesServiceError

logger = logging.getLogger(__name__)

DetailsFetcher = Callable[[str], Awaitable[Dict[str, Any]]]


class PlaceDetailsCache:
    def __init__(self, fetcher: DetailsFetcher):
        self._fetcher = fetcher
        self._store: Dict[str, Dict[str, Any]] = {}
        self.hits = 0
        self.misses = 0

    def __contains__(self, place_id: str) -> bool:
        return place_id in self._store

    def __len__(self) -> int:
        return len(self._store)

    def peek(self, place_id: str) -> Optional[Dict[str, Any]]:
        return self._store.get(place_id)

    async def get(self, place_id: str) -> Optional[Dict[str, Any]]:
        """Return cached details, fetching them on first use."""
        if not place_id:
            return None
        if place_id in self._store:
            self.hits += 1
            logger.debug(f"Details cache hit for {place_id}")
            return self._store[place_id]

        self.misses += 1
        try:
            details = await self._fetcher(place_id)
        except PlacesServiceError as e:
            logger.error(f"Error fetching place details for {place_id}: {e}")
            return None
        self._store[place_id] = details
        return details

    def clear(self):
        """Clear all cached entries (useful for testing)."""
        self._store = {}
        logger.info("Details cache cleared")
