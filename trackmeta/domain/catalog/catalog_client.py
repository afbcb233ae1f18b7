# trackmeta/domain/catalog/catalog_client.py
import logging
import threading
from typing import Any, List, Optional

import requests
import spotipy
from pydantic import BaseModel, Field
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when the upstream catalog cannot resolve an ISRC."""


class TrackNotFoundError(CatalogError):
    """The catalog search returned no tracks for the ISRC."""


class CatalogConfigurationError(CatalogError):
    """Client credentials are missing."""


class TrackCandidate(BaseModel):
    """Metadata for one track as resolved from the catalog, ready to be stored."""

    isrc: str
    image_uri: Optional[str] = None
    title: str
    popularity: int = Field(default=0, ge=0)
    artists: List[str] = Field(default_factory=list)


def select_most_popular(items: List[dict]) -> dict:
    """Return the item with the highest popularity; ties keep the first one seen."""
    best = items[0]
    for item in items[1:]:
        if (item.get('popularity') or 0) > (best.get('popularity') or 0):
            best = item
    return best


def candidate_from_search_item(isrc: str, item: dict) -> TrackCandidate:
    images = (item.get('album') or {}).get('images') or []
    return TrackCandidate(
        isrc=isrc,
        image_uri=images[0].get('url') if images else None,
        title=item['name'],
        popularity=item.get('popularity') or 0,
        artists=[artist['name'] for artist in item.get('artists') or [] if artist.get('name')],
    )


class CatalogClient:
    def __init__(self, client_id=None, client_secret=None,
                 spotify_client=None, search_limit: int = 20):
        """Wraps a Spotipy client authenticated with the client-credentials grant.

        The access token is held in memory by Spotipy's auth manager and
        reused until it expires, at which point the next call fetches a new
        one. Pass ``spotify_client`` to inject a ready client (tests do).
        """
        self._client_id = client_id
        self._client_secret = client_secret
        self._search_limit = search_limit
        self._lock = threading.RLock()

        self.sp = spotify_client
        if self.sp is not None:
            logger.info("Spotipy client injected into CatalogClient.")
        elif not client_id or not client_secret:
            raise CatalogConfigurationError("Spotify client ID and client secret must be configured.")

    def _spotify(self) -> spotipy.Spotify:
        with self._lock:
            if self.sp is None:
                self.sp = spotipy.Spotify(
                    auth_manager=SpotifyClientCredentials(
                        client_id=self._client_id,
                        client_secret=self._client_secret,
                        cache_handler=MemoryCacheHandler(),
                    ),
                    retries=0,
                    status_retries=0,
                )
                logger.info("Spotipy client initialized successfully in CatalogClient.")
            return self.sp

    def _search(self, isrc: str) -> Any:
        try:
            return self._spotify().search(q=f"isrc:{isrc}", type='track', limit=self._search_limit)
        except SpotifyOauthError as exc:
            logger.error("Failed to get Spotify API token: %s", exc, exc_info=True)
            raise CatalogError(f"failed to get Spotify API token: {exc}") from exc
        except (SpotifyException, requests.RequestException) as exc:
            logger.error("Spotify search failed for ISRC %s: %s", isrc, exc, exc_info=True)
            raise CatalogError(f"failed to search for track: {exc}") from exc

    def fetch_by_isrc(self, isrc: str) -> TrackCandidate:
        """Resolve an ISRC to the most popular matching catalog track."""
        results = self._search(isrc)
        try:
            raw_items = ((results or {}).get('tracks') or {}).get('items') or []
            items = [item for item in raw_items if isinstance(item, dict)]
        except (AttributeError, TypeError) as exc:
            raise CatalogError(f"malformed search response: {exc}") from exc
        if not items:
            logger.info("No catalog track found for ISRC %s", isrc)
            raise TrackNotFoundError("no track found for the given ISRC")

        try:
            candidate = candidate_from_search_item(isrc, select_most_popular(items))
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            logger.error("Could not map catalog result for ISRC %s: %s", isrc, exc, exc_info=True)
            raise CatalogError(f"malformed track in search response: {exc}") from exc

        logger.info(
            "Resolved ISRC %s to '%s' (popularity=%s, %d candidates)",
            isrc, candidate.title, candidate.popularity, len(items),
        )
        return candidate


__all__ = [
    "CatalogClient",
    "CatalogError",
    "CatalogConfigurationError",
    "TrackCandidate",
    "TrackNotFoundError",
    "candidate_from_search_item",
    "select_most_popular",
]
