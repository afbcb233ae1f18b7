from __future__ import annotations

import logging

from trackmeta.domain.catalog import CatalogClient
from trackmeta.database.db_manager import Track

from .repository import TrackRepository


logger = logging.getLogger(__name__)


class TrackIngestService:
    """Fetches a track from the catalog and persists it under its ISRC."""

    def __init__(self, catalog_client: CatalogClient, repository: TrackRepository):
        self.catalog_client = catalog_client
        self.repository = repository

    def fetch_and_store(self, isrc: str) -> Track:
        logger.info("Fetching catalog metadata for ISRC %s", isrc)
        candidate = self.catalog_client.fetch_by_isrc(isrc)
        return self.repository.upsert(isrc, candidate)


__all__ = ["TrackIngestService"]
