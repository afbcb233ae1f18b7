"""Track storage and the fetch-and-store workflow."""

from .repository import TrackRepository, TrackStoreError
from .ingest import TrackIngestService

__all__ = ["TrackRepository", "TrackStoreError", "TrackIngestService"]
