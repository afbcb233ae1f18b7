"""Catalog domain: resolving ISRCs through the Spotify Web API."""

from .catalog_client import (
    CatalogClient,
    CatalogConfigurationError,
    CatalogError,
    TrackCandidate,
    TrackNotFoundError,
)

__all__ = [
    "CatalogClient",
    "CatalogConfigurationError",
    "CatalogError",
    "TrackCandidate",
    "TrackNotFoundError",
]
