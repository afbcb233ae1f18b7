"""Persistence layer: SQLAlchemy models and schema setup."""

from .db_manager import db, Track, Artist, initialize_database, DatabaseUnavailableError

__all__ = ["db", "Track", "Artist", "initialize_database", "DatabaseUnavailableError"]
