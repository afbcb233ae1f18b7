from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from trackmeta.database.db_manager import db, Artist, Track
from trackmeta.domain.catalog import TrackCandidate


logger = logging.getLogger(__name__)

# InnoDB aborts one of two racing gap-locked inserts with this code
MYSQL_DEADLOCK = 1213


def is_write_conflict(exc: SQLAlchemyError) -> bool:
    """True when a concurrent writer for the same ISRC made this transaction fail."""
    if isinstance(exc, IntegrityError):
        return True
    if isinstance(exc, OperationalError):
        args = getattr(exc.orig, 'args', ()) or ()
        return bool(args) and args[0] == MYSQL_DEADLOCK
    return False


class TrackStoreError(Exception):
    """Raised when track metadata cannot be read or written."""


class TrackRepository:
    """Reads and writes Track rows through the Flask-SQLAlchemy session."""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def find_by_isrc(self, isrc: str) -> Optional[Track]:
        return self.session.execute(
            select(Track).where(Track.isrc == isrc)
        ).scalar_one_or_none()

    def find_by_artist_name(self, fragment: str) -> List[Track]:
        """Tracks with at least one artist whose name contains ``fragment``.

        LIKE wildcards in the fragment are escaped, so ``%`` and ``_`` only
        match themselves.
        """
        stmt = (
            select(Track)
            .where(Track.artists.any(Artist.name.contains(fragment, autoescape=True)))
            .order_by(Track.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def _find_for_update(self, isrc: str) -> Optional[Track]:
        return self.session.execute(
            select(Track).where(Track.isrc == isrc).with_for_update()
        ).scalar_one_or_none()

    def _apply(self, isrc: str, candidate: TrackCandidate) -> Track:
        track = self._find_for_update(isrc)
        if track is None:
            track = Track(isrc=isrc)
            self.session.add(track)
        track.image_uri = candidate.image_uri
        track.title = candidate.title
        track.popularity = candidate.popularity
        # Replace wholesale; delete-orphan removes the previous rows
        track.artists = [
            Artist(name=name, position=position)
            for position, name in enumerate(candidate.artists)
        ]
        self.session.flush()
        return track

    def upsert(self, isrc: str, candidate: TrackCandidate) -> Track:
        """Insert the track if its ISRC is new, otherwise overwrite it in place."""
        try:
            try:
                track = self._apply(isrc, candidate)
                self.session.commit()
            except (IntegrityError, OperationalError) as conflict:
                if not is_write_conflict(conflict):
                    raise
                # A concurrent request inserted the same ISRC first; update that row
                self.session.rollback()
                logger.info("Concurrent write detected for ISRC %s; applying as update", isrc)
                track = self._apply(isrc, candidate)
                self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to store track metadata for %s: %s", isrc, e, exc_info=True)
            raise TrackStoreError(f"failed to store track metadata: {e}") from e
        logger.info("Stored track %s (%s)", isrc, track.title)
        return track


__all__ = ["TrackRepository", "TrackStoreError", "is_write_conflict"]
