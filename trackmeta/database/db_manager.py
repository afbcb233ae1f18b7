# trackmeta/database/db_manager.py
from flask_sqlalchemy import SQLAlchemy
import os
import logging
from datetime import datetime
from sqlalchemy import ForeignKey, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import relationship

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    """Raised when the configured database cannot be reached at startup."""


class Track(db.Model):
    __tablename__ = 'tracks'

    id = db.Column(db.Integer, primary_key=True)
    isrc = db.Column(db.String(32), unique=True, nullable=False, index=True)
    image_uri = db.Column(db.String(500), nullable=True)  # First album image, if any
    title = db.Column(db.String(255), nullable=False)
    popularity = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    artists = relationship(
        'Artist',
        back_populates='track',
        order_by='Artist.position',
        cascade='all, delete-orphan',
        lazy='selectin',
    )

    def to_dict(self, *, include_id: bool = True) -> dict:
        """Converts the Track to a dictionary for API responses."""
        data = {
            'image_uri': self.image_uri,
            'title': self.title,
            'artists': [artist.to_dict() for artist in self.artists],
            'popularity': self.popularity,
        }
        if include_id:
            data = {'id': self.id, **data}
        return data

    def __repr__(self) -> str:
        return f"<Track {self.isrc}: {self.title}>"


class Artist(db.Model):
    __tablename__ = 'artists'

    id = db.Column(db.Integer, primary_key=True)
    track_id = db.Column(db.Integer, ForeignKey('tracks.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    track = relationship('Track', back_populates='artists')

    def to_dict(self) -> dict:
        return {'name': self.name}

    def __repr__(self) -> str:
        return f"<Artist {self.name}>"


def _ensure_sqlite_directory(uri):
    url = make_url(uri)
    # Only handle file-based SQLite (not :memory:)
    if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
        db_dir = os.path.dirname(url.database)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)
            logger.info("Created SQLite DB directory: %s", db_dir)


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance,
    checks that the database answers and creates the tracks/artists
    tables if they don't already exist.

    Raises DatabaseUnavailableError when the connection cannot be made.
    """
    db.init_app(app)

    uri = app.config.get('SQLALCHEMY_DATABASE_URI')
    try:
        if uri:
            _ensure_sqlite_directory(uri)
    except Exception as e:
        # Don't block app startup on path parsing issues; log and continue
        logger.warning("Could not ensure SQLite directory exists: %s", e)

    with app.app_context():
        try:
            with db.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            db.create_all()
        except SQLAlchemyError as exc:
            logger.error("Error connecting to database: %s", exc)
            raise DatabaseUnavailableError(f"Error connecting to database: {exc}") from exc
        logger.info("Database tables created or already exist.")
