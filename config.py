#!/usr/bin/env python
# config.py
import os
from urllib.parse import quote

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def build_database_uri(host: str, port: int, user: str, password: str, database: str, charset: str) -> str:
    """Compose a MySQL connection URI for the PyMySQL driver."""
    credentials = quote(user, safe='')
    if password:
        credentials = f"{credentials}:{quote(password, safe='')}"
    return f"mysql+pymysql://{credentials}@{host}:{port}/{database}?charset={charset}"


class Config:
    # Database connection parameters
    DB_HOST = os.getenv('DB_HOST', 'localhost')
    DB_PORT = _get_int('DB_PORT', 3306)
    DB_USER = os.getenv('DB_USER', 'root')
    DB_PASSWORD = os.getenv('DB_PASSWORD', '')
    DB_NAME = os.getenv('DB_NAME', 'spotify')
    DB_CHARSET = os.getenv('DB_CHARSET', 'utf8mb4')

    # DATABASE_URL wins over the discrete parameters (tests point it at SQLite)
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or build_database_uri(
        DB_HOST, DB_PORT, DB_USER, DB_PASSWORD, DB_NAME, DB_CHARSET
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}

    # Spotify API
    SPOTIPY_CLIENT_ID = os.environ.get('SPOTIPY_CLIENT_ID')
    SPOTIPY_CLIENT_SECRET = os.environ.get('SPOTIPY_CLIENT_SECRET')
    # Number of search results considered when resolving an ISRC (Spotify caps at 50)
    CATALOG_SEARCH_LIMIT = _get_int('CATALOG_SEARCH_LIMIT', 20)

    # HTTP listener
    PORT = _get_int('PORT', 8080)

    # Runtime behavior
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    LOG_DIR = os.getenv('LOG_DIR') or os.path.join(basedir, 'trackmeta', 'log')
