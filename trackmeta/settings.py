#!/usr/bin/env python
"""
Validated application settings.

Reads the values resolved by config.Config and checks them before the
service starts, so a missing credential or a bad port fails at boot rather
than on the first request.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import Config


class AppSettings(BaseModel):
    """Runtime configuration for database, catalog and HTTP listener."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    host: str = "localhost"
    port: int = Field(default=3306, ge=1, le=65535)
    user: str = "root"
    password: str = ""
    database: str = "spotify"
    charset: str = "utf8mb4"
    database_uri: str

    api_client_id: str
    api_client_secret: str
    search_limit: int = Field(default=20, ge=1, le=50)

    listen_port: int = Field(default=8080, ge=1, le=65535)
    debug: bool = False

    @field_validator("api_client_id", "api_client_secret", "database_uri", "host", "database", mode="before")
    @classmethod
    def _require_non_blank(cls, value):
        if value is None or not str(value).strip():
            raise ValueError("must be provided")
        return str(value).strip()


def load_app_settings() -> AppSettings:
    """Build settings from the current Config, raising ValidationError when invalid."""
    return AppSettings(
        host=Config.DB_HOST,
        port=Config.DB_PORT,
        user=Config.DB_USER,
        password=Config.DB_PASSWORD,
        database=Config.DB_NAME,
        charset=Config.DB_CHARSET,
        database_uri=Config.SQLALCHEMY_DATABASE_URI,
        api_client_id=Config.SPOTIPY_CLIENT_ID,
        api_client_secret=Config.SPOTIPY_CLIENT_SECRET,
        search_limit=Config.CATALOG_SEARCH_LIMIT,
        listen_port=Config.PORT,
        debug=Config.DEBUG,
    )


__all__ = ["AppSettings", "load_app_settings"]
