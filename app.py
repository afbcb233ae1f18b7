import os
import sys
import logging
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Flask specific imports ---
from flask import Flask, request, g
from pydantic import ValidationError

# --- Import configuration and the service wiring ---
from config import Config
from trackmeta.database.db_manager import initialize_database, DatabaseUnavailableError
from trackmeta.domain.catalog import CatalogClient
from trackmeta.domain.tracks import TrackIngestService, TrackRepository
from trackmeta.interfaces.http.routes import track_bp, health_bp
from trackmeta.observability import configure_structured_logging
from trackmeta.settings import load_app_settings


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str, enable_console: bool = False) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when enabled
      - Werkzeug/Flask loggers routed to root (no extra console spam)

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_path = os.path.join(log_dir, f"log-{timestamp}")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Preserve structured handlers; remove existing FileHandlers to avoid duplicates
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def create_app(test_config=None, catalog_client=None, settings=None):
    """Build the Flask application.

    ``settings`` is a validated AppSettings; when given, the database URI
    and catalog credentials are taken from it instead of raw Config values.
    ``test_config`` overrides values loaded from Config; ``catalog_client``
    replaces the Spotify-backed client (tests inject a stub here).
    Raises DatabaseUnavailableError when the database cannot be reached.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if settings is not None:
        app.config.update(
            SQLALCHEMY_DATABASE_URI=settings.database_uri,
            SPOTIPY_CLIENT_ID=settings.api_client_id,
            SPOTIPY_CLIENT_SECRET=settings.api_client_secret,
            CATALOG_SEARCH_LIMIT=settings.search_limit,
            DEBUG=settings.debug,
        )
    if test_config:
        app.config.update(test_config)
    configure_structured_logging(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    # Initialize database (fatal on connection failure)
    initialize_database(app)

    if catalog_client is None:
        catalog_client = CatalogClient(
            client_id=app.config.get('SPOTIPY_CLIENT_ID'),
            client_secret=app.config.get('SPOTIPY_CLIENT_SECRET'),
            search_limit=app.config.get('CATALOG_SEARCH_LIMIT', 20),
        )
    track_repository = TrackRepository()

    # Expose services for routes
    app.extensions['track_repository'] = track_repository
    app.extensions['track_ingest'] = TrackIngestService(catalog_client, track_repository)

    # --- Register Blueprints ---
    app.register_blueprint(track_bp)
    app.register_blueprint(health_bp)

    return app


def main() -> int:
    debug_mode = bool(Config.DEBUG)
    # In debug with reloader: only configure file logging in the child process
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(Config.LOG_DIR, enable_console=Config.ENABLE_CONSOLE_LOGS)
        logger.info("File logging initialized at %s", log_file_path)

    try:
        settings = load_app_settings()
    except ValidationError as e:
        logger.critical("Invalid configuration: %s", e)
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return 1

    try:
        app = create_app(settings=settings)
    except DatabaseUnavailableError as e:
        logger.critical("%s", e)
        print(str(e), file=sys.stderr)
        return 1

    # Route app.logger through root handlers, keep levels consistent
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True
    logger.info("Starting Flask application on port %s...", settings.listen_port)
    app.run(debug=settings.debug, host='0.0.0.0', port=settings.listen_port, threaded=True)
    return 0


if __name__ == '__main__':
    sys.exit(main())
