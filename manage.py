# manage.py
import sys

from flask import Flask

from config import Config
from trackmeta.database.db_manager import initialize_database, DatabaseUnavailableError


def create_db() -> int:
    """Creates the tracks and artists tables for the configured database."""
    app = Flask(__name__)
    app.config.from_object(Config)
    print(f"Using database: {app.config['SQLALCHEMY_DATABASE_URI'].split('@')[-1]}")
    try:
        initialize_database(app)
    except DatabaseUnavailableError as e:
        print(str(e), file=sys.stderr)
        return 1
    print("Database tables created!")
    return 0


if __name__ == '__main__':
    if len(sys.argv) > 1 and sys.argv[1] == 'create_db':
        sys.exit(create_db())
    print("Usage: python manage.py create_db", file=sys.stderr)
    sys.exit(2)
