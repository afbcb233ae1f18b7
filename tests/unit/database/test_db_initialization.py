import pytest
from flask import Flask
from sqlalchemy import inspect


def _bare_app(uri):
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    return app


@pytest.mark.unit
def test_initialize_database_creates_sqlite_directory_and_tables(tmp_path):
    target_dir = tmp_path / "nested" / "dbdir"
    db_file = target_dir / "test.db"
    uri = f"sqlite:///{db_file}".replace("\\", "/")

    from trackmeta.database.db_manager import initialize_database, db, Track

    app = _bare_app(uri)
    initialize_database(app)

    assert target_dir.exists()
    with app.app_context():
        tables = set(inspect(db.engine).get_table_names())
        assert {"tracks", "artists"} <= tables
        assert db.session.query(Track).count() == 0


@pytest.mark.unit
def test_initialize_database_is_idempotent(tmp_path):
    from trackmeta.database.db_manager import initialize_database, db, Track

    uri = f"sqlite:///{(tmp_path / 'again.db').as_posix()}"
    first = _bare_app(uri)
    initialize_database(first)
    with first.app_context():
        db.session.add(Track(isrc="USRC17607839", title="Track A", popularity=50))
        db.session.commit()

    second = _bare_app(uri)
    initialize_database(second)
    with second.app_context():
        assert db.session.query(Track).count() == 1


@pytest.mark.unit
def test_initialize_database_unreachable_raises(tmp_path):
    from trackmeta.database.db_manager import initialize_database, DatabaseUnavailableError

    # A directory path cannot be opened as a SQLite database file
    app = _bare_app(f"sqlite:///{tmp_path.as_posix()}")
    with pytest.raises(DatabaseUnavailableError):
        initialize_database(app)
