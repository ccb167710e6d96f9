"""Database engine and session factory configuration."""

from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from organize_folder.packages.scanner.core.config import get_settings

settings = get_settings()


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Build an engine; SQLite connections get foreign keys turned on.

    Cascading deletes of ``file_objects`` rely on ``ON DELETE CASCADE``, which
    SQLite ignores unless ``PRAGMA foreign_keys`` is enabled per connection.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True, echo=echo)

    database = parsed.database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # pragma: no cover - driver hook
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


# ``echo`` mirrors SQL logs when enabled in settings for easier debugging.
engine = create_db_engine(settings.sql_database_url, echo=settings.database_echo)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
