"""Engine, session and schema management for the notebook index database."""

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Generator, List

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations
from loguru import logger
from sqlalchemy import Connection, Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from zk_next.models import Base, NoteRecord, SchemaVersion
from zk_next.models.search import (
    BACKFILL_SEARCH_INDEX,
    CREATE_SEARCH_INDEX,
    CREATE_TRIGGERS,
    DROP_TRIGGERS,
)


@dataclass(frozen=True)
class Migration:
    """A schema change applied at most once, in version order."""

    version: int
    description: str
    apply: Callable[[Connection], None]


def table_exists(connection: Connection, table: str) -> bool:
    result = connection.execute(
        text("SELECT 1 FROM sqlite_master WHERE name = :table"), {"table": table}
    )
    return result.fetchone() is not None


def column_exists(connection: Connection, table: str, column: str) -> bool:
    """Check if a column exists in a table (idempotent migration support)."""
    result = connection.execute(text(f"PRAGMA table_info({table})"))
    columns = [row[1] for row in result]
    return column in columns


def _create_notes_table(connection: Connection) -> None:
    # No-op on databases created before schema versions were recorded
    Base.metadata.create_all(connection, tables=[NoteRecord.__table__])


def _add_note_content_columns(connection: Connection) -> None:
    op = Operations(MigrationContext.configure(connection))
    for column in ("title", "body", "filename"):
        if not column_exists(connection, "notes", column):
            logger.info(f"Adding column notes.{column}")
            op.add_column("notes", sa.Column(column, sa.Text(), nullable=True))


def _create_search_index(connection: Connection) -> None:
    already_present = table_exists(connection, "notes_fts")
    connection.execute(CREATE_SEARCH_INDEX)
    if not already_present:
        connection.execute(BACKFILL_SEARCH_INDEX)


MIGRATIONS: List[Migration] = [
    Migration(1, "create notes table", _create_notes_table),
    Migration(2, "add title, body and filename columns", _add_note_content_columns),
    Migration(3, "create notes_fts full-text table", _create_search_index),
]

SCHEMA_VERSION = MIGRATIONS[-1].version


def get_schema_version(connection: Connection) -> int:
    """Return the recorded schema version, 0 for a database that has none."""
    version = connection.execute(sa.select(sa.func.max(SchemaVersion.version))).scalar()
    return version or 0


def set_schema_version(connection: Connection, version: int) -> None:
    connection.execute(sa.delete(SchemaVersion))
    connection.execute(sa.insert(SchemaVersion).values(version=version))


def run_migrations(connection: Connection) -> int:
    """Apply every migration newer than the recorded version.

    Returns:
        The schema version after migrating
    """
    Base.metadata.create_all(connection, tables=[SchemaVersion.__table__])
    current = get_schema_version(connection)
    for migration in MIGRATIONS:
        if migration.version <= current:
            continue
        logger.debug(f"Applying migration {migration.version}: {migration.description}")
        migration.apply(connection)
        set_schema_version(connection, migration.version)
        current = migration.version
    return current


def install_triggers(connection: Connection) -> None:
    """Drop and recreate the triggers that mirror notes into notes_fts."""
    for statement in DROP_TRIGGERS:
        connection.execute(statement)
    for statement in CREATE_TRIGGERS:
        connection.execute(statement)


def init_db(engine: Engine) -> None:
    """Bring the schema up to date and (re)install triggers."""
    with engine.begin() as connection:
        version = run_migrations(connection)
        install_triggers(connection)
    logger.debug(f"Database ready at schema version {version}")


def get_db_url(db_path: Path) -> str:
    """Get SQLAlchemy URL for database path."""
    return f"sqlite:///{db_path}"


def create_db_engine(db_path: Path) -> Engine:
    db_url = get_db_url(db_path)
    logger.debug(f"Creating engine for db_url: {db_url}")
    return create_engine(db_url)


@contextmanager
def engine_session_factory(
    db_path: Path,
) -> Generator[tuple[Engine, sessionmaker[Session]], None, None]:
    """Create an engine on an up to date schema and a session factory for it.

    The engine is disposed when the context exits.
    """
    engine = create_db_engine(db_path)
    try:
        factory = sessionmaker(engine, expire_on_commit=False)

        logger.debug("Initializing database...")
        init_db(engine)

        yield engine, factory
    finally:
        engine.dispose()


@contextmanager
def scoped_session(session_maker: sessionmaker[Session]) -> Generator[Session, None, None]:
    """
    Get a session with proper lifecycle management.

    Args:
        session_maker: Session maker to create sessions from
    """
    session = session_maker()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
