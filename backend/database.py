# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
SQLAlchemy engine, session factory, declarative base, the FastAPI
dependency that provides a transactional DB session per request, and the
dialect-aware INSERT used for upserts and skip-duplicate bulk inserts.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.dialects import mysql, postgresql, sqlite

from core.config import settings

# pool_pre_ping keeps idle connections alive across MySQL's wait_timeout
engine = create_engine(settings.database_url, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_conn, connection_record):
    """SQLite ignores FOREIGN KEY clauses unless asked per connection."""
    if type(dbapi_conn).__module__.startswith("sqlite3"):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db():
    """
    FastAPI dependency.  Yields a session for the duration of the request,
    then closes it.  Use with Depends(get_db).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ---------------------------------------------------------------------------
# Dialect-specific INSERT
# ---------------------------------------------------------------------------
# The generic insert() has no conflict clause.  Each supported backend ships
# its own construct:
#   sqlite / postgresql  →  .on_conflict_do_nothing() / .on_conflict_do_update()
#   mysql                →  .prefix_with("IGNORE") / .on_duplicate_key_update()

_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
    "mysql": mysql.insert,
    "mariadb": mysql.insert,
}


def dialect_name(db: Session) -> str:
    return db.get_bind().dialect.name


def dialect_insert(db: Session, model):
    """Return the INSERT construct of the session's dialect for *model*."""
    name = dialect_name(db)
    try:
        return _INSERTS[name](model.__table__)
    except KeyError:
        raise RuntimeError(f"Unsupported database dialect: {name}") from None


def insert_ignore(db: Session, model, rows: list):
    """INSERT *rows*, silently skipping any that hit a unique constraint."""
    stmt = dialect_insert(db, model).values(rows)
    if dialect_name(db) in ("mysql", "mariadb"):
        return stmt.prefix_with("IGNORE")
    return stmt.on_conflict_do_nothing()
