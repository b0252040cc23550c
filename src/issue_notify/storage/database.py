"""SQLite-backed notification database: users, rules and subscriptions."""

import sqlite3
from pathlib import Path
from typing import Optional, Union

from ..exceptions import StorageError
from ..logging_config import get_logger
from .base import Session, SessionFactory

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1


class DbSession(Session):
    """One sqlite connection, open for the length of a ``with`` block.

    Usage::

        with db.open_session() as session:
            rows = session.conn.execute("SELECT * FROM users").fetchall()
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn: Optional[sqlite3.Connection] = conn

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if the session was closed."""
        if self._conn is None:
            raise RuntimeError("Session is closed")
        return self._conn

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def commit(self) -> None:
        self.conn.commit()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._conn is not None and exc_type is not None:
            self._conn.rollback()
        self.close()


class NotifyDB(SessionFactory):
    """Manages the sqlite file holding users, rules and subscriptions.

    Sessions are short lived: each ``open_session()`` opens its own
    connection, closed when the session ends. The schema is created or
    upgraded by the first session. With ``create=False`` a missing
    database file is an error instead of being created empty.
    """

    def __init__(self, db_path: Union[str, Path], create: bool = True) -> None:
        self.db_path: Path = Path(db_path)
        self.create = create
        self._migrated = False

    # ── lifecycle ─────────────────────────────────────────────────

    def open_session(self) -> DbSession:
        """Open (or create) the database and return a new session."""
        if not self.create and not self.db_path.is_file():
            raise StorageError("database not found", self.db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise StorageError(str(e), self.db_path)
        conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = sqlite3.Row
        if not self._migrated:
            try:
                _migrate(conn)
            except sqlite3.Error as e:
                conn.close()
                raise StorageError(f"schema migration failed: {e}", self.db_path)
            self._migrated = True
        logger.debug("Notification DB session opened at %s", self.db_path)
        return DbSession(conn)


# ── migration ─────────────────────────────────────────────────────


def _migrate(conn: sqlite3.Connection) -> None:
    """Idempotently create / upgrade all tables."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER NOT NULL
        )
        """
    )
    row = conn.execute("SELECT version FROM schema_version").fetchone()
    current = row["version"] if row else 0

    if current < 1:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS users (
                uuid  TEXT PRIMARY KEY,
                login TEXT NOT NULL UNIQUE,
                name  TEXT,
                email TEXT
            );

            CREATE TABLE IF NOT EXISTS rules (
                rule_key TEXT PRIMARY KEY,
                name     TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS subscriptions (
                project_uuid      TEXT NOT NULL,
                notification_type TEXT NOT NULL,
                user_uuid         TEXT NOT NULL REFERENCES users(uuid),
                PRIMARY KEY (project_uuid, notification_type, user_uuid)
            );

            CREATE INDEX IF NOT EXISTS idx_subscriptions_type
                ON subscriptions(project_uuid, notification_type);
            """
        )

    if row is None:
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (_SCHEMA_VERSION,))
    else:
        conn.execute("UPDATE schema_version SET version = ?", (_SCHEMA_VERSION,))
    conn.commit()
