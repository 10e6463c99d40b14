"""
SQLite persistence gateway and simple migration system.

The ``Database`` class is the single handle through which the rest of
the application reaches the datastore.  It is constructed explicitly
by ``create_app`` (or the CLI), stored on ``app.state`` and handed to
services through the ``get_db`` dependency; there is no module level
connection.  Every unit of work opens its own short-lived connection,
so requests never share mutable connection state.

Two "collections" are exposed, ``todos`` and ``users``.  Records are
keyed by 24 character hexadecimal identifiers generated here.  The
migration mechanism stores applied versions in the ``migrations``
table and executes new migrations in order.
"""

import logging
import os
import re
import secrets
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from fastapi import Request

from .errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")

MIGRATIONS: List[tuple] = [
    # Migration 1: initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS user_tokens (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            access TEXT NOT NULL,
            token TEXT NOT NULL,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS todos (
            id TEXT PRIMARY KEY,
            text TEXT NOT NULL CHECK (length(text) > 0),
            completed INTEGER NOT NULL DEFAULT 0,
            completed_at INTEGER,
            owner_id TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(owner_id) REFERENCES users(id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: lookup indices
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_user_tokens_user_id ON user_tokens(user_id);
        CREATE INDEX IF NOT EXISTS idx_user_tokens_token ON user_tokens(token);
        CREATE INDEX IF NOT EXISTS idx_todos_owner_id ON todos(owner_id);
        """,
    ),
]

# Columns that the ad-hoc maintenance operations may filter on.  Keys
# are the document field names used on the command line.
COLLECTIONS: Dict[str, Dict[str, str]] = {
    "todos": {
        "id": "id",
        "text": "text",
        "completed": "completed",
        "completedAt": "completed_at",
        "ownerId": "owner_id",
    },
    "users": {
        "id": "id",
        "email": "email",
    },
}


def new_object_id() -> str:
    """Return a fresh 24 character hexadecimal identifier."""
    return secrets.token_hex(12)


def is_valid_object_id(value: Any) -> bool:
    return isinstance(value, str) and bool(OBJECT_ID_RE.match(value))


def ensure_object_id(value: Any) -> str:
    """Return ``value`` if it is a well-formed identifier, else raise ``ValidationError``."""
    if not is_valid_object_id(value):
        raise ValidationError("Invalid ObjectID")
    return value


def resolve_database_path(database_url: str) -> str:
    """Resolve ``database_url`` to an absolute filesystem path.

    A ``sqlite:///`` prefix is accepted and stripped.  Relative paths
    are resolved against the current working directory.
    """
    path = database_url
    if path.startswith("sqlite:///"):
        path = path[len("sqlite:///"):]
    if os.path.isabs(path):
        return path
    return str(Path(path).resolve())


class Database:
    """Handle to the SQLite datastore."""

    def __init__(self, database_url: str) -> None:
        self.path = resolve_database_path(database_url)
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def connect(self) -> sqlite3.Connection:
        """Create and return a new connection with dict-like rows and foreign keys on."""
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def transaction(self, immediate: bool = False) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside a transaction.

        Commits on success and rolls back on any error.  Datastore
        errors are re-raised as ``PersistenceError`` carrying the raw
        message.  With ``immediate=True`` the write lock is taken up
        front so a read followed by a write in the same block is atomic
        with respect to other connections.
        """
        conn = self.connect()
        try:
            cursor = conn.cursor()
            if immediate:
                cursor.execute("BEGIN IMMEDIATE")
            yield cursor
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise PersistenceError(str(exc)) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def open(self) -> None:
        """Create the database file if needed and apply pending migrations."""
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        with self.transaction() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) AS version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    # executescript commits first, so each migration carries
                    # its own transaction with the version row inside it.
                    cursor.executescript(
                        f"BEGIN;\n{sql}\n"
                        f"INSERT INTO migrations (version) VALUES ({int(version)});\n"
                        "COMMIT;"
                    )
                    logger.info("Applied migration %s to %s", version, self.path)
                    current_version = version
        self._open = True

    def close(self) -> None:
        self._open = False

    # ------------------------------------------------------------------
    # Ad-hoc maintenance operations
    # ------------------------------------------------------------------
    @staticmethod
    def _column(collection: str, field: str) -> str:
        try:
            columns = COLLECTIONS[collection]
        except KeyError:
            raise ValidationError(f"Unknown collection: {collection}") from None
        try:
            return columns[field]
        except KeyError:
            raise ValidationError(f"Unknown field for {collection}: {field}") from None

    @classmethod
    def _match(cls, collection: str, field: str, value: Any) -> Tuple[str, tuple]:
        """Build the WHERE predicate for ``field == value``; ``None`` matches NULL."""
        column = cls._column(collection, field)
        if value is None:
            return f"{column} IS NULL", ()
        return f"{column} = ?", (value,)

    def delete_many(self, collection: str, field: str, value: Any) -> int:
        """Delete every document whose ``field`` equals ``value``.  Returns the count."""
        predicate, params = self._match(collection, field, value)
        with self.transaction() as cursor:
            cursor.execute(f"DELETE FROM {collection} WHERE {predicate}", params)
            return cursor.rowcount

    def delete_one(self, collection: str, field: str, value: Any) -> int:
        """Delete the oldest document whose ``field`` equals ``value``.  Returns 0 or 1."""
        predicate, params = self._match(collection, field, value)
        with self.transaction(immediate=True) as cursor:
            cursor.execute(
                f"DELETE FROM {collection} WHERE rowid = "
                f"(SELECT rowid FROM {collection} WHERE {predicate} ORDER BY rowid LIMIT 1)",
                params,
            )
            return cursor.rowcount

    def find_one_and_delete(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Delete the document with ``record_id`` and return its stored row, or ``None``."""
        self._column(collection, "id")
        ensure_object_id(record_id)
        with self.transaction(immediate=True) as cursor:
            row = cursor.execute(
                f"SELECT * FROM {collection} WHERE id = ?", (record_id,)
            ).fetchone()
            if row is None:
                return None
            cursor.execute(f"DELETE FROM {collection} WHERE id = ?", (record_id,))
            document = dict(row)
            document.pop("password", None)
            return document


def get_db(request: Request) -> Database:
    """FastAPI dependency returning the application's ``Database`` handle."""
    return request.app.state.db
