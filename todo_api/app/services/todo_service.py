"""
Business logic for todos.

Every read and write is scoped to the calling owner.  A todo that
exists but belongs to someone else is reported exactly like a todo
that does not exist (``NotFoundError``), so callers cannot discover
other users' documents.  Scoped updates and deletes filter on
``id AND owner_id`` inside a single immediate transaction rather than
checking ownership first and mutating afterwards.

Identifiers are validated before the datastore is touched.  The
blocking sqlite work of each operation runs in a worker thread so the
event loop stays free while a transaction waits for the write lock.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from ..core.db import Database, ensure_object_id, new_object_id
from ..core.errors import NotFoundError
from ..schemas.todo import TodoCreate, TodoRead, TodoUpdate

logger = logging.getLogger(__name__)

TODO_COLUMNS = "id, text, completed, completed_at, owner_id"


def now_millis() -> int:
    return int(time.time() * 1000)


def row_to_todo(row) -> TodoRead:
    return TodoRead(
        id=row["id"],
        text=row["text"],
        completed=bool(row["completed"]),
        completed_at=row["completed_at"],
        owner_id=row["owner_id"],
    )


def normalize_update(data: TodoUpdate, now: Optional[int] = None) -> Dict[str, Any]:
    """Turn a partial update into the column values to write.

    ``completedAt`` is always derived here: a ``completed`` value of
    exactly ``True`` stamps the current time in epoch milliseconds, any
    other value (missing, ``False``, or a non-boolean) resets the todo
    to not completed and clears the timestamp.
    """
    values: Dict[str, Any] = {}
    if data.text is not None:
        values["text"] = data.text
    if data.completed is True:
        values["completed"] = 1
        values["completed_at"] = now if now is not None else now_millis()
    else:
        values["completed"] = 0
        values["completed_at"] = None
    return values


class TodoService:
    """Owner-scoped CRUD operations on todos."""

    @classmethod
    async def create_todo(cls, db: Database, owner_id: str, data: TodoCreate) -> TodoRead:
        todo_id = new_object_id()

        def _insert() -> None:
            with db.transaction() as cursor:
                cursor.execute(
                    "INSERT INTO todos (id, text, completed, completed_at, owner_id) "
                    "VALUES (?, ?, 0, NULL, ?)",
                    (todo_id, data.text, owner_id),
                )

        await run_in_threadpool(_insert)
        logger.info("Created todo %s for user %s", todo_id, owner_id)
        return TodoRead(id=todo_id, text=data.text, completed=False, completed_at=None, owner_id=owner_id)

    @classmethod
    async def list_todos(cls, db: Database, owner_id: str) -> List[TodoRead]:
        """Return the owner's todos in creation order."""

        def _select() -> list:
            with db.transaction() as cursor:
                return cursor.execute(
                    f"SELECT {TODO_COLUMNS} FROM todos WHERE owner_id = ? ORDER BY rowid",
                    (owner_id,),
                ).fetchall()

        rows = await run_in_threadpool(_select)
        return [row_to_todo(row) for row in rows]

    @classmethod
    async def get_todo(cls, db: Database, owner_id: str, todo_id: str) -> TodoRead:
        ensure_object_id(todo_id)

        def _select():
            with db.transaction() as cursor:
                return cursor.execute(
                    f"SELECT {TODO_COLUMNS} FROM todos WHERE id = ? AND owner_id = ?",
                    (todo_id, owner_id),
                ).fetchone()

        row = await run_in_threadpool(_select)
        if row is None:
            raise NotFoundError()
        return row_to_todo(row)

    @classmethod
    async def delete_todo(cls, db: Database, owner_id: str, todo_id: str) -> TodoRead:
        """Remove the owner's todo and return it as it was before deletion."""
        ensure_object_id(todo_id)

        def _delete():
            with db.transaction(immediate=True) as cursor:
                row = cursor.execute(
                    f"SELECT {TODO_COLUMNS} FROM todos WHERE id = ? AND owner_id = ?",
                    (todo_id, owner_id),
                ).fetchone()
                if row is None:
                    raise NotFoundError()
                cursor.execute(
                    "DELETE FROM todos WHERE id = ? AND owner_id = ?",
                    (todo_id, owner_id),
                )
                return row

        row = await run_in_threadpool(_delete)
        logger.info("Deleted todo %s for user %s", todo_id, owner_id)
        return row_to_todo(row)

    @classmethod
    async def update_todo(
        cls,
        db: Database,
        owner_id: str,
        todo_id: str,
        data: TodoUpdate,
        now: Optional[int] = None,
    ) -> TodoRead:
        """Apply a normalised partial update to the owner's todo and return the new state."""
        ensure_object_id(todo_id)
        values = normalize_update(data, now)
        assignments = ", ".join(f"{column} = ?" for column in values)

        def _update():
            with db.transaction(immediate=True) as cursor:
                cursor.execute(
                    f"UPDATE todos SET {assignments} WHERE id = ? AND owner_id = ?",
                    (*values.values(), todo_id, owner_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError()
                return cursor.execute(
                    f"SELECT {TODO_COLUMNS} FROM todos WHERE id = ?",
                    (todo_id,),
                ).fetchone()

        row = await run_in_threadpool(_update)
        return row_to_todo(row)
