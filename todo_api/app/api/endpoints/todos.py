"""
Todo endpoints.

All routes require an authenticated caller and only ever see the
caller's own todos.  A todo id that is not a 24 character hex string
is rejected with 400 before the datastore is queried; a well-formed
id that matches nothing the caller owns yields 404 with an empty body.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from todo_api.app.api.deps import CurrentUser, get_current_user
from todo_api.app.core.db import Database, get_db
from todo_api.app.schemas.todo import TodoCreate, TodoEnvelope, TodoList, TodoRead, TodoUpdate
from todo_api.app.services.todo_service import TodoService

router = APIRouter()


@router.post("", response_model=TodoRead, response_model_exclude_none=True)
async def create_todo(
    data: TodoCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> TodoRead:
    """Create a todo owned by the caller and return it."""
    return await TodoService.create_todo(db, current_user.id, data)


@router.get("", response_model=TodoList, response_model_exclude_none=True)
async def list_todos(
    current_user: CurrentUser = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> TodoList:
    """List the caller's todos."""
    todos = await TodoService.list_todos(db, current_user.id)
    return TodoList(todos=todos)


@router.get("/{todo_id}", response_model=TodoEnvelope, response_model_exclude_none=True)
async def get_todo(
    todo_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> TodoEnvelope:
    todo = await TodoService.get_todo(db, current_user.id, todo_id)
    return TodoEnvelope(todo=todo)


@router.delete("/{todo_id}", response_model=TodoEnvelope, response_model_exclude_none=True)
async def delete_todo(
    todo_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> TodoEnvelope:
    """Delete one of the caller's todos and return what was removed."""
    todo = await TodoService.delete_todo(db, current_user.id, todo_id)
    return TodoEnvelope(todo=todo)


@router.patch("/{todo_id}", response_model=TodoEnvelope, response_model_exclude_none=True)
async def update_todo(
    todo_id: str,
    data: Optional[TodoUpdate] = None,
    current_user: CurrentUser = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> TodoEnvelope:
    """Partially update ``text`` and/or ``completed``.

    ``completedAt`` is set by the server: the current time when
    ``completed`` is ``true``, cleared otherwise.
    """
    todo = await TodoService.update_todo(db, current_user.id, todo_id, data or TodoUpdate())
    return TodoEnvelope(todo=todo)
