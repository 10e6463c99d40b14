"""
Pydantic models for todo data.

Field names follow the JSON representation used on the wire
(``completedAt``, ``ownerId``) through aliases, while Python code uses
snake_case attribute names.  ``completedAt`` is omitted from responses
when the todo is not completed.
"""

from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

TodoText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class TodoCreate(BaseModel):
    """Schema for creating a todo.  Only ``text`` is accepted."""

    text: TodoText = Field(..., examples=["Walk the dog"])


class TodoUpdate(BaseModel):
    """Schema for a partial todo update.

    Only ``text`` and ``completed`` are read; anything else in the body
    (including ``completedAt``) is dropped.  ``completed`` is kept as a
    raw value so that non-boolean input is normalised to ``False`` by
    the service instead of being rejected.
    """

    model_config = ConfigDict(extra="ignore")

    text: Optional[TodoText] = None
    completed: Any = None


class TodoRead(BaseModel):
    """Schema for reading a todo."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    text: str
    completed: bool = False
    completed_at: Optional[int] = Field(None, alias="completedAt")
    owner_id: str = Field(..., alias="ownerId")


class TodoEnvelope(BaseModel):
    todo: TodoRead


class TodoList(BaseModel):
    todos: List[TodoRead]
