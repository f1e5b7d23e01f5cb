from __future__ import annotations

from datetime import datetime, UTC
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Todo(BaseModel):
    """A single todo item stored at `todos/{id}`."""

    id: int = 0
    title: str = ""
    done: bool = False
    date: Optional[datetime] = None

    @classmethod
    def new(cls, todo_id: int, title: str) -> "Todo":
        return cls(id=todo_id, title=title, done=False, date=datetime.now(UTC))

    def __str__(self) -> str:
        return f"{self.id} - {self.title}"


class Metadata(BaseModel):
    """Bookkeeping stored at `metadata`; `nextId` is the next todo id to hand out."""

    model_config = ConfigDict(populate_by_name=True)

    next_id: int = Field(default=0, alias="nextId")


# The store returns numerically keyed children either as an array with null
# holes or as an object keyed by id.
TodoCollection = Union[List[Optional[Todo]], Dict[str, Optional[Todo]]]


def iter_todos(collection: TodoCollection) -> List[Todo]:
    items = collection.values() if isinstance(collection, dict) else collection
    return [t for t in items if t is not None]


def filter_todos(todos: List[Todo]) -> List[Todo]:
    """Keep todos that are still open and have a title."""
    return [t for t in todos if not t.done and t.title != ""]
