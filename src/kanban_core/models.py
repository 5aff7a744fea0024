"""Typed task records shared by the allocator, suggestion engine and store.

Example:
    >>> task = Task(id="a1b2c3d4", title="Fix login", priority=Priority.URGENT)
    >>> task.column
    <Column.BACKLOG: 'backlog'>
    >>> Task.from_dict(task.to_dict()) == task
    True
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class TaskType(str, Enum):
    """Kinds of work a task can represent."""

    BUG = "bug"
    FEATURE = "feature"
    CHORE = "chore"


class Priority(str, Enum):
    """Task priority, ordered from least to most pressing."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_ORDER.index(self)


class Column(str, Enum):
    """Workflow stage, ordered left to right as displayed on a board."""

    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    NEED_INPUT = "need_input"
    REVIEW = "review"
    DONE = "done"

    @property
    def rank(self) -> int:
        return _COLUMN_ORDER.index(self)


_PRIORITY_ORDER = list(Priority)
_COLUMN_ORDER = list(Column)


@dataclass
class Task:
    """A single task on the board.

    Attributes:
        id: Opaque unique identifier.
        title: Display string.
        type: Kind of work.
        priority: How pressing the task is.
        column: Workflow stage the task sits in.
        position: Ordering key within the column (ascending = top to bottom).
        blocked_by: Ids of tasks that must resolve before this one is ready.
        created_at: Creation time, used to order snapshots deterministically.
    """

    id: str
    title: str
    type: TaskType = TaskType.FEATURE
    priority: Priority = Priority.MEDIUM
    column: Column = Column.BACKLOG
    position: float = 0.0
    blocked_by: list[str] = field(default_factory=list)
    created_at: datetime | None = None

    @property
    def is_blocked(self) -> bool:
        return bool(self.blocked_by)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type.value,
            "priority": self.priority.value,
            "column": self.column.value,
            "position": self.position,
            "blocked_by": self.blocked_by.copy(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Create a Task from its stored dictionary form.

        Missing optional keys fall back to the dataclass defaults. Unknown
        enum values raise ValueError.
        """
        created_at = data.get("created_at")
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            type=TaskType(data.get("type", TaskType.FEATURE.value)),
            priority=Priority(data.get("priority", Priority.MEDIUM.value)),
            column=Column(data.get("column", Column.BACKLOG.value)),
            position=float(data.get("position", 0.0)),
            blocked_by=list(data.get("blocked_by") or []),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )
