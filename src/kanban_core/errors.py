"""Exceptions raised by the task store."""


class KanbanError(Exception):
    """Base class for task store errors."""

    pass


class TaskNotFoundError(KanbanError, KeyError):
    """Raised when a task id does not exist in the store."""

    def __init__(self, task_id: str) -> None:
        super().__init__(task_id)
        self.task_id = task_id

    def __str__(self) -> str:
        return f"Task with id '{self.task_id}' not found"


class DependencyError(KanbanError, ValueError):
    """Raised when a blocked_by change would block a task on itself or form a cycle."""

    pass


class PositionCollisionError(KanbanError):
    """Raised when no free position could be allocated within the retry budget."""

    def __init__(self, column: str, position: float, attempts: int) -> None:
        super().__init__(
            f"Position {position} in column '{column}' still collides after {attempts} attempt(s)"
        )
        self.column = column
        self.position = position
        self.attempts = attempts


class TaskStoreError(KanbanError):
    """Raised when the store file cannot be read and so must not be overwritten."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Task store {path} is unreadable ({reason}); refusing to overwrite it")
        self.path = path
        self.reason = reason
