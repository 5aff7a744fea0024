"""Reference record store for tasks.

Example:
    >>> store = TaskStore(settings)
    >>> task = store.create("Write release notes", column="todo")
    >>> store.add_blocker(task.id, other.id)
"""

from kanban_core.store.json_store import TaskStore

__all__ = ["TaskStore"]
