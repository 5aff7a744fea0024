"""File-based task store.

Persistent task records in a JSON file with atomic writes. The store owns
every mutation of ``position`` and ``blocked_by``; the allocator and the
suggestion engine only compute over the tasks it hands them.

Position allocation is a read-then-write sequence, so every mutating
operation runs under a store-wide lock, re-reads the file first, and checks
the allocated position against the column before saving. A collision is
retried with a forced rebalance of the column.
"""

import json
import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from kanban_core.config import BaseSettings, get_settings
from kanban_core.errors import (
    DependencyError,
    PositionCollisionError,
    TaskNotFoundError,
    TaskStoreError,
)
from kanban_core.logging import Loggers
from kanban_core.models import Column, Priority, Task, TaskType
from kanban_core.positioning import BOTTOM, Placement, PositionAllocator
from kanban_core.store._utils import atomic_write_json, short_id
from kanban_core.suggestions import Suggestion, build_suggestions

logger = Loggers.store()

# (column siblings, force_rebalance) -> Placement
AllocateFn = Callable[[Sequence[Task], bool], Placement]


class TaskStore:
    """Persistent task store.

    Stores tasks in ``settings.tasks_path`` as ``{"items": [...]}``, in
    insertion order.

    Example:
        >>> store = TaskStore(settings)
        >>> task = store.create("Fix login", priority="urgent", column="todo")
        >>> store.move(task.id, "in_progress", index=0)
        >>> store.suggest(limit=3)
    """

    def __init__(self, settings: BaseSettings | None = None) -> None:
        self._settings = settings or get_settings()
        self._storage_path = self._settings.tasks_path
        self._allocator = PositionAllocator.from_settings(self._settings)
        self._lock = threading.RLock()
        self._items: dict[str, Task] = {}
        self._unparsed: list[Any] = []
        self._load_error: str | None = None
        self._load()

    def _load(self) -> None:
        """Read every task from disk into a fresh snapshot.

        A file that cannot be parsed at all loads as an empty store and
        blocks writes until it is fixed. Single records that fail to parse
        are skipped and carried back verbatim on the next save.
        """
        items: dict[str, Task] = {}
        unparsed: list[Any] = []
        error: str | None = None

        if self._storage_path.exists():
            try:
                with open(self._storage_path, "r") as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                error = str(e)
            else:
                records = data.get("items", []) if isinstance(data, dict) else None
                if isinstance(records, list):
                    for record in records:
                        try:
                            task = Task.from_dict(record)
                        except (KeyError, ValueError, TypeError, AttributeError) as e:
                            unparsed.append(record)
                            logger.warning(
                                "task_record_skipped",
                                path=str(self._storage_path),
                                error=f"{type(e).__name__}: {e}",
                            )
                            continue
                        items[task.id] = task
                else:
                    error = "expected an object with an 'items' list"

        if error is not None:
            logger.warning("task_store_unreadable", path=str(self._storage_path), error=error)

        self._items = items
        self._unparsed = unparsed
        self._load_error = error

    def _load_for_write(self) -> None:
        self._load()
        if self._load_error is not None:
            raise TaskStoreError(str(self._storage_path), self._load_error)

    def _save(self) -> None:
        data = {"items": [task.to_dict() for task in self._items.values()] + self._unparsed}
        atomic_write_json(self._storage_path, data)
        logger.debug("task_store_saved", path=str(self._storage_path), tasks=len(self._items))

    def refresh(self) -> None:
        """Re-read the store from disk, picking up other writers' changes."""
        with self._lock:
            self._load()

    # -------------------- queries --------------------

    def get(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        with self._lock:
            return self._items.get(task_id)

    def list_tasks(
        self,
        column: Column | str | None = None,
        priority: Priority | str | None = None,
        task_type: TaskType | str | None = None,
    ) -> list[Task]:
        """List tasks in store order with optional equality filters."""
        with self._lock:
            results = list(self._items.values())
        if column is not None:
            results = [t for t in results if t.column == Column(column)]
        if priority is not None:
            results = [t for t in results if t.priority == Priority(priority)]
        if task_type is not None:
            results = [t for t in results if t.type == TaskType(task_type)]
        return results

    def is_empty(self) -> bool:
        """Check if the task store has any items."""
        with self._lock:
            return not self._items

    def suggest(self, limit: int | None = None) -> list[Suggestion]:
        """Rank the current snapshot of tasks by what to work on next.

        Args:
            limit: Maximum number of suggestions. None uses
                ``settings.suggest_limit``; 0 or less means no limit.
        """
        if limit is None:
            limit = self._settings.suggest_limit
        with self._lock:
            snapshot = list(self._items.values())
        return build_suggestions(snapshot, limit)

    # -------------------- mutations --------------------

    def create(
        self,
        title: str,
        task_type: TaskType | str = TaskType.FEATURE,
        priority: Priority | str = Priority.MEDIUM,
        column: Column | str = Column.BACKLOG,
        blocked_by: list[str] | None = None,
        index: int = BOTTOM,
    ) -> Task:
        """Create a task and place it in its column.

        Args:
            title: Task title.
            task_type: Kind of work (bug, feature, chore).
            priority: Priority level.
            column: Column to create the task in.
            blocked_by: Ids of existing tasks this one depends on.
            index: Slot in the column; 0 for top, -1 for bottom.

        Returns:
            The created task.

        Raises:
            TaskNotFoundError: If a blocker does not exist.
            TaskStoreError: If the store file cannot be read.
        """
        with self._lock:
            self._load_for_write()
            blockers = list(dict.fromkeys(blocked_by or []))
            for blocker_id in blockers:
                self._require(blocker_id)

            task = Task(
                id=str(uuid.uuid4())[:8],
                title=title,
                type=TaskType(task_type),
                priority=Priority(priority),
                column=Column(column),
                blocked_by=blockers,
                created_at=datetime.now(timezone.utc),
            )
            self._commit_placement(
                task,
                task.column,
                lambda siblings, force: self._allocator.place_at_index(siblings, index, force),
            )
            self._items[task.id] = task
            self._save()

        logger.info(
            "task_created",
            task_id=task.id,
            column=task.column.value,
            position=task.position,
        )
        return task

    def move(
        self,
        task_id: str,
        column: Column | str | None = None,
        index: int = BOTTOM,
        after: str | None = None,
        before: str | None = None,
    ) -> Task:
        """Move a task to a column and/or position.

        Args:
            task_id: Task to move.
            column: Target column. None keeps the current one, or takes the
                reference task's column when ``after`` or ``before`` is given.
            index: Slot in the target column (0 top, -1 bottom); ignored
                when ``after`` or ``before`` is given.
            after: Place directly below this task.
            before: Place directly above this task.

        Raises:
            TaskNotFoundError: If the task or reference task does not exist.
            ValueError: If both ``after`` and ``before`` are given, or the
                reference task is not in an explicitly given column.
            TaskStoreError: If the store file cannot be read.
        """
        if after is not None and before is not None:
            raise ValueError("use either after or before, not both")

        with self._lock:
            self._load_for_write()
            task = self._require(task_id)
            previous_column = task.column
            old_position = task.position

            reference_id = after if after is not None else before
            if reference_id is not None:
                reference = self._require(reference_id)
                if reference.id == task.id:
                    raise ValueError("a task cannot be positioned relative to itself")
                target_column = Column(column) if column is not None else reference.column
                if reference.column != target_column:
                    raise ValueError(
                        f"task {short_id(reference.id)} is in {reference.column.value}, "
                        f"not {target_column.value}"
                    )
                place = self._allocator.place_after if after is not None else self._allocator.place_before
                allocate: AllocateFn = lambda siblings, force: place(siblings, reference.id, force)
            else:
                target_column = Column(column) if column is not None else task.column
                allocate = lambda siblings, force: self._allocator.place_at_index(siblings, index, force)

            self._commit_placement(task, target_column, allocate)

            if (
                target_column == Column.DONE
                and previous_column != Column.DONE
                and self._settings.auto_unblock_on_done
            ):
                self._release_dependents(task.id)

            self._save()

        logger.info(
            "task_moved",
            task_id=task.id,
            column={"from": previous_column.value, "to": target_column.value},
            position={"from": old_position, "to": task.position},
        )
        return task

    def add_blocker(self, task_id: str, blocker_id: str) -> Task:
        """Mark ``task_id`` as blocked by ``blocker_id``.

        Raises:
            TaskNotFoundError: If either task does not exist.
            DependencyError: If the task would block itself or a cycle would form.
        """
        with self._lock:
            self._load_for_write()
            task = self._require(task_id)
            blocker = self._require(blocker_id)
            if blocker.id == task.id:
                raise DependencyError("task cannot block itself")
            if self._has_circular_dependency(task.id, blocker):
                raise DependencyError(
                    f"circular dependency detected: {short_id(blocker.id)} is already "
                    f"blocked by {short_id(task.id)} (directly or indirectly)"
                )
            if blocker.id not in task.blocked_by:
                task.blocked_by.append(blocker.id)
                self._save()
        return task

    def remove_blocker(self, task_id: str, blocker_id: str) -> bool:
        """Remove ``blocker_id`` from a task's blocked_by.

        Returns:
            True if removed, False if the task was not blocked by it.
        """
        with self._lock:
            self._load_for_write()
            task = self._require(task_id)
            if blocker_id not in task.blocked_by:
                return False
            task.blocked_by.remove(blocker_id)
            self._save()
        return True

    def delete(self, task_id: str) -> bool:
        """Delete a task and drop it from every blocked_by list.

        Returns:
            True if deleted, False if not found.
        """
        with self._lock:
            self._load_for_write()
            if task_id not in self._items:
                return False
            del self._items[task_id]
            self._release_dependents(task_id)
            self._save()
        logger.info("task_deleted", task_id=task_id)
        return True

    # -------------------- internals --------------------

    def _require(self, task_id: str) -> Task:
        task = self._items.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def _column_tasks(self, column: Column, exclude: str) -> list[Task]:
        return [t for t in self._items.values() if t.column == column and t.id != exclude]

    def _commit_placement(self, task: Task, column: Column, allocate: AllocateFn) -> None:
        """Allocate a position for ``task`` in ``column`` and apply it.

        Must be called with the lock held and the store freshly loaded.
        """
        siblings = self._column_tasks(column, exclude=task.id)
        attempts = max(1, self._settings.position_retry_attempts)
        force = False
        for attempt in range(1, attempts + 1):
            placement = allocate(siblings, force)
            if not self._collides(placement, siblings):
                break
            logger.warning(
                "position_collision",
                task_id=task.id,
                column=column.value,
                position=placement.position,
                attempt=attempt,
            )
            force = True
        else:
            raise PositionCollisionError(column.value, placement.position, attempts)

        for sibling in siblings:
            if sibling.id in placement.renumbered:
                sibling.position = placement.renumbered[sibling.id]
        task.column = column
        task.position = placement.position

    @staticmethod
    def _collides(placement: Placement, siblings: Sequence[Task]) -> bool:
        taken = {placement.renumbered.get(t.id, t.position) for t in siblings}
        return placement.position in taken

    def _release_dependents(self, task_id: str) -> None:
        for other in self._items.values():
            if task_id in other.blocked_by:
                other.blocked_by = [b for b in other.blocked_by if b != task_id]
                logger.debug("dependency_resolved", task_id=other.id, resolved=task_id)

    def _has_circular_dependency(self, target_id: str, blocking_task: Task) -> bool:
        """Check whether ``target_id`` is in the blocked_by chain of ``blocking_task``."""
        visited: set[str] = set()
        queue = deque(blocking_task.blocked_by)
        while queue:
            current_id = queue.popleft()
            if current_id in visited:
                continue
            visited.add(current_id)
            if current_id == target_id:
                return True
            current = self._items.get(current_id)
            if current is not None:
                queue.extend(current.blocked_by)
        return False
