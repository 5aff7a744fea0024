"""Tiered "what to work on next" ranking.

Tasks are ranked by the first tier they match:

1. In-progress tasks (continue current work)
2. Urgent unblocked tasks
3. High priority unblocked tasks
4. Unblocked tasks that other tasks are waiting on, most waiters first

A task appears at most once, under its earliest tier. The ranking is a pure
projection of the snapshot it is given.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Iterable, Sequence

from kanban_core.logging import Loggers
from kanban_core.models import Column, Priority, Task

logger = Loggers.suggestions()

# Columns where a task is no longer waiting to be picked up.
SETTLED_COLUMNS = frozenset({Column.DONE, Column.REVIEW})


class SuggestionTier(IntEnum):
    """Ranking buckets; lower values take precedence."""

    ACTIVE = 1
    URGENT = 2
    HIGH = 3
    UNBLOCKER = 4


REASON_ACTIVE = "Continue current work"
REASON_URGENT = "Urgent priority, unblocked"
REASON_HIGH = "High priority, unblocked"

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def unblocks_reason(count: int) -> str:
    return f"Unblocks {count} other task(s)"


@dataclass(frozen=True)
class Suggestion:
    """A task worth working on next, with the reason it was picked."""

    task: Task
    reason: str
    tier: SuggestionTier

    def to_dict(self) -> dict[str, Any]:
        return {
            "task": {
                "id": self.task.id,
                "title": self.task.title,
                "type": self.task.type.value,
                "priority": self.task.priority.value,
                "column": self.task.column.value,
            },
            "reason": self.reason,
        }


def creation_order(tasks: Iterable[Task]) -> list[Task]:
    """Order a snapshot by creation time.

    The sort is stable, so tasks with equal timestamps keep their incoming
    order. Tasks without a timestamp follow all timestamped ones. Naive
    timestamps are read as UTC so they compare with aware ones.
    """
    return sorted(tasks, key=_creation_key)


def _creation_key(task: Task) -> tuple[bool, datetime]:
    created = task.created_at
    if created is None:
        return True, _EARLIEST
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return False, created


def count_unblocks(tasks: Iterable[Task]) -> Counter[str]:
    """Count, for each task id, how many tasks list it in ``blocked_by``."""
    counts: Counter[str] = Counter()
    for task in tasks:
        counts.update(dict.fromkeys(task.blocked_by, 1))
    return counts


def _ready_at_priority(task: Task, priority: Priority) -> bool:
    return (
        task.column != Column.IN_PROGRESS
        and task.column not in SETTLED_COLUMNS
        and task.priority == priority
        and not task.is_blocked
    )


def build_suggestions(tasks: Sequence[Task], limit: int = 0) -> list[Suggestion]:
    """Rank tasks by what should be worked on next.

    Args:
        tasks: Snapshot of every task on the board.
        limit: Maximum number of suggestions; 0 or less means no limit.

    Returns:
        Suggestions in tier order, then in order within each tier.
    """
    ordered = creation_order(tasks)
    unblocks = count_unblocks(ordered)

    suggestions: list[Suggestion] = []
    added: set[str] = set()

    def add(task: Task, reason: str, tier: SuggestionTier) -> None:
        if task.id not in added:
            suggestions.append(Suggestion(task=task, reason=reason, tier=tier))
            added.add(task.id)

    for task in ordered:
        if task.column == Column.IN_PROGRESS:
            add(task, REASON_ACTIVE, SuggestionTier.ACTIVE)

    for task in ordered:
        if _ready_at_priority(task, Priority.URGENT):
            add(task, REASON_URGENT, SuggestionTier.URGENT)

    for task in ordered:
        if _ready_at_priority(task, Priority.HIGH):
            add(task, REASON_HIGH, SuggestionTier.HIGH)

    unblocking = [
        task
        for task in ordered
        if task.id not in added
        and task.column not in SETTLED_COLUMNS
        and unblocks[task.id] > 0
        and not task.is_blocked
    ]
    unblocking.sort(key=lambda t: unblocks[t.id], reverse=True)
    for task in unblocking:
        add(task, unblocks_reason(unblocks[task.id]), SuggestionTier.UNBLOCKER)

    logger.debug(
        "suggestions_built",
        total=len(suggestions),
        tiers=dict(Counter(s.tier.name.lower() for s in suggestions)),
        limit=limit,
    )

    if limit > 0:
        return suggestions[:limit]
    return suggestions
