"""Suggestion engine ranking which tasks to work on next.

Example:
    >>> from kanban_core.suggestions import build_suggestions
    >>> for s in build_suggestions(tasks, limit=3):
    ...     print(s.task.title, "-", s.reason)
"""

from kanban_core.suggestions.engine import (
    REASON_ACTIVE,
    REASON_HIGH,
    REASON_URGENT,
    Suggestion,
    SuggestionTier,
    build_suggestions,
    count_unblocks,
    creation_order,
    unblocks_reason,
)

__all__ = [
    "REASON_ACTIVE",
    "REASON_HIGH",
    "REASON_URGENT",
    "Suggestion",
    "SuggestionTier",
    "build_suggestions",
    "count_unblocks",
    "creation_order",
    "unblocks_reason",
]
