"""Position allocation for ordering tasks within a column.

Example:
    >>> from kanban_core.positioning import position_at_index, PositionAllocator
    >>> position_at_index([1000.0, 2000.0], 0)
    500.0
"""

from kanban_core.positioning.allocator import (
    BOTTOM,
    DEFAULT_GAP,
    MIN_GAP,
    Placement,
    PositionAllocator,
    needs_rebalance,
    next_position,
    position_after,
    position_at_index,
    position_before,
    position_between,
    rebalance,
    sort_by_position,
)

__all__ = [
    "BOTTOM",
    "DEFAULT_GAP",
    "MIN_GAP",
    "Placement",
    "PositionAllocator",
    "needs_rebalance",
    "next_position",
    "position_after",
    "position_at_index",
    "position_before",
    "position_between",
    "rebalance",
    "sort_by_position",
]
