"""Gap-based position allocation for tasks within a column.

Positions are floats spaced DEFAULT_GAP apart. Inserting between two tasks
takes the midpoint, so no sibling is rewritten. Repeated midpoints between
the same neighbours shrink the gap towards float precision; once an insertion
would leave a gap below MIN_GAP the column is renumbered with fresh, evenly
spaced keys instead.

Example:
    >>> next_position([1000.0, 2000.0])
    3000.0
    >>> position_at_index([1000.0, 2000.0, 3000.0], 1)
    1500.0
"""

from dataclasses import dataclass, field
from operator import attrgetter
from typing import TYPE_CHECKING, Iterable, Sequence

from kanban_core.logging import Loggers
from kanban_core.models import Task

if TYPE_CHECKING:
    from kanban_core.config import BaseSettings

logger = Loggers.positioning()

DEFAULT_GAP = 1000.0
MIN_GAP = 0.001

# Index meaning "append at the bottom of the column".
BOTTOM = -1


def next_position(positions: Iterable[float], gap: float = DEFAULT_GAP) -> float:
    """Return a position below every existing one (append at the bottom).

    An empty column gets ``gap``; otherwise ``max(positions) + gap``.
    """
    positions = list(positions)
    if not positions:
        return gap
    return max(positions) + gap


def position_between(before: float, after: float) -> float:
    """Return the midpoint of two neighbouring positions.

    Raises:
        ValueError: If ``before`` is not strictly smaller than ``after``.
    """
    if not before < after:
        raise ValueError(f"before ({before}) must be smaller than after ({after})")
    return (before + after) / 2.0


def position_at_index(
    sorted_positions: Sequence[float],
    index: int,
    gap: float = DEFAULT_GAP,
) -> float:
    """Return the position for inserting at ``index`` in a column.

    ``sorted_positions`` must be ascending; that is not checked.

    Args:
        sorted_positions: Existing positions in the column, ascending.
        index: 0 for the top, -1 for the bottom, otherwise the slot the new
            task should occupy. Indices past the end append.
        gap: Spacing used for empty columns and appends.

    Raises:
        ValueError: For negative indices other than -1.
    """
    if index < BOTTOM:
        raise ValueError(f"invalid position index {index}, use 0 for top or -1 for bottom")
    if not sorted_positions:
        return gap
    if index == BOTTOM or index >= len(sorted_positions):
        return next_position(sorted_positions, gap)
    if index == 0:
        return sorted_positions[0] / 2.0
    return position_between(sorted_positions[index - 1], sorted_positions[index])


def position_after(
    sorted_positions: Sequence[float],
    target: float,
    gap: float = DEFAULT_GAP,
) -> float:
    """Return a position directly below ``target``."""
    following = [p for p in sorted_positions if p > target]
    if not following:
        return target + gap
    return position_between(target, min(following))


def position_before(sorted_positions: Sequence[float], target: float) -> float:
    """Return a position directly above ``target``.

    Raises:
        ValueError: If ``target`` is the top position and not positive, since
            halving it would not move above it. Rebalance the column first.
    """
    preceding = [p for p in sorted_positions if p < target]
    if not preceding:
        if target <= 0:
            raise ValueError(f"no position above top position {target}; rebalance the column")
        return target / 2.0
    return position_between(max(preceding), target)


def sort_by_position(tasks: Iterable[Task]) -> list[Task]:
    """Return tasks ordered by position; equal positions keep their input order."""
    return sorted(tasks, key=attrgetter("position"))


def needs_rebalance(before: float, after: float, min_gap: float = MIN_GAP) -> bool:
    """Check whether inserting between two positions would leave too small a gap."""
    return (after - before) / 2.0 < min_gap


def rebalance(tasks: Iterable[Task], gap: float = DEFAULT_GAP) -> dict[str, float]:
    """Renumber a column with evenly spaced positions in current display order.

    Returns:
        Mapping of task id to its new position (gap, 2*gap, ...).
    """
    return {
        task.id: gap * i
        for i, task in enumerate(sort_by_position(tasks), start=1)
    }


@dataclass
class Placement:
    """Result of allocating a position.

    Attributes:
        position: Position for the task being placed.
        renumbered: New positions for siblings when the column was
            rebalanced; empty when no sibling changes.
    """

    position: float
    renumbered: dict[str, float] = field(default_factory=dict)

    @property
    def rebalanced(self) -> bool:
        return bool(self.renumbered)


class PositionAllocator:
    """Allocates positions in a column, rebalancing when gaps run out.

    The task being placed must not be part of ``column_tasks``.

    Example:
        >>> allocator = PositionAllocator(gap=1000.0, min_gap=0.001)
        >>> allocator.place_at_index([], 0).position
        1000.0
    """

    def __init__(self, gap: float = DEFAULT_GAP, min_gap: float = MIN_GAP) -> None:
        self.gap = gap
        self.min_gap = min_gap

    @classmethod
    def from_settings(cls, settings: "BaseSettings") -> "PositionAllocator":
        return cls(gap=settings.position_gap, min_gap=settings.min_position_gap)

    def place_at_index(
        self,
        column_tasks: Iterable[Task],
        index: int = BOTTOM,
        force_rebalance: bool = False,
    ) -> Placement:
        """Allocate a position for inserting at ``index`` (0 = top, -1 = bottom)."""
        ordered = sort_by_position(column_tasks)
        positions = [t.position for t in ordered]
        if index < BOTTOM:
            raise ValueError(f"invalid position index {index}, use 0 for top or -1 for bottom")

        if force_rebalance or self._slot_too_tight(positions, index):
            renumbered = rebalance(ordered, self.gap)
            fresh = [renumbered[t.id] for t in ordered]
            position = position_at_index(fresh, index, self.gap)
            logger.info(
                "column_rebalanced",
                tasks=len(renumbered),
                index=index,
                position=position,
                forced=force_rebalance,
            )
            return Placement(position, renumbered)

        return Placement(position_at_index(positions, index, self.gap))

    def place_after(
        self,
        column_tasks: Iterable[Task],
        target_id: str,
        force_rebalance: bool = False,
    ) -> Placement:
        """Allocate a position directly below the task ``target_id``."""
        ordered = sort_by_position(column_tasks)
        return self.place_at_index(
            ordered, self._index_of(ordered, target_id) + 1, force_rebalance
        )

    def place_before(
        self,
        column_tasks: Iterable[Task],
        target_id: str,
        force_rebalance: bool = False,
    ) -> Placement:
        """Allocate a position directly above the task ``target_id``."""
        ordered = sort_by_position(column_tasks)
        return self.place_at_index(
            ordered, self._index_of(ordered, target_id), force_rebalance
        )

    def _slot_too_tight(self, positions: Sequence[float], index: int) -> bool:
        if not positions or index == BOTTOM or index >= len(positions):
            return False
        if index == 0:
            # Halving only moves towards zero; non-positive keys cannot shrink.
            return positions[0] <= 0 or needs_rebalance(0.0, positions[0], self.min_gap)
        return needs_rebalance(positions[index - 1], positions[index], self.min_gap)

    @staticmethod
    def _index_of(ordered: Sequence[Task], target_id: str) -> int:
        for i, task in enumerate(ordered):
            if task.id == target_id:
                return i
        raise KeyError(target_id)
