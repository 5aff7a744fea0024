"""kanban-core - ordering and next-task ranking for Kanban task trackers.

This package provides:

- Typed task records (Task, Column, Priority, TaskType)
- Gap-based position allocation with rebalancing (kanban_core.positioning)
- A tiered suggestion engine for "what to work on next" (kanban_core.suggestions)
- A JSON-file reference task store (kanban_core.store)
- Layered settings and structured logging
"""

from kanban_core.config import (
    BaseSettings,
    SettingsContext,
    SettingsValidationError,
    get_context_settings,
    get_settings,
    reload_settings,
    set_context_settings,
    set_settings,
    validate_settings,
)
from kanban_core.errors import (
    DependencyError,
    KanbanError,
    PositionCollisionError,
    TaskNotFoundError,
    TaskStoreError,
)
from kanban_core.logging import configure_logging, get_logger
from kanban_core.models import Column, Priority, Task, TaskType
from kanban_core.positioning import (
    Placement,
    PositionAllocator,
    next_position,
    position_at_index,
    position_between,
    sort_by_position,
)
from kanban_core.store import TaskStore
from kanban_core.suggestions import Suggestion, SuggestionTier, build_suggestions

__version__ = "0.1.0"

__all__ = [
    # Models
    "Column",
    "Priority",
    "Task",
    "TaskType",
    # Positioning
    "Placement",
    "PositionAllocator",
    "next_position",
    "position_at_index",
    "position_between",
    "sort_by_position",
    # Suggestions
    "Suggestion",
    "SuggestionTier",
    "build_suggestions",
    # Store
    "TaskStore",
    # Errors
    "DependencyError",
    "KanbanError",
    "PositionCollisionError",
    "TaskNotFoundError",
    "TaskStoreError",
    # Settings
    "BaseSettings",
    "SettingsContext",
    "SettingsValidationError",
    "get_settings",
    "set_settings",
    "set_context_settings",
    "get_context_settings",
    "validate_settings",
    "reload_settings",
    # Logging
    "configure_logging",
    "get_logger",
]
