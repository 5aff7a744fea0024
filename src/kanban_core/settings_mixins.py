"""Settings mixins for application identity, board behaviour and logging.

AppSettingsMixin: Application identity and disk layout (app_name, workspace, paths).
BoardSettingsMixin: Position allocation and suggestion defaults.
LoggingSettingsMixin: Log level and format.

These are mixins rather than BaseSettings subclasses so config.py can
compose them without MRO issues.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator


class AppSettingsMixin:
    """Settings for application identity and disk layout."""

    app_name: str = Field(
        default="kanban",
        title="App Name",
        description="Application name, also used for config directories",
    )

    workspace_dir: Path = Field(
        default_factory=lambda: Path.home() / ".kanban",
        title="Workspace Directory",
        description="Directory holding the task store",
    )

    @field_validator("workspace_dir", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Expand ~ in paths."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    def ensure_workspace_exists(self) -> None:
        """Create workspace directory if it doesn't exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)

    @property
    def tasks_dir(self) -> Path:
        """Directory for task storage."""
        return self.workspace_dir / "tasks"

    @property
    def tasks_path(self) -> Path:
        """JSON file backing the task store."""
        return self.tasks_dir / "tasks.json"


class BoardSettingsMixin:
    """Settings for position allocation and suggestions.

    Mixin class that provides:
    - Default gap between positions and the rebalance threshold
    - Retry budget for position collisions
    - Default suggestion limit
    - Dependency resolution when tasks reach done
    """

    position_gap: float = Field(
        default=1000.0,
        gt=0,
        title="Position Gap",
        description="Spacing between positions of appended or renumbered tasks",
    )
    min_position_gap: float = Field(
        default=0.001,
        gt=0,
        title="Minimum Position Gap",
        description="Smallest gap an insertion may leave before the column is renumbered",
    )
    position_retry_attempts: int = Field(
        default=3,
        title="Position Retry Attempts",
        description="Attempts to allocate a non-colliding position before failing",
    )
    suggest_limit: int = Field(
        default=5,
        title="Suggestion Limit",
        description="Default maximum number of suggestions (0 or less means no limit)",
    )
    auto_unblock_on_done: bool = Field(
        default=True,
        title="Auto Unblock On Done",
        description="Remove a task from other tasks' blocked_by when it moves to done",
    )


class LoggingSettingsMixin:
    """Settings for logging output."""

    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        title="Log Level",
        description="Logging verbosity level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        title="Log Format",
        description="Log output format (console for dev, json for production)",
    )
