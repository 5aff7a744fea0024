"""Shared test fixtures and utilities for kanban-core tests.

Provides:
- MockContext for isolating tests from global state
- Temporary workspace fixtures
- A task factory and a store bound to a temporary workspace
"""

import os
import tempfile
from itertools import count
from pathlib import Path
from typing import Callable, Generator

import pytest

from kanban_core.config import (
    BaseSettings,
    reload_settings,
    set_context_settings,
    set_settings,
)
from kanban_core.models import Column, Priority, Task, TaskType
from kanban_core.store import TaskStore


class MockContext:
    """Context manager for isolating tests from global state.

    Handles:
    - Resetting global settings singleton
    - Providing a temporary workspace directory
    - Hiding KANBAN_* environment variables

    Usage:
        with MockContext(suggest_limit=3) as ctx:
            store = TaskStore(ctx.settings)
    """

    def __init__(self, **settings_kwargs):
        self._settings_kwargs = settings_kwargs
        self._temp_dir: tempfile.TemporaryDirectory | None = None
        self._settings: BaseSettings | None = None
        self._original_env: dict[str, str] = {}

    def __enter__(self) -> "MockContext":
        self._temp_dir = tempfile.TemporaryDirectory()
        workspace_dir = Path(self._temp_dir.name)

        for var in [v for v in os.environ if v.startswith("KANBAN_")]:
            self._original_env[var] = os.environ.pop(var)

        self._settings = BaseSettings(
            workspace_dir=workspace_dir,
            **self._settings_kwargs,
        )
        set_settings(self._settings)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        set_context_settings(None)
        os.environ.update(self._original_env)
        reload_settings()
        if self._temp_dir:
            self._temp_dir.cleanup()

    @property
    def settings(self) -> BaseSettings:
        if self._settings is None:
            raise RuntimeError("MockContext not entered")
        return self._settings

    @property
    def workspace_dir(self) -> Path:
        if self._temp_dir is None:
            raise RuntimeError("MockContext not entered")
        return Path(self._temp_dir.name)


@pytest.fixture
def mock_context() -> Generator[MockContext, None, None]:
    """Fixture providing an isolated test context."""
    with MockContext() as ctx:
        yield ctx


@pytest.fixture
def temp_workspace(tmp_path: Path) -> Path:
    """Fixture providing a temporary workspace directory."""
    workspace = tmp_path / "workspace"
    workspace.mkdir(parents=True)
    return workspace


@pytest.fixture
def store(mock_context: MockContext) -> TaskStore:
    """Fixture providing an empty store in a temporary workspace."""
    return TaskStore(mock_context.settings)


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Factory for in-memory tasks with sequential ids."""
    ids = count(1)

    def _make(
        title: str = "",
        column: Column = Column.BACKLOG,
        priority: Priority = Priority.MEDIUM,
        position: float = 0.0,
        blocked_by: list[str] | None = None,
        task_id: str | None = None,
        **kwargs,
    ) -> Task:
        n = next(ids)
        return Task(
            id=task_id or f"t{n}",
            title=title or f"Task {n}",
            type=kwargs.pop("type", TaskType.FEATURE),
            column=column,
            priority=priority,
            position=position,
            blocked_by=blocked_by or [],
            **kwargs,
        )

    return _make
