"""Tests for configuration module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

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


class TestBaseSettings:
    """Tests for BaseSettings class."""

    def test_default_values(self, temp_workspace: Path):
        with patch.dict(os.environ, {}, clear=True):
            settings = BaseSettings(workspace_dir=temp_workspace)

        assert settings.app_name == "kanban"
        assert settings.position_gap == 1000.0
        assert settings.min_position_gap == 0.001
        assert settings.position_retry_attempts == 3
        assert settings.suggest_limit == 5
        assert settings.auto_unblock_on_done is True
        assert settings.log_level == "warning"
        assert settings.log_format == "console"

    def test_workspace_path_expansion(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = BaseSettings(workspace_dir="~/test_workspace")

        assert settings.workspace_dir == Path.home() / "test_workspace"

    def test_derived_paths(self, temp_workspace: Path):
        with patch.dict(os.environ, {}, clear=True):
            settings = BaseSettings(workspace_dir=temp_workspace)

        assert settings.tasks_dir == temp_workspace / "tasks"
        assert settings.tasks_path == temp_workspace / "tasks" / "tasks.json"

    def test_ensure_workspace_exists(self, tmp_path: Path):
        workspace = tmp_path / "nested" / "workspace"
        with patch.dict(os.environ, {}, clear=True):
            settings = BaseSettings(workspace_dir=workspace)
        settings.ensure_workspace_exists()
        assert workspace.is_dir()

    def test_env_overrides(self, temp_workspace: Path):
        env = {
            "KANBAN_POSITION_GAP": "64",
            "KANBAN_SUGGEST_LIMIT": "0",
            "KANBAN_LOG_FORMAT": "json",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = BaseSettings(workspace_dir=temp_workspace)

        assert settings.position_gap == 64.0
        assert settings.suggest_limit == 0
        assert settings.log_format == "json"

    def test_init_takes_precedence_over_env(self, temp_workspace: Path):
        with patch.dict(os.environ, {"KANBAN_SUGGEST_LIMIT": "9"}, clear=True):
            settings = BaseSettings(workspace_dir=temp_workspace, suggest_limit=2)
        assert settings.suggest_limit == 2

    def test_project_json_config(self, tmp_path: Path, monkeypatch):
        config_dir = tmp_path / ".kanban"
        config_dir.mkdir()
        (config_dir / "settings.json").write_text(json.dumps({"suggest_limit": 7}))
        monkeypatch.chdir(tmp_path)

        with patch.dict(os.environ, {}, clear=True):
            settings = BaseSettings(workspace_dir=tmp_path)
        assert settings.suggest_limit == 7

    def test_invalid_log_level(self, temp_workspace: Path):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError):
                BaseSettings(workspace_dir=temp_workspace, log_level="verbose")

    def test_non_positive_gap_rejected(self, temp_workspace: Path):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError):
                BaseSettings(workspace_dir=temp_workspace, position_gap=0)


class TestSettingsAccess:
    def test_set_and_get_settings(self, mock_context):
        assert get_settings() is mock_context.settings

    def test_context_overrides_global(self, mock_context, temp_workspace: Path):
        other = BaseSettings(workspace_dir=temp_workspace, suggest_limit=1)
        with SettingsContext(other) as s:
            assert s is other
            assert get_settings() is other
            assert get_context_settings() is other
        assert get_settings() is mock_context.settings

    def test_set_context_settings_token(self, mock_context, temp_workspace: Path):
        other = BaseSettings(workspace_dir=temp_workspace)
        token = set_context_settings(other)
        try:
            assert get_settings() is other
        finally:
            set_context_settings(None)
        assert token is not None
        assert get_context_settings() is None

    def test_reload_settings_creates_fresh_instance(self, mock_context):
        original = get_settings()
        fresh = reload_settings()
        assert fresh is not original
        set_settings(original)


class TestValidateSettings:
    def test_valid_defaults(self, mock_context):
        validate_settings(mock_context.settings)

    def test_min_gap_must_be_below_gap(self, temp_workspace: Path):
        settings = BaseSettings(
            workspace_dir=temp_workspace, position_gap=1.0, min_position_gap=1.0
        )
        with pytest.raises(SettingsValidationError, match="min_position_gap"):
            validate_settings(settings)

    def test_retry_attempts_must_be_positive(self, temp_workspace: Path):
        settings = BaseSettings(workspace_dir=temp_workspace, position_retry_attempts=0)
        with pytest.raises(SettingsValidationError, match="position_retry_attempts"):
            validate_settings(settings)
