"""Configuration for kanban-core.

Settings Management:
    The module provides both global singleton and context-based settings:

    1. Global singleton (simple cases):
        set_settings(my_settings)
        settings = get_settings()

    2. Context-based (isolated contexts, tests):
        with SettingsContext(my_settings):
            settings = get_settings()  # Returns my_settings

Settings Loading Priority (highest to lowest):
    1. Constructor arguments
    2. Environment variables (KANBAN_* prefix)
    3. Project config (./.{app_name}/settings.json)
    4. User config (~/.{app_name}/settings.json)
    5. .env file
    6. Default values
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from pathlib import Path
from typing import Generator, Tuple, Type

from pydantic_settings import (
    BaseSettings as PydanticBaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from kanban_core.settings_mixins import (
    AppSettingsMixin,
    BoardSettingsMixin,
    LoggingSettingsMixin,
)

__all__ = [
    "BaseSettings",
    "SettingsContext",
    "SettingsValidationError",
    "get_settings",
    "set_settings",
    "set_context_settings",
    "get_context_settings",
    "validate_settings",
    "reload_settings",
]


class BaseSettings(BoardSettingsMixin, AppSettingsMixin, LoggingSettingsMixin, PydanticBaseSettings):
    """Settings for kanban-core.

    Mixins provide organized settings:
    - BoardSettingsMixin: Position gaps, retries, suggestion defaults
    - AppSettingsMixin: Application identity and disk layout
    - LoggingSettingsMixin: Log level and format

    Output-mode choices (quiet, JSON) belong to callers that render results;
    the core components never read them.
    """

    model_config = SettingsConfigDict(
        env_prefix="KANBAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[PydanticBaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Layer the project and user JSON files between the environment and .env.

        Missing files are left out.
        """
        app_name = cls.model_fields["app_name"].default
        json_files = (
            Path.cwd() / f".{app_name}" / "settings.json",
            Path.home() / f".{app_name}" / "settings.json",
        )
        return (
            init_settings,
            env_settings,
            *(
                JsonConfigSettingsSource(settings_cls, json_file=path)
                for path in json_files
                if path.exists()
            ),
            dotenv_settings,
        )


# Context variable for settings (takes precedence over global singleton)
_settings_context: ContextVar[BaseSettings | None] = ContextVar(
    "settings_context", default=None
)

_settings_instance: BaseSettings | None = None


def get_settings() -> BaseSettings:
    """Get the current settings instance.

    Settings resolution order:
    1. Context variable (set via SettingsContext or set_context_settings)
    2. Global singleton (set via set_settings)
    3. Fresh BaseSettings instance (created on first access)
    """
    context_settings = _settings_context.get()
    if context_settings is not None:
        return context_settings

    global _settings_instance
    if _settings_instance is None:
        _settings_instance = BaseSettings()
    return _settings_instance


def set_settings(settings: BaseSettings) -> None:
    """Set the global settings instance."""
    global _settings_instance
    _settings_instance = settings


def set_context_settings(settings: BaseSettings | None) -> Token:
    """Set settings for the current context.

    Args:
        settings: Settings to use in current context, or None to clear

    Returns:
        Token that can be used to reset the context variable.
    """
    return _settings_context.set(settings)


def get_context_settings() -> BaseSettings | None:
    """Get settings from current context (if any)."""
    return _settings_context.get()


@contextmanager
def SettingsContext(settings: BaseSettings) -> Generator[BaseSettings, None, None]:
    """Context manager for isolated settings.

    Example:
        with SettingsContext(test_settings) as s:
            store = TaskStore()  # picks up test_settings
    """
    token = _settings_context.set(settings)
    try:
        yield settings
    finally:
        _settings_context.reset(token)


def reload_settings() -> BaseSettings:
    """Reload settings (clears global singleton and context cache)."""
    global _settings_instance
    _settings_instance = None
    _settings_context.set(None)
    return get_settings()


class SettingsValidationError(Exception):
    """Raised when settings validation fails."""

    pass


def validate_settings(settings: BaseSettings) -> None:
    """Validate settings for runtime use.

    Checks relationships between fields that single-field validation
    cannot express.

    Raises:
        SettingsValidationError: If validation fails
    """
    errors = []

    if settings.min_position_gap >= settings.position_gap:
        errors.append(
            f"min_position_gap ({settings.min_position_gap}) must be smaller "
            f"than position_gap ({settings.position_gap})."
        )

    if settings.position_retry_attempts < 1:
        errors.append("position_retry_attempts must be at least 1.")

    if errors:
        raise SettingsValidationError("\n".join(errors))
