"""Exceptions raised by the lesson editor."""

from __future__ import annotations


class LessonEditorError(Exception):
    """Base class for lesson editor errors."""


class WidgetPropsError(LessonEditorError, ValueError):
    """Numeric widget parameters violate their range constraints."""


class ConfigError(LessonEditorError):
    """The editor configuration file could not be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
