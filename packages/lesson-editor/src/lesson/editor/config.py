"""Editor configuration with JSON file overrides.

Settings files use camelCase keys and are deep-merged over the defaults,
so a file only needs to name the values it changes.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lesson.editor.errors import ConfigError

CONFIG_DIR_NAME = ".lesson"
SETTINGS_FILE_NAME = "editor.json"

DEFAULT_PLACEHOLDER = "Type '/' for commands"


def _default_block_placeholders() -> dict[str, str]:
    return {
        "h1": "Heading 1",
        "h2": "Heading 2",
        "h3": "Heading 3",
        "paragraph": "Start writing...",
        "quote": "Enter your quote...",
        "divider": "",
    }


@dataclass
class NumericDefaults:
    """Values a number editor falls back to when a widget leaves them unset."""

    default_value: float = 10
    min: float = 0
    max: float = 100
    step: float = 1


@dataclass
class EditorConfig:
    """Editor configuration."""

    default_placeholder: str = DEFAULT_PLACEHOLDER
    block_placeholders: dict[str, str] = field(default_factory=_default_block_placeholders)
    keybindings: dict[str, str | list[str]] = field(default_factory=dict)
    numeric_defaults: NumericDefaults = field(default_factory=NumericDefaults)

    def placeholder_for(self, variant: str | None) -> str:
        """Placeholder shown for a block variant; paragraph's for unknown ones."""
        if variant is None:
            return self.default_placeholder
        if variant in self.block_placeholders:
            return self.block_placeholders[variant]
        return self.block_placeholders.get("paragraph", self.default_placeholder)


def _config_defaults() -> dict[str, Any]:
    return {
        "defaultPlaceholder": DEFAULT_PLACEHOLDER,
        "blockPlaceholders": _default_block_placeholders(),
        "keybindings": {},
        "numericDefaults": {"defaultValue": 10, "min": 0, "max": 100, "step": 1},
    }


def deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into base.

    Nested dicts merge key by key; any other override value replaces the
    base value. ``None`` overrides are ignored.
    """
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def config_from_dict(data: dict[str, Any]) -> EditorConfig:
    """Build an EditorConfig from camelCase settings, filling in defaults."""
    merged = deep_merge(_config_defaults(), data)
    numeric = merged["numericDefaults"]
    return EditorConfig(
        default_placeholder=merged["defaultPlaceholder"],
        block_placeholders=dict(merged["blockPlaceholders"]),
        keybindings=dict(merged["keybindings"]),
        numeric_defaults=NumericDefaults(
            default_value=numeric["defaultValue"],
            min=numeric["min"],
            max=numeric["max"],
            step=numeric["step"],
        ),
    )


def default_config_path(cwd: str | None = None) -> Path:
    return Path(cwd or os.getcwd()) / CONFIG_DIR_NAME / SETTINGS_FILE_NAME


def load_config(path: str | Path | None = None) -> EditorConfig:
    """Load editor settings from a JSON file.

    A missing file yields the defaults. Unreadable or non-object JSON
    raises ConfigError.
    """
    config_path = Path(path) if path is not None else default_config_path()
    if not config_path.exists():
        return EditorConfig()

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(str(config_path), str(exc)) from exc

    if not isinstance(raw, dict):
        raise ConfigError(str(config_path), "settings must be a JSON object")

    return config_from_dict(raw)
