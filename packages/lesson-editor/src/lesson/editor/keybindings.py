"""Section input keybindings manager."""

from __future__ import annotations

from typing import Literal

from lesson.editor.keys import Key, KeyEvent, KeyId, matches_key

EditorAction = Literal[
    # Slash menu
    "menuUp",
    "menuDown",
    "menuConfirm",
    "menuCancel",
    # Text input
    "submit",
    "newLine",
    "deleteCharBackward",
]

KeybindingsConfig = dict[EditorAction, KeyId | list[KeyId]]

DEFAULT_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    "menuUp": Key.up,
    "menuDown": Key.down,
    "menuConfirm": Key.enter,
    "menuCancel": Key.escape,
    "submit": Key.enter,
    "newLine": Key.shift(Key.enter),
    "deleteCharBackward": Key.backspace,
}


class KeybindingsManager:
    """Resolves key presses to editor actions."""

    def __init__(self, config: KeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[EditorAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: KeybindingsConfig) -> None:
        self._action_to_keys.clear()

        for action, keys in DEFAULT_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        for action, keys in config.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

    def matches(self, data: KeyEvent | KeyId, action: EditorAction) -> bool:
        """Check if input matches a specific action."""
        keys = self._action_to_keys.get(action)
        if not keys:
            return False
        return any(matches_key(data, key) for key in keys)

    def get_keys(self, action: EditorAction) -> list[KeyId]:
        return self._action_to_keys.get(action, [])

    def set_config(self, config: KeybindingsConfig) -> None:
        self._build_maps(config)


_global_keybindings: KeybindingsManager | None = None


def get_keybindings() -> KeybindingsManager:
    global _global_keybindings
    if _global_keybindings is None:
        _global_keybindings = KeybindingsManager()
    return _global_keybindings


def set_keybindings(manager: KeybindingsManager) -> None:
    global _global_keybindings
    _global_keybindings = manager
