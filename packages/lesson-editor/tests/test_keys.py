"""Tests for lesson.editor.keys and lesson.editor.keybindings."""

from __future__ import annotations

import pytest

from lesson.editor.keybindings import (
    DEFAULT_KEYBINDINGS,
    KeybindingsManager,
    get_keybindings,
    set_keybindings,
)
from lesson.editor.keys import Key, KeyEvent, matches_key, normalize_key_name, parse_key_id


# ---------------------------------------------------------------------------
# Key ids
# ---------------------------------------------------------------------------


class TestParseKeyId:
    def test_plain_key(self) -> None:
        assert parse_key_id("enter") == {"modifiers": 0, "key": "enter"}

    def test_modifiers_bitmask(self) -> None:
        assert parse_key_id("ctrl+shift+a") == {"modifiers": 5, "key": "a"}

    def test_modifier_order_is_irrelevant(self) -> None:
        assert parse_key_id("shift+ctrl+a") == parse_key_id("ctrl+shift+a")

    def test_dom_names_are_normalized(self) -> None:
        assert parse_key_id("ArrowUp") == {"modifiers": 0, "key": "up"}

    def test_empty_and_modifier_only(self) -> None:
        assert parse_key_id("") is None
        assert parse_key_id("shift") is None

    def test_plus_key(self) -> None:
        assert parse_key_id("+") == {"modifiers": 0, "key": "+"}
        assert parse_key_id("ctrl++") == {"modifiers": 4, "key": "+"}


class TestKeyEvent:
    def test_key_id_from_dom_event(self) -> None:
        assert KeyEvent("Enter", shift=True).key_id == "shift+enter"
        assert KeyEvent("ArrowDown").key_id == "down"
        assert KeyEvent("Escape").key_id == "escape"

    def test_from_key_id(self) -> None:
        event = KeyEvent.from_key_id("shift+enter")
        assert event.shift is True
        assert event.key == "enter"

    def test_from_invalid_key_id(self) -> None:
        with pytest.raises(ValueError):
            KeyEvent.from_key_id("")

    def test_normalize_key_name(self) -> None:
        assert normalize_key_name("Backspace") == "backspace"
        assert normalize_key_name("A") == "a"
        assert normalize_key_name(" ") == "space"


class TestMatchesKey:
    def test_event_matches_id(self) -> None:
        assert matches_key(KeyEvent("Enter"), "enter")

    def test_shift_enter_is_not_enter(self) -> None:
        assert not matches_key(KeyEvent("Enter", shift=True), "enter")
        assert matches_key(KeyEvent("Enter", shift=True), Key.shift(Key.enter))

    def test_string_data(self) -> None:
        assert matches_key("Escape", "escape")
        assert not matches_key("a", "b")

    def test_invalid_binding(self) -> None:
        assert not matches_key("a", "")


# ---------------------------------------------------------------------------
# Keybindings
# ---------------------------------------------------------------------------


class TestKeybindingsManager:
    def test_defaults(self) -> None:
        kb = KeybindingsManager()
        assert kb.matches("enter", "submit")
        assert kb.matches("shift+enter", "newLine")
        assert kb.matches(KeyEvent("ArrowUp"), "menuUp")
        assert kb.get_keys("menuCancel") == ["escape"]

    def test_defaults_use_named_keys(self) -> None:
        assert DEFAULT_KEYBINDINGS["newLine"] == Key.shift(Key.enter) == "shift+enter"
        assert DEFAULT_KEYBINDINGS["menuCancel"] == Key.escape

    def test_every_default_action_has_keys(self) -> None:
        kb = KeybindingsManager()
        for action in DEFAULT_KEYBINDINGS:
            assert kb.get_keys(action), action

    def test_override(self) -> None:
        kb = KeybindingsManager({"submit": ["ctrl+enter"]})
        assert kb.matches("ctrl+enter", "submit")
        assert not kb.matches("enter", "submit")

    def test_set_config_rebuilds_from_defaults(self) -> None:
        kb = KeybindingsManager({"submit": "ctrl+enter"})
        kb.set_config({})
        assert kb.matches("enter", "submit")

    def test_global_manager(self) -> None:
        original = get_keybindings()
        try:
            custom = KeybindingsManager({"menuCancel": "ctrl+c"})
            set_keybindings(custom)
            assert get_keybindings() is custom
        finally:
            set_keybindings(original)
