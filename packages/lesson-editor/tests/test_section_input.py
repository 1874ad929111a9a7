"""Tests for lesson.editor.section_input -- the slash-command input state machine."""

from __future__ import annotations

import re

import pytest

from lesson.editor.config import EditorConfig
from lesson.editor.keys import KeyEvent
from lesson.editor.markers import widget_identity
from lesson.editor.section_input import (
    CommitEvent,
    RegionState,
    SectionInput,
    mint_instance_id,
)

ENTER = KeyEvent("Enter")
SHIFT_ENTER = KeyEvent("Enter", shift=True)
ESCAPE = KeyEvent("Escape")
BACKSPACE = KeyEvent("Backspace")
DOWN = KeyEvent("ArrowDown")
UP = KeyEvent("ArrowUp")


@pytest.fixture
def commits() -> list[CommitEvent]:
    return []


@pytest.fixture
def region(commits: list[CommitEvent]) -> SectionInput:
    r = SectionInput("block-1")
    r.on_commit = commits.append
    return r


# ---------------------------------------------------------------------------
# Buffer changes and the slash trigger
# ---------------------------------------------------------------------------


class TestBufferChanged:
    def test_initial_state_is_idle(self, region: SectionInput) -> None:
        assert region.mode == "idle"
        assert region.state == RegionState(mode="idle", variant=None, menu_query=None)
        assert region.placeholder == "Type '/' for commands"
        assert region.trigger_offset is None

    def test_plain_text_is_composing(self, region: SectionInput) -> None:
        region.input_text("Hello")
        assert region.mode == "composing"
        assert region.is_menu_open is False

    def test_slash_opens_menu_with_query(self, region: SectionInput) -> None:
        region.input_text("Hello /hea")
        assert region.is_menu_open is True
        assert region.query == "hea"
        assert region.trigger_offset == 6
        assert region.state == RegionState(mode="composing", variant=None, menu_query="hea")
        assert [c.id for c in region.menu.items] == ["h1", "h2", "h3"]

    def test_bare_slash_lists_every_command(self, region: SectionInput) -> None:
        region.input_text("/")
        assert region.is_menu_open is True
        assert region.query == ""
        assert len(region.menu.items) == 9

    def test_space_after_slash_closes_menu(self, region: SectionInput) -> None:
        region.input_text("and/or ")
        assert region.is_menu_open is False
        assert region.trigger_offset is None

    def test_last_slash_is_used(self, region: SectionInput) -> None:
        region.input_text("a/b c /qu")
        assert region.query == "qu"
        assert region.trigger_offset == 6

    def test_trailing_newlines_are_ignored(self, region: SectionInput) -> None:
        region.set_buffer("/he\n\n")
        assert region.is_menu_open is True
        assert region.query == "he"

    def test_clearing_buffer_resets_everything(self, region: SectionInput) -> None:
        region.input_text("/h1")
        region.handle_key(ENTER)
        region.input_text("Title")
        region.set_buffer("")
        assert region.mode == "idle"
        assert region.selected_variant is None
        assert region.placeholder == "Type '/' for commands"
        assert region.trigger_offset is None

    def test_slash_inside_widget_marker_is_not_a_trigger(self, region: SectionInput) -> None:
        region.set_buffer("See {{dropdown:a/b}}")
        assert region.is_menu_open is False
        assert region.trigger_offset is None

    def test_slash_after_widget_marker_triggers(self, region: SectionInput) -> None:
        region.set_buffer("{{dropdown:a/b}} /he")
        assert region.query == "he"
        assert region.trigger_offset == len("{{dropdown:a/b}} ")

    def test_typing_at_caret(self, region: SectionInput) -> None:
        region.set_buffer("ac")
        region.move_caret(1)
        region.input_text("b")
        assert region.text == "abc"
        assert region.caret == 2

    def test_caret_is_clamped(self, region: SectionInput) -> None:
        region.set_buffer("abc")
        region.move_caret(99)
        assert region.caret == 3
        region.move_caret(-5)
        assert region.caret == 0

    def test_set_buffer_turns_markers_into_widgets(self, region: SectionInput) -> None:
        region.set_buffer("x {{dropdown:d-1}} y")
        widgets = [widget_identity(s) for s in region.segments if not isinstance(s, str)]
        assert widgets == [("dropdown", "d-1")]
        assert region.text == "x {{dropdown:d-1}} y"


# ---------------------------------------------------------------------------
# Block commands
# ---------------------------------------------------------------------------


class TestBlockCommands:
    def test_enter_selects_first_heading(self, region: SectionInput, commits: list[CommitEvent]) -> None:
        region.input_text("Hello /hea")
        assert region.handle_key(ENTER) is True
        assert region.text == "Hello "
        assert region.mode == "block_selected"
        assert region.selected_variant == "h1"
        assert region.placeholder == "Heading 1"
        assert region.caret == len("Hello ")
        assert region.is_menu_open is False
        assert commits == []

    def test_arrow_keys_pick_highlighted_command(self, region: SectionInput) -> None:
        region.input_text("/")
        region.handle_key(DOWN)
        region.handle_key(DOWN)
        region.handle_key(UP)
        region.handle_key(DOWN)
        region.handle_key(ENTER)
        assert region.selected_variant == "h3"
        assert region.placeholder == "Heading 3"

    def test_quote_and_paragraph_placeholders(self, region: SectionInput) -> None:
        region.input_text("/quote")
        region.handle_key(ENTER)
        assert region.placeholder == "Enter your quote..."

        other = SectionInput("block-2")
        other.input_text("/para")
        other.handle_key(ENTER)
        assert other.selected_variant == "paragraph"
        assert other.placeholder == "Start writing..."

    def test_custom_placeholders_from_config(self) -> None:
        config = EditorConfig(default_placeholder="Write here")
        config.block_placeholders["h2"] = "Section title"
        region = SectionInput("b", config=config)
        assert region.placeholder == "Write here"
        region.select_command("h2")
        assert region.placeholder == "Section title"

    def test_select_without_trigger_keeps_text(self, region: SectionInput) -> None:
        region.input_text("Already typed")
        region.select_command("h2")
        assert region.text == "Already typed"
        assert region.selected_variant == "h2"

    def test_enter_with_no_matches_does_nothing(
        self, region: SectionInput, commits: list[CommitEvent]
    ) -> None:
        region.input_text("/zzz")
        assert region.handle_key(ENTER) is True
        assert region.text == "/zzz"
        assert region.selected_variant is None
        assert commits == []

    def test_unknown_command_raises(self, region: SectionInput) -> None:
        with pytest.raises(ValueError):
            region.select_command("table")


class TestDivider:
    def test_divider_commits_immediately(self, region: SectionInput, commits: list[CommitEvent]) -> None:
        region.input_text("Intro /div")
        region.handle_key(ENTER)
        assert commits == [CommitEvent("block-1", "---", "divider")]
        assert region.text == ""
        assert region.mode == "idle"
        assert region.is_menu_open is False

    def test_direct_divider_selection(self, region: SectionInput, commits: list[CommitEvent]) -> None:
        region.select_command("divider")
        assert len(commits) == 1
        assert commits[0].content == "---"
        assert commits[0].block_variant == "divider"


# ---------------------------------------------------------------------------
# Inline widgets
# ---------------------------------------------------------------------------


class TestInlineCommands:
    def test_inline_command_inserts_widget_and_space(self, region: SectionInput) -> None:
        region.input_text("Value /num")
        region.handle_key(ENTER)
        assert re.fullmatch(r"Value \{\{numberScrubber:numberScrubber-\d+\}\} ", region.text)
        assert region.caret == len(region.text)
        assert region.is_menu_open is False
        assert region.trigger_offset is None
        assert region.mode == "composing"

    def test_inline_command_keeps_block_variant(self, region: SectionInput) -> None:
        region.input_text("/h2")
        region.handle_key(ENTER)
        region.input_text("Pick /drop")
        region.handle_key(ENTER)
        assert region.selected_variant == "h2"
        assert region.text.startswith("Pick {{dropdown:dropdown-")

    def test_widget_survives_commit(self, region: SectionInput, commits: list[CommitEvent]) -> None:
        region.input_text("Value /num")
        region.handle_key(ENTER)
        region.input_text("apples")
        region.handle_key(ENTER)
        assert len(commits) == 1
        assert re.fullmatch(
            r"Value \{\{numberScrubber:numberScrubber-\d+\}\} apples", commits[0].content
        )

    def test_earlier_widgets_are_kept(self, region: SectionInput) -> None:
        region.input_text("/drop")
        region.handle_key(ENTER)
        region.input_text("and /text")
        region.menu.set_selected_index(
            [c.id for c in region.menu.items].index("textInput")
        )
        region.handle_key(ENTER)
        kinds = [widget_identity(s)[0] for s in region.segments if not isinstance(s, str)]
        assert kinds == ["dropdown", "textInput"]

    def test_insert_widget_at_caret(self, region: SectionInput) -> None:
        region.set_buffer("ab")
        region.move_caret(1)
        region.insert_widget("textInput", "t-1")
        assert region.text == "a{{textInput:t-1}} b"
        assert region.caret == len("a{{textInput:t-1}} ")

    def test_minted_ids_are_unique(self) -> None:
        first = mint_instance_id("dropdown")
        second = mint_instance_id("dropdown")
        assert first != second
        assert first.startswith("dropdown-")
        assert int(second.rsplit("-", 1)[1]) > int(first.rsplit("-", 1)[1])


# ---------------------------------------------------------------------------
# Enter, Escape and Backspace
# ---------------------------------------------------------------------------


class TestCommit:
    def test_enter_commits_content(self, region: SectionInput, commits: list[CommitEvent]) -> None:
        region.input_text("  Hello world ")
        region.handle_key(ENTER)
        assert commits == [CommitEvent("block-1", "Hello world", None)]

    def test_region_is_not_cleared(self, region: SectionInput) -> None:
        region.input_text("Hello")
        region.handle_key(ENTER)
        assert region.text == "Hello"

    def test_commit_carries_variant(self, region: SectionInput, commits: list[CommitEvent]) -> None:
        region.input_text("/h1")
        region.handle_key(ENTER)
        region.input_text("Title")
        region.handle_key(ENTER)
        assert commits == [CommitEvent("block-1", "Title", "h1")]

    def test_blank_buffer_does_not_commit(self, region: SectionInput, commits: list[CommitEvent]) -> None:
        region.input_text("   ")
        assert region.handle_key(ENTER) is True
        assert commits == []

    def test_shift_enter_inserts_newline(self, region: SectionInput, commits: list[CommitEvent]) -> None:
        region.input_text("Hello")
        assert region.handle_key(SHIFT_ENTER) is True
        assert region.text == "Hello\n"
        assert commits == []


class TestEscape:
    def test_escape_closes_menu_only(self, region: SectionInput) -> None:
        region.input_text("Hi /he")
        assert region.handle_key(ESCAPE) is True
        assert region.is_menu_open is False
        assert region.query == ""
        assert region.trigger_offset is None
        assert region.text == "Hi /he"

    def test_escape_without_menu_is_not_consumed(self, region: SectionInput) -> None:
        region.input_text("Hi")
        assert region.handle_key(ESCAPE) is False

    def test_arrows_without_menu_are_not_consumed(self, region: SectionInput) -> None:
        region.input_text("Hi")
        assert region.handle_key(UP) is False
        assert region.handle_key(DOWN) is False


class TestBackspace:
    def test_deleting_lone_slash_closes_menu(self, region: SectionInput) -> None:
        region.input_text("/")
        region.handle_key(BACKSPACE)
        assert region.text == ""
        assert region.is_menu_open is False
        assert region.mode == "idle"

    def test_leaving_only_slash_closes_menu(self, region: SectionInput) -> None:
        region.input_text("/x")
        region.handle_key(BACKSPACE)
        assert region.text == "/"
        assert region.is_menu_open is False
        assert region.trigger_offset is None

    def test_shortening_query_refreshes_menu(self, region: SectionInput) -> None:
        region.input_text("a /hx")
        region.handle_key(BACKSPACE)
        assert region.is_menu_open is True
        assert region.query == "h"

    def test_backspace_on_empty_block_clears_variant(self, region: SectionInput) -> None:
        region.input_text("/h1")
        region.handle_key(ENTER)
        assert region.text == ""
        assert region.selected_variant == "h1"
        region.handle_key(BACKSPACE)
        assert region.selected_variant is None
        assert region.placeholder == "Type '/' for commands"
        assert region.mode == "idle"

    def test_backspace_removes_whole_widget(self, region: SectionInput) -> None:
        region.set_buffer("a {{dropdown:d}} ")
        region.handle_key(BACKSPACE)
        region.handle_key(BACKSPACE)
        assert region.text == "a "
        assert region.caret == 2

    def test_backspace_removes_whole_grapheme(self, region: SectionInput) -> None:
        region.input_text("ok \U0001F44D\U0001F3FD")
        region.handle_key(BACKSPACE)
        assert region.text == "ok "
        region.set_buffer("cafe\u0301")
        region.handle_key(BACKSPACE)
        assert region.text == "caf"

    def test_reset(self, region: SectionInput) -> None:
        region.input_text("/h1")
        region.handle_key(ENTER)
        region.input_text("x")
        region.reset()
        assert region.text == ""
        assert region.state == RegionState(mode="idle", variant=None, menu_query=None)
