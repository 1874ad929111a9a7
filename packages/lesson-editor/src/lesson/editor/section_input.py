"""Slash-command aware input region.

A ``SectionInput`` is the composing surface of one empty lesson block. The
author types free text; typing ``/`` opens the command menu filtered by
whatever follows the slash. Picking a block command turns the region into
that block type, picking an inline command drops a widget into the text,
and Enter commits the encoded content.

The buffer is a list of segments: literal strings and widget nodes. Text
offsets (caret, trigger) count each widget as the length of its marker.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Literal

import grapheme as _grapheme

from lesson.editor.command_menu import CommandMenu
from lesson.editor.commands import (
    COMMANDS,
    Command,
    get_command,
    is_block_command,
    is_inline_command,
)
from lesson.editor.config import EditorConfig
from lesson.editor.keybindings import KeybindingsManager, get_keybindings
from lesson.editor.keys import KeyEvent, KeyId
from lesson.editor.markers import (
    decode_to_nodes,
    encode,
    format_marker,
    widget_identity,
    widget_node,
)
from lesson.editor.tree import DocumentNode

logger = logging.getLogger(__name__)

TRIGGER_CHAR = "/"
DIVIDER_CONTENT = "---"

InputMode = Literal["idle", "composing", "block_selected"]
Segment = str | DocumentNode

_last_stamp = 0


def mint_instance_id(kind: str) -> str:
    """Return ``kind-<ms>``, strictly increasing within the process."""
    global _last_stamp
    stamp = time.time_ns() // 1_000_000
    if stamp <= _last_stamp:
        stamp = _last_stamp + 1
    _last_stamp = stamp
    return f"{kind}-{stamp}"


@dataclass(frozen=True)
class CommitEvent:
    """Emitted when a region's content is committed."""

    region_id: str
    content: str
    block_variant: str | None = None


@dataclass(frozen=True)
class RegionState:
    """Snapshot of a region's mode and menu.

    ``menu_query`` is ``None`` while the menu is closed.
    """

    mode: InputMode
    variant: str | None
    menu_query: str | None


def _segment_text(segment: Segment) -> str:
    if isinstance(segment, str):
        return segment
    identity = widget_identity(segment)
    return format_marker(*identity) if identity else ""


def _normalize(segments: list[Segment]) -> list[Segment]:
    """Merge adjacent strings and drop empty ones."""
    result: list[Segment] = []
    for segment in segments:
        if isinstance(segment, str):
            if not segment:
                continue
            if result and isinstance(result[-1], str):
                result[-1] = result[-1] + segment
                continue
        result.append(segment)
    return result


def _split_at(segments: list[Segment], offset: int) -> tuple[list[Segment], list[Segment]]:
    """Split the buffer at a text offset.

    A widget straddling the offset stays whole on the left side.
    """
    left: list[Segment] = []
    right: list[Segment] = []
    position = 0
    for segment in segments:
        length = len(_segment_text(segment))
        end = position + length
        if end <= offset:
            left.append(segment)
        elif position >= offset:
            right.append(segment)
        elif isinstance(segment, str):
            cut = offset - position
            left.append(segment[:cut])
            right.append(segment[cut:])
        else:
            left.append(segment)
        position = end
    return _normalize(left), _normalize(right)


class SectionInput:
    """Composing state machine for one editable region."""

    def __init__(
        self,
        region_id: str,
        placeholder: str | None = None,
        config: EditorConfig | None = None,
        keybindings: KeybindingsManager | None = None,
        commands: tuple[Command, ...] = COMMANDS,
    ) -> None:
        self._config = config or EditorConfig()
        if keybindings is None and self._config.keybindings:
            keybindings = KeybindingsManager(self._config.keybindings)  # type: ignore[arg-type]
        self._keybindings = keybindings

        self.region_id = region_id
        self._default_placeholder = (
            placeholder if placeholder is not None else self._config.default_placeholder
        )
        self.placeholder = self._default_placeholder

        self._segments: list[Segment] = []
        self._caret = 0
        self._trigger_offset: int | None = None
        self._selected_variant: str | None = None
        self._menu_open = False
        self._menu = CommandMenu(commands=commands, keybindings=keybindings)

        self.on_commit: Callable[[CommitEvent], None] | None = None

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def text(self) -> str:
        """Buffer text, widgets written as their markers."""
        return "".join(_segment_text(s) for s in self._segments)

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def caret(self) -> int:
        return self._caret

    @property
    def trigger_offset(self) -> int | None:
        return self._trigger_offset

    @property
    def selected_variant(self) -> str | None:
        return self._selected_variant

    @property
    def is_menu_open(self) -> bool:
        return self._menu_open

    @property
    def query(self) -> str:
        return self._menu.query if self._menu_open else ""

    @property
    def menu(self) -> CommandMenu:
        return self._menu

    @property
    def mode(self) -> InputMode:
        if self._selected_variant is not None:
            return "block_selected"
        if self.text.rstrip("\r\n"):
            return "composing"
        return "idle"

    @property
    def state(self) -> RegionState:
        return RegionState(
            mode=self.mode,
            variant=self._selected_variant,
            menu_query=self._menu.query if self._menu_open else None,
        )

    def content(self) -> str:
        """The buffer encoded for commit."""
        return encode(self._segments)

    # ------------------------------------------------------------------
    # Buffer mutation
    # ------------------------------------------------------------------

    def input_text(self, text: str) -> None:
        """Insert typed text at the caret."""
        left, right = _split_at(self._segments, self._caret)
        self._segments = _normalize(left + [text] + right)
        self._caret = len("".join(_segment_text(s) for s in left)) + len(text)
        self._on_buffer_changed()

    def set_buffer(self, text: str, caret: int | None = None) -> None:
        """Replace the whole buffer with user-edited text.

        Markers in ``text`` become widgets. The caret defaults to the end.
        """
        self._segments = _normalize(list(decode_to_nodes(text)))
        length = len(self.text)
        self._caret = length if caret is None else max(0, min(caret, length))
        self._on_buffer_changed()

    def move_caret(self, offset: int) -> None:
        self._caret = max(0, min(offset, len(self.text)))

    def insert_widget(self, kind: str, instance_id: str) -> None:
        """Insert a widget and one trailing space at the caret."""
        left, right = _split_at(self._segments, self._caret)
        self._segments = _normalize(left + [widget_node(kind, instance_id), " "] + right)
        self._caret = len("".join(_segment_text(s) for s in left)) + len(
            format_marker(kind, instance_id)
        ) + 1

    def _truncate(self, offset: int) -> None:
        left, _ = _split_at(self._segments, offset)
        self._segments = left
        self._caret = len(self.text)

    def _delete_backward(self) -> bool:
        if self._caret == 0 or not self._segments:
            return False
        left, right = _split_at(self._segments, self._caret)
        if not left:
            return False
        last = left.pop()
        if isinstance(last, str):
            # Drop the whole last grapheme (emoji, combining marks)
            clusters = list(_grapheme.graphemes(last))
            left.append(last[: len(last) - len(clusters[-1])])
        self._segments = _normalize(left + right)
        self._caret = len("".join(_segment_text(s) for s in left))
        return True

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _open_menu(self, query: str, offset: int) -> None:
        if not self._menu_open or self._menu.query != query:
            self._menu.set_query(query)
        self._menu_open = True
        self._trigger_offset = offset

    def close_menu(self) -> None:
        self._menu_open = False
        self._menu.set_query("")
        self._trigger_offset = None

    def _restore_placeholder(self) -> None:
        self._selected_variant = None
        self.placeholder = self._default_placeholder

    def _last_trigger_index(self) -> int:
        """Offset of the last trigger typed as text. Widget markers are skipped."""
        last = -1
        position = 0
        for segment in self._segments:
            if isinstance(segment, str):
                found = segment.rfind(TRIGGER_CHAR)
                if found != -1:
                    last = position + found
            position += len(_segment_text(segment))
        return last

    def _on_buffer_changed(self) -> None:
        text = self.text.rstrip("\r\n")

        if not text:
            self.close_menu()
            self._restore_placeholder()
            return

        slash_index = self._last_trigger_index()
        if slash_index != -1 and slash_index < len(text):
            query = text[slash_index + 1 :]
            if " " not in query:
                self._open_menu(query, slash_index)
                return

        self.close_menu()

    def reset(self) -> None:
        """Clear the buffer and return to the idle state."""
        self._segments = []
        self._caret = 0
        self.close_menu()
        self._restore_placeholder()

    def select_command(self, command_id: str) -> None:
        """Apply a command picked from the slash menu."""
        command = get_command(command_id)
        if command is None:
            raise ValueError(f"Unknown command: {command_id!r}")

        trigger = self._trigger_offset
        self.close_menu()

        if command_id == "divider":
            self.reset()
            self._emit(CommitEvent(self.region_id, DIVIDER_CONTENT, "divider"))
            return

        if trigger is not None:
            self._truncate(trigger)

        if is_inline_command(command_id):
            self._caret = len(self.text)
            self.insert_widget(command_id, mint_instance_id(command_id))
            self._caret = len(self.text)
            return

        if is_block_command(command_id):
            self._selected_variant = command_id
            self.placeholder = self._config.placeholder_for(command_id)
            self._caret = len(self.text)

    def commit(self) -> bool:
        """Emit a commit event for non-empty content. The buffer is kept."""
        content = self.content()
        if not content.strip():
            return False
        self._emit(CommitEvent(self.region_id, content, self._selected_variant))
        return True

    def _emit(self, event: CommitEvent) -> None:
        logger.debug(
            "Region %s committed %r as %s",
            event.region_id,
            event.content,
            event.block_variant or "paragraph",
        )
        if self.on_commit:
            self.on_commit(event)

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def handle_key(self, data: KeyEvent | KeyId) -> bool:
        """Handle a key press. Returns ``True`` if the key was consumed."""
        kb = self._keybindings or get_keybindings()

        if self._menu_open:
            if kb.matches(data, "menuConfirm"):
                command = self._menu.selected()
                if command is not None:
                    self.select_command(command.id)
                return True
            if kb.matches(data, "menuCancel"):
                self.close_menu()
                return True
            if self._menu.handle_key(data):
                return True

        if kb.matches(data, "submit"):
            self.commit()
            return True

        if kb.matches(data, "newLine"):
            self.input_text("\n")
            return True

        if kb.matches(data, "deleteCharBackward"):
            if self._delete_backward():
                self._on_buffer_changed()
            text = self.text.rstrip("\r\n")
            if text == TRIGGER_CHAR or not text:
                self.close_menu()
                if not text:
                    self._restore_placeholder()
            return True

        return False
