"""Slash command menu with filtering and clamped keyboard navigation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from lesson.editor.commands import COMMANDS, Command, categorize, filter_commands
from lesson.editor.keybindings import KeybindingsManager, get_keybindings
from lesson.editor.keys import KeyEvent, KeyId


@dataclass
class MenuEntry:
    """A command as listed in a menu section, with its flat index."""

    command: Command
    index: int
    selected: bool


@dataclass
class MenuSection:
    title: str
    entries: list[MenuEntry]


class CommandMenu:
    """Filtered command list with a single flat selection index.

    The index addresses the flat filtered list, not a per-category list,
    and navigation stops at both ends instead of wrapping.
    """

    def __init__(
        self,
        commands: tuple[Command, ...] = COMMANDS,
        keybindings: KeybindingsManager | None = None,
    ) -> None:
        self._commands = commands
        self._keybindings = keybindings
        self._query = ""
        self._filtered: list[Command] = list(commands)
        self._selected_index = 0

        self.on_select: Callable[[Command], None] | None = None
        self.on_cancel: Callable[[], None] | None = None

    @property
    def query(self) -> str:
        return self._query

    @property
    def items(self) -> list[Command]:
        return list(self._filtered)

    @property
    def selected_index(self) -> int:
        return self._selected_index

    def set_query(self, query: str) -> None:
        """Refilter for a new query and reset the selection to the top."""
        self._query = query
        self._filtered = filter_commands(query, self._commands)
        self._selected_index = 0

    def move_up(self) -> None:
        if self._selected_index > 0:
            self._selected_index -= 1

    def move_down(self) -> None:
        if self._selected_index < len(self._filtered) - 1:
            self._selected_index += 1

    def set_selected_index(self, index: int) -> None:
        self._selected_index = max(0, min(index, len(self._filtered) - 1))

    def selected(self) -> Command | None:
        if 0 <= self._selected_index < len(self._filtered):
            return self._filtered[self._selected_index]
        return None

    def sections(self) -> list[MenuSection]:
        """Group the filtered commands into "Blocks" and "Inline Components"."""
        grouped = categorize(self._filtered)
        position = {cmd.id: i for i, cmd in enumerate(self._filtered)}
        sections: list[MenuSection] = []
        for title, commands in (("Blocks", grouped.block), ("Inline Components", grouped.inline)):
            if not commands:
                continue
            entries = [
                MenuEntry(
                    command=cmd,
                    index=position[cmd.id],
                    selected=position[cmd.id] == self._selected_index,
                )
                for cmd in commands
            ]
            sections.append(MenuSection(title=title, entries=entries))
        return sections

    def handle_key(self, data: KeyEvent | KeyId) -> bool:
        """Apply a navigation key. Returns ``True`` if the key was consumed."""
        kb = self._keybindings or get_keybindings()

        if kb.matches(data, "menuUp"):
            self.move_up()
            return True
        if kb.matches(data, "menuDown"):
            self.move_down()
            return True
        if kb.matches(data, "menuConfirm"):
            command = self.selected()
            if command is not None and self.on_select:
                self.on_select(command)
            return True
        if kb.matches(data, "menuCancel"):
            if self.on_cancel:
                self.on_cancel()
            return True
        return False
