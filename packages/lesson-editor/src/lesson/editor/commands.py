"""Slash command catalog and matching.

Commands come in two flavours. Block commands replace the whole input
region with a typed block (heading, quote, ...). Inline commands insert a
widget into the text being composed and let the author keep typing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

BlockCommandType = Literal["h1", "h2", "h3", "paragraph", "quote", "divider"]
InlineCommandType = Literal["numberScrubber", "dropdown", "textInput"]
SlashCommandType = Literal[
    "h1",
    "h2",
    "h3",
    "paragraph",
    "quote",
    "divider",
    "numberScrubber",
    "dropdown",
    "textInput",
]
CommandCategory = Literal["block", "inline"]

BLOCK_COMMAND_IDS: tuple[str, ...] = ("h1", "h2", "h3", "paragraph", "quote", "divider")
INLINE_COMMAND_IDS: tuple[str, ...] = ("numberScrubber", "dropdown", "textInput")


@dataclass(frozen=True)
class Command:
    """A registered slash command."""

    id: str
    label: str
    description: str
    keywords: frozenset[str]
    category: CommandCategory

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on label, description or keywords."""
        needle = query.lower()
        if needle in self.label.lower() or needle in self.description.lower():
            return True
        return any(needle in keyword.lower() for keyword in self.keywords)


def _command(
    id: str,
    label: str,
    description: str,
    keywords: Iterable[str],
    category: CommandCategory,
) -> Command:
    return Command(
        id=id,
        label=label,
        description=description,
        keywords=frozenset(keywords),
        category=category,
    )


COMMANDS: tuple[Command, ...] = (
    # Block-level commands
    _command("h1", "Heading 1", "Large section heading", ["h1", "heading", "title", "large"], "block"),
    _command("h2", "Heading 2", "Medium section heading", ["h2", "heading", "subtitle", "medium"], "block"),
    _command("h3", "Heading 3", "Small section heading", ["h3", "heading", "small"], "block"),
    _command("paragraph", "Paragraph", "Plain text paragraph", ["p", "paragraph", "text", "plain"], "block"),
    _command("quote", "Quote", "Capture a quote", ["quote", "blockquote", "citation"], "block"),
    _command("divider", "Divider", "Visual separator", ["divider", "separator", "hr", "line"], "block"),
    # Inline widget commands
    _command(
        "numberScrubber",
        "Number Scrubber",
        "Interactive number with drag/click controls",
        ["number", "scrubber", "stepper", "slider", "inline", "variable"],
        "inline",
    ),
    _command(
        "dropdown",
        "Dropdown",
        "Inline dropdown selector",
        ["dropdown", "select", "choice", "inline", "options"],
        "inline",
    ),
    _command(
        "textInput",
        "Text Input",
        "Inline text input field",
        ["input", "text", "inline", "field", "type"],
        "inline",
    ),
)

_COMMANDS_BY_ID: dict[str, Command] = {cmd.id: cmd for cmd in COMMANDS}


def get_command(command_id: str) -> Command | None:
    return _COMMANDS_BY_ID.get(command_id)


def is_inline_command(command_id: str) -> bool:
    """True for commands that insert a widget and keep composing."""
    return command_id in INLINE_COMMAND_IDS


def is_block_command(command_id: str) -> bool:
    return command_id in BLOCK_COMMAND_IDS


def filter_commands(
    query: str, commands: Iterable[Command] = COMMANDS
) -> list[Command]:
    """Return the commands matching query, in registry order.

    An empty query matches every command.
    """
    return [cmd for cmd in commands if cmd.matches(query)]


@dataclass
class CommandSections:
    """Matches partitioned by category, each keeping its relative order."""

    block: list[Command]
    inline: list[Command]


def categorize(matches: Iterable[Command]) -> CommandSections:
    sections = CommandSections(block=[], inline=[])
    for cmd in matches:
        if cmd.category == "block":
            sections.block.append(cmd)
        else:
            sections.inline.append(cmd)
    return sections
