"""Lesson document: the ordered top-level sections and their structure edits.

Each top-level section is a wrapper tree holding one block. New blocks start
as an input region; committing the region replaces the block's children
with typed content and records the addition in the ledger.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Sequence

from lesson.editor.bridge import HostBridge, section_delete_message, section_reorder_message
from lesson.editor.config import EditorConfig
from lesson.editor.editable_text import EditableText
from lesson.editor.ledger import EditLedger
from lesson.editor.markers import decode_to_nodes
from lesson.editor.section_input import CommitEvent, SectionInput
from lesson.editor.tree import (
    DocumentNode,
    contains_id,
    element_path,
    get_id,
    node,
    node_at,
    replace_content,
    text_content,
)
from lesson.editor.types import NumericWidgetProps

logger = logging.getLogger(__name__)

LAYOUT_KEY_PREFIX = "layout-"
PLACEHOLDER_BLOCK_TYPE = "placeholder"


def build_block_content(variant: str | None, content: str, section_id: str) -> DocumentNode:
    """Content node for a committed block of the given variant."""
    children = decode_to_nodes(content)
    match variant:
        case "h1" | "h2" | "h3":
            return node(variant, *children, section_id=section_id)
        case "quote":
            return node("blockquote", node("p", *children, section_id=section_id))
        case "divider":
            return node("hr")
        case _:
            return node("p", *children, section_id=section_id)


def _as_numeric_props(props: NumericWidgetProps | dict[str, Any]) -> NumericWidgetProps:
    if isinstance(props, NumericWidgetProps):
        return props
    return NumericWidgetProps.model_validate(props)


def _format_number(value: float | None) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def scrubber_element_path(section_id: str, var_name: str | None, default_value: float | None) -> str:
    """Ledger key for a number scrubber: ``scrubble-<section>-<var or default>``."""
    return f"scrubble-{section_id}-{var_name or _format_number(default_value)}"


def section_key_id(section: DocumentNode) -> str:
    """Id used for a section in reorder records."""
    if section.key and section.key.startswith(LAYOUT_KEY_PREFIX):
        return section.key[len(LAYOUT_KEY_PREFIX) :]
    return get_id(section) or "unknown"


class LessonDocument:
    """Top-level sections of a lesson plus the regions being composed."""

    def __init__(
        self,
        sections: Iterable[DocumentNode] = (),
        ledger: EditLedger | None = None,
        bridge: HostBridge | None = None,
        config: EditorConfig | None = None,
    ) -> None:
        self.sections: list[DocumentNode] = list(sections)
        self.ledger = ledger if ledger is not None else EditLedger()
        self.bridge = bridge
        self._config = config or EditorConfig()
        self.regions: dict[str, SectionInput] = {}

    def section_ids(self) -> list[str]:
        return [section_key_id(section) for section in self.sections]

    def index_of(self, target_id: str) -> int:
        """Index of the top-level section containing ``target_id``, or -1."""
        for index, section in enumerate(self.sections):
            if contains_id(section, target_id):
                return index
        return -1

    def _new_block_id(self) -> str:
        block_id = f"block-{time.time_ns() // 1_000_000}"
        while self.index_of(block_id) != -1:
            block_id = f"block-{int(block_id.rsplit('-', 1)[1]) + 1}"
        return block_id

    def add_section_after(self, target_id: str) -> str | None:
        """Insert an empty input block after the section containing ``target_id``."""
        index = self.index_of(target_id)
        if index == -1:
            logger.warning("Could not find block with id: %s", target_id)
            return None

        block_id = self._new_block_id()
        wrapper = node(
            "layout",
            node("block", node("section-input", region_id=block_id), id=block_id),
            key=f"{LAYOUT_KEY_PREFIX}{block_id}",
        )

        region = SectionInput(block_id, config=self._config)
        region.on_commit = self.commit_section
        self.regions[block_id] = region

        self.ledger.add_structure_edit(
            "add", section_id=block_id, block_type=PLACEHOLDER_BLOCK_TYPE, content=""
        )
        self.sections = self.sections[: index + 1] + [wrapper] + self.sections[index + 1 :]
        return block_id

    def commit_section(self, event: CommitEvent) -> None:
        """Replace a block's input region with its committed content."""
        content_node = build_block_content(event.block_variant, event.content, event.region_id)
        self.sections = [
            replace_content(section, event.region_id, content_node)  # type: ignore[misc]
            for section in self.sections
        ]
        self.regions.pop(event.region_id, None)
        self.ledger.add_structure_edit(
            "add",
            section_id=event.region_id,
            content=event.content,
            block_type=event.block_variant,
        )

    def delete_section(self, section_id: str) -> None:
        self.sections = [s for s in self.sections if not contains_id(s, section_id)]
        self.regions.pop(section_id, None)
        self.ledger.add_structure_edit("delete", section_id=section_id)
        if self.bridge is not None:
            self.bridge.post(section_delete_message(section_id))

    def reorder(self, new_order: Iterable[DocumentNode]) -> list[str]:
        """Adopt a new section order and record it as one reorder edit."""
        self.sections = list(new_order)
        section_ids = self.section_ids()
        self.ledger.add_structure_edit("reorder", section_ids=section_ids)
        if self.bridge is not None:
            self.bridge.post(section_reorder_message(section_ids))
        return section_ids

    # ------------------------------------------------------------------
    # Editing existing content
    # ------------------------------------------------------------------

    def open_text_editor(self, section_id: str, path: Sequence[int]) -> EditableText | None:
        """Start editing the element at ``path`` (child indices) in a section.

        A pending text edit for the same element supplies the current text,
        so repeated edits fold into one record.
        """
        index = self.index_of(section_id)
        if index == -1:
            logger.warning("Could not find block with id: %s", section_id)
            return None
        section = self.sections[index]
        target = node_at(section, path)
        if not isinstance(target, DocumentNode):
            logger.warning("No element at %s in %s", list(path), section_id)
            return None

        path_label = element_path(section, path, root_index=index)
        text, html = text_content(target), None
        pending = self.ledger.find_text_edit(section_id, path_label)
        if pending is not None:
            text, html = pending.new_text, pending.new_html

        editor = EditableText(self.ledger, section_id, path_label, text, html)
        editor.begin()
        return editor

    def effective_numeric_props(
        self, section_id: str, props: NumericWidgetProps | dict[str, Any]
    ) -> NumericWidgetProps:
        """A scrubber's props with any pending edit's values laid over them."""
        base = _as_numeric_props(props)
        path = scrubber_element_path(section_id, base.var_name, base.default_value)
        pending = self.ledger.find_numeric_widget_edit(section_id, path)
        if pending is None:
            return base
        overrides = {k: v for k, v in pending.new_props.model_dump().items() if v is not None}
        return base.model_copy(update=overrides)

    def open_number_editor(self, section_id: str, props: NumericWidgetProps | dict[str, Any]) -> str:
        """Focus the number editor on a scrubber. Returns its element path."""
        base = _as_numeric_props(props)
        path = scrubber_element_path(section_id, base.var_name, base.default_value)
        self.ledger.open_numeric_widget_editor(
            self.effective_numeric_props(section_id, base), section_id, path
        )
        return path
