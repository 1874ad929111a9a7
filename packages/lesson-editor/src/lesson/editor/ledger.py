"""Pending edit ledger.

Collects the edits made in editing mode until the host saves or discards
them. The ledger keeps at most one record per edited target: repeated edits
update the record in place, and an edit that restores the original value
removes the record altogether. Text typed into a freshly added block is
folded into that block's pending "add" record.

Structure deletes and reorders are appended as they happen; replaying them
in order is left to the consumer.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from lesson.editor.types import (
    EquationComponentType,
    EquationEdit,
    NumericWidgetEdit,
    NumericWidgetProps,
    StructureAction,
    StructureEdit,
    TextEdit,
    serialize_edit,
)

logger = logging.getLogger(__name__)

AnyEdit = TextEdit | EquationEdit | NumericWidgetEdit | StructureEdit
LedgerListener = Callable[["EditLedger"], None]

_STRUCTURE_FIELDS = ("section_id", "section_ids", "content", "block_type")


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_edit_id(timestamp: int) -> str:
    return f"edit-{timestamp}-{uuid.uuid4().hex[:9]}"


def _as_props(props: NumericWidgetProps | dict[str, Any]) -> NumericWidgetProps:
    if isinstance(props, NumericWidgetProps):
        return props
    return NumericWidgetProps.model_validate(props)


@dataclass
class EquationFocus:
    """The equation currently open in the equation editor."""

    latex: str
    section_id: str
    element_path: str
    color_map: dict[str, str] | None = None
    component_type: EquationComponentType = "Equation"


@dataclass
class NumericWidgetFocus:
    """The number widget currently open in the number editor."""

    props: NumericWidgetProps
    section_id: str
    element_path: str


class EditLedger:
    """Ordered, de-duplicated collection of pending edits."""

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._edits: list[AnyEdit] = []
        self._clock = clock or _now_ms
        self._listeners: list[LedgerListener] = []

        self.equation_focus: EquationFocus | None = None
        self.numeric_focus: NumericWidgetFocus | None = None

    # ------------------------------------------------------------------
    # Access and notification
    # ------------------------------------------------------------------

    @property
    def edits(self) -> list[AnyEdit]:
        return list(self._edits)

    @property
    def count(self) -> int:
        return len(self._edits)

    def __len__(self) -> int:
        return len(self._edits)

    def __iter__(self) -> Iterator[AnyEdit]:
        return iter(list(self._edits))

    def snapshot(self) -> list[dict[str, Any]]:
        """Wire-format copy of every pending edit, in ledger order."""
        return [serialize_edit(edit) for edit in self._edits]

    def subscribe(self, fn: LedgerListener) -> Callable[[], None]:
        """Call ``fn`` after every mutation. Returns an unsubscribe function."""
        self._listeners.append(fn)

        def unsubscribe() -> None:
            if fn in self._listeners:
                self._listeners.remove(fn)

        return unsubscribe

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _find(self, predicate: Callable[[AnyEdit], bool]) -> int:
        for index, edit in enumerate(self._edits):
            if predicate(edit):
                return index
        return -1

    def _find_structure_add(self, section_id: str | None) -> int:
        return self._find(
            lambda e: isinstance(e, StructureEdit)
            and e.action == "add"
            and e.section_id == section_id
        )

    def find_text_edit(self, section_id: str, element_path: str) -> TextEdit | None:
        index = self._find(
            lambda e: isinstance(e, TextEdit)
            and e.section_id == section_id
            and e.element_path == element_path
        )
        return self._edits[index] if index != -1 else None  # type: ignore[return-value]

    def find_numeric_widget_edit(
        self, section_id: str, element_path: str
    ) -> NumericWidgetEdit | None:
        index = self._find(
            lambda e: isinstance(e, NumericWidgetEdit)
            and e.section_id == section_id
            and e.element_path == element_path
        )
        return self._edits[index] if index != -1 else None  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def add_text_edit(
        self,
        section_id: str,
        element_path: str,
        original_text: str,
        new_text: str,
        original_html: str | None = None,
        new_html: str | None = None,
    ) -> None:
        now = self._clock()

        add_index = self._find_structure_add(section_id)
        if add_index != -1:
            self._edits[add_index] = self._edits[add_index].model_copy(
                update={"content": new_text, "timestamp": now}
            )
            logger.debug("Folded text into pending add for %s", section_id)
            self._changed()
            return

        index = self._find(
            lambda e: isinstance(e, TextEdit)
            and e.section_id == section_id
            and e.element_path == element_path
        )
        if index != -1:
            existing = self._edits[index]
            html_matches = (
                new_html is None
                or existing.original_html is None
                or new_html == existing.original_html
            )
            if new_text == existing.original_text and html_matches:
                del self._edits[index]
                logger.debug("Reverted text edit %s", existing.id)
            else:
                self._edits[index] = existing.model_copy(
                    update={"new_text": new_text, "new_html": new_html, "timestamp": now}
                )
            self._changed()
            return

        self._edits.append(
            TextEdit(
                id=generate_edit_id(now),
                section_id=section_id,
                element_path=element_path,
                original_text=original_text,
                new_text=new_text,
                original_html=original_html,
                new_html=new_html,
                timestamp=now,
            )
        )
        self._changed()

    def add_equation_edit(
        self,
        section_id: str,
        original_latex: str,
        new_latex: str,
        component_type: EquationComponentType = "Equation",
        color_map: dict[str, str] | None = None,
    ) -> None:
        now = self._clock()

        index = self._find(
            lambda e: isinstance(e, EquationEdit)
            and e.section_id == section_id
            and e.original_latex == original_latex
        )
        if index != -1:
            existing = self._edits[index]
            if new_latex == existing.original_latex:
                del self._edits[index]
                logger.debug("Reverted equation edit %s", existing.id)
            else:
                self._edits[index] = existing.model_copy(
                    update={"new_latex": new_latex, "color_map": color_map, "timestamp": now}
                )
            self._changed()
            return

        self._edits.append(
            EquationEdit(
                id=generate_edit_id(now),
                section_id=section_id,
                component_type=component_type,
                original_latex=original_latex,
                new_latex=new_latex,
                color_map=color_map,
                timestamp=now,
            )
        )
        self._changed()

    def add_numeric_widget_edit(
        self,
        section_id: str,
        element_path: str,
        original_props: NumericWidgetProps | dict[str, Any],
        new_props: NumericWidgetProps | dict[str, Any],
    ) -> None:
        now = self._clock()
        original = _as_props(original_props)
        new = _as_props(new_props)

        index = self._find(
            lambda e: isinstance(e, NumericWidgetEdit)
            and e.section_id == section_id
            and e.element_path == element_path
        )
        if index != -1:
            existing = self._edits[index]
            if new == existing.original_props:
                del self._edits[index]
                logger.debug("Reverted numeric widget edit %s", existing.id)
            else:
                self._edits[index] = existing.model_copy(
                    update={"new_props": new, "timestamp": now}
                )
            self._changed()
            return

        self._edits.append(
            NumericWidgetEdit(
                id=generate_edit_id(now),
                section_id=section_id,
                element_path=element_path,
                original_props=original,
                new_props=new,
                timestamp=now,
            )
        )
        self._changed()

    def add_structure_edit(self, action: StructureAction, **fields: Any) -> None:
        """Record a structure change.

        ``fields`` may name ``section_id``, ``section_ids``, ``content`` and
        ``block_type``. A second "add" for the same section merges the given
        fields, explicit ``None`` values included, into the pending record.
        Any other keyword is a caller bug and raises TypeError, the same as
        an unexpected keyword on an ordinary signature.
        """
        unknown = set(fields) - set(_STRUCTURE_FIELDS)
        if unknown:
            raise TypeError(f"Unexpected structure edit fields: {sorted(unknown)}")

        now = self._clock()

        if action == "add":
            index = self._find_structure_add(fields.get("section_id"))
            if index != -1:
                self._edits[index] = self._edits[index].model_copy(
                    update={**fields, "timestamp": now}
                )
                self._changed()
                return

        self._edits.append(
            StructureEdit(id=generate_edit_id(now), action=action, timestamp=now, **fields)
        )
        logger.debug("Recorded structure %s %s", action, fields.get("section_id") or "")
        self._changed()

    def remove_edit(self, edit_id: str) -> None:
        self._edits = [edit for edit in self._edits if edit.id != edit_id]
        self._changed()

    def clear(self) -> None:
        self._edits = []
        self._changed()

    # ------------------------------------------------------------------
    # Equation editor focus
    # ------------------------------------------------------------------

    def open_equation_editor(
        self,
        latex: str,
        color_map: dict[str, str] | None,
        section_id: str,
        element_path: str,
        component_type: EquationComponentType = "Equation",
    ) -> None:
        self.equation_focus = EquationFocus(
            latex=latex,
            section_id=section_id,
            element_path=element_path,
            color_map=color_map,
            component_type=component_type,
        )

    def close_equation_editor(self) -> None:
        self.equation_focus = None

    def save_equation_edit(
        self, new_latex: str, new_color_map: dict[str, str] | None = None
    ) -> None:
        focus = self.equation_focus
        if focus is None:
            return

        latex_changed = new_latex != focus.latex
        color_map_changed = new_color_map is not None and new_color_map != focus.color_map

        if latex_changed or color_map_changed:
            self.add_equation_edit(
                section_id=focus.section_id,
                original_latex=focus.latex,
                new_latex=new_latex,
                component_type=focus.component_type,
                color_map=new_color_map if new_color_map is not None else focus.color_map,
            )

        self.equation_focus = None

    # ------------------------------------------------------------------
    # Numeric widget editor focus
    # ------------------------------------------------------------------

    def open_numeric_widget_editor(
        self,
        props: NumericWidgetProps | dict[str, Any],
        section_id: str,
        element_path: str,
    ) -> None:
        self.numeric_focus = NumericWidgetFocus(
            props=_as_props(props), section_id=section_id, element_path=element_path
        )

    def close_numeric_widget_editor(self) -> None:
        self.numeric_focus = None

    def save_numeric_widget_edit(self, new_props: NumericWidgetProps | dict[str, Any]) -> None:
        focus = self.numeric_focus
        if focus is None:
            return

        props = _as_props(new_props)
        if props != focus.props:
            self.add_numeric_widget_edit(
                section_id=focus.section_id,
                element_path=focus.element_path,
                original_props=focus.props,
                new_props=props,
            )

        self.numeric_focus = None
