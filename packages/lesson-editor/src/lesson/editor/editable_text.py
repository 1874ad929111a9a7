"""Click-to-edit controller for existing lesson text.

In editing mode any run of lesson text can be edited in place. Starting an
edit snapshots the text (and markup, when the host supplies it); finishing
records a text edit in the ledger if anything changed; cancelling puts the
snapshot back.
"""

from __future__ import annotations

import logging

from lesson.editor.keys import Key, KeyEvent, KeyId, matches_key
from lesson.editor.ledger import EditLedger

logger = logging.getLogger(__name__)


class EditableText:
    """One editable text element inside a section."""

    def __init__(
        self,
        ledger: EditLedger,
        section_id: str,
        element_path: str,
        text: str,
        html: str | None = None,
    ) -> None:
        self._ledger = ledger
        self.section_id = section_id
        self.element_path = element_path
        self.text = text
        self.html = html
        self.is_editing = False

        self._original_text = text
        self._original_html = html

    def begin(self) -> None:
        """Enter edit mode, remembering the current content."""
        if self.is_editing:
            return
        self._original_text = self.text
        self._original_html = self.html
        self.is_editing = True

    def set_text(self, text: str, html: str | None = None) -> bool:
        """Replace the content being edited. Ignored outside edit mode."""
        if not self.is_editing:
            return False
        self.text = text
        self.html = html
        return True

    def commit(self) -> bool:
        """Leave edit mode, recording a text edit if the content changed."""
        if not self.is_editing:
            return False
        self.is_editing = False

        changed = self.text != self._original_text or self.html != self._original_html
        if changed:
            self._ledger.add_text_edit(
                section_id=self.section_id,
                element_path=self.element_path,
                original_text=self._original_text,
                new_text=self.text,
                original_html=self._original_html,
                new_html=self.html,
            )
        else:
            logger.debug("No change to %s in %s", self.element_path, self.section_id)
        return changed

    def cancel(self) -> None:
        """Leave edit mode and restore the remembered content."""
        self.text = self._original_text
        self.html = self._original_html
        self.is_editing = False

    def handle_key(self, data: KeyEvent | KeyId) -> bool:
        if not self.is_editing:
            return False
        if matches_key(data, Key.enter):
            self.commit()
            return True
        if matches_key(data, Key.escape):
            self.cancel()
            return True
        return False
