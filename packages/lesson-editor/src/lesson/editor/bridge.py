"""Host message protocol and bridge.

The lesson runs embedded in a host application that owns saving. The host
toggles editing mode, asks for or clears the pending edits, and receives a
snapshot after every ledger change. Delivery is fire-and-forget: the host
treats the latest snapshot it has seen as authoritative.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from lesson.editor.ledger import EditLedger

logger = logging.getLogger(__name__)

PostMessage = Callable[[dict[str, Any]], None]


# --- Host -> lesson messages ---


@dataclass
class SetEditingModeMessage:
    type: str = "set-editing-mode"
    enabled: bool = False


@dataclass
class ClearEditsMessage:
    type: str = "clear-edits"


@dataclass
class RequestEditsMessage:
    type: str = "request-edits"


HostMessage = SetEditingModeMessage | ClearEditsMessage | RequestEditsMessage


def parse_host_message(data: Any) -> HostMessage | None:
    """Parse a raw dict into a typed host message, or None if unrecognized."""
    if not isinstance(data, dict):
        return None
    msg_type = data.get("type", "")
    match msg_type:
        case "set-editing-mode":
            return SetEditingModeMessage(enabled=bool(data.get("enabled", False)))
        case "clear-edits":
            return ClearEditsMessage()
        case "request-edits":
            return RequestEditsMessage()
        case _:
            return None


# --- Lesson -> host message builders ---


def edits_changed_message(edits: list[dict[str, Any]]) -> dict[str, Any]:
    return {"type": "edits-changed", "edits": edits, "count": len(edits)}


def edits_response_message(edits: list[dict[str, Any]]) -> dict[str, Any]:
    return {"type": "edits-response", "edits": edits, "count": len(edits)}


def editing_mode_changed_message(is_editing: bool) -> dict[str, Any]:
    return {"type": "editing-mode-changed", "isEditing": is_editing}


def section_reorder_message(section_ids: list[str]) -> dict[str, Any]:
    return {"type": "commit-section-reorder", "sectionIds": section_ids}


def section_delete_message(section_id: str) -> dict[str, Any]:
    return {"type": "commit-section-delete", "sectionId": section_id}


class HostBridge:
    """Connects a ledger to the host message channel."""

    def __init__(self, ledger: EditLedger, post_message: PostMessage | None = None) -> None:
        self._ledger = ledger
        self._post_message = post_message
        self.is_editing = False
        self._unsubscribe = ledger.subscribe(self._on_ledger_changed)

    def post(self, message: dict[str, Any]) -> None:
        if self._post_message is None:
            logger.debug("No host listener, dropping %s", message.get("type"))
            return
        self._post_message(message)

    def _on_ledger_changed(self, ledger: EditLedger) -> None:
        self.post(edits_changed_message(ledger.snapshot()))

    def set_editing_mode(self, enabled: bool) -> None:
        self.is_editing = enabled
        self.post(editing_mode_changed_message(enabled))

    def handle(self, data: Any) -> dict[str, Any] | None:
        """Dispatch one host message. Returns the reply for ``request-edits``."""
        message = parse_host_message(data)
        if message is None:
            logger.debug("Ignoring host message %r", data)
            return None

        match message:
            case SetEditingModeMessage(enabled=enabled):
                self.set_editing_mode(enabled)
            case ClearEditsMessage():
                self._ledger.clear()
            case RequestEditsMessage():
                reply = edits_response_message(self._ledger.snapshot())
                self.post(reply)
                return reply
        return None

    def close(self) -> None:
        """Stop forwarding ledger changes."""
        self._unsubscribe()
