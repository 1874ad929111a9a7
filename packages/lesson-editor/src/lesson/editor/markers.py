"""Inline widget marker codec.

Committed content is a flat string in which inline widgets appear as
``{{kind:id}}`` tokens, e.g. ``"Set {{numberScrubber:numberScrubber-17}} apples"``.
``encode`` flattens a content tree into that form and ``decode`` turns it
back into literal text interleaved with widget instances.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from lesson.editor.commands import INLINE_COMMAND_IDS
from lesson.editor.tree import DocumentNode, Node

WIDGET_KIND_ATTR = "data-inline-component"
WIDGET_ID_ATTR = "data-component-id"

MARKER_RE = re.compile(
    r"\{\{(" + "|".join(re.escape(kind) for kind in INLINE_COMMAND_IDS) + r"):([^}]+)\}\}"
)


def format_marker(kind: str, instance_id: str) -> str:
    return f"{{{{{kind}:{instance_id}}}}}"


def widget_defaults(kind: str, instance_id: str) -> dict[str, Any]:
    """Parameters a widget starts with when only its marker is known."""
    if kind == "numberScrubber":
        return {"var_name": f"var_{instance_id}", "default_value": 10, "min": 0, "max": 100}
    if kind == "dropdown":
        return {"correct_answer": "Option 1", "options": ["Option 1", "Option 2", "Option 3"]}
    if kind == "textInput":
        return {"correct_answer": "answer", "placeholder": "Type answer..."}
    return {}


@dataclass
class WidgetInstance:
    """A live inline widget resolved from a marker."""

    kind: str
    id: str
    props: dict[str, Any] = field(default_factory=dict)

    @property
    def marker(self) -> str:
        return format_marker(self.kind, self.id)

    def to_node(self) -> DocumentNode:
        return widget_node(self.kind, self.id)


def widget_node(kind: str, instance_id: str) -> DocumentNode:
    """Content node for an inline widget, tagged so ``encode`` emits its marker."""
    return DocumentNode(
        type="span",
        props={WIDGET_KIND_ATTR: kind, WIDGET_ID_ATTR: instance_id},
    )


def widget_identity(item: Node) -> tuple[str, str] | None:
    """Return ``(kind, id)`` if the node is tagged as an inline widget."""
    if not isinstance(item, DocumentNode):
        return None
    kind = item.props.get(WIDGET_KIND_ATTR)
    instance_id = item.props.get(WIDGET_ID_ATTR)
    if kind and instance_id:
        return str(kind), str(instance_id)
    return None


def _encode_into(item: Node, parts: list[str]) -> None:
    if isinstance(item, str):
        parts.append(item)
        return
    identity = widget_identity(item)
    if identity is not None:
        parts.append(format_marker(*identity))
        return
    for child in item.children:
        _encode_into(child, parts)


def encode(content: Node | Iterable[Node]) -> str:
    """Flatten content to text, writing widgets as markers.

    Wrapper elements contribute nothing of their own; widget children are
    not visited. The result is stripped of surrounding whitespace.
    """
    parts: list[str] = []
    if isinstance(content, (str, DocumentNode)):
        _encode_into(content, parts)
    else:
        for item in content:
            _encode_into(item, parts)
    return "".join(parts).strip()


def has_markers(text: str) -> bool:
    return MARKER_RE.search(text) is not None


def decode(text: str) -> str | list[str | WidgetInstance]:
    """Split text into literal segments and widget instances.

    Unknown kinds and malformed tokens stay literal. Text without any
    marker is returned as-is rather than wrapped in a list.
    """
    parts: list[str | WidgetInstance] = []
    last_index = 0

    for match in MARKER_RE.finditer(text):
        if match.start() > last_index:
            parts.append(text[last_index : match.start()])
        kind, instance_id = match.group(1), match.group(2)
        parts.append(
            WidgetInstance(kind=kind, id=instance_id, props=widget_defaults(kind, instance_id))
        )
        last_index = match.end()

    if not parts:
        return text

    if last_index < len(text):
        parts.append(text[last_index:])

    return parts


def decode_to_nodes(text: str) -> tuple[Node, ...]:
    """Decode text into content children, widgets as widget nodes."""
    decoded = decode(text)
    if isinstance(decoded, str):
        return (decoded,) if decoded else ()
    return tuple(
        part.to_node() if isinstance(part, WidgetInstance) else part for part in decoded
    )
