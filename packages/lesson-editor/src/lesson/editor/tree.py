"""Composite document tree and the id-aware walker over it.

Nodes are immutable. Replacement builds a new tree along the path to the
target and shares every untouched subtree with the original.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Iterator, Mapping, Sequence, Union

Node = Union["DocumentNode", str]


@dataclass(frozen=True)
class DocumentNode:
    """An element in lesson content: a layout, block, heading, widget, ..."""

    type: str
    id: str | None = None
    key: str | None = None
    props: Mapping[str, Any] = field(default_factory=dict)
    children: tuple[Node, ...] = ()


def node(
    type: str,
    *children: Node,
    id: str | None = None,
    key: str | None = None,
    **props: Any,
) -> DocumentNode:
    """Shorthand constructor: ``node("block", node("p", "hi"), id="b1")``."""
    return DocumentNode(type=type, id=id, key=key, props=props, children=tuple(children))


def as_children(content: Node | Iterable[Node] | None) -> tuple[Node, ...]:
    """Normalize a single node, a sequence of nodes, or None to a children tuple."""
    if content is None:
        return ()
    if isinstance(content, (str, DocumentNode)):
        return (content,)
    return tuple(content)


def iter_nodes(root: Node) -> Iterator[DocumentNode]:
    """Yield every element in the subtree, depth-first in document order."""
    if not isinstance(root, DocumentNode):
        return
    yield root
    for child in root.children:
        yield from iter_nodes(child)


def get_id(root: Node) -> str | None:
    """Return the first identifier found in the subtree.

    The node's own id wins; otherwise children are searched depth-first in
    document order and the first non-empty id is returned. Sibling subtrees
    that both carry ids resolve to the earlier one.
    """
    if not isinstance(root, DocumentNode):
        return None
    if root.id:
        return root.id
    for child in root.children:
        found = get_id(child)
        if found:
            return found
    return None


def contains_id(root: Node, target_id: str) -> bool:
    """True if some node in the subtree resolves to ``target_id``."""
    return any(n.id == target_id for n in iter_nodes(root))


def replace_content(
    root: Node, target_id: str, new_content: Node | Iterable[Node] | None
) -> Node:
    """Return a tree where the node with ``target_id`` has ``new_content`` as children.

    The target keeps its type, key and props. Ancestors on the path are
    rebuilt; a tree without the target comes back with identical content.
    """
    if not isinstance(root, DocumentNode):
        return root

    if root.id == target_id:
        return replace(root, children=as_children(new_content))

    if not root.children:
        return root

    children = tuple(
        replace_content(child, target_id, new_content) for child in root.children
    )
    return replace(root, children=children)


def node_at(root: Node, path: Sequence[int]) -> Node | None:
    """Follow child indices from ``root``; None if the path leaves the tree."""
    current = root
    for index in path:
        if not isinstance(current, DocumentNode) or not 0 <= index < len(current.children):
            return None
        current = current.children[index]
    return current


def text_content(root: Node) -> str:
    """Concatenated literal text of the subtree."""
    if isinstance(root, str):
        return root
    return "".join(text_content(child) for child in root.children)


def element_path(root: DocumentNode, path: Sequence[int], root_index: int = 0) -> str:
    """Position label such as ``"layout[2] > block[0] > p[1]"``.

    Each step names the element and its index among its element siblings;
    literal text children are not counted.
    """
    labels = [f"{root.type}[{root_index}]"]
    current: Node = root
    for index in path:
        if not isinstance(current, DocumentNode) or not 0 <= index < len(current.children):
            break
        child = current.children[index]
        if not isinstance(child, DocumentNode):
            break
        position = sum(isinstance(c, DocumentNode) for c in current.children[:index])
        labels.append(f"{child.type}[{position}]")
        current = child
    return " > ".join(labels)
