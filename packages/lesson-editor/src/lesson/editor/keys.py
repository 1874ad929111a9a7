"""Key event normalization and matching.

Input surfaces report key presses either as DOM-style events
(``key="ArrowUp"`` plus modifier flags) or as key identifiers such as
``"shift+enter"``. Both are reduced to the same identifier form so that
``matches_key`` can compare them against bindings.
"""

from __future__ import annotations

from dataclasses import dataclass

KeyId = str


class Key:
    """Named keys used by the default bindings."""

    escape = "escape"
    enter = "enter"
    backspace = "backspace"
    up = "up"
    down = "down"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"


MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

# DOM ``KeyboardEvent.key`` values -> key names
_DOM_KEY_NAMES: dict[str, str] = {
    "arrowup": "up",
    "arrowdown": "down",
    "arrowleft": "left",
    "arrowright": "right",
    "esc": "escape",
    "return": "enter",
    "del": "delete",
    " ": "space",
}


def normalize_key_name(key: str) -> str:
    """Lower-case a key name and map DOM names onto key ids."""
    if len(key) == 1 and key != " ":
        return key.lower()
    lower = key.lower()
    return _DOM_KEY_NAMES.get(lower, lower)


def parse_key_id(key_id: str) -> dict[str, object] | None:
    """Split a key identifier like ``"ctrl+shift+a"`` into its components.

    Returns a dict with:
    - ``modifiers``: int bitmask (shift=1, alt=2, ctrl=4)
    - ``key``: the normalized base key

    Returns ``None`` if the key_id is empty or names modifiers only.
    """
    if not key_id:
        return None

    # "+" and "ctrl++" style ids bind the plus key itself
    if key_id == "+":
        return {"modifiers": 0, "key": "+"}
    if key_id.endswith("++"):
        parts = key_id[:-2].split("+") + ["+"]
    else:
        parts = key_id.split("+")

    modifier = 0
    key_parts: list[str] = []

    for part in parts:
        lower = part.lower()
        if lower in MODIFIERS:
            modifier |= MODIFIERS[lower]
        elif part:
            key_parts.append(part)

    key = "+".join(key_parts)
    if not key:
        return None

    return {"modifiers": modifier, "key": normalize_key_name(key)}


@dataclass(frozen=True)
class KeyEvent:
    """A single key press on an input surface."""

    key: str
    shift: bool = False
    ctrl: bool = False
    alt: bool = False

    @property
    def key_id(self) -> KeyId:
        parts: list[str] = []
        if self.ctrl:
            parts.append("ctrl")
        if self.shift:
            parts.append("shift")
        if self.alt:
            parts.append("alt")
        parts.append(normalize_key_name(self.key))
        return "+".join(parts)

    @classmethod
    def from_key_id(cls, key_id: KeyId) -> KeyEvent:
        parsed = parse_key_id(key_id)
        if parsed is None:
            raise ValueError(f"Invalid key id: {key_id!r}")
        bits = int(parsed["modifiers"])  # type: ignore[arg-type]
        return cls(
            key=str(parsed["key"]),
            shift=bool(bits & MODIFIERS["shift"]),
            alt=bool(bits & MODIFIERS["alt"]),
            ctrl=bool(bits & MODIFIERS["ctrl"]),
        )


def matches_key(data: KeyEvent | KeyId, key_id: KeyId) -> bool:
    """Return ``True`` if *data* is the key named by *key_id*.

    Modifiers must match exactly: ``"enter"`` does not match shift+Enter.
    """
    expected = parse_key_id(key_id)
    if expected is None:
        return False

    if isinstance(data, KeyEvent):
        actual = parse_key_id(data.key_id)
    else:
        actual = parse_key_id(data)
    if actual is None:
        return False

    return actual == expected
