"""Entry point for the lesson-editor CLI.

``lesson-editor replay steps.json`` drives a one-block lesson through a
scripted editing session and prints every message sent to the host as a
JSON line. Steps are objects with an ``op`` field:

- ``{"op": "host", "message": {...}}``
- ``{"op": "add-section", "after": "intro"}``
- ``{"op": "type", "text": "Hello /hea"}``
- ``{"op": "key", "key": "enter"}``
- ``{"op": "select", "command": "h1"}``
- ``{"op": "delete-section", "id": "intro"}``

``type``, ``key`` and ``select`` act on ``"region"`` if given, else on the
most recently added block.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, TextIO

import jsonschema

from lesson.editor.bridge import HostBridge
from lesson.editor.commands import COMMANDS, get_command
from lesson.editor.config import EditorConfig, load_config
from lesson.editor.errors import LessonEditorError
from lesson.editor.ledger import EditLedger
from lesson.editor.lesson import LessonDocument
from lesson.editor.tree import node

logger = logging.getLogger(__name__)


STEP_OPS = ("host", "add-section", "delete-section", "type", "key", "select")

# Fields each op cannot run without
STEP_REQUIRED_FIELDS: dict[str, list[str]] = {
    "host": ["message"],
    "delete-section": ["id"],
    "key": ["key"],
    "select": ["command"],
}

SCRIPT_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["op"],
        "properties": {
            "op": {"enum": list(STEP_OPS)},
            "message": {"type": "object"},
            "after": {"type": "string"},
            "id": {"type": "string"},
            "region": {"type": "string"},
            "text": {"type": "string"},
            "key": {"type": "string"},
            "command": {"enum": [cmd.id for cmd in COMMANDS]},
        },
        "allOf": [
            {
                "if": {"required": ["op"], "properties": {"op": {"const": op}}},
                "then": {"required": fields},
            }
            for op, fields in STEP_REQUIRED_FIELDS.items()
        ],
    },
}


def validate_script(steps: Any) -> list[str]:
    """Validate a replay script. Returns error messages (empty if valid)."""
    try:
        jsonschema.validate(instance=steps, schema=SCRIPT_SCHEMA)
        return []
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "(root)"
        return [f"{path}: {e.message}"]


def _initial_sections() -> list[Any]:
    return [node("layout", node("block", node("p", "Welcome"), id="intro"), key="layout-intro")]


def _field(step: dict[str, Any], name: str, number: int) -> Any:
    if name not in step:
        raise LessonEditorError(f"step {number}: missing {name!r}")
    return step[name]


def replay(steps: list[dict[str, Any]], config: EditorConfig, out: TextIO) -> LessonDocument:
    """Run scripted steps against a fresh lesson, writing host messages to ``out``."""
    ledger = EditLedger()

    def post(message: dict[str, Any]) -> None:
        out.write(json.dumps(message) + "\n")

    bridge = HostBridge(ledger, post)
    document = LessonDocument(_initial_sections(), ledger=ledger, bridge=bridge, config=config)
    last_region: str | None = None

    for number, step in enumerate(steps, start=1):
        op = step.get("op")
        region_id = step.get("region", last_region)
        logger.debug("Step %d: %s", number, op)

        match op:
            case "host":
                bridge.handle(_field(step, "message", number))
            case "add-section":
                added = document.add_section_after(step.get("after", "intro"))
                if added is not None:
                    last_region = added
            case "delete-section":
                document.delete_section(_field(step, "id", number))
            case "type" | "key" | "select":
                region = document.regions.get(region_id) if region_id else None
                if region is None:
                    raise LessonEditorError(f"step {number}: no open region {region_id!r}")
                if op == "type":
                    region.input_text(step.get("text", ""))
                elif op == "key":
                    region.handle_key(_field(step, "key", number))
                else:
                    command_id = _field(step, "command", number)
                    if get_command(command_id) is None:
                        raise LessonEditorError(f"step {number}: unknown command {command_id!r}")
                    region.select_command(command_id)
            case _:
                raise LessonEditorError(f"step {number}: unknown op {op!r}")

    return document


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="lesson-editor: inline lesson editing tools")
    parser.add_argument("--log-level", default="warning", choices=["debug", "info", "warning", "error"])
    parser.add_argument("--config", default=None, help="Editor settings JSON file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay_parser = subparsers.add_parser("replay", help="Replay a scripted editing session")
    replay_parser.add_argument("script", help="JSON file with a list of steps")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config) if args.config else EditorConfig()
        with open(args.script, encoding="utf-8") as f:
            steps = json.load(f)
        errors = validate_script(steps)
        if errors:
            raise LessonEditorError(f"invalid script: {errors[0]}")
        replay(steps, config, sys.stdout)
    except (OSError, json.JSONDecodeError, LessonEditorError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
