"""lesson-editor: inline lesson authoring with slash commands and a pending edit ledger."""

# Host bridge
from lesson.editor.bridge import (
    ClearEditsMessage,
    HostBridge,
    RequestEditsMessage,
    SetEditingModeMessage,
    parse_host_message,
)

# Command catalog and menu
from lesson.editor.command_menu import CommandMenu, MenuEntry, MenuSection
from lesson.editor.commands import (
    COMMANDS,
    Command,
    categorize,
    filter_commands,
    get_command,
    is_inline_command,
)

# Configuration and errors
from lesson.editor.config import EditorConfig, NumericDefaults, load_config
from lesson.editor.errors import ConfigError, LessonEditorError, WidgetPropsError

# Modal forms
from lesson.editor.editable_text import EditableText
from lesson.editor.forms import EquationEditorForm, NumberEditorForm, validate_numeric_props

# Keys
from lesson.editor.keybindings import (
    DEFAULT_KEYBINDINGS,
    KeybindingsManager,
    get_keybindings,
    set_keybindings,
)
from lesson.editor.keys import Key, KeyEvent, KeyId, matches_key, parse_key_id

# Ledger and records
from lesson.editor.ledger import EditLedger, EquationFocus, NumericWidgetFocus
from lesson.editor.lesson import LessonDocument, build_block_content, scrubber_element_path

# Marker codec
from lesson.editor.markers import WidgetInstance, decode, encode, format_marker, has_markers

# Input regions
from lesson.editor.section_input import CommitEvent, RegionState, SectionInput

# Document tree
from lesson.editor.tree import DocumentNode, contains_id, get_id, node, replace_content
from lesson.editor.types import (
    EquationEdit,
    NumericWidgetEdit,
    NumericWidgetProps,
    PendingEdit,
    StructureEdit,
    TextEdit,
    parse_edit,
)

__all__ = [
    # Bridge
    "ClearEditsMessage",
    "HostBridge",
    "RequestEditsMessage",
    "SetEditingModeMessage",
    "parse_host_message",
    # Commands
    "COMMANDS",
    "Command",
    "CommandMenu",
    "MenuEntry",
    "MenuSection",
    "categorize",
    "filter_commands",
    "get_command",
    "is_inline_command",
    # Config and errors
    "ConfigError",
    "EditorConfig",
    "LessonEditorError",
    "NumericDefaults",
    "WidgetPropsError",
    "load_config",
    # Forms
    "EditableText",
    "EquationEditorForm",
    "NumberEditorForm",
    "validate_numeric_props",
    # Keys
    "DEFAULT_KEYBINDINGS",
    "Key",
    "KeyEvent",
    "KeyId",
    "KeybindingsManager",
    "get_keybindings",
    "matches_key",
    "parse_key_id",
    "set_keybindings",
    # Ledger
    "EditLedger",
    "EquationEdit",
    "EquationFocus",
    "NumericWidgetEdit",
    "NumericWidgetFocus",
    "NumericWidgetProps",
    "PendingEdit",
    "StructureEdit",
    "TextEdit",
    "parse_edit",
    # Lesson
    "LessonDocument",
    "build_block_content",
    "scrubber_element_path",
    # Markers
    "WidgetInstance",
    "decode",
    "encode",
    "format_marker",
    "has_markers",
    # Regions
    "CommitEvent",
    "RegionState",
    "SectionInput",
    # Tree
    "DocumentNode",
    "contains_id",
    "get_id",
    "node",
    "replace_content",
]
