"""Pending edit records.

Every change made in editing mode becomes one of four records that the host
persists later. Attributes are snake_case with camelCase aliases for the wire.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

EquationComponentType = Literal["Equation", "InteractiveEquation", "ColoredEquation"]
StructureAction = Literal["add", "delete", "reorder"]


class NumericWidgetProps(BaseModel):
    """Parameters of an inline number scrubber."""

    model_config = ConfigDict(populate_by_name=True)

    var_name: str | None = Field(default=None, alias="varName")
    default_value: float | None = Field(default=None, alias="defaultValue")
    min: float | None = None
    max: float | None = None
    step: float | None = None


class TextEdit(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["text"] = "text"
    id: str
    section_id: str = Field(alias="sectionId")
    element_path: str = Field(alias="elementPath")
    original_text: str = Field(alias="originalText")
    new_text: str = Field(alias="newText")
    original_html: str | None = Field(default=None, alias="originalHtml")
    new_html: str | None = Field(default=None, alias="newHtml")
    timestamp: int  # Unix timestamp in milliseconds


class EquationEdit(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["equation"] = "equation"
    id: str
    section_id: str = Field(alias="sectionId")
    component_type: EquationComponentType = Field(default="Equation", alias="componentType")
    original_latex: str = Field(alias="originalLatex")
    new_latex: str = Field(alias="newLatex")
    color_map: dict[str, str] | None = Field(default=None, alias="colorMap")
    timestamp: int


class NumericWidgetEdit(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["numericWidget"] = "numericWidget"
    id: str
    section_id: str = Field(alias="sectionId")
    element_path: str = Field(alias="elementPath")
    original_props: NumericWidgetProps = Field(alias="originalProps")
    new_props: NumericWidgetProps = Field(alias="newProps")
    timestamp: int


class StructureEdit(BaseModel):
    """A block-level topology change: add, delete or reorder."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["structure"] = "structure"
    id: str
    action: StructureAction
    section_id: str | None = Field(default=None, alias="sectionId")
    section_ids: list[str] | None = Field(default=None, alias="sectionIds")
    content: str | None = None
    block_type: str | None = Field(default=None, alias="blockType")
    timestamp: int


PendingEdit = Annotated[
    TextEdit | EquationEdit | NumericWidgetEdit | StructureEdit,
    Field(discriminator="type"),
]

_pending_edit_adapter: TypeAdapter[Any] = TypeAdapter(PendingEdit)


def parse_edit(data: dict[str, Any]) -> TextEdit | EquationEdit | NumericWidgetEdit | StructureEdit:
    """Validate a wire-format record into its edit model."""
    return _pending_edit_adapter.validate_python(data)


def serialize_edit(edit: BaseModel) -> dict[str, Any]:
    return edit.model_dump(by_alias=True, exclude_none=True)
