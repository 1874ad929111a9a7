"""Modal editor forms for equations and number widgets.

Forms are the validation boundary in front of the ledger: a form holds the
values being typed, refuses to save invalid ones, and only hands clean
values to the ledger's focus methods.
"""

from __future__ import annotations

from lesson.editor.config import EditorConfig, NumericDefaults
from lesson.editor.errors import WidgetPropsError
from lesson.editor.keys import KeyEvent, KeyId, matches_key
from lesson.editor.ledger import EditLedger
from lesson.editor.types import NumericWidgetProps


def validate_numeric_props(min: float, max: float, step: float, default_value: float) -> None:
    """Raise WidgetPropsError unless min < max, step > 0 and min <= default <= max."""
    if min >= max:
        raise WidgetPropsError("Min must be less than max")
    if step <= 0:
        raise WidgetPropsError("Step must be greater than 0")
    if default_value < min or default_value > max:
        raise WidgetPropsError("Default value must be between min and max")


class NumberEditorForm:
    """Edits the number widget currently focused in the ledger."""

    def __init__(self, ledger: EditLedger, config: EditorConfig | None = None) -> None:
        self._ledger = ledger
        self._defaults: NumericDefaults = (config or EditorConfig()).numeric_defaults

        self.var_name = ""
        self.default_value: float = self._defaults.default_value
        self.min: float = self._defaults.min
        self.max: float = self._defaults.max
        self.step: float = self._defaults.step
        self.error: str | None = None

        self.reload()

    @property
    def is_open(self) -> bool:
        return self._ledger.numeric_focus is not None

    def reload(self) -> None:
        """Copy the focused widget's values into the form fields."""
        focus = self._ledger.numeric_focus
        if focus is None:
            return
        props = focus.props
        self.var_name = props.var_name or ""
        self.default_value = (
            props.default_value if props.default_value is not None else self._defaults.default_value
        )
        self.min = props.min if props.min is not None else self._defaults.min
        self.max = props.max if props.max is not None else self._defaults.max
        self.step = props.step if props.step is not None else self._defaults.step
        self.error = None

    def validate(self) -> bool:
        try:
            validate_numeric_props(self.min, self.max, self.step, self.default_value)
        except WidgetPropsError as exc:
            self.error = str(exc)
            return False
        self.error = None
        return True

    def props(self) -> NumericWidgetProps:
        return NumericWidgetProps(
            var_name=self.var_name or None,
            default_value=self.default_value,
            min=self.min,
            max=self.max,
            step=self.step,
        )

    def save(self) -> bool:
        """Validate and save. Invalid values leave the ledger untouched."""
        if not self.is_open or not self.validate():
            return False
        self._ledger.save_numeric_widget_edit(self.props())
        return True

    def cancel(self) -> None:
        self._ledger.close_numeric_widget_editor()

    def handle_key(self, data: KeyEvent | KeyId) -> bool:
        if matches_key(data, "enter"):
            self.save()
            return True
        if matches_key(data, "escape"):
            self.cancel()
            return True
        return False


class EquationEditorForm:
    """Edits the equation currently focused in the ledger."""

    def __init__(self, ledger: EditLedger) -> None:
        self._ledger = ledger
        self.latex = ""
        self.color_map: dict[str, str] | None = None
        self.reload()

    @property
    def is_open(self) -> bool:
        return self._ledger.equation_focus is not None

    def reload(self) -> None:
        focus = self._ledger.equation_focus
        if focus is None:
            return
        self.latex = focus.latex
        self.color_map = dict(focus.color_map) if focus.color_map is not None else None

    def save(self) -> bool:
        if not self.is_open:
            return False
        self._ledger.save_equation_edit(self.latex, self.color_map)
        return True

    def cancel(self) -> None:
        self._ledger.close_equation_editor()

    def handle_key(self, data: KeyEvent | KeyId) -> bool:
        if matches_key(data, "escape"):
            self.cancel()
            return True
        return False
