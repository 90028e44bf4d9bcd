"""
Typed expression templates

Generated code is assembled from literal text and typed slots instead of
ad-hoc string concatenation. Number slots only take numbers and render them
the way the target language prints them; code slots only take code that a
generator has already produced.

    template = ExpressionTemplate("((", CodeSlot("a"), ") % (", CodeSlot("b"), "))")
    template.render(a="7", b="3")  # -> "((7) % (3))"
"""
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple, Union


class TemplateError(ValueError):
    """Raised when a template is rendered with missing or mistyped values"""


@dataclass(frozen=True)
class NumberSlot:
    """Slot filled with a numeric field value"""
    name: str


@dataclass(frozen=True)
class CodeSlot:
    """Slot filled with already generated code"""
    name: str


Part = Union[str, NumberSlot, CodeSlot]
Number = Union[int, float]


def format_js_number(value: Number) -> str:
    """Render a number the way JavaScript's String(number) does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    # Larger integers are not exact as JavaScript doubles
    if isinstance(value, int) and abs(value) <= 2 ** 53:
        return str(value)
    value = float(value)
    if value == 0:
        return "0"  # also -0

    text = repr(value)  # shortest round-trip digits, same as JavaScript
    if "e" not in text:
        return text[:-2] if text.endswith(".0") else text

    mantissa, exponent = text.split("e")
    exponent = int(exponent)
    if -7 < exponent < 21:
        # JavaScript stays positional between 1e-7 and 1e21
        sign = "-" if mantissa.startswith("-") else ""
        mantissa = mantissa.lstrip("-")
        whole = mantissa.split(".")[0]
        digits = mantissa.replace(".", "")
        point = len(whole) + exponent
        if point <= 0:
            return f"{sign}0.{'0' * -point}{digits}"
        if point >= len(digits):
            return f"{sign}{digits}{'0' * (point - len(digits))}"
        return f"{sign}{digits[:point]}.{digits[point:]}"
    return f"{mantissa}e{'+' if exponent > 0 else '-'}{abs(exponent)}"


def format_python_number(value: Number) -> str:
    """Render a number as a Python expression."""
    if math.isnan(value):
        return "float('nan')"
    if math.isinf(value):
        return "float('inf')" if value > 0 else "-float('inf')"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value)


class ExpressionTemplate:
    """
    Code template made of literal text and typed slots.

    Args:
        *parts: Literal strings, NumberSlot and CodeSlot instances, in order
        number_format: Renders numbers for the target language
    """

    def __init__(self, *parts: Part, number_format: Callable[[Number], str] = format_js_number):
        for part in parts:
            if not isinstance(part, (str, NumberSlot, CodeSlot)):
                raise TemplateError(f"Unsupported template part: {part!r}")
        self._parts: Tuple[Part, ...] = parts
        self._number_format = number_format

    @property
    def slot_names(self) -> List[str]:
        names = []
        for part in self._parts:
            if isinstance(part, (NumberSlot, CodeSlot)) and part.name not in names:
                names.append(part.name)
        return names

    def render(self, **values) -> str:
        """
        Fill every slot and return the code text.

        Raises:
            TemplateError: If a slot is missing, a value has the wrong type,
                or a value is passed that no slot uses
        """
        unused = sorted(set(values) - set(self.slot_names))
        if unused:
            raise TemplateError(f"No slot named: {', '.join(unused)}")

        rendered: Dict[str, str] = {}
        out = []
        for part in self._parts:
            if isinstance(part, str):
                out.append(part)
                continue
            if part.name not in rendered:
                if part.name not in values:
                    raise TemplateError(f"Missing value for slot '{part.name}'")
                rendered[part.name] = self._render_slot(part, values[part.name])
            out.append(rendered[part.name])
        return "".join(out)

    def _render_slot(self, slot: Part, value) -> str:
        if isinstance(slot, NumberSlot):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TemplateError(
                    f"Slot '{slot.name}' expects a number, got {type(value).__name__}"
                )
            return self._number_format(value)
        if not isinstance(value, str):
            raise TemplateError(f"Slot '{slot.name}' expects code text, got {type(value).__name__}")
        return value
