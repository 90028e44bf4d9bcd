"""
Block Definitions

Declarative description of a block's shape: its inputs, fields, output type,
colour and help metadata. The editor renders blocks from this description;
nothing here has behavior beyond describing data and checking field values.

The JSON rendering follows the editor's JSON block format, e.g.:

    {
        "type": "math_remainder",
        "message0": "%1 %% %2 %3",
        "args0": [
            {"type": "input_value", "name": "n1", "check": "Number"},
            {"type": "input_dummy", "align": "CENTRE"},
            {"type": "input_value", "name": "n2", "check": "Number"}
        ],
        "inputsInline": true,
        "output": "Number",
        "colour": 230,
        "tooltip": "",
        "helpUrl": ""
    }
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from blockforge.domain.block import Block
from blockforge.domain.port_type import PortType
from blockforge.shared.validation import (
    All,
    NumberValidator,
    PatternValidator,
    RangeValidator,
    RequiredValidator,
    ValidationError,
    ValidationResult,
    validate_field,
)


class Align(Enum):
    """Horizontal alignment of an input row"""
    LEFT = "LEFT"
    CENTRE = "CENTRE"
    RIGHT = "RIGHT"


# =============================================================================
# Fields
# =============================================================================

@dataclass(frozen=True)
class FieldLabel:
    """Non-editable text on a block"""
    text: str


@dataclass(frozen=True)
class FieldNumber:
    """
    Editable numeric field.

    Attributes:
        name: Field name read by generators (e.g., "n1")
        value: Default value
        min: Optional lower bound
        max: Optional upper bound
        precision: Optional step the value is rounded to
    """
    name: str
    value: Union[int, float] = 0
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None
    precision: Optional[Union[int, float]] = None

    def coerce(self, value: Any) -> Union[int, float]:
        """
        Turn user input into a valid field value.

        Strings are parsed (commas stripped, "infinity" accepted), the result
        is clamped to [min, max] and rounded to precision.

        Raises:
            ValidationError: If the value is not numeric
        """
        if isinstance(value, bool):
            raise ValidationError(f"must be a number, got {value!r}", self.name)

        if isinstance(value, str):
            text = value.strip().replace(",", "")
            if text.lower() in ("infinity", "+infinity"):
                number = math.inf
            elif text.lower() == "-infinity":
                number = -math.inf
            else:
                try:
                    number = float(text) if text else 0
                except ValueError:
                    raise ValidationError(f"must be a number, got {value!r}", self.name) from None
        elif isinstance(value, (int, float)):
            number = value
        else:
            raise ValidationError(f"must be a number, got {type(value).__name__}", self.name)

        if math.isnan(number):
            raise ValidationError("must be a number, got NaN", self.name)

        if self.min is not None:
            number = max(number, self.min)
        if self.max is not None:
            number = min(number, self.max)

        if self.precision and math.isfinite(number):
            # Halves round up, as in the editor
            number = math.floor(number / self.precision + 0.5) * self.precision
            # Trim float noise like 0.30000000000000004 to the precision's decimals
            decimals = _decimal_places(self.precision)
            number = round(number, decimals)

        if isinstance(number, float) and number.is_integer():
            return int(number)
        return number

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": "field_number", "name": self.name, "value": self.value}
        if self.min is not None:
            data["min"] = self.min
        if self.max is not None:
            data["max"] = self.max
        if self.precision is not None:
            data["precision"] = self.precision
        return data


def _decimal_places(step: Union[int, float]) -> int:
    text = repr(float(step))
    if "e-" in text:
        return int(text.split("e-")[1])
    return len(text.split(".")[1].rstrip("0")) if "." in text else 0


Field = Union[FieldLabel, FieldNumber]


# =============================================================================
# Inputs
# =============================================================================

@dataclass(frozen=True)
class DummyInput:
    """Input row that only carries fields"""
    fields: tuple = ()
    align: Align = Align.LEFT

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": "input_dummy"}
        if self.align is not Align.LEFT:
            data["align"] = self.align.value
        return data


@dataclass(frozen=True)
class ValueInput:
    """Socket accepting another block's output"""
    name: str
    check: Optional[PortType] = None
    fields: tuple = ()
    align: Align = Align.LEFT

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": "input_value", "name": self.name}
        if self.check is not None:
            data["check"] = self.check.name
        if self.align is not Align.LEFT:
            data["align"] = self.align.value
        return data


Input = Union[DummyInput, ValueInput]


# =============================================================================
# Block Definition
# =============================================================================

TYPE_ID_VALIDATOR = PatternValidator(
    r'^[A-Za-z_][A-Za-z0-9_]*$',
    "must start with a letter or underscore and contain only letters, digits and underscores",
)


@dataclass
class BlockDefinition:
    """
    Declarative description of one block type.

    Attributes:
        type_id: Unique identifier, also the generator table key
        inputs: Input rows in display order
        inputs_inline: Lay inputs out on one line
        output: Output check type, or None for blocks without an output
        colour: Hue (0-360)
        tooltip: Hover text
        help_url: Help link
        description: Human-readable description (used for search)
        tags: Search tags
    """
    type_id: str
    inputs: List[Input] = field(default_factory=list)
    inputs_inline: bool = False
    output: Optional[PortType] = None
    colour: int = 230
    tooltip: str = ""
    help_url: str = ""
    description: str = ""
    tags: List[str] = field(default_factory=list)

    def __post_init__(self):
        result = TYPE_ID_VALIDATOR.validate(self.type_id)
        if not result.valid:
            raise ValidationError("; ".join(result.errors), "type_id")
        names = [f.name for f in self.number_fields()] + self.input_names()
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValidationError(f"duplicate field/input names: {', '.join(duplicates)}", self.type_id)

    def number_fields(self) -> List[FieldNumber]:
        return [
            f for block_input in self.inputs for f in block_input.fields
            if isinstance(f, FieldNumber)
        ]

    def input_names(self) -> List[str]:
        return [i.name for i in self.inputs if isinstance(i, ValueInput)]

    def get_field(self, name: str) -> Optional[FieldNumber]:
        for f in self.number_fields():
            if f.name == name:
                return f
        return None

    def default_fields(self) -> Dict[str, Any]:
        return {f.name: f.value for f in self.number_fields()}

    def create_block(self, **field_values) -> Block:
        """New block instance with default field values, overridden by field_values"""
        fields = self.default_fields()
        for name, value in field_values.items():
            number_field = self.get_field(name)
            if number_field is None:
                raise ValidationError(f"unknown field '{name}'", self.type_id)
            fields[name] = number_field.coerce(value)
        return Block(type=self.type_id, fields=fields)

    def validate_fields(self, fields: Dict[str, Any]) -> ValidationResult:
        """Check a block instance's field values against this definition"""
        result = ValidationResult()
        for number_field in self.number_fields():
            result.merge(validate_field(
                number_field.name,
                fields.get(number_field.name),
                All(
                    RequiredValidator(),
                    NumberValidator(),
                    RangeValidator(number_field.min, number_field.max),
                    stop_on_first_error=True,
                ),
            ))
        known = {f.name for f in self.number_fields()}
        for name in fields:
            if name not in known:
                result.add_warning(f"{self.type_id}: unknown field '{name}'")
        return result

    def to_json(self) -> Dict[str, Any]:
        """Render in the editor's JSON block format"""
        message_parts: List[str] = []
        args: List[Dict[str, Any]] = []

        for block_input in self.inputs:
            for f in block_input.fields:
                if isinstance(f, FieldLabel):
                    # A bare % would be read as an interpolation token
                    message_parts.append(f.text.replace("%", "%%"))
                else:
                    args.append(f.to_json())
                    message_parts.append(f"%{len(args)}")
            args.append(block_input.to_json())
            message_parts.append(f"%{len(args)}")

        data: Dict[str, Any] = {
            "type": self.type_id,
            "message0": " ".join(message_parts),
            "args0": args,
        }
        if self.inputs_inline:
            data["inputsInline"] = True
        if self.output is not None:
            data["output"] = self.output.name
        data["colour"] = self.colour
        data["tooltip"] = self.tooltip
        data["helpUrl"] = self.help_url
        return data
