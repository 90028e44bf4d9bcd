"""
Tests for block definitions, the block type registry and block instances.
"""
import math

import pytest

from blockforge.blocks.block_registry import BlockTypeRegistry, create_default_block_registry
from blockforge.blocks.definition import (
    Align,
    BlockDefinition,
    DummyInput,
    FieldLabel,
    FieldNumber,
    ValueInput,
)
from blockforge.blocks.math_blocks import FIBONACCI, MATH_FIBONACCI, MATH_NUMBER, MATH_REMAINDER
from blockforge.domain.block import Block, Workspace
from blockforge.domain.port_type import NUMBER_TYPE, STRING_TYPE, PortType, get_port_type
from blockforge.shared.validation import ValidationError


# =============================================================================
# FieldNumber Tests
# =============================================================================

class TestFieldNumber:
    """Tests for number field coercion."""

    def test_numbers_pass_through(self):
        field = FieldNumber("n1")
        assert field.coerce(3) == 3
        assert field.coerce(2.5) == 2.5

    def test_integral_float_becomes_int(self):
        value = FieldNumber("n1").coerce(4.0)
        assert value == 4
        assert isinstance(value, int)

    def test_strings_are_parsed(self):
        field = FieldNumber("n1")
        assert field.coerce(" 12 ") == 12
        assert field.coerce("1,000") == 1000
        assert field.coerce("0.25") == 0.25
        assert field.coerce("") == 0

    def test_infinity_strings(self):
        field = FieldNumber("n1")
        assert field.coerce("Infinity") == math.inf
        assert field.coerce("-infinity") == -math.inf

    def test_clamped_to_range(self):
        field = FieldNumber("n1", min=0, max=10)
        assert field.coerce(-5) == 0
        assert field.coerce(50) == 10

    def test_rounded_to_precision(self):
        assert FieldNumber("n1", precision=1).coerce(2.6) == 3
        assert FieldNumber("n1", precision=0.1).coerce(0.34) == 0.3
        assert FieldNumber("n1", precision=0.5).coerce(1.3) == 1.5

    @pytest.mark.parametrize("value, expected", [
        (0.5, 1),
        (2.5, 3),
        (-0.5, 0),
        (-2.5, -2),
        ("1.5", 2),
    ])
    def test_halves_round_up(self, value, expected):
        assert FieldNumber("n1", precision=1).coerce(value) == expected

    def test_halves_round_up_with_fractional_precision(self):
        assert FieldNumber("n1", precision=0.5).coerce(1.25) == 1.5

    @pytest.mark.parametrize("value", ["abc", True, None, [1], float("nan")])
    def test_rejects_non_numeric(self, value):
        with pytest.raises(ValidationError) as exc:
            FieldNumber("n1").coerce(value)
        assert exc.value.field_name == "n1"

    def test_to_json(self):
        assert FieldNumber("n1", 0).to_json() == {"type": "field_number", "name": "n1", "value": 0}
        assert FieldNumber("n", 1, min=0, max=9, precision=1).to_json() == {
            "type": "field_number", "name": "n", "value": 1, "min": 0, "max": 9, "precision": 1,
        }


# =============================================================================
# BlockDefinition Tests
# =============================================================================

class TestBlockDefinition:
    """Tests for BlockDefinition construction and JSON rendering."""

    def test_invalid_type_id(self):
        with pytest.raises(ValidationError) as exc:
            BlockDefinition(type_id="math-remainder")
        assert exc.value.field_name == "type_id"

    def test_duplicate_names(self):
        with pytest.raises(ValidationError, match="duplicate"):
            BlockDefinition(
                type_id="dup",
                inputs=[DummyInput(fields=(FieldNumber("a"),)), ValueInput("a")],
            )

    def test_fibonacci_shape(self):
        assert [f.name for f in MATH_FIBONACCI.number_fields()] == ["n1", "n2"]
        assert MATH_FIBONACCI.input_names() == ["x"]
        assert MATH_FIBONACCI.default_fields() == {"n1": 0, "n2": 1}
        assert MATH_FIBONACCI.inputs_inline is True
        assert MATH_FIBONACCI.output == NUMBER_TYPE
        assert MATH_FIBONACCI.colour == 230

    def test_fibonacci_json(self):
        data = MATH_FIBONACCI.to_json()
        assert data["type"] == "math_fibonacci"
        assert data["message0"] == "if Fib(1)= %1 and Fib(2)= %2 %3 , return Fib( %4 ) %5"
        assert data["args0"] == [
            {"type": "field_number", "name": "n1", "value": 0},
            {"type": "field_number", "name": "n2", "value": 1},
            {"type": "input_dummy", "align": "CENTRE"},
            {"type": "input_value", "name": "x", "check": "Number", "align": "RIGHT"},
            {"type": "input_dummy"},
        ]
        assert data["inputsInline"] is True
        assert data["output"] == "Number"
        assert data["colour"] == 230
        assert data["tooltip"] == ""
        assert data["helpUrl"] == ""

    def test_chinese_labels(self):
        message = FIBONACCI.to_json()["message0"]
        for label in ("如果：F(1)=", "，F(2)=", "，返回F(", ")"):
            assert label in message

    def test_remainder_json_escapes_percent(self):
        data = MATH_REMAINDER.to_json()
        assert data["message0"] == "%1 %% %2 %3"
        assert data["args0"] == [
            {"type": "input_value", "name": "n1", "check": "Number"},
            {"type": "input_dummy", "align": "CENTRE"},
            {"type": "input_value", "name": "n2", "check": "Number"},
        ]

    def test_no_inline_key_when_not_inline(self):
        assert "inputsInline" not in MATH_NUMBER.to_json()
        assert MATH_NUMBER.to_json()["tooltip"] == "A number."

    def test_create_block_defaults(self):
        block = MATH_FIBONACCI.create_block()
        assert block.type == "math_fibonacci"
        assert block.fields == {"n1": 0, "n2": 1}

    def test_create_block_coerces(self):
        block = MATH_FIBONACCI.create_block(n1="3", n2=5.0)
        assert block.fields == {"n1": 3, "n2": 5}

    def test_create_block_unknown_field(self):
        with pytest.raises(ValidationError, match="unknown field 'n3'"):
            MATH_FIBONACCI.create_block(n3=1)

    def test_validate_fields(self):
        assert MATH_FIBONACCI.validate_fields({"n1": 0, "n2": 1}).valid

        missing = MATH_FIBONACCI.validate_fields({"n1": 0})
        assert not missing.valid
        assert "n2: is required" in missing.errors

        wrong_type = MATH_FIBONACCI.validate_fields({"n1": "zero", "n2": 1})
        assert not wrong_type.valid

    def test_validate_fields_warns_on_unknown(self):
        result = MATH_FIBONACCI.validate_fields({"n1": 0, "n2": 1, "extra": 2})
        assert result.valid
        assert result.warnings == ["math_fibonacci: unknown field 'extra'"]

    def test_validate_fields_checks_bounds(self):
        definition = BlockDefinition(
            type_id="math_digit",
            inputs=[DummyInput(fields=(FieldNumber("d", 5, min=0, max=9),))],
            output=NUMBER_TYPE,
        )
        assert definition.validate_fields({"d": 9}).valid
        assert definition.validate_fields({"d": 12}).errors == ["d: must be at most 9"]
        assert definition.validate_fields({"d": "7"}).errors == ["d: must be a number, got str"]

    def test_custom_definition(self):
        definition = BlockDefinition(
            type_id="text_length",
            inputs=[ValueInput("VALUE", check=STRING_TYPE, fields=(FieldLabel("length of"),))],
            output=NUMBER_TYPE,
            colour=160,
        )
        data = definition.to_json()
        assert data["message0"] == "length of %1"
        assert data["args0"] == [{"type": "input_value", "name": "VALUE", "check": "String"}]
        assert data["colour"] == 160

    def test_align_values(self):
        assert [a.value for a in Align] == ["LEFT", "CENTRE", "RIGHT"]


# =============================================================================
# BlockTypeRegistry Tests
# =============================================================================

class TestBlockTypeRegistry:
    """Tests for BlockTypeRegistry."""

    @pytest.fixture
    def registry(self):
        return create_default_block_registry()

    def test_default_types(self, registry):
        assert [d.type_id for d in registry.list_all()] == [
            "math_number", "math_fibonacci", "fibonacci", "math_remainder",
        ]

    def test_get_exact_and_case_insensitive(self, registry):
        assert registry.get("math_remainder") is MATH_REMAINDER
        assert registry.get("MATH_Remainder") is MATH_REMAINDER
        assert registry.get("missing") is None

    def test_contains(self, registry):
        assert "fibonacci" in registry
        assert "text_join" not in registry

    def test_search(self, registry):
        assert {d.type_id for d in registry.search("fib")} == {"math_fibonacci", "fibonacci"}
        assert [d.type_id for d in registry.search("modulo")] == ["math_remainder"]
        assert [d.type_id for d in registry.search("zh")] == ["fibonacci"]

    def test_to_json_array(self, registry):
        data = registry.to_json_array()
        assert [d["type"] for d in data] == ["math_number", "math_fibonacci", "fibonacci", "math_remainder"]

    def test_initialize_twice(self, registry):
        registry.initialize_default_types()
        assert len(registry.list_all()) == 4

    def test_registries_are_independent(self):
        first = BlockTypeRegistry()
        second = BlockTypeRegistry()
        first.register(MATH_NUMBER)
        assert "math_number" in first
        assert "math_number" not in second

    def test_register_overwrites(self):
        registry = BlockTypeRegistry()
        registry.register(MATH_NUMBER)
        replacement = BlockDefinition(type_id="math_number", colour=10)
        registry.register(replacement)
        assert registry.get("math_number") is replacement


# =============================================================================
# Block and Workspace Tests
# =============================================================================

class TestBlock:
    """Tests for block instances."""

    def test_fields_and_inputs(self):
        child = Block("math_number", fields={"NUM": 5})
        block = Block("math_fibonacci", fields={"n1": 0, "n2": 1}).connect("x", child)

        assert block.get_field_value("n2") == 1
        assert block.get_field_value("missing") is None
        assert block.get_input_target_block("x") is child
        assert block.get_input_target_block("y") is None
        assert block.descendants() == [block, child]

    def test_disconnect(self):
        child = Block("math_number")
        block = Block("math_remainder").connect("n1", child)
        assert block.disconnect("n1") is child
        assert block.get_input_target_block("n1") is None

    def test_empty_type(self):
        with pytest.raises(ValueError):
            Block(" ")

    def test_unique_ids(self):
        assert Block("math_number").id != Block("math_number").id

    def test_from_dict(self):
        block = Block.from_dict({
            "type": "math_remainder",
            "id": "r1",
            "inputs": {
                "n1": {"block": {"type": "math_number", "fields": {"NUM": 7}}},
                "n2": {"shadow": {"type": "math_number"}},
            },
            "x": 10,
        })
        assert block.id == "r1"
        assert block.get_input_target_block("n1").get_field_value("NUM") == 7
        assert block.get_input_target_block("n2") is None

    def test_from_dict_requires_type(self):
        with pytest.raises(ValueError, match="'type'"):
            Block.from_dict({"fields": {}})

    def test_dict_round_trip(self):
        block = Block("math_fibonacci", fields={"n1": 0, "n2": 1}, id="f1")
        block.connect("x", Block("math_number", fields={"NUM": 5}, id="n1"))
        assert Block.from_dict(block.to_dict()) == block


class TestWorkspace:
    """Tests for Workspace loading."""

    def test_from_workspace_shape(self):
        workspace = Workspace.from_dict({"blocks": {"blocks": [{"type": "math_number"}, {"type": "math_remainder"}]}})
        assert [b.type for b in workspace.top_blocks] == ["math_number", "math_remainder"]

    def test_from_list_and_single_block(self):
        assert len(Workspace.from_dict([{"type": "math_number"}]).top_blocks) == 1
        assert Workspace.from_dict({"type": "math_number"}).top_blocks[0].type == "math_number"

    def test_all_blocks(self):
        root = Block("math_remainder").connect("n1", Block("math_number"))
        workspace = Workspace()
        workspace.add_top_block(root)
        workspace.add_top_block(Block("math_number"))
        assert len(workspace.all_blocks()) == 3


# =============================================================================
# PortType Tests
# =============================================================================

class TestPortType:
    """Tests for connection check types."""

    def test_compatibility(self):
        assert NUMBER_TYPE.is_compatible_with(PortType("Number"))
        assert not NUMBER_TYPE.is_compatible_with(STRING_TYPE)

    def test_get_port_type(self):
        assert get_port_type("Number") == NUMBER_TYPE
