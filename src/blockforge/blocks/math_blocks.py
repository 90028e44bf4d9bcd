"""
Math block definitions

Fibonacci (English and Chinese labels), remainder, and the number literal
the other blocks take as input.
"""
from blockforge.blocks.definition import (
    Align,
    BlockDefinition,
    DummyInput,
    FieldLabel,
    FieldNumber,
    ValueInput,
)
from blockforge.domain.port_type import NUMBER_TYPE


MATH_COLOUR = 230


def _fibonacci_definition(type_id: str, labels: tuple, description: str, tags: list) -> BlockDefinition:
    """Both Fibonacci blocks share one shape and differ only in label text."""
    first, second, call, close = labels
    return BlockDefinition(
        type_id=type_id,
        inputs=[
            DummyInput(
                fields=(
                    FieldLabel(first),
                    FieldNumber("n1", 0),
                    FieldLabel(second),
                    FieldNumber("n2", 1),
                ),
                align=Align.CENTRE,
            ),
            ValueInput("x", check=NUMBER_TYPE, fields=(FieldLabel(call),), align=Align.RIGHT),
            DummyInput(fields=(FieldLabel(close),)),
        ],
        inputs_inline=True,
        output=NUMBER_TYPE,
        colour=MATH_COLOUR,
        tooltip="",
        help_url="",
        description=description,
        tags=tags,
    )


MATH_FIBONACCI = _fibonacci_definition(
    "math_fibonacci",
    ("if Fib(1)=", "and Fib(2)=", ", return Fib(", ")"),
    "Fibonacci-like sequence with configurable first two terms",
    ["math", "fibonacci", "sequence", "recursion"],
)

FIBONACCI = _fibonacci_definition(
    "fibonacci",
    ("如果：F(1)=", "，F(2)=", "，返回F(", ")"),
    "Fibonacci-like sequence with configurable first two terms (Chinese labels)",
    ["math", "fibonacci", "sequence", "zh"],
)

MATH_REMAINDER = BlockDefinition(
    type_id="math_remainder",
    inputs=[
        ValueInput("n1", check=NUMBER_TYPE),
        DummyInput(fields=(FieldLabel("%"),), align=Align.CENTRE),
        ValueInput("n2", check=NUMBER_TYPE),
    ],
    inputs_inline=True,
    output=NUMBER_TYPE,
    colour=MATH_COLOUR,
    tooltip="",
    help_url="",
    description="Remainder of dividing the first number by the second",
    tags=["math", "remainder", "modulo", "operator"],
)

MATH_NUMBER = BlockDefinition(
    type_id="math_number",
    inputs=[DummyInput(fields=(FieldNumber("NUM", 0),))],
    output=NUMBER_TYPE,
    colour=MATH_COLOUR,
    tooltip="A number.",
    help_url="https://en.wikipedia.org/wiki/Number",
    description="Number literal",
    tags=["math", "number", "literal"],
)

MATH_BLOCKS = [MATH_NUMBER, MATH_FIBONACCI, FIBONACCI, MATH_REMAINDER]
