"""
JavaScript generator for the math blocks.

Order values follow the editor's JavaScript precedence table:
https://developer.mozilla.org/en-US/docs/Web/JavaScript/Reference/Operators/Operator_Precedence
"""
from typing import Tuple

from blockforge.domain.block import Block
from blockforge.generators.generator import CodeGenerator
from blockforge.generators.template import CodeSlot, ExpressionTemplate, NumberSlot, format_js_number


class Order:
    ATOMIC = 0             # 0 "" ...
    NEW = 1.1              # new
    MEMBER = 1.2           # . []
    FUNCTION_CALL = 2      # ()
    INCREMENT = 3          # ++
    DECREMENT = 3          # --
    BITWISE_NOT = 4.1      # ~
    UNARY_PLUS = 4.2       # +
    UNARY_NEGATION = 4.3   # -
    LOGICAL_NOT = 4.4      # !
    TYPEOF = 4.5           # typeof
    VOID = 4.6             # void
    DELETE = 4.7           # delete
    AWAIT = 4.8            # await
    EXPONENTIATION = 5.0   # **
    MULTIPLICATION = 5.1   # *
    DIVISION = 5.2         # /
    MODULUS = 5.3          # %
    SUBTRACTION = 6.1      # -
    ADDITION = 6.2         # +
    BITWISE_SHIFT = 7      # << >> >>>
    RELATIONAL = 8         # < <= > >=
    IN = 8                 # in
    INSTANCEOF = 8         # instanceof
    EQUALITY = 9           # == != === !==
    BITWISE_AND = 10       # &
    BITWISE_XOR = 11       # ^
    BITWISE_OR = 12        # |
    LOGICAL_AND = 13       # &&
    LOGICAL_OR = 14        # ||
    CONDITIONAL = 15       # ?:
    ASSIGNMENT = 16        # = += -= **= *= /= %= <<= >>= ...
    YIELD = 16.5           # yield
    COMMA = 17             # ,
    NONE = 99              # (...)


class JavascriptGenerator(CodeGenerator):
    ORDER_ATOMIC = Order.ATOMIC
    ORDER_NONE = Order.NONE
    ORDER_OVERRIDES = [
        # (foo()).bar -> foo().bar
        # (foo())[0] -> foo()[0]
        (Order.FUNCTION_CALL, Order.MEMBER),
        # (foo())() -> foo()()
        (Order.FUNCTION_CALL, Order.FUNCTION_CALL),
        # (foo.bar).baz -> foo.bar.baz
        (Order.MEMBER, Order.MEMBER),
        # (foo.bar)() -> foo.bar()
        (Order.MEMBER, Order.FUNCTION_CALL),
        # !(!foo) -> !!foo
        (Order.LOGICAL_NOT, Order.LOGICAL_NOT),
        # a * (b * c) -> a * b * c
        (Order.MULTIPLICATION, Order.MULTIPLICATION),
        # a + (b + c) -> a + b + c
        (Order.ADDITION, Order.ADDITION),
        # a && (b && c) -> a && b && c
        (Order.LOGICAL_AND, Order.LOGICAL_AND),
        # a || (b || c) -> a || b || c
        (Order.LOGICAL_OR, Order.LOGICAL_OR),
    ]

    def __init__(self):
        super().__init__("javascript")

    def scrub_naked_value(self, line: str) -> str:
        return line + ";\n"


# Pieces are joined without newlines; the emitted code is a single line
FIBONACCI_TEMPLATE = ExpressionTemplate(
    "    (function fib(n) {",
    "        if (n == 1) return ", NumberSlot("n1"), ";",
    "        if (n == 2) return ", NumberSlot("n2"), ";",
    "        return fib(n-1) + fib(n-2);",
    "    })(", CodeSlot("x"), ")",
    number_format=format_js_number,
)

REMAINDER_TEMPLATE = ExpressionTemplate(
    "((", CodeSlot("n1"), ") % (", CodeSlot("n2"), "))",
)


def math_number(block: Block, generator: CodeGenerator) -> Tuple[str, float]:
    value = block.get_field_value("NUM")
    code = format_js_number(value)
    order = Order.ATOMIC if value >= 0 else Order.UNARY_NEGATION
    return code, order


def math_fibonacci(block: Block, generator: CodeGenerator) -> Tuple[str, float]:
    index = generator.value_to_code(block, "x", Order.ATOMIC)
    if index == "":
        index = "1"

    code = FIBONACCI_TEMPLATE.render(
        n1=block.get_field_value("n1"),
        n2=block.get_field_value("n2"),
        x=index,
    )
    return code, Order.NONE


def math_remainder(block: Block, generator: CodeGenerator) -> Tuple[str, float]:
    # Empty operands pass through unvalidated
    dividend = generator.value_to_code(block, "n1", Order.ATOMIC)
    divisor = generator.value_to_code(block, "n2", Order.ATOMIC)
    code = REMAINDER_TEMPLATE.render(n1=dividend, n2=divisor)
    return code, Order.NONE


def create_javascript_generator() -> JavascriptGenerator:
    generator = JavascriptGenerator()
    generator.register("math_number", math_number)
    generator.register("math_fibonacci", math_fibonacci)
    generator.register("fibonacci", math_fibonacci)
    generator.register("math_remainder", math_remainder)
    return generator
