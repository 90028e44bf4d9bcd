"""
Python generator for the math blocks.

Order values follow the editor's Python precedence table:
https://docs.python.org/3/reference/expressions.html#summary
"""
import math
from typing import Tuple

from blockforge.domain.block import Block
from blockforge.generators.generator import CodeGenerator
from blockforge.generators.template import CodeSlot, ExpressionTemplate, NumberSlot, format_python_number


class Order:
    ATOMIC = 0             # 0 "" ...
    COLLECTION = 1         # tuples, lists, dictionaries
    STRING_CONVERSION = 1  # `expression...`
    MEMBER = 2.1           # . []
    FUNCTION_CALL = 2.2    # ()
    EXPONENTIATION = 3     # **
    UNARY_SIGN = 4         # + -
    BITWISE_NOT = 4        # ~
    MULTIPLICATIVE = 5     # * / // %
    ADDITIVE = 6           # + -
    BITWISE_SHIFT = 7      # << >>
    BITWISE_AND = 8        # &
    BITWISE_XOR = 9        # ^
    BITWISE_OR = 10        # |
    RELATIONAL = 11        # in, not in, is, is not, <, <=, >, >=, <>, !=, ==
    LOGICAL_NOT = 12       # not
    LOGICAL_AND = 13       # and
    LOGICAL_OR = 14        # or
    CONDITIONAL = 15       # if else
    LAMBDA = 16            # lambda
    NONE = 99              # (...)


class PythonGenerator(CodeGenerator):
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
        # not (not foo) -> not not foo
        (Order.LOGICAL_NOT, Order.LOGICAL_NOT),
        # a and (b and c) -> a and b and c
        (Order.LOGICAL_AND, Order.LOGICAL_AND),
        # a or (b or c) -> a or b or c
        (Order.LOGICAL_OR, Order.LOGICAL_OR),
    ]

    def __init__(self):
        super().__init__("python")


# A lambda cannot name itself, so the recursive step is passed in explicitly
FIBONACCI_TEMPLATE = ExpressionTemplate(
    "(lambda fib: fib(fib, ", CodeSlot("x"), "))",
    "(lambda fib, n: ", NumberSlot("n1"), " if n == 1 else ", NumberSlot("n2"),
    " if n == 2 else fib(fib, n - 1) + fib(fib, n - 2))",
    number_format=format_python_number,
)

REMAINDER_TEMPLATE = ExpressionTemplate(
    "((", CodeSlot("n1"), ") % (", CodeSlot("n2"), "))",
)


def math_number(block: Block, generator: CodeGenerator) -> Tuple[str, float]:
    value = block.get_field_value("NUM")
    code = format_python_number(value)
    if math.isnan(value) or value == math.inf:
        order = Order.FUNCTION_CALL
    elif value < 0:
        order = Order.UNARY_SIGN
    else:
        order = Order.ATOMIC
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
    dividend = generator.value_to_code(block, "n1", Order.ATOMIC)
    divisor = generator.value_to_code(block, "n2", Order.ATOMIC)
    code = REMAINDER_TEMPLATE.render(n1=dividend, n2=divisor)
    return code, Order.NONE


def create_python_generator() -> PythonGenerator:
    generator = PythonGenerator()
    generator.register("math_number", math_number)
    generator.register("math_fibonacci", math_fibonacci)
    generator.register("fibonacci", math_fibonacci)
    generator.register("math_remainder", math_remainder)
    return generator
