"""
Code Generator Base

Per-language code assembler. Holds the table of generator functions keyed by
block type and implements the precedence rule that decides when nested
expression code must be parenthesised.

Generator functions have the signature:

    def generate(block: Block, generator: CodeGenerator) -> Tuple[str, float]

and return the code text together with the order (precedence) of its
outermost operator. Lower order binds tighter; ORDER_ATOMIC is 0 and
ORDER_NONE (no guaranteed precedence) is 99.
"""
import math
import re
from typing import Callable, Dict, List, Optional, Tuple

from blockforge.domain.block import Block, Workspace
from blockforge.shared.registry import ModuleRegistry
from blockforge.utils.message import Log


GeneratorFn = Callable[[Block, 'CodeGenerator'], Tuple[str, float]]


class GeneratorError(Exception):
    """Raised when a block cannot be turned into code"""

    def __init__(self, message: str, block_type: Optional[str] = None):
        self.block_type = block_type
        super().__init__(f"{block_type}: {message}" if block_type else message)


class CodeGenerator:
    """
    Code generator for one output language.

    Subclasses set the order constants, the override pairs and how a bare
    value is turned into a statement.
    """

    ORDER_ATOMIC: float = 0
    ORDER_NONE: float = 99

    # (outer, inner) pairs that never need parentheses even though the
    # inner order is not tighter than the outer one, e.g. a.b.c or a + b + c
    ORDER_OVERRIDES: List[Tuple[float, float]] = []

    def __init__(self, name: str):
        self.name = name
        self._generators: ModuleRegistry[GeneratorFn] = ModuleRegistry(name)

    # =========================================================================
    # Generator table
    # =========================================================================

    def register(self, type_id: str, fn: Optional[GeneratorFn] = None):
        """
        Register a generator function for a block type.

        Usable directly, register("math_number", fn), or as a decorator,
        @generator.register("math_number").
        """
        if fn is not None:
            self._generators.register_component(type_id, fn)
            return fn
        return self._generators.register(type_id)

    def get(self, type_id: str) -> Optional[GeneratorFn]:
        return self._generators.get(type_id)

    def supports(self, type_id: str) -> bool:
        return self._generators.is_registered(type_id)

    def block_types(self) -> List[str]:
        return self._generators.list_keys()

    # =========================================================================
    # Code assembly
    # =========================================================================

    def block_to_code(self, block: Block) -> Tuple[str, float]:
        """
        Generate code for a value block.

        Raises:
            GeneratorError: If no generator is registered for the block type
                or the generator does not return a (code, order) pair
        """
        fn = self.get(block.type)
        if fn is None:
            raise GeneratorError(f"{self.name} generator does not know block type", block.type)

        result = fn(block, self)
        if not isinstance(result, tuple) or len(result) != 2:
            raise GeneratorError("Expecting (code, order) tuple from value block", block.type)

        code, order = result
        if not isinstance(code, str):
            raise GeneratorError(f"Generated code must be a string, got {type(code).__name__}", block.type)
        if not isinstance(order, (int, float)) or math.isnan(order):
            raise GeneratorError(f"Expecting valid order from value block, got {order!r}", block.type)
        return code, order

    def value_to_code(self, block: Block, name: str, outer_order: float) -> str:
        """
        Generate code for the block plugged into a value input.

        Args:
            block: Block owning the input
            name: Input name
            outer_order: Order of the operator the value will be embedded in

        Returns:
            The child's code, parenthesised if needed, or "" when the input
            is empty
        """
        if not isinstance(outer_order, (int, float)) or math.isnan(outer_order):
            raise GeneratorError(f"Expecting valid order from block, got {outer_order!r}", block.type)

        target = block.get_input_target_block(name)
        if target is None:
            return ""

        code, inner_order = self.block_to_code(target)
        if not code:
            return ""

        if self._needs_parentheses(outer_order, inner_order):
            code = f"({code})"
        return code

    def _needs_parentheses(self, outer_order: float, inner_order: float) -> bool:
        outer_class = math.floor(outer_order)
        inner_class = math.floor(inner_order)
        if outer_class > inner_class:
            return False
        # No parens around NONE-NONE and ATOMIC-ATOMIC pairs
        if outer_class == inner_class and outer_class in (math.floor(self.ORDER_ATOMIC), math.floor(self.ORDER_NONE)):
            return False
        return (outer_order, inner_order) not in self.ORDER_OVERRIDES

    def scrub_naked_value(self, line: str) -> str:
        """Turn a bare value into a statement."""
        return line + "\n"

    def workspace_to_code(self, workspace: Workspace) -> str:
        """Generate code for every top-level block of a workspace."""
        lines = []
        for block in workspace.top_blocks:
            code, _ = self.block_to_code(block)
            if code:
                lines.append(self.scrub_naked_value(code))
        code = "\n".join(lines)
        # Trim leading blank lines, trailing whitespace and spaces before newlines
        code = re.sub(r"^\s+\n", "", code)
        code = re.sub(r"\n\s+$", "\n", code)
        code = re.sub(r"[ \t]+\n", "\n", code)
        Log.debug(f"CodeGenerator '{self.name}': Generated {len(lines)} top-level statement(s)")
        return code


class GeneratorRegistry:
    """Output language name -> CodeGenerator"""

    def __init__(self):
        self._generators: Dict[str, CodeGenerator] = {}

    def register(self, generator: CodeGenerator) -> None:
        if generator.name in self._generators:
            Log.warning(f"GeneratorRegistry: Overwriting generator for language '{generator.name}'")
        self._generators[generator.name] = generator
        Log.debug(f"GeneratorRegistry: Registered '{generator.name}' generator")

    def get(self, language: str) -> Optional[CodeGenerator]:
        return self._generators.get(language.lower())

    def languages(self) -> List[str]:
        return sorted(self._generators)


def create_default_generators() -> GeneratorRegistry:
    """Registry with the JavaScript and Python generators for the math blocks"""
    from blockforge.generators.javascript import create_javascript_generator
    from blockforge.generators.python import create_python_generator

    registry = GeneratorRegistry()
    registry.register(create_javascript_generator())
    registry.register(create_python_generator())
    return registry
