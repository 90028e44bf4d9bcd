"""
Code generators.

Usage:
    from blockforge.generators import create_default_generators

    generators = create_default_generators()
    code, order = generators.get("javascript").block_to_code(block)
"""
from blockforge.generators.generator import (
    CodeGenerator,
    GeneratorError,
    GeneratorRegistry,
    create_default_generators,
)
from blockforge.generators.template import (
    CodeSlot,
    ExpressionTemplate,
    NumberSlot,
    TemplateError,
)

__all__ = [
    'CodeGenerator',
    'GeneratorError',
    'GeneratorRegistry',
    'create_default_generators',
    'CodeSlot',
    'ExpressionTemplate',
    'NumberSlot',
    'TemplateError',
]
