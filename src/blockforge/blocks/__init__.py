"""
Block definitions.

Provides:
- BlockDefinition and its field/input building blocks
- BlockTypeRegistry for discovery of the available block types
- The math blocks (Fibonacci, remainder, number literal)
"""
from blockforge.blocks.definition import (
    Align,
    BlockDefinition,
    DummyInput,
    FieldLabel,
    FieldNumber,
    ValueInput,
)
from blockforge.blocks.block_registry import BlockTypeRegistry, create_default_block_registry

__all__ = [
    'Align',
    'BlockDefinition',
    'DummyInput',
    'FieldLabel',
    'FieldNumber',
    'ValueInput',
    'BlockTypeRegistry',
    'create_default_block_registry',
]
