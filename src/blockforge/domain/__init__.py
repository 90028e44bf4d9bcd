"""
Domain entities for block trees.
"""
from blockforge.domain.block import Block, Workspace
from blockforge.domain.port_type import (
    BOOLEAN_TYPE,
    NUMBER_TYPE,
    STRING_TYPE,
    PortType,
    get_port_type,
)

__all__ = [
    'Block',
    'Workspace',
    'PortType',
    'NUMBER_TYPE',
    'STRING_TYPE',
    'BOOLEAN_TYPE',
    'get_port_type',
]
