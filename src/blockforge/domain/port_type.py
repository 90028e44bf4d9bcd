"""
Port type value object

Represents the connection check type of a block output or value input.
Immutable and contains domain rules for compatibility.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class PortType:
    """
    Immutable port type identifier.

    Port types define what kind of value flows through a socket.
    Examples: "Number", "String", "Boolean".
    """
    name: str

    def __post_init__(self):
        """Validate port type name"""
        if not self.name or not self.name.strip():
            raise ValueError("Port type name cannot be empty")

    def is_compatible_with(self, other: 'PortType') -> bool:
        """
        Domain rule: Check if this port type is compatible with another.

        Ports are compatible if they have the same name.
        """
        return self.name == other.name

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"PortType(name='{self.name}')"


# Common port types
NUMBER_TYPE = PortType("Number")
STRING_TYPE = PortType("String")
BOOLEAN_TYPE = PortType("Boolean")


def get_port_type(name: str) -> PortType:
    """Factory function to get or create port type"""
    known_types = {
        "Number": NUMBER_TYPE,
        "String": STRING_TYPE,
        "Boolean": BOOLEAN_TYPE,
    }
    return known_types.get(name, PortType(name))
