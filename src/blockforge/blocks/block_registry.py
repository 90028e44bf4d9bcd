"""
Block Type Registry

Manages available block types and their definitions.
Provides block type discovery and registration.
"""
from typing import Any, Dict, List, Optional

from blockforge.blocks.definition import BlockDefinition
from blockforge.utils.message import Log


class BlockTypeRegistry:
    """
    Registry for block types.

    Maps block type id to its BlockDefinition. Each registry is an explicit
    object owned by whoever builds the editor toolbox; there is no shared
    global table.
    """

    def __init__(self):
        self._block_types: Dict[str, BlockDefinition] = {}
        self._initialized = False
        Log.debug("BlockTypeRegistry: Initialized")

    def register(self, definition: BlockDefinition) -> None:
        """
        Register a block type.

        Args:
            definition: BlockDefinition instance
        """
        if definition.type_id in self._block_types:
            Log.warning(f"BlockTypeRegistry: Overwriting existing block type: {definition.type_id}")

        self._block_types[definition.type_id] = definition
        Log.debug(f"BlockTypeRegistry: Registered block type '{definition.type_id}'")

    def get(self, type_id: str) -> Optional[BlockDefinition]:
        """
        Get a block definition by ID (case-insensitive fallback).

        Args:
            type_id: Block type identifier

        Returns:
            BlockDefinition or None if not found
        """
        exact_match = self._block_types.get(type_id)
        if exact_match:
            return exact_match

        type_id_lower = type_id.lower()
        for registered_type_id, definition in self._block_types.items():
            if registered_type_id.lower() == type_id_lower:
                return definition

        return None

    def __contains__(self, type_id: str) -> bool:
        return self.get(type_id) is not None

    def list_all(self) -> List[BlockDefinition]:
        """List all registered block definitions in registration order."""
        return list(self._block_types.values())

    def search(self, query: str) -> List[BlockDefinition]:
        """
        Search block types by type id, description, or tags.

        Args:
            query: Search query string

        Returns:
            List of matching BlockDefinition objects
        """
        query_lower = query.lower()
        results = []

        for definition in self.list_all():
            if query_lower in definition.type_id.lower():
                results.append(definition)
                continue

            if query_lower in definition.description.lower():
                results.append(definition)
                continue

            if any(query_lower in tag.lower() for tag in definition.tags):
                results.append(definition)
                continue

        return results

    def to_json_array(self) -> List[Dict[str, Any]]:
        """All definitions in the editor's JSON block format"""
        return [definition.to_json() for definition in self.list_all()]

    def initialize_default_types(self):
        """Register the math blocks shipped with BlockForge"""
        if self._initialized:
            return

        from blockforge.blocks.math_blocks import MATH_BLOCKS

        for definition in MATH_BLOCKS:
            self.register(definition)

        self._initialized = True
        Log.info(f"BlockTypeRegistry: Registered {len(MATH_BLOCKS)} default block types")


def create_default_block_registry() -> BlockTypeRegistry:
    registry = BlockTypeRegistry()
    registry.initialize_default_types()
    return registry
