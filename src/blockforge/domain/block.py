"""
Block instance entity

A configured block as it sits in an editor workspace: its type, the values
of its fields, and the child blocks plugged into its value inputs. This is
the host-side state a generator reads; the editor owns its lifecycle.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Block:
    """
    Block instance.

    Attributes:
        type: Block type identifier (e.g., "math_fibonacci")
        fields: Field name -> value
        inputs: Value input name -> connected child block. A missing key
            means the socket is empty.
        id: Unique identifier
    """
    type: str
    fields: Dict[str, Any] = field(default_factory=dict)
    inputs: Dict[str, 'Block'] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        if not self.type or not self.type.strip():
            raise ValueError("Block type cannot be empty")

    def get_field_value(self, name: str) -> Any:
        """Value of a field, or None if the block has no such field."""
        return self.fields.get(name)

    def set_field_value(self, name: str, value: Any) -> None:
        self.fields[name] = value

    def get_input_target_block(self, name: str) -> Optional['Block']:
        """Block connected to a value input, or None if the socket is empty."""
        return self.inputs.get(name)

    def connect(self, input_name: str, child: 'Block') -> 'Block':
        """Plug a child block into a value input. Returns self for chaining."""
        self.inputs[input_name] = child
        return self

    def disconnect(self, input_name: str) -> Optional['Block']:
        return self.inputs.pop(input_name, None)

    def descendants(self) -> List['Block']:
        """This block and every block nested under it, depth first."""
        result = [self]
        for child in self.inputs.values():
            result.extend(child.descendants())
        return result

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "id": self.id}
        if self.fields:
            data["fields"] = dict(self.fields)
        if self.inputs:
            data["inputs"] = {
                name: {"block": child.to_dict()}
                for name, child in self.inputs.items()
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Block':
        """
        Build a block tree from its nested-dict form.

        Shape: {"type": ..., "id": ..., "fields": {...},
                "inputs": {name: {"block": {...}}}}

        Inputs whose entry has no "block" are treated as empty sockets.
        Unknown keys are ignored.
        """
        if not isinstance(data, dict) or "type" not in data:
            raise ValueError(f"Block data must be an object with a 'type' key, got: {data!r}")

        inputs = {}
        for name, connection in (data.get("inputs") or {}).items():
            child = (connection or {}).get("block")
            if child is not None:
                inputs[name] = cls.from_dict(child)

        kwargs = {}
        if data.get("id"):
            kwargs["id"] = data["id"]
        return cls(
            type=data["type"],
            fields=dict(data.get("fields") or {}),
            inputs=inputs,
            **kwargs,
        )


@dataclass
class Workspace:
    """Ordered top-level blocks of an editor workspace."""
    top_blocks: List[Block] = field(default_factory=list)

    def add_top_block(self, block: Block) -> Block:
        self.top_blocks.append(block)
        return block

    def all_blocks(self) -> List[Block]:
        result = []
        for block in self.top_blocks:
            result.extend(block.descendants())
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {"blocks": {"blocks": [block.to_dict() for block in self.top_blocks]}}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Workspace':
        """
        Accepts either {"blocks": {"blocks": [...]}}, a bare list of block
        objects, or a single block object.
        """
        if isinstance(data, list):
            items = data
        elif isinstance(data, dict) and "blocks" in data:
            blocks = data["blocks"]
            items = blocks.get("blocks", []) if isinstance(blocks, dict) else blocks
        else:
            items = [data]
        return cls(top_blocks=[Block.from_dict(item) for item in items])
