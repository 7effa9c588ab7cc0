"""
pyblocks Documents
Block (de)serialisation, editor state documents and the custom block library

Serialised blocks are plain JSON-compatible dicts. Loading always assigns
fresh ids and takes slot layout and parameter minimums from the block
registry, so documents written against an older layout are repaired rather
than rejected. Errors and execution trace fields are never stored.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pyblocks.arity import propagate_input_count
from pyblocks.domains.prf import CUSTOM_FUNCTION, default_registry
from pyblocks.domains.registry import BlockRegistry
from pyblocks.errors import ValidationError, ValidationResult, invalid_result
from pyblocks.tree import create_block, reconcile_slots, set_depth
from pyblocks.types import Block, BlockType, NumValue, Slot, clone_block
from pyblocks.validator import (
    EDITOR_FILE_TYPE,
    ValidationState,
    check_for_errors,
    validate_block_data,
    validate_editor_state,
)

logger = logging.getLogger(__name__)

BlockData = Dict[str, Any]


#==============================================================================
# Block Serialisation
#==============================================================================

def block_to_dict(block: Block) -> BlockData:
    """Serialise a tree to a JSON-compatible dict"""
    children: List[Dict[str, Any]] = []
    for slot in block.children:
        entry: Dict[str, Any] = {
            "name": slot.name,
            "block": block_to_dict(slot.block) if slot.block is not None else None,
            "input_descriptor_index": slot.input_descriptor_index,
        }
        if slot.input_set is not None:
            entry["input_set"] = slot.input_set
        if slot.input_mod is not None:
            entry["input_mod"] = slot.input_mod
        children.append(entry)

    data: BlockData = {
        "id": block.id,
        "type": block.type.value,
        "children": children,
        "num_values": [{"name": v.name, "value": v.value} for v in block.num_values],
        "collapsed": block.collapsed,
        "immutable": block.immutable,
        "hasBreakpoint": block.has_breakpoint,
        "inputCount": block.input_count,
    }
    if block.name is not None:
        data["name"] = block.name
    return data


def block_from_dict(
    data: BlockData,
    depth: int = 0,
    registry: Optional[BlockRegistry] = None,
) -> Block:
    """
    Deserialise a tree.

    Args:
        data: Serialised block
        depth: Depth assigned to the root of the loaded tree
        registry: Block registry (defaults to the shared one)

    Returns:
        The loaded tree, with fresh ids

    Raises:
        ValueError: If data is not a structurally valid block
    """
    state = ValidationState()
    if not validate_block_data(state, data):
        details = "; ".join(f"{e.path}: {e.message}" for e in state.errors)
        raise ValueError(f"Invalid block data: {details}")
    return _load_block(data, depth, registry or default_registry())


def _load_block(data: BlockData, depth: int, registry: BlockRegistry) -> Block:
    block_type = BlockType(data["type"])
    config = registry.get(block_type)

    stored_values = {nv["name"]: nv["value"] for nv in data.get("num_values", [])}
    block = Block(
        type=block_type,
        name=data.get("name"),
        num_values=[
            NumValue(spec.name, stored_values.get(spec.name, spec.default), spec.min)
            for spec in config.num_values
        ],
        input_count=data.get("inputCount", 0),
        depth=depth,
        collapsed=bool(data.get("collapsed", False)),
        immutable=bool(data.get("immutable", False)),
        has_breakpoint=bool(data.get("hasBreakpoint", False)),
    )

    stored_slots = [
        Slot(
            name=s["name"],
            block=_load_block(s["block"], depth + 1, registry) if s.get("block") is not None else None,
        )
        for s in data.get("children", [])
    ]
    layout = config.layout(block)
    if [s.name for s in stored_slots] != [spec.name for spec in layout]:
        logger.warning(f"Repaired slot layout of {block.label} block while loading")
    block.children = reconcile_slots(stored_slots, layout)
    return block


#==============================================================================
# Custom Block Library
#==============================================================================

class CustomBlockLibrary:
    """
    Named user-defined functions.

    Entries are kept serialised, so every instantiation is an independent
    copy with its own ids.
    """

    def __init__(self, registry: Optional[BlockRegistry] = None) -> None:
        self._registry = registry or default_registry()
        self._blocks: Dict[str, BlockData] = {}

    def define(self, name: str, body: Block) -> Block:
        """Wrap a copy of body in a Custom block called name and register it"""
        block = create_block(BlockType.CUSTOM, name=name, registry=self._registry)
        block.slot(CUSTOM_FUNCTION).block = clone_block(body)
        set_depth(block)
        self.register(block)
        return block

    def register(self, block: Block) -> None:
        """
        Register a Custom block under its name, replacing any previous entry.

        Raises:
            ValueError: If the block is not a named Custom block
        """
        if block.type != BlockType.CUSTOM:
            raise ValueError(f"Only Custom blocks can be registered, got {block.type.value}")
        if not block.name:
            raise ValueError("Custom blocks need a name")
        self._blocks[block.name] = block_to_dict(block)

    def register_data(self, name: str, data: BlockData) -> None:
        """Register an already serialised Custom block (its own name wins)"""
        block = block_from_dict(data, registry=self._registry)
        if not block.name:
            block.name = name
        self.register(block)

    def instantiate(self, name: str, input_count: int = 0, depth: int = 0) -> Block:
        """
        Create a fresh copy of a registered custom block.

        Raises:
            KeyError: If no custom block has that name
        """
        if name not in self._blocks:
            raise KeyError(f"Unknown custom block: {name}")
        block = block_from_dict(self._blocks[name], depth=depth, registry=self._registry)
        propagate_input_count(block, input_count)
        return block

    def names(self) -> List[str]:
        return sorted(self._blocks)

    def to_dict(self) -> Dict[str, BlockData]:
        return {name: dict(data) for name, data in self._blocks.items()}

    def __len__(self) -> int:
        return len(self._blocks)

    def __contains__(self, name: object) -> bool:
        return name in self._blocks


#==============================================================================
# Editor State Documents
#==============================================================================

@dataclass
class EditorState:
    """Everything an editor document stores"""
    root: Optional[Block] = None
    inputs: List[int] = field(default_factory=list)
    input_count: int = 0
    custom_blocks: CustomBlockLibrary = field(default_factory=CustomBlockLibrary)


def dump_editor_state(state: EditorState) -> Dict[str, Any]:
    """Serialise an editor state to a JSON-compatible dict"""
    doc: Dict[str, Any] = {
        "fileType": EDITOR_FILE_TYPE,
        "inputs": list(state.inputs),
        "inputCount": state.input_count,
        "customBlocks": state.custom_blocks.to_dict(),
    }
    if state.root is not None:
        doc["rootBlock"] = block_to_dict(state.root)
    return doc


def load_editor_state(
    source: Union[str, Path, Dict[str, Any]],
    registry: Optional[BlockRegistry] = None,
) -> Tuple[Optional[EditorState], ValidationResult]:
    """
    Load an editor document from a path, a JSON string or a parsed dict.

    The loaded root gets the document's input count propagated and is
    validated, so its errors are ready to display.

    Returns:
        (state, validation result); state is None when the document is invalid
    """
    registry = registry or default_registry()

    doc: Any = source
    if isinstance(source, Path) or (isinstance(source, str) and not source.lstrip().startswith("{")):
        path = Path(source)
        try:
            doc = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            return None, invalid_result([ValidationError("$", f"Could not read {path}: {e}")])
    elif isinstance(source, str):
        try:
            doc = json.loads(source)
        except json.JSONDecodeError as e:
            return None, invalid_result([ValidationError("$", f"Invalid JSON: {e}")])

    result = validate_editor_state(doc)
    if not result.valid:
        return None, result

    library = CustomBlockLibrary(registry)
    for name, data in doc.get("customBlocks", {}).items():
        library.register_data(name, data)

    input_count = max(0, doc["inputCount"])
    root = None
    if doc.get("rootBlock") is not None:
        root = _load_block(doc["rootBlock"], 0, registry)
        propagate_input_count(root, input_count)
        check_for_errors(root, registry)

    state = EditorState(
        root=root,
        inputs=list(doc["inputs"]),
        input_count=input_count,
        custom_blocks=library,
    )
    return state, result
