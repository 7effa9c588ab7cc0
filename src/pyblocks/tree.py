"""
pyblocks Tree Construction
Creating blocks and keeping their slot layout in step with their parameters
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from pyblocks.arity import get_input_count_of_slot, propagate_input_count
from pyblocks.domains.prf import default_registry
from pyblocks.domains.registry import BlockRegistry, SlotSpec
from pyblocks.types import Block, BlockType, Slot, iter_blocks, new_block_id


#==============================================================================
# Block Creation
#==============================================================================

def create_block(
    block_type: BlockType,
    input_count: int = 0,
    depth: int = 0,
    name: Optional[str] = None,
    registry: Optional[BlockRegistry] = None,
) -> Block:
    """
    Create a block with the default parameters and empty slots of its type.

    Args:
        block_type: Type of the new block
        input_count: Input count derived from the slot it will occupy
        depth: Nesting depth of the slot it will occupy
        name: Display name (Custom blocks)
        registry: Block registry (defaults to the shared one)

    Returns:
        A fresh block with a new id
    """
    config = (registry or default_registry()).get(block_type)
    block = Block(
        type=block_type,
        name=name,
        num_values=[spec.make_value() for spec in config.num_values],
        input_count=input_count,
        depth=depth,
        collapsed=block_type == BlockType.CUSTOM,
    )
    block.children = [spec.make_slot() for spec in config.layout(block)]
    return block


#==============================================================================
# Slot Reconciliation
#==============================================================================

def reconcile_slots(old_slots: List[Slot], layout: List[SlotSpec]) -> List[Slot]:
    """
    Build slots for a new layout, keeping occupants whose slot name survives.

    Occupants of slots missing from the new layout are dropped.
    """
    by_name = {s.name: s.block for s in old_slots}
    return [spec.make_slot(by_name.get(spec.name)) for spec in layout]


def _shape(slots: List[Slot]) -> List[Tuple[str, int, Optional[int], Optional[int]]]:
    return [(s.name, s.input_descriptor_index, s.input_set, s.input_mod) for s in slots]


def refresh_dynamic_children(block: Block, registry: Optional[BlockRegistry] = None) -> bool:
    """
    Recompute the slot layout of a block whose layout depends on parameters.

    When the layout changes the block gets a new id, and the kept children get
    their input counts and depths re-derived.

    Returns:
        True if the layout changed
    """
    config = (registry or default_registry()).get(block.type)
    if config.dynamic_children is None:
        return False

    slots = reconcile_slots(block.children, config.layout(block))
    if _shape(slots) == _shape(block.children):
        return False

    block.children = slots
    block.id = new_block_id()
    for slot in slots:
        if slot.block is not None:
            propagate_input_count(slot.block, get_input_count_of_slot(slot, block.input_count))
            set_depth(slot.block, block.depth + 1)
    return True


def set_num_value(
    block: Block,
    name: str,
    value: int,
    registry: Optional[BlockRegistry] = None,
) -> None:
    """
    Set a numeric parameter and regenerate any layout that depends on it.

    Out-of-range values are stored as given; the validator reports them.

    Raises:
        KeyError: If the block has no parameter with that name
    """
    for v in block.num_values:
        if v.name == name:
            v.value = value
            break
    else:
        raise KeyError(f"{block.type.value} block has no parameter '{name}'")
    refresh_dynamic_children(block, registry)


#==============================================================================
# Presentation Helpers
#==============================================================================

def set_depth(block: Block, depth: int = 0) -> None:
    """Set depth on a block and its descendants (child = parent + 1)"""
    stack = [(block, depth)]
    while stack:
        current, d = stack.pop()
        current.depth = d
        for slot in current.children:
            if slot.block is not None:
                stack.append((slot.block, d + 1))


def toggle_breakpoint(root: Block, block_id: str) -> bool:
    """
    Flip the breakpoint flag of the block with the given id.

    Returns:
        The new flag value

    Raises:
        KeyError: If no block in the tree has that id
    """
    for block in iter_blocks(root):
        if block.id == block_id:
            block.has_breakpoint = not block.has_breakpoint
            return block.has_breakpoint
    raise KeyError(f"No block with id {block_id}")
