"""
pyblocks Type Definitions
Block tree data model for the primitive recursive function editor

A tree is made of Block nodes. Each block owns an ordered list of named Slots,
and each slot holds at most one child block. Blocks are mutable dataclasses:
the evaluator only reads them, while the arity propagator, validator and
tree helpers update the cached fields in place.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Set


#==============================================================================
# Block Types
#==============================================================================

class BlockType(str, Enum):
    """The closed set of block variants"""
    ZERO = "Zero"
    SUCCESSOR = "Successor"
    PROJECTION = "Projection"
    COMPOSITION = "Composition"
    PRIMITIVE_RECURSION = "Primitive Recursion"
    MINIMIZATION = "Minimization"
    CUSTOM = "Custom"


def new_block_id() -> str:
    """Generate a fresh, globally unique block id"""
    return str(uuid.uuid4())


#==============================================================================
# Slots and Parameters
#==============================================================================

@dataclass
class NumValue:
    """A named integer parameter of a block (e.g. Projection's i)"""
    name: str
    value: int
    min: int = 0


@dataclass
class Slot:
    """
    A named position in a block's children.

    Attributes:
        name: Unique among the siblings of one block ("f", "g1", "Base Case")
        block: The occupying child, or None when empty
        input_descriptor_index: Index into the input descriptor table (display only)
        input_set: If set, the child's input count is exactly this value
        input_mod: If set (and input_set is not), added to the parent's input count
    """
    name: str
    block: Optional["Block"] = None
    input_descriptor_index: int = 0
    input_set: Optional[int] = None
    input_mod: Optional[int] = None


#==============================================================================
# Block
#==============================================================================

@dataclass
class Block:
    """
    A node in a block tree.

    input_count and depth are derived state: input_count is kept consistent by
    the arity propagator, depth by set_depth. errors is recomputed wholesale
    by the validator. latest_input / latest_output are execution trace fields.
    """
    type: BlockType
    id: str = field(default_factory=new_block_id)
    name: Optional[str] = None
    children: List[Slot] = field(default_factory=list)
    num_values: List[NumValue] = field(default_factory=list)
    input_count: int = 0
    depth: int = 0
    collapsed: bool = False
    immutable: bool = False
    has_breakpoint: bool = False
    errors: List[str] = field(default_factory=list)
    latest_input: Optional[List[int]] = None
    latest_output: Optional[int] = None

    def slot(self, name: str) -> Optional[Slot]:
        """Look up a slot by name"""
        for s in self.children:
            if s.name == name:
                return s
        return None

    def child(self, name: str) -> Optional["Block"]:
        """Get the block occupying the named slot, if any"""
        s = self.slot(name)
        return s.block if s is not None else None

    def num_value(self, name: str) -> Optional[int]:
        """Get the value of a named numeric parameter, if present"""
        for v in self.num_values:
            if v.name == name:
                return v.value
        return None

    @property
    def label(self) -> str:
        """Display label: the custom name, or the upper-cased type"""
        return self.name or self.type.value.upper()


#==============================================================================
# Tree Traversal
#==============================================================================

def iter_blocks(root: Block) -> Iterator[Block]:
    """Iterate over every block of a tree in pre-order"""
    stack = [root]
    while stack:
        block = stack.pop()
        yield block
        for s in reversed(block.children):
            if s.block is not None:
                stack.append(s.block)


def find_block(root: Block, block_id: str) -> Optional[Block]:
    """Find the block with the given id, or None"""
    for block in iter_blocks(root):
        if block.id == block_id:
            return block
    return None


def is_descendant(parent: Block, child_id: str) -> bool:
    """Check whether a block with child_id lives strictly below parent"""
    for s in parent.children:
        if s.block is None:
            continue
        if s.block.id == child_id:
            return True
        if is_descendant(s.block, child_id):
            return True
    return False


def collect_breakpoints(root: Block) -> Set[str]:
    """Collect the ids of every block flagged with a breakpoint"""
    return {b.id for b in iter_blocks(root) if b.has_breakpoint}


def clear_execution_data(root: Block) -> None:
    """Reset latest_input / latest_output across a tree"""
    for block in iter_blocks(root):
        block.latest_input = None
        block.latest_output = None


#==============================================================================
# Clone-on-write Helpers
#==============================================================================

def clone_block(block: Block) -> Block:
    """Deep copy a tree (ids are preserved)"""
    return copy.deepcopy(block)


def remove_block_by_id(root: Block, target_id: str) -> Block:
    """
    Return a copy of root with the block target_id detached from its slot.

    The root itself is never removed; callers handle that case by dropping
    the whole tree.
    """
    result = clone_block(root)
    for block in iter_blocks(result):
        for s in block.children:
            if s.block is not None and s.block.id == target_id:
                s.block = None
                return result
    return result


def replace_slot_block(parent: Block, slot_name: str, new_child: Optional[Block]) -> Block:
    """
    Return a deep copy of parent whose slot slot_name holds new_child.

    The copy avoids aliasing between the old and the new tree.
    """
    result = clone_block(parent)
    s = result.slot(slot_name)
    if s is not None:
        s.block = new_child
    return result
