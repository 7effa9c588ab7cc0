"""
pyblocks Arity Propagation
Keeps every block's cached input_count consistent with the root's

Input counts flow from the root downwards: each slot derives its occupant's
count from the parent's count via a fixed value (input_set), a signed
modifier (input_mod) or pass-through.
"""

from __future__ import annotations

from typing import List, Tuple

from pyblocks.types import Block, Slot


def get_input_count_of_slot(slot: Slot, parent_count: int = 0) -> int:
    """
    Compute the input count a slot's occupant expects.

    Args:
        slot: The slot whose arity rule is applied
        parent_count: The input count of the block owning the slot

    Returns:
        input_set if present, else parent_count + input_mod, else parent_count
    """
    if slot.input_set is not None:
        return slot.input_set
    if slot.input_mod is not None:
        return parent_count + slot.input_mod
    return parent_count


def propagate_input_count(root: Block, count: int) -> None:
    """
    Set root.input_count to count and derive every descendant's input_count.

    Walks the tree pre-order with an explicit stack, so arbitrarily deep
    trees do not hit the interpreter recursion limit. Only input_count is
    touched; errors, parameters and slot layouts are left alone.
    """
    stack: List[Tuple[Block, int]] = [(root, count)]
    while stack:
        block, block_count = stack.pop()
        block.input_count = block_count
        for slot in reversed(block.children):
            if slot.block is not None:
                stack.append((slot.block, get_input_count_of_slot(slot, block_count)))
