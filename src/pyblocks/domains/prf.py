"""
pyblocks Primitive Recursive Function Domain
The seven block types of the editor

Zero, Successor and Projection are the base functions; Composition,
Primitive Recursion and Minimization build new functions from old ones;
Custom wraps a named, user-defined subtree.
"""

from __future__ import annotations

from typing import List, Optional, TYPE_CHECKING

from pyblocks.domains.registry import (
    BlockConfig,
    BlockRegistry,
    SlotSpec,
    define_block,
)
from pyblocks.errors import EvaluationError
from pyblocks.types import Block, BlockType

if TYPE_CHECKING:
    from pyblocks.evaluator import EvalContext


#==============================================================================
# Helper Functions
#==============================================================================

def _require_child(block: Block, slot_name: str) -> Block:
    """Get the occupant of a slot or fail the evaluation"""
    child = block.child(slot_name)
    if child is None:
        raise EvaluationError.missing_slot(block.type.value, slot_name, block.id)
    return child


def _require_value(block: Block, name: str) -> int:
    value = block.num_value(name)
    if value is None:
        raise EvaluationError.missing_parameter(block.type.value, name, block.id)
    return value


def _no_errors(_block: Block) -> List[str]:
    return []


#==============================================================================
# Zero
#==============================================================================

async def _zero_rule(_block: Block, _inputs: List[int], _ctx: "EvalContext") -> int:
    return 0


zero: BlockConfig = (define_block(BlockType.ZERO)
                     .evaluate(_zero_rule)
                     .check(_no_errors)
                     .description("Ignores inputs. Returns 0.")
                     .build())


#==============================================================================
# Successor
#==============================================================================

async def _successor_rule(block: Block, inputs: List[int], _ctx: "EvalContext") -> int:
    if len(inputs) != 1:
        raise EvaluationError.arity(block.type.value, "exactly one", len(inputs), block.id)
    return inputs[0] + 1


def _successor_check(block: Block) -> List[str]:
    if block.input_count != 1:
        return [f"Successor block requires exactly one input, but has {block.input_count}."]
    return []


successor: BlockConfig = (define_block(BlockType.SUCCESSOR)
                          .evaluate(_successor_rule)
                          .check(_successor_check)
                          .description("1 input. Returns the input incremented by 1.")
                          .build())


#==============================================================================
# Projection
#==============================================================================

async def _projection_rule(block: Block, inputs: List[int], _ctx: "EvalContext") -> int:
    if not inputs:
        raise EvaluationError.no_inputs(block.type.value, block.id)
    i = _require_value(block, "i")
    if i < 1 or i > len(inputs):
        raise EvaluationError.parameter_out_of_range(
            block.type.value, "i", i, 1, len(inputs), block.id
        )
    return inputs[i - 1]


def _projection_check(block: Block) -> List[str]:
    if block.input_count <= 0:
        return ["Projection block requires at least one input."]
    i = block.num_value("i")
    if i is None:
        return ["Projection block requires 'i' value."]
    if i < 1 or i > block.input_count:
        return [
            f"Projection block 'i' value must be between 1 and {block.input_count}, but is {i}."
        ]
    return []


projection: BlockConfig = (define_block(BlockType.PROJECTION)
                           .num_value("i", default=1, min=1)
                           .evaluate(_projection_rule)
                           .check(_projection_check)
                           .description(
                               "n > 0 inputs. Returns the i-th input, where i is a "
                               "parameter of the block and 1 <= i <= n."
                           )
                           .build())


#==============================================================================
# Composition
#==============================================================================

async def _composition_rule(block: Block, inputs: List[int], ctx: "EvalContext") -> int:
    m = _require_value(block, "m")

    # g1..gm run strictly in index order; the step trace depends on it
    g_results: List[int] = []
    for i in range(1, m + 1):
        g_block = _require_child(block, f"g{i}")
        g_results.append(await ctx.evaluate(g_block, inputs))

    f_block = _require_child(block, "f")
    return await ctx.evaluate(f_block, g_results)


def _composition_layout(block: Block) -> List[SlotSpec]:
    m = block.num_value("m")
    if m is None:
        m = 1
    m = max(m, 0)
    return [
        SlotSpec("f", input_descriptor_index=1, input_set=m),
        *(SlotSpec(f"g{i}", input_descriptor_index=0) for i in range(1, m + 1)),
    ]


def _composition_check(block: Block) -> List[str]:
    m = block.num_value("m")
    if m is None:
        return ["Composition block requires 'm' value."]
    if m < 0:
        return [f"Composition block 'm' value must be at least 0, but is {m}."]
    return []


composition: BlockConfig = (define_block(BlockType.COMPOSITION)
                            .num_value("m", default=1, min=0)
                            .dynamic_slots(_composition_layout)
                            .evaluate(_composition_rule)
                            .check(_composition_check)
                            .description(
                                "n inputs. Contains m blocks g1 ... gm. Runs g1 ... gm on "
                                "the n inputs. Then returns f evaluated on the results of "
                                "g1 ... gm."
                            )
                            .build())


#==============================================================================
# Primitive Recursion
#==============================================================================

BASE_CASE = "Base Case"
RECURSIVE_CASE = "Recursive Case"


async def _primitive_recursion_rule(block: Block, inputs: List[int], ctx: "EvalContext") -> int:
    if not inputs:
        raise EvaluationError.no_inputs(block.type.value, block.id)

    *xs, n = inputs
    if n <= 0:
        return await ctx.evaluate(_require_child(block, BASE_CASE), xs)

    # z = this block on (x1..xk, n-1), then the recursive case on (x1..xk, n-1, z)
    decremented = [*xs, n - 1]
    z = await ctx.evaluate(block, decremented)
    return await ctx.evaluate(_require_child(block, RECURSIVE_CASE), [*decremented, z])


def _primitive_recursion_check(block: Block) -> List[str]:
    if block.input_count < 1:
        return ["Primitive Recursion block requires at least one input."]
    return []


primitive_recursion: BlockConfig = (define_block(BlockType.PRIMITIVE_RECURSION)
                                    .slot(BASE_CASE, input_descriptor_index=0, input_mod=-1)
                                    .slot(RECURSIVE_CASE, input_descriptor_index=3, input_mod=1)
                                    .evaluate(_primitive_recursion_rule)
                                    .check(_primitive_recursion_check)
                                    .description(
                                        "n >= 1 inputs. If rightmost input is 0, returns the "
                                        "base case. Otherwise, returns the recursive case "
                                        "evaluated where y = (rightmost input - 1), and z is "
                                        "the result of the previous recursive step (this "
                                        "block, evaluated with rightmost input decremented)."
                                    )
                                    .build())


#==============================================================================
# Minimization
#==============================================================================

async def _minimization_rule(block: Block, inputs: List[int], ctx: "EvalContext") -> int:
    f_block = _require_child(block, "f")
    limit = ctx.options.max_minimization_steps
    for n in range(limit):
        if await ctx.evaluate(f_block, [*inputs, n]) == 0:
            return n
    raise EvaluationError.did_not_converge(limit, block.id)


minimization: BlockConfig = (define_block(BlockType.MINIMIZATION)
                             .slot("f", input_descriptor_index=2, input_mod=1)
                             .evaluate(_minimization_rule)
                             .check(_no_errors)
                             .description(
                                 "Any number of inputs. Finds the smallest non-negative "
                                 "integer n such that f evaluated on the inputs and n "
                                 "returns 0."
                             )
                             .build())


#==============================================================================
# Custom
#==============================================================================

CUSTOM_FUNCTION = "Custom Function"


async def _custom_rule(block: Block, inputs: List[int], ctx: "EvalContext") -> int:
    child = block.child(CUSTOM_FUNCTION)
    if child is None:
        raise EvaluationError.empty_custom(block.name, block.id)
    return await ctx.evaluate(child, inputs)


custom: BlockConfig = (define_block(BlockType.CUSTOM)
                       .slot(CUSTOM_FUNCTION, input_descriptor_index=0)
                       .evaluate(_custom_rule)
                       .check(_no_errors)
                       .build())


#==============================================================================
# Registry Creation
#==============================================================================

def create_prf_registry() -> BlockRegistry:
    """Create a frozen registry holding all seven block types"""
    registry = BlockRegistry()
    registry.register_all([
        zero,
        successor,
        projection,
        composition,
        primitive_recursion,
        minimization,
        custom,
    ])
    return registry.freeze()


_default_registry: Optional[BlockRegistry] = None


def default_registry() -> BlockRegistry:
    """The shared registry used when no explicit one is given"""
    global _default_registry
    if _default_registry is None:
        _default_registry = create_prf_registry()
    return _default_registry
