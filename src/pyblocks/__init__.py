"""
pyblocks

Evaluation engine for a visual editor of primitive recursive functions.
Block trees built from Zero, Successor, Projection, Composition, Primitive
Recursion, Minimization and Custom blocks can be validated, kept
arity-consistent, and evaluated either directly or step by step under a
pause / resume / halt / breakpoint controller.
"""

from __future__ import annotations

#==============================================================================
# Types
#==============================================================================

from pyblocks.types import (
    Block,
    BlockType,
    NumValue,
    Slot,
    new_block_id,
    # Tree helpers
    clear_execution_data,
    clone_block,
    collect_breakpoints,
    find_block,
    is_descendant,
    iter_blocks,
    remove_block_by_id,
    replace_slot_block,
)

#==============================================================================
# Errors
#==============================================================================

from pyblocks.errors import (
    BlocksError,
    ErrorCodes,
    EvaluationError,
    Halted,
    ValidationError,
    ValidationResult,
)

#==============================================================================
# Registry
#==============================================================================

from pyblocks.domains.registry import (
    BlockConfig,
    BlockRegistry,
    NumValueSpec,
    SlotSpec,
    define_block,
    describe_slot_inputs,
)
from pyblocks.domains.prf import (
    create_prf_registry,
    default_registry,
)

#==============================================================================
# Engine
#==============================================================================

from pyblocks.arity import (
    get_input_count_of_slot,
    propagate_input_count,
)
from pyblocks.tree import (
    create_block,
    reconcile_slots,
    refresh_dynamic_children,
    set_depth,
    set_num_value,
    toggle_breakpoint,
)
from pyblocks.validator import (
    check_for_errors,
    validate,
)
from pyblocks.evaluator import (
    MAX_MINIMIZATION_STEPS,
    EvalOptions,
    Evaluator,
    evaluate,
    evaluate_stepped,
)
from pyblocks.controller import (
    ControllerOptions,
    RunState,
    Speed,
    StepController,
    StepEvent,
)

#==============================================================================
# Documents
#==============================================================================

from pyblocks.document import (
    CustomBlockLibrary,
    EditorState,
    block_from_dict,
    block_to_dict,
    dump_editor_state,
    load_editor_state,
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "Block",
    "BlockType",
    "NumValue",
    "Slot",
    "new_block_id",
    "clear_execution_data",
    "clone_block",
    "collect_breakpoints",
    "find_block",
    "is_descendant",
    "iter_blocks",
    "remove_block_by_id",
    "replace_slot_block",
    # Errors
    "BlocksError",
    "ErrorCodes",
    "EvaluationError",
    "Halted",
    "ValidationError",
    "ValidationResult",
    # Registry
    "BlockConfig",
    "BlockRegistry",
    "NumValueSpec",
    "SlotSpec",
    "define_block",
    "describe_slot_inputs",
    "create_prf_registry",
    "default_registry",
    # Engine
    "get_input_count_of_slot",
    "propagate_input_count",
    "create_block",
    "reconcile_slots",
    "refresh_dynamic_children",
    "set_depth",
    "set_num_value",
    "toggle_breakpoint",
    "check_for_errors",
    "validate",
    "MAX_MINIMIZATION_STEPS",
    "EvalOptions",
    "Evaluator",
    "evaluate",
    "evaluate_stepped",
    "ControllerOptions",
    "RunState",
    "Speed",
    "StepController",
    "StepEvent",
    # Documents
    "CustomBlockLibrary",
    "EditorState",
    "block_from_dict",
    "block_to_dict",
    "dump_editor_state",
    "load_editor_state",
]
