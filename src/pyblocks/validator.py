# pyblocks Validator
# Advisory error annotation for block trees, and structural validation of
# editor documents before they are turned into trees

from __future__ import annotations

from typing import Any, List, Optional

from pyblocks.domains.prf import default_registry
from pyblocks.domains.registry import BlockRegistry
from pyblocks.errors import (
    ValidationError,
    ValidationResult,
    invalid_result,
    valid_result,
)
from pyblocks.types import Block, BlockType


CHILD_ERRORS = "Error(s) in children"

EDITOR_FILE_TYPE = "BRAM_EDITOR_STATE_V2"


#==============================================================================
# Block Tree Validation
#==============================================================================

def check_for_errors(block: Block, registry: Optional[BlockRegistry] = None) -> List[str]:
    """
    Recompute block.errors for a block and all of its descendants.

    Occupied slots are validated first; any child with errors adds a single
    "Error(s) in children" marker per child, and each empty slot adds
    "Missing <slot name>.". The type-specific validator's messages follow.
    Never raises for a malformed tree.

    Returns:
        The block's new error list
    """
    registry = registry or default_registry()
    block.errors = []

    for slot in block.children:
        if slot.block is not None:
            if check_for_errors(slot.block, registry):
                block.errors.append(CHILD_ERRORS)
        else:
            block.errors.append(f"Missing {slot.name}.")

    config = registry.lookup(block.type)
    if config is None:
        block.errors.append(f"Unknown block type: {block.type.value}")
    else:
        block.errors.extend(config.check_for_errors(block))
    return block.errors


def validate(root: Block, registry: Optional[BlockRegistry] = None) -> None:
    """Annotate root and every descendant with fresh errors"""
    check_for_errors(root, registry)


#==============================================================================
# Validation State
#==============================================================================

class ValidationState:
    """State tracking during document validation"""

    def __init__(self) -> None:
        self.errors: list[ValidationError] = []
        self.path: list[str] = []

    def push_path(self, segment: str) -> None:
        self.path.append(segment)

    def pop_path(self) -> None:
        self.path.pop()

    def current_path(self) -> str:
        """Get the current validation path as a dot-separated string"""
        return ".".join(self.path) if self.path else "$"

    def add_error(self, message: str, value: Any | None = None) -> None:
        self.errors.append(ValidationError(
            path=self.current_path(),
            message=message,
            value=value,
        ))


#==============================================================================
# Primitive Validators
#==============================================================================

def validate_string(value: Any) -> bool:
    return isinstance(value, str)


def validate_array(value: Any) -> bool:
    return isinstance(value, list)


def validate_object(value: Any) -> bool:
    return isinstance(value, dict)


def validate_int(value: Any) -> bool:
    """Check for an integer (bool is not accepted)"""
    return isinstance(value, int) and not isinstance(value, bool)


BLOCK_TYPE_NAMES = {t.value for t in BlockType}


#==============================================================================
# Document Validation - Blocks
#==============================================================================

def validate_block_data(state: ValidationState, value: Any) -> bool:
    """Validate a serialised block and its children"""
    if not validate_object(value):
        state.add_error("Block must be an object", value)
        return False

    ok = True

    if value.get("type") not in BLOCK_TYPE_NAMES:
        state.push_path("type")
        state.add_error("Block must have a known 'type'", value.get("type"))
        state.pop_path()
        ok = False

    for key in ("id", "name"):
        if key in value and value[key] is not None and not validate_string(value[key]):
            state.push_path(key)
            state.add_error(f"'{key}' must be a string", value[key])
            state.pop_path()
            ok = False

    if "inputCount" in value and not validate_int(value["inputCount"]):
        state.push_path("inputCount")
        state.add_error("inputCount must be an integer", value["inputCount"])
        state.pop_path()
        ok = False

    if "num_values" in value:
        if not validate_array(value["num_values"]):
            state.push_path("num_values")
            state.add_error("num_values must be an array", value["num_values"])
            state.pop_path()
            ok = False
        else:
            for i, nv in enumerate(value["num_values"]):
                if not validate_object(nv) or not validate_string(nv.get("name")) \
                        or not validate_int(nv.get("value")):
                    state.push_path(f"num_values[{i}]")
                    state.add_error("num_values entries need a string 'name' and integer 'value'", nv)
                    state.pop_path()
                    ok = False

    if "children" in value:
        if not validate_array(value["children"]):
            state.push_path("children")
            state.add_error("children must be an array", value["children"])
            state.pop_path()
            ok = False
        else:
            seen: set[str] = set()
            for i, slot in enumerate(value["children"]):
                state.push_path(f"children[{i}]")
                if not validate_object(slot) or not validate_string(slot.get("name")):
                    state.add_error("Slot must be an object with a string 'name'", slot)
                    ok = False
                else:
                    if slot["name"] in seen:
                        state.add_error(f"Duplicate slot name: {slot['name']}", slot["name"])
                        ok = False
                    seen.add(slot["name"])
                    if slot.get("block") is not None:
                        state.push_path("block")
                        ok = validate_block_data(state, slot["block"]) and ok
                        state.pop_path()
                state.pop_path()

    return ok


#==============================================================================
# Document Validation - Editor State
#==============================================================================

def validate_editor_state(doc: Any) -> ValidationResult:
    """Validate an editor state document"""
    state = ValidationState()

    if not validate_object(doc):
        state.add_error("Document must be an object", doc)
        return invalid_result(state.errors)

    if doc.get("fileType") != EDITOR_FILE_TYPE:
        state.push_path("fileType")
        state.add_error(f"fileType must be {EDITOR_FILE_TYPE}", doc.get("fileType"))
        state.pop_path()

    if not validate_array(doc.get("inputs")) or not all(validate_int(x) for x in doc["inputs"]):
        state.push_path("inputs")
        state.add_error("inputs must be an array of integers", doc.get("inputs"))
        state.pop_path()

    if not validate_int(doc.get("inputCount")):
        state.push_path("inputCount")
        state.add_error("inputCount must be an integer", doc.get("inputCount"))
        state.pop_path()

    if doc.get("rootBlock") is not None:
        state.push_path("rootBlock")
        validate_block_data(state, doc["rootBlock"])
        state.pop_path()

    custom_blocks = doc.get("customBlocks", {})
    state.push_path("customBlocks")
    if not validate_object(custom_blocks):
        state.add_error("customBlocks must be an object", custom_blocks)
    else:
        for name, data in custom_blocks.items():
            state.push_path(name)
            if validate_block_data(state, data) and data.get("type") != BlockType.CUSTOM.value:
                state.add_error("Saved custom blocks must have type Custom", data.get("type"))
            state.pop_path()
    state.pop_path()

    if state.errors:
        return invalid_result(state.errors)

    return valid_result(doc)
