# pyblocks Error Types
# Error domain for block evaluation, cancellation and document validation

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional


#==============================================================================
# Error Codes
#==============================================================================

class ErrorCodes(str, Enum):
    """Error code constants for pyblocks errors"""

    # Evaluation errors
    MISSING_SLOT = "MissingSlot"
    ARITY_ERROR = "ArityError"
    MISSING_PARAMETER = "MissingParameter"
    PARAMETER_OUT_OF_RANGE = "ParameterOutOfRange"
    NO_INPUTS = "NoInputs"
    NON_CONVERGENCE = "NonConvergence"
    EMPTY_CUSTOM = "EmptyCustom"
    RECURSION_LIMIT = "RecursionLimit"
    UNKNOWN_BLOCK_TYPE = "UnknownBlockType"

    # Cancellation
    HALTED = "Halted"

    # Document validation errors
    VALIDATION_ERROR = "ValidationError"


#==============================================================================
# Exception Classes
#==============================================================================

class BlocksError(Exception):
    """Base exception class for all pyblocks errors"""

    def __init__(self, code: ErrorCodes, message: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta

    def __str__(self) -> str:
        return self.message


class EvaluationError(BlocksError):
    """
    A block tree could not be evaluated.

    Raised lazily, at the point the evaluator reaches the malformed block.
    Aborts the whole evaluation; there is never a partial result.
    """

    #---------------------------------------------------------------------------
    # Static factory methods for common errors
    #---------------------------------------------------------------------------

    @staticmethod
    def missing_slot(block_type: str, slot_name: str, block_id: str | None = None) -> "EvaluationError":
        """Create a MissingSlot error"""
        return EvaluationError(
            ErrorCodes.MISSING_SLOT,
            f"{slot_name} block is missing in {block_type}.",
            {"block_id": block_id, "slot": slot_name},
        )

    @staticmethod
    def arity(block_type: str, expected: str, got: int, block_id: str | None = None) -> "EvaluationError":
        """Create an ArityError"""
        return EvaluationError(
            ErrorCodes.ARITY_ERROR,
            f"{block_type} block requires {expected} input(s), got {got}.",
            {"block_id": block_id, "got": got},
        )

    @staticmethod
    def missing_parameter(block_type: str, name: str, block_id: str | None = None) -> "EvaluationError":
        """Create a MissingParameter error"""
        return EvaluationError(
            ErrorCodes.MISSING_PARAMETER,
            f"{block_type} block requires a value for '{name}'.",
            {"block_id": block_id, "parameter": name},
        )

    @staticmethod
    def parameter_out_of_range(
        block_type: str,
        name: str,
        value: int,
        low: int,
        high: int,
        block_id: str | None = None,
    ) -> "EvaluationError":
        """Create a ParameterOutOfRange error"""
        return EvaluationError(
            ErrorCodes.PARAMETER_OUT_OF_RANGE,
            f"{block_type} block '{name}' value must be between {low} and {high}, but is {value}.",
            {"block_id": block_id, "parameter": name, "value": value},
        )

    @staticmethod
    def no_inputs(block_type: str, block_id: str | None = None) -> "EvaluationError":
        """Create a NoInputs error"""
        return EvaluationError(
            ErrorCodes.NO_INPUTS,
            f"{block_type} block requires at least one input.",
            {"block_id": block_id},
        )

    @staticmethod
    def did_not_converge(limit: int, block_id: str | None = None) -> "EvaluationError":
        """Create a NonConvergence error"""
        return EvaluationError(
            ErrorCodes.NON_CONVERGENCE,
            f"Minimization did not converge within {limit} iterations.",
            {"block_id": block_id, "limit": limit},
        )

    @staticmethod
    def empty_custom(name: str | None, block_id: str | None = None) -> "EvaluationError":
        """Create an EmptyCustom error"""
        label = f" '{name}'" if name else ""
        return EvaluationError(
            ErrorCodes.EMPTY_CUSTOM,
            f"Custom block{label} is empty.",
            {"block_id": block_id},
        )

    @staticmethod
    def recursion_limit() -> "EvaluationError":
        """Create a RecursionLimit error"""
        return EvaluationError(
            ErrorCodes.RECURSION_LIMIT,
            "Evaluation exceeded the interpreter recursion limit.",
        )

    @staticmethod
    def unknown_block_type(block_type: str) -> "EvaluationError":
        """Create an UnknownBlockType error"""
        return EvaluationError(
            ErrorCodes.UNKNOWN_BLOCK_TYPE,
            f"Unknown block type: {block_type}",
        )


class Halted(BlocksError):
    """
    Raised from a step callback to cancel a stepped evaluation.

    Not an EvaluationError: a halted run is not a failure and callers
    should not report it as one.
    """

    def __init__(self, message: str = "Halted") -> None:
        super().__init__(ErrorCodes.HALTED, message)


#==============================================================================
# Validation Error Types
#==============================================================================

class ValidationError:
    """A single document validation error"""

    def __init__(self, path: str, message: str, value: Any | None = None):
        self.path = path
        self.message = message
        self.value = value

    def __repr__(self) -> str:
        return f"ValidationError({self.path!r}, {self.message!r})"


class ValidationResult:
    """Result of a document validation operation"""

    def __init__(self, valid: bool, errors: List[ValidationError], value: Any | None = None):
        self.valid = valid
        self.errors = errors
        self.value = value


def valid_result(value: Any) -> ValidationResult:
    """Create a successful validation result"""
    return ValidationResult(valid=True, errors=[], value=value)


def invalid_result(errors: List[ValidationError]) -> ValidationResult:
    """Create a failed validation result"""
    return ValidationResult(valid=False, errors=errors)

