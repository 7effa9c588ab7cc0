#!/usr/bin/env python3
"""
pyblocks CLI

Run and validate saved block editor documents from the command line.

Usage:
    python -m pyblocks.cli <path> [options]
    pyblocks <path> [options]

Examples:
    pyblocks addition.bramflower --inputs 2,3
    pyblocks addition.bramflower --validate
    pyblocks addition.bramflower --inputs "[4, 1]" --trace --speed fast
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Iterator, List, Optional, Tuple

from pyblocks.arity import propagate_input_count
from pyblocks.controller import StepController, StepEvent, Speed
from pyblocks.document import load_editor_state
from pyblocks.errors import EvaluationError
from pyblocks.evaluator import evaluate
from pyblocks.types import Block
from pyblocks.validator import CHILD_ERRORS, check_for_errors


#==============================================================================
# CLI Output Formatting
#==============================================================================

class Colors:
    """ANSI color codes for terminal output"""
    RESET = "\x1b[0m"
    BOLD = "\x1b[1m"
    DIM = "\x1b[2m"
    RED = "\x1b[31m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    CYAN = "\x1b[36m"


def print_msg(msg: str, color: str = Colors.RESET) -> None:
    """Print a message with optional color"""
    print(f"{color}{msg}{Colors.RESET}")


def format_step(event: StepEvent) -> str:
    """Format a step notification for the trace output"""
    block = event.block
    args = ", ".join(str(x) for x in block.latest_input or [])
    return f"{Colors.DIM}[{event.index:>4}]{Colors.RESET} {block.label}({args}) = {Colors.CYAN}{event.result}{Colors.RESET}"


#==============================================================================
# Input Parsing
#==============================================================================

def parse_input_string(input_str: str) -> List[int]:
    """
    Parse inputs from a comma-separated or JSON array string.

    Examples:
        "1,2,3" -> [1, 2, 3]
        "[1, 2, 3]" -> [1, 2, 3]
        "" -> []

    Raises:
        ValueError: If any value is not an integer
    """
    try:
        parsed = json.loads(input_str)
        if isinstance(parsed, list):
            return [_as_int(v) for v in parsed]
    except json.JSONDecodeError:
        pass

    return [int(s.strip()) for s in input_str.split(",") if s.strip()]


def read_inputs_file(file_path: str) -> Optional[List[int]]:
    """
    Read inputs from a JSON file holding an array of integers.

    Returns:
        The inputs, or None if the file is missing or invalid
    """
    try:
        with open(file_path, "r") as f:
            parsed = json.load(f)
        if isinstance(parsed, list):
            return [_as_int(v) for v in parsed]
    except (OSError, json.JSONDecodeError, ValueError):
        return None
    return None


def _as_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Inputs must be integers, got {value!r}")
    return value


#==============================================================================
# Tree Reporting
#==============================================================================

def iter_with_paths(root: Block) -> Iterator[Tuple[str, Block]]:
    """Yield (path, block) pairs in pre-order; paths join slot names with '/'"""
    stack = [(root.label, root)]
    while stack:
        path, block = stack.pop()
        yield path, block
        for slot in reversed(block.children):
            if slot.block is not None:
                stack.append((f"{path}/{slot.name}", slot.block))


def report_errors(root: Block) -> int:
    """Print every block's own errors; returns how many were printed"""
    count = 0
    for path, block in iter_with_paths(root):
        for error in block.errors:
            if error == CHILD_ERRORS:
                continue
            print_msg(f"  - {path}: {error}", Colors.RED)
            count += 1
    return count


#==============================================================================
# Document Running
#==============================================================================

def run_document(
    path: str,
    inputs: Optional[str] = None,
    inputs_file: Optional[str] = None,
    trace: bool = False,
    speed: Speed = Speed.INSTANT,
    validate_only: bool = False,
    strict: bool = False,
    verbose: bool = False,
) -> int:
    """
    Run a saved editor document.

    Args:
        path: Path to the document
        inputs: Input values (comma-separated or JSON), overriding the document's
        inputs_file: Path to an inputs JSON file
        trace: Evaluate step by step and print every step
        speed: Auto-play speed for traced runs
        validate_only: Only validate, don't evaluate
        strict: Refuse to evaluate a tree with validation errors
        verbose: Show detailed output

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    state, result = load_editor_state(path)
    if state is None:
        print_msg(f"Error: Could not load document: {path}", Colors.RED)
        for error in result.errors:
            print_msg(f"  - {error.path}: {error.message}", Colors.RED)
        return 1

    if state.root is None:
        print_msg("Error: Document has no root block", Colors.RED)
        return 1

    root = state.root
    print_msg(f"\n{Colors.BOLD}Running:{Colors.RESET} {Colors.CYAN}{path}{Colors.RESET}\n")

    # Prepare inputs
    input_array = state.inputs
    try:
        if inputs is not None:
            input_array = parse_input_string(inputs)
        elif inputs_file:
            file_inputs = read_inputs_file(inputs_file)
            if file_inputs is None:
                print_msg(f"Warning: Could not read inputs file: {inputs_file}", Colors.YELLOW)
            else:
                input_array = file_inputs
    except ValueError as e:
        print_msg(f"Error: {e}", Colors.RED)
        return 1

    if len(input_array) != root.input_count:
        propagate_input_count(root, len(input_array))
        check_for_errors(root)

    # Validate
    print_msg(f"{Colors.BOLD}Validating...{Colors.RESET}")
    if root.errors:
        print_msg("Validation found problems:", Colors.YELLOW)
        report_errors(root)
        if strict or validate_only:
            return 1
    else:
        print_msg(f"{Colors.GREEN}✓ Validation passed{Colors.RESET}\n")

    if validate_only:
        return 0

    # Evaluate
    print_msg(f"{Colors.BOLD}Evaluating on {input_array}...{Colors.RESET}")
    try:
        if trace:
            controller = StepController(on_step=lambda event: print(format_step(event)))
            value = asyncio.run(controller.start(root, input_array, speed))
            if verbose:
                print_msg(f"{controller.steps} steps", Colors.DIM)
        else:
            value = evaluate(root, input_array)
    except EvaluationError as e:
        print_msg(f"{Colors.RED}Evaluation error:{Colors.RESET} {e.code.value}", Colors.RED)
        print_msg(f"  {e.message}", Colors.RED)
        return 1

    print_msg(f"{Colors.GREEN}✓ Result:{Colors.RESET} {Colors.CYAN}{value}{Colors.RESET}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        prog="pyblocks",
        description="Run and validate primitive recursive function block documents",
    )
    parser.add_argument("path", help="Path to the editor document")
    parser.add_argument(
        "--inputs",
        type=str,
        help="Input values (comma-separated or JSON array)",
    )
    parser.add_argument(
        "--inputs-file",
        type=str,
        dest="inputs_file",
        help="Read inputs from JSON file",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Only validate, don't evaluate",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Don't evaluate a tree with validation errors",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Evaluate step by step and print every step",
    )
    parser.add_argument(
        "--speed",
        choices=[s.value for s in Speed],
        default=Speed.INSTANT.value,
        help="Delay between traced steps",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed output",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    return run_document(
        args.path,
        inputs=args.inputs,
        inputs_file=args.inputs_file,
        trace=args.trace,
        speed=Speed(args.speed),
        validate_only=args.validate,
        strict=args.strict,
        verbose=args.verbose,
    )


if __name__ == "__main__":
    sys.exit(main())
