"""
pyblocks Evaluator
Interpreter for block trees of primitive recursive functions

Every block type's evaluation rule is a coroutine taken from the block
registry. The same rules serve two execution modes:

- evaluate(): direct evaluation. No step callback is installed, so the rule
  coroutines never suspend and are driven to completion synchronously.
- evaluate_stepped(): after each block completes, an awaitable step callback
  is invoked with the block and its result. The callback may suspend for as
  long as it likes (pausing) or raise Halted to unwind the whole walk.

Notifications are post-order: the deepest, earliest-finishing blocks report
first, and a block that is evaluated many times (recursion, minimization)
reports once per evaluation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Coroutine, List, Optional, Sequence

from pyblocks.domains.prf import default_registry
from pyblocks.domains.registry import BlockRegistry
from pyblocks.errors import EvaluationError
from pyblocks.types import Block

logger = logging.getLogger(__name__)


#==============================================================================
# Evaluation Options
#==============================================================================

MAX_MINIMIZATION_STEPS = 100

StepCallback = Callable[[Block, int], Awaitable[None]]


@dataclass
class EvalOptions:
    """
    Options for block evaluation.

    Attributes:
        trace: Record latest_input / latest_output on every evaluated block
        max_minimization_steps: Candidates a Minimization block tries before
            giving up with a non-convergence error
    """
    trace: bool = False
    max_minimization_steps: int = MAX_MINIMIZATION_STEPS


#==============================================================================
# Evaluation Context
#==============================================================================

@dataclass
class EvalContext:
    """Per-run state handed to block rules"""
    evaluator: "Evaluator"
    options: EvalOptions
    on_step: Optional[StepCallback] = None
    steps: int = 0

    async def evaluate(self, block: Block, inputs: Sequence[int]) -> int:
        """Evaluate a child (or the same) block within this run"""
        return await self.evaluator.eval_block(block, inputs, self)


#==============================================================================
# Evaluator Class
#==============================================================================

class Evaluator:
    """
    Block tree evaluator.

    Errors are not pre-checked: a missing child, a bad parameter or an arity
    mismatch raises EvaluationError only when the walk reaches it.
    """

    def __init__(self, registry: Optional[BlockRegistry] = None):
        self._registry = registry if registry is not None else default_registry()

    @property
    def registry(self) -> BlockRegistry:
        return self._registry

    #---------------------------------------------------------------------------
    # Public Evaluation API
    #---------------------------------------------------------------------------

    def evaluate(
        self,
        block: Block,
        inputs: Sequence[int],
        options: Optional[EvalOptions] = None,
    ) -> int:
        """
        Evaluate a tree to completion.

        Args:
            block: Root of the tree to evaluate
            inputs: Input vector
            options: Evaluation options

        Returns:
            The numeric result

        Raises:
            EvaluationError: If the tree cannot be evaluated
        """
        ctx = EvalContext(evaluator=self, options=options or EvalOptions())
        logger.debug(f"Evaluating {block.label} on {list(inputs)}")
        try:
            result = _run_to_completion(self.eval_block(block, inputs, ctx))
        except RecursionError:
            raise EvaluationError.recursion_limit() from None
        logger.debug(f"Evaluated {block.label} => {result} in {ctx.steps} steps")
        return result

    async def evaluate_stepped(
        self,
        block: Block,
        inputs: Sequence[int],
        on_step: Optional[StepCallback] = None,
        options: Optional[EvalOptions] = None,
    ) -> int:
        """
        Evaluate a tree, awaiting on_step(block, result) after each block.

        Args:
            block: Root of the tree to evaluate
            inputs: Input vector
            on_step: Awaitable callback run after every block completes
            options: Evaluation options

        Returns:
            The numeric result

        Raises:
            EvaluationError: If the tree cannot be evaluated
            Halted: If on_step raised it; nothing is returned in that case
        """
        ctx = EvalContext(evaluator=self, options=options or EvalOptions(), on_step=on_step)
        try:
            return await self.eval_block(block, inputs, ctx)
        except RecursionError:
            raise EvaluationError.recursion_limit() from None

    #---------------------------------------------------------------------------
    # Block Dispatch
    #---------------------------------------------------------------------------

    async def eval_block(self, block: Block, inputs: Sequence[int], ctx: EvalContext) -> int:
        """Evaluate one block via its registry rule, then notify"""
        config = self._registry.lookup(block.type)
        if config is None:
            raise EvaluationError.unknown_block_type(block.type.value)

        args: List[int] = list(inputs)
        result = await config.evaluate(block, args, ctx)
        ctx.steps += 1

        if ctx.options.trace:
            block.latest_input = args
            block.latest_output = result

        if ctx.on_step is not None:
            await ctx.on_step(block, result)

        return result


def _run_to_completion(coro: Coroutine[Any, Any, int]) -> int:
    """Drive a coroutine that is known never to suspend"""
    try:
        coro.send(None)
    except StopIteration as stop:
        return stop.value
    coro.close()
    raise RuntimeError("Direct evaluation suspended; use evaluate_stepped instead")


#==============================================================================
# Convenience Functions
#==============================================================================

def evaluate(block: Block, inputs: Sequence[int], options: Optional[EvalOptions] = None) -> int:
    """Evaluate a tree with the default block registry"""
    return Evaluator().evaluate(block, inputs, options)


async def evaluate_stepped(
    block: Block,
    inputs: Sequence[int],
    on_step: Optional[StepCallback] = None,
    options: Optional[EvalOptions] = None,
) -> int:
    """Evaluate a tree step by step with the default block registry"""
    return await Evaluator().evaluate_stepped(block, inputs, on_step, options)
