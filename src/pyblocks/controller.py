"""
pyblocks Step Controller
Cooperative pause / resume / halt / breakpoint control over stepped evaluation

The controller owns the step callback handed to Evaluator.evaluate_stepped.
Each time a block finishes, the callback reports the step, then either
returns (running), parks on an asyncio.Event until resumed (paused), or
raises Halted so every pending evaluation frame unwinds without a result.

Run states:

    IDLE -> RUNNING -> {PAUSED <-> RUNNING} -> COMPLETED | HALTED | ERRORED
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Set

from pyblocks.errors import EvaluationError, Halted
from pyblocks.evaluator import EvalOptions, Evaluator
from pyblocks.types import Block, collect_breakpoints

logger = logging.getLogger(__name__)


#==============================================================================
# Run State and Speed
#==============================================================================

class RunState(str, Enum):
    """Lifecycle of one controlled evaluation"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    HALTED = "halted"
    ERRORED = "errored"


class Speed(str, Enum):
    """Auto-play speed between steps"""
    INSTANT = "instant"
    FAST = "fast"
    SLOW = "slow"


DEFAULT_DELAYS: Dict[Speed, float] = {
    Speed.SLOW: 0.5,
    Speed.FAST: 0.1,
    Speed.INSTANT: 0.0,
}


#==============================================================================
# Controller Options and Events
#==============================================================================

@dataclass
class ControllerOptions:
    """
    Options for the step controller.

    Attributes:
        delays: Seconds to wait after each step, per speed
        eval_options: Options for the underlying evaluation (trace is on so
            that latest_input / latest_output are available to listeners)
    """
    delays: Dict[Speed, float] = field(default_factory=lambda: dict(DEFAULT_DELAYS))
    eval_options: EvalOptions = field(default_factory=lambda: EvalOptions(trace=True))


@dataclass(frozen=True)
class StepEvent:
    """One block completion reported during a controlled run"""
    index: int
    block: Block
    result: int

    @property
    def block_id(self) -> str:
        return self.block.id


StepListener = Callable[[StepEvent], None]
CompletionListener = Callable[[int], None]
StateListener = Callable[[RunState], None]


#==============================================================================
# Step Controller
#==============================================================================

class StepController:
    """
    Drives one stepped evaluation at a time.

    start() is a coroutine; pause(), resume(), halt(), single_step() and the
    breakpoint setters are plain methods meant to be called from other tasks
    on the same event loop while start() is pending.
    """

    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        options: Optional[ControllerOptions] = None,
        on_step: Optional[StepListener] = None,
        on_complete: Optional[CompletionListener] = None,
        on_state_change: Optional[StateListener] = None,
    ):
        self._evaluator = evaluator or Evaluator()
        self._options = options or ControllerOptions()
        self._step_listeners: List[StepListener] = [on_step] if on_step else []
        self._complete_listeners: List[CompletionListener] = [on_complete] if on_complete else []
        self._state_listeners: List[StateListener] = [on_state_change] if on_state_change else []

        self._state = RunState.IDLE
        self._speed = Speed.INSTANT
        self._breakpoints: Set[str] = set()
        self._tree_breakpoints: Set[str] = set()
        self._ignore_breakpoints = False
        self._pause_at_next_step = False
        self._halted = False
        self._resume_event: Optional[asyncio.Event] = None

        self._steps = 0
        self._result: Optional[int] = None
        self._error: Optional[EvaluationError] = None
        self._highlighted_block_id: Optional[str] = None

    #---------------------------------------------------------------------------
    # Inspection
    #---------------------------------------------------------------------------

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        """True while a run is in progress (running or paused)"""
        return self._state in (RunState.RUNNING, RunState.PAUSED)

    @property
    def speed(self) -> Speed:
        return self._speed

    @property
    def steps(self) -> int:
        """Number of step notifications delivered in the current/last run"""
        return self._steps

    @property
    def result(self) -> Optional[int]:
        return self._result

    @property
    def error(self) -> Optional[EvaluationError]:
        return self._error

    @property
    def highlighted_block_id(self) -> Optional[str]:
        """Id of the block that completed most recently in a live run"""
        return self._highlighted_block_id

    @property
    def breakpoints(self) -> Set[str]:
        """Explicit breakpoints plus the tree flags collected at the last start()"""
        return self._breakpoints | self._tree_breakpoints

    #---------------------------------------------------------------------------
    # Listeners
    #---------------------------------------------------------------------------

    def add_step_listener(self, listener: StepListener) -> None:
        self._step_listeners.append(listener)

    def add_completion_listener(self, listener: CompletionListener) -> None:
        self._complete_listeners.append(listener)

    def add_state_listener(self, listener: StateListener) -> None:
        self._state_listeners.append(listener)

    def _set_state(self, state: RunState) -> None:
        if state == self._state:
            return
        logger.debug(f"Run state {self._state.value} -> {state.value}")
        self._state = state
        for listener in self._state_listeners:
            listener(state)

    #---------------------------------------------------------------------------
    # Run
    #---------------------------------------------------------------------------

    async def start(
        self,
        root: Block,
        inputs: Sequence[int],
        speed: Optional[Speed] = None,
    ) -> Optional[int]:
        """
        Evaluate root on inputs under step control.

        The tree's breakpoint flags are re-read on every start, so flags
        cleared between runs no longer pause. Ids added with set_breakpoint()
        are kept across runs.

        Args:
            root: Tree to evaluate
            inputs: Input vector
            speed: Auto-play speed (keeps the current speed when omitted)

        Returns:
            The result, or None if the run was halted

        Raises:
            EvaluationError: If the tree cannot be evaluated
            RuntimeError: If a run is already in progress
        """
        if self.is_running:
            raise RuntimeError("An evaluation is already in progress")

        if speed is not None:
            self._speed = speed
        self._halted = False
        self._steps = 0
        self._result = None
        self._error = None
        self._tree_breakpoints = collect_breakpoints(root)
        self._resume_event = asyncio.Event()
        self._set_state(RunState.RUNNING)

        try:
            result = await self._evaluator.evaluate_stepped(
                root, inputs, self._on_step, self._options.eval_options
            )
        except Halted:
            logger.debug(f"Run halted after {self._steps} steps")
            self._set_state(RunState.HALTED)
            return None
        except asyncio.CancelledError:
            self._set_state(RunState.HALTED)
            raise
        except EvaluationError as e:
            self._error = e
            self._set_state(RunState.ERRORED)
            raise
        except Exception:
            self._set_state(RunState.ERRORED)
            raise
        finally:
            self._highlighted_block_id = None
            self._ignore_breakpoints = False
            self._pause_at_next_step = False

        self._result = result
        self._set_state(RunState.COMPLETED)
        for listener in self._complete_listeners:
            listener(result)
        return result

    async def _on_step(self, block: Block, result: int) -> None:
        """Step callback: report, then pause, delay or halt as requested"""
        if self._halted:
            raise Halted()

        self._steps += 1
        self._highlighted_block_id = block.id
        event = StepEvent(index=self._steps, block=block, result=result)
        for listener in self._step_listeners:
            listener(event)

        at_breakpoint = (
            block.id in self._breakpoints or block.id in self._tree_breakpoints
        ) and not self._ignore_breakpoints
        if at_breakpoint or self._pause_at_next_step:
            if at_breakpoint:
                logger.debug(f"Breakpoint hit at {block.label} ({block.id})")
            self._pause_at_next_step = False
            self._resume_event.clear()
            self._set_state(RunState.PAUSED)
            await self._resume_event.wait()
            if self._halted:
                raise Halted()

        # Yield even at instant speed so halt() and pause() get a chance to run
        await asyncio.sleep(self._options.delays.get(self._speed, 0.0))
        if self._halted:
            raise Halted()

    #---------------------------------------------------------------------------
    # Control
    #---------------------------------------------------------------------------

    def pause(self) -> None:
        """Pause after the next block completes"""
        if self._state == RunState.RUNNING:
            self._pause_at_next_step = True

    def resume(self) -> None:
        """Continue a paused run"""
        if self._state != RunState.PAUSED:
            return
        self._set_state(RunState.RUNNING)
        self._resume_event.set()

    def halt(self) -> None:
        """
        Abort the current run at the next step boundary.

        A pending pause is released so the Halted condition can unwind the
        evaluation immediately.
        """
        if not self.is_running:
            return
        logger.debug("Halt requested")
        self._halted = True
        self._pause_at_next_step = False
        self._resume_event.set()

    def single_step(self) -> None:
        """
        Pause after exactly one more block completes.

        When no run is active the request is kept, so the next start()
        pauses after its first step.
        """
        self._pause_at_next_step = True
        if self._state == RunState.PAUSED:
            self._set_state(RunState.RUNNING)
            self._resume_event.set()

    def set_breakpoint(self, block_id: str, enabled: bool) -> None:
        if enabled:
            self._breakpoints.add(block_id)
        else:
            self._breakpoints.discard(block_id)

    def set_ignore_breakpoints(self, ignore: bool) -> None:
        """Ignore breakpoints for the rest of the current run"""
        self._ignore_breakpoints = ignore

    def set_speed(self, speed: Speed) -> None:
        self._speed = speed
