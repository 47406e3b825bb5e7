"""
Sequential step runner.

Runs a list of callback-style steps one at a time. Each step receives the
results of the previous one followed by a ``done`` callback:

    def step(*prior_results, done) -> cancel_handle | None

and reports back with ``done(error, *results)``. The first truthy error
stops the run. The final callback receives one of three shapes:

    (None, *results)   every step succeeded
    (error,)           a step failed
    (None,)            the run was terminated

Example:
    def fetch(done):
        handle = loop.call_later(0.1, done, None, 1, 2)
        return handle  # cancelled if the run is terminated

    def add(a, b, done):
        done(None, a + b)

    terminator = run([fetch, add], lambda err, total=None: print(err, total))
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any

from stepflow.abort import abort
from stepflow.async_callback import async_callback
from stepflow.config import get_runner_config
from stepflow.defer import defer, resolve_loop
from stepflow.errors import InvalidStepError
from stepflow.handles import as_cancel_callable
from stepflow.logging import run_logger
from stepflow.state import RunState, RunStatus
from stepflow.terminator import Terminator

Step = Callable[..., Any]


def run(
    steps: Sequence[Step],
    callback: Callable[..., Any],
    *,
    loop: asyncio.AbstractEventLoop | None = None,
    name: str | None = None,
) -> Terminator:
    """
    Run ``steps`` in series, passing each step's results to the next.

    The first step is invoked before this function returns. The final
    callback always fires on a later turn of the event loop.

    Args:
        steps: Ordered steps, may be empty
        callback: Final callback, ``callback(error, *results)``
        loop: Event loop to schedule on (default: the running loop)
        name: Optional run name included in log events

    Returns:
        Terminator that cancels the run when called

    Raises:
        InvalidStepError: If a step is not callable
        NoEventLoopError: If no loop is running and none was given
    """
    loop = resolve_loop(loop)
    steps = list(steps)

    if get_runner_config().validate_steps:
        for position, step in enumerate(steps):
            if not callable(step):
                raise InvalidStepError(
                    f"Step {position} is not callable: {step!r}", position=position
                )

    state = RunState(size=len(steps))
    state.logger = run_logger(state.run_id, name)
    state.logger.debug("run_started", steps=state.size)

    if state.size:
        iterate(steps, state, [], callback, loop=loop)
    else:
        # Nothing to run; still answer on a later turn
        defer(iterate, steps, state, [], callback, loop=loop)

    return Terminator(state, callback, loop)


def iterate(
    steps: Sequence[Step],
    state: RunState,
    args: list[Any],
    callback: Callable[..., Any],
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> None:
    """Invoke the step at ``state.index``, or finalize when none is left."""
    key = state.index
    if state.logger is None:
        state.logger = run_logger(state.run_id)
    log = state.logger

    if key >= state.size:
        state.transition(RunStatus.SUCCEEDED)
        log.info("run_succeeded", steps=state.size, results=len(args))
        callback(None, *args)
        return

    step = steps[key]

    def on_done(error: Any = None, *results: Any) -> None:
        # Late or duplicate completion, or the run was already stopped
        if key not in state.jobs or state.status.is_complete:
            log.debug("late_completion_ignored", step=key, status=str(state.status))
            return

        del state.jobs[key]

        if error:
            state.error = error
            state.transition(RunStatus.FAILED)
            log.info("run_failed", step=key, error=repr(error))
            abort(state)
            callback(error)
            return

        log.debug("step_completed", step=key, results=len(results))

        state.index += 1
        iterate(steps, state, list(results), callback, loop=loop)

    state.transition(RunStatus.STEP_ACTIVE)
    log.debug("step_started", step=key, args=len(args))

    done = async_callback(on_done, loop=loop)
    state.jobs[key] = as_cancel_callable(step(*args, done))


waterfall = run
