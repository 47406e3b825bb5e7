"""
Coroutine adapters for the step runner.

``coroutine_step`` lets an ``async def`` function take part in a run, and
``run_async`` lets a coroutine await a whole run:

    @coroutine_step
    async def fetch(url):
        return await client.get(url)

    results = await run_async([fetch_url, fetch, parse])
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from stepflow.errors import RunCanceledError, SchedulingError, StepFailedError
from stepflow.terminator import Terminator
from stepflow.waterfall import Step, run


def coroutine_step(fn: Callable[..., Awaitable[Any]]) -> Step:
    """
    Turn an async function into a callback-style step.

    The coroutine runs as an ``asyncio.Task``, which is also returned as
    the step's cancellation handle. A returned tuple is spread into several
    results, None forwards no results and any other value is forwarded as a
    single result. A raised exception becomes the step's error, and a task
    cancelled by anything other than the run's terminator fails the step
    with ``asyncio.CancelledError``.
    """

    @functools.wraps(fn)
    def step(*args: Any) -> asyncio.Task[Any]:
        *inputs, done = args
        task = asyncio.ensure_future(fn(*inputs))

        def on_task_done(fut: asyncio.Future[Any]) -> None:
            # After termination the run has stopped tracking this step and
            # drops the completion
            if fut.cancelled():
                done(asyncio.CancelledError())
                return
            error = fut.exception()
            if error is not None:
                done(error)
                return
            result = fut.result()
            if result is None:
                done(None)
            elif isinstance(result, tuple):
                done(None, *result)
            else:
                done(None, result)

        task.add_done_callback(on_task_done)
        return task

    return step


async def run_async(
    steps: Sequence[Step],
    *,
    name: str | None = None,
    started: Callable[[Terminator], Any] | None = None,
) -> tuple[Any, ...]:
    """
    Run ``steps`` and wait for the outcome.

    ``started`` receives the run's terminator as soon as the first step
    has been invoked, for callers that want to stop the run from elsewhere.

    Returns:
        The last step's results as a tuple (empty for an empty list)

    Raises:
        The failing step's exception, or StepFailedError wrapping any
        other error value (including a step's ``asyncio.CancelledError``).
        SchedulingError: If the run finished before ``run`` returned
        RunCanceledError: If the run was terminated from elsewhere
        asyncio.CancelledError: If the awaiting task is cancelled; the run
            is terminated first
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[tuple[Any, ...]] = loop.create_future()
    terminator: Terminator | None = None

    def finish(error: Any = None, *results: Any) -> None:
        if future.done():
            return
        if terminator is None:
            raise SchedulingError("Run finished before its terminator was bound")
        if error:
            # CancelledError from a step must not read as cancelling the waiter
            if isinstance(error, Exception):
                future.set_exception(error)
            else:
                future.set_exception(StepFailedError(error, run_id=terminator.run_id))
        elif terminator.cancelled:
            future.set_exception(
                RunCanceledError(
                    f"Run {terminator.run_id} was terminated", run_id=terminator.run_id
                )
            )
        else:
            future.set_result(results)

    terminator = run(steps, finish, loop=loop, name=name)
    if started is not None:
        started(terminator)

    try:
        return await future
    except asyncio.CancelledError:
        terminator()
        raise
