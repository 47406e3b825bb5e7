"""Shared pytest fixtures and step implementations."""

import asyncio
import logging
from collections.abc import Callable, Generator, Sequence
from typing import Any

import pytest
from structlog.testing import CapturingLoggerFactory

from stepflow.config import reset_runner_config
from stepflow.logging import configure_logging, reset_logging
from stepflow.terminator import Terminator
from stepflow.waterfall import run


@pytest.fixture(autouse=True)
def reset_stepflow() -> Generator[None, None, None]:
    """Fresh config and logging for every test, with log output captured."""
    reset_runner_config()
    reset_logging()
    configure_logging(
        json_format=False,
        level=logging.DEBUG,
        logger_factory=CapturingLoggerFactory(),
    )
    yield
    reset_runner_config()
    reset_logging()


# =============================================================================
# Shared Step Implementations
# =============================================================================


def sync_step(*values: Any) -> Callable[..., None]:
    """A step that completes in the same turn with fixed results."""

    def step(*args: Any) -> None:
        done = args[-1]
        done(None, *values)

    return step


def later_step(delay: float, *values: Any) -> Callable[..., asyncio.TimerHandle]:
    """A step that completes after ``delay`` seconds and can be cancelled."""

    def step(*args: Any) -> asyncio.TimerHandle:
        done = args[-1]
        return asyncio.get_running_loop().call_later(delay, done, None, *values)

    return step


def failing_step(error: Any) -> Callable[..., None]:
    """A step that reports ``error`` in the same turn."""

    def step(*args: Any) -> None:
        done = args[-1]
        done(error)

    return step


# =============================================================================
# Run Driver
# =============================================================================


class Outcome:
    """Everything observed while driving one run."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.terminator: Terminator | None = None

    @property
    def only_call(self) -> tuple[Any, ...]:
        assert len(self.calls) == 1, f"expected one final callback, got {self.calls}"
        return self.calls[0]


@pytest.fixture
def drive() -> Callable[..., Outcome]:
    """Run steps on a fresh event loop until the final callback fires.

    The loop keeps running for ``settle`` seconds afterwards so stray or
    duplicate completions get a chance to show up.
    """

    def _drive(steps: Sequence[Any], *, settle: float = 0.05, timeout: float = 2.0) -> Outcome:
        outcome = Outcome()

        async def scenario() -> None:
            finished = asyncio.Event()

            def callback(*args: Any) -> None:
                outcome.calls.append(args)
                finished.set()

            outcome.terminator = run(steps, callback)
            await asyncio.wait_for(finished.wait(), timeout=timeout)
            await asyncio.sleep(settle)

        asyncio.run(scenario())
        return outcome

    return _drive
