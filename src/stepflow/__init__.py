"""
Stepflow - sequential step runner on the asyncio event loop.

This package runs an ordered list of callback-style steps one at a time:
- Each step's results are passed to the next step
- The first error stops the run and reaches the final callback untouched
- Completions are always observed on a later loop turn than the step call
- A terminator handle cancels the active step from outside
- Coroutine adapters for async functions and awaiting a whole run
"""

__version__ = "0.3.0"

from stepflow.abort import abort
from stepflow.adapters import coroutine_step, run_async
from stepflow.async_callback import async_callback
from stepflow.config import RunnerConfig, get_runner_config, reset_runner_config
from stepflow.defer import defer
from stepflow.errors import (
    InvalidStateTransitionError,
    InvalidStepError,
    NoEventLoopError,
    RunCanceledError,
    SchedulingError,
    StepFailedError,
    StepflowError,
)
from stepflow.handles import CancelHandle, as_cancel_callable
from stepflow.state import RunState, RunStatus
from stepflow.terminator import Terminator
from stepflow.waterfall import iterate, run, waterfall

__all__ = [
    # Runner
    "run",
    "waterfall",
    "iterate",
    "Terminator",
    "RunState",
    "RunStatus",
    # Building blocks
    "defer",
    "abort",
    "async_callback",
    "CancelHandle",
    "as_cancel_callable",
    # Coroutine adapters
    "coroutine_step",
    "run_async",
    # Configuration
    "RunnerConfig",
    "get_runner_config",
    "reset_runner_config",
    # Errors
    "StepflowError",
    "SchedulingError",
    "NoEventLoopError",
    "InvalidStepError",
    "InvalidStateTransitionError",
    "RunCanceledError",
    "StepFailedError",
]
