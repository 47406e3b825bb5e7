"""Stepflow error hierarchy.

Errors reported by steps are never wrapped by the runner: they reach the
final callback exactly as the step passed them. The classes below cover
the runner's own failure modes.
"""

from __future__ import annotations

from typing import Any


class StepflowError(Exception):
    """Base exception for all Stepflow errors.

    Attributes:
        code: Numeric error code for programmatic handling
        cause: Optional original exception that caused this error
    """

    code: int = 100

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.cause = cause

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.code:
            parts.append(f"(code={self.code})")
        if self.cause:
            parts.append(f"caused by: {self.cause}")
        return " ".join(parts)


class SchedulingError(StepflowError):
    """A deferred call could not be scheduled."""

    code: int = 200


class NoEventLoopError(SchedulingError):
    """Deferral was requested with no running event loop.

    Raised when ``defer`` (or anything built on it) is used outside a
    running asyncio loop and no loop was passed explicitly.
    """

    code: int = 201


class InvalidStepError(StepflowError, TypeError):
    """A step in the list is not callable."""

    code: int = 300

    def __init__(self, message: str, *, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class InvalidStateTransitionError(StepflowError):
    """Raised when a run attempts an illegal status transition."""

    code: int = 400

    def __init__(self, message: str, *, current: Any = None, target: Any = None) -> None:
        super().__init__(message)
        self.current = current
        self.target = target


class RunCanceledError(StepflowError):
    """The run was terminated before it finished.

    Only the awaitable surface raises this. Callback-style runs report
    termination as a bare ``(None)`` completion.
    """

    code: int = 500

    def __init__(self, message: str, *, run_id: str | None = None) -> None:
        super().__init__(message)
        self.run_id = run_id


class StepFailedError(StepflowError):
    """A step reported an error value that is not an exception.

    Callback-style runs hand such values to the final callback untouched.
    The awaitable surface needs something raisable, so it wraps them here.
    """

    code: int = 600

    def __init__(self, error: Any, *, run_id: str | None = None) -> None:
        super().__init__(f"Step failed: {error!r}")
        self.error = error
        self.run_id = run_id
