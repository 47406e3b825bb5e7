"""
Run state and RunStatus enum.

A RunState is created fresh for every call to ``run`` and is shared only
between that run's continuation chain and its terminator. RunStatus tracks
where the run sits in its lifecycle:

    IDLE -> STEP_ACTIVE -> ... -> SUCCEEDED | FAILED | CANCELED

The status is bookkeeping alongside ``index`` and ``jobs``. Once it is
complete, further step completions are ignored.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from stepflow.errors import InvalidStateTransitionError


def _generate_run_id() -> str:
    """Generate a unique run ID using ULID."""
    import ulid

    return str(ulid.new())


class RunStatus(Enum):
    """
    Lifecycle status of a run.

    Each value is a tuple of (name, complete).
    """

    # Created, no step started yet
    IDLE = ("IDLE", False)

    # A step has been invoked and its completion is outstanding
    STEP_ACTIVE = ("STEP_ACTIVE", False)

    # Every step succeeded and the final callback received the results
    SUCCEEDED = ("SUCCEEDED", True)

    # A step reported an error
    FAILED = ("FAILED", True)

    # The terminator stopped the run
    CANCELED = ("CANCELED", True)

    def __init__(self, name: str, complete: bool) -> None:
        self._name = name
        self._complete = complete

    @property
    def is_complete(self) -> bool:
        """Returns True for SUCCEEDED, FAILED and CANCELED."""
        return self._complete

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"RunStatus.{self.name}"


VALID_TRANSITIONS: dict[RunStatus, frozenset[RunStatus]] = {
    RunStatus.IDLE: frozenset(
        {RunStatus.STEP_ACTIVE, RunStatus.SUCCEEDED, RunStatus.CANCELED}
    ),
    RunStatus.STEP_ACTIVE: frozenset(
        {
            RunStatus.STEP_ACTIVE,
            RunStatus.SUCCEEDED,
            RunStatus.FAILED,
            RunStatus.CANCELED,
        }
    ),
    RunStatus.SUCCEEDED: frozenset(),
    RunStatus.FAILED: frozenset(),
    RunStatus.CANCELED: frozenset(),
}


def can_transition(current: RunStatus, target: RunStatus) -> bool:
    """Check whether a run may move from ``current`` to ``target``."""
    return target in VALID_TRANSITIONS[current]


def validate_transition(current: RunStatus, target: RunStatus) -> None:
    """
    Raise if the transition is not allowed.

    Raises:
        InvalidStateTransitionError: If ``target`` is not reachable from ``current``
    """
    if not can_transition(current, target):
        raise InvalidStateTransitionError(
            f"Cannot transition run from {current} to {target}",
            current=current,
            target=target,
        )


@dataclass
class RunState:
    """
    Mutable state owned by a single run.

    Attributes:
        index: Position of the current step, never exceeds ``size``
        size: Number of steps, fixed when the run starts
        jobs: Step index -> cancellation callable (or None) for active steps
        run_id: Unique identifier used in log events
        status: Current lifecycle status
        error: Error reported by the failing step, if any
        logger: Logger bound with this run's context
    """

    size: int
    index: int = 0
    jobs: dict[int, Callable[[], Any] | None] = field(default_factory=dict)
    run_id: str = field(default_factory=_generate_run_id)
    status: RunStatus = RunStatus.IDLE
    error: Any = None
    logger: Any = field(default=None, repr=False, compare=False)

    def transition(self, target: RunStatus) -> None:
        """Move to ``target``, validating against VALID_TRANSITIONS."""
        validate_transition(self.status, target)
        self.status = target

    @property
    def active(self) -> bool:
        """True while at least one step is being tracked."""
        return bool(self.jobs)
