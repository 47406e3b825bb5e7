"""
Terminator - external cancellation handle for a run.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from stepflow.abort import abort
from stepflow.defer import defer
from stepflow.state import RunStatus

if TYPE_CHECKING:
    import asyncio

    from stepflow.state import RunState


class Terminator:
    """
    Cancels the run it is bound to.

    Calling the terminator while a step is active fast-forwards the run so
    no further step starts, cancels the active step and delivers ``(None)``
    to the final callback on a later turn. Calling it when no step is
    tracked (the run already finished, failed, or was terminated) does
    nothing.

    The bare ``(None)`` completion looks the same as an empty step list
    succeeding. Use ``cancelled`` to tell them apart.
    """

    def __init__(
        self,
        state: RunState,
        callback: Callable[..., Any],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._state = state
        self._callback = callback
        self._loop = loop

    def __call__(self) -> None:
        state = self._state
        if not state.active:
            return

        state.index = state.size
        state.transition(RunStatus.CANCELED)
        if state.logger is not None:
            state.logger.info("run_canceled", step=max(state.jobs))

        abort(state)

        defer(self._callback, None, loop=self._loop)

    @property
    def run_id(self) -> str:
        return self._state.run_id

    @property
    def status(self) -> RunStatus:
        return self._state.status

    @property
    def cancelled(self) -> bool:
        """True if this terminator stopped the run."""
        return self._state.status is RunStatus.CANCELED

    @property
    def done(self) -> bool:
        """True once the run reached SUCCEEDED, FAILED or CANCELED."""
        return self._state.status.is_complete

    @property
    def error(self) -> Any:
        """The error that failed the run, or None."""
        return self._state.error

    @property
    def index(self) -> int:
        return self._state.index

    @property
    def size(self) -> int:
        return self._state.size

    def __repr__(self) -> str:
        return f"Terminator(run_id={self.run_id!r}, status={self.status})"
