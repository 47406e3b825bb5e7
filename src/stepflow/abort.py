"""Cancellation of a run's active steps."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stepflow.state import RunState

logger = logging.getLogger(__name__)


def abort(state: RunState) -> None:
    """
    Invoke the cancellation handle of every tracked step, then clear tracking.

    Fire-and-forget: the handles are told to stop, nothing waits for them.
    A handle that raises stops the sweep and the exception propagates, but
    ``state.jobs`` is still cleared. ``index`` and ``size`` are untouched.
    """
    if not state.jobs:
        return

    logger.debug("Aborting %d active step(s) of run %s", len(state.jobs), state.run_id)

    try:
        for key, handle in list(state.jobs.items()):
            if callable(handle):
                logger.debug("Canceling step %d of run %s", key, state.run_id)
                handle()
    finally:
        state.jobs.clear()
