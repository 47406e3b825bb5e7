"""Deferred execution on the asyncio event loop."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from stepflow.errors import NoEventLoopError


def resolve_loop(loop: asyncio.AbstractEventLoop | None = None) -> asyncio.AbstractEventLoop:
    """
    Return ``loop`` or the running event loop.

    Raises:
        NoEventLoopError: If no loop was given and none is running
    """
    if loop is not None:
        return loop
    try:
        return asyncio.get_running_loop()
    except RuntimeError as e:
        raise NoEventLoopError(
            "defer() needs a running event loop or an explicit loop", cause=e
        ) from e


def defer(
    fn: Callable[..., Any],
    *args: Any,
    loop: asyncio.AbstractEventLoop | None = None,
) -> asyncio.Handle:
    """
    Schedule ``fn(*args)`` for a later turn of the event loop.

    ``fn`` is never called synchronously. Exceptions it raises are routed
    to the loop's exception handler, not to the caller of ``defer``.

    Returns:
        The loop handle, which can be cancelled before it runs
    """
    return resolve_loop(loop).call_soon(fn, *args)
