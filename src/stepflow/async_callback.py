"""
Async-safety wrapper for step completion callbacks.

A step may report completion in the same turn it was started. The wrapper
pushes such calls to a later turn so the runner never re-enters itself
synchronously and chains of synchronous steps do not grow the stack.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from stepflow.defer import defer, resolve_loop


def async_callback(
    callback: Callable[..., Any],
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> Callable[..., None]:
    """
    Wrap ``callback`` so it is never invoked in the turn the wrapper was made.

    Every call to the returned function produces exactly one call to
    ``callback`` with the same positional arguments: deferred while still
    inside the creating turn, immediate afterwards.
    """
    loop = resolve_loop(loop)
    is_async = False

    def mark_async() -> None:
        nonlocal is_async
        is_async = True

    defer(mark_async, loop=loop)

    def wrapped(*args: Any) -> None:
        if is_async:
            callback(*args)
        else:
            defer(callback, *args, loop=loop)

    return wrapped
