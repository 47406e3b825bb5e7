"""
Cancellation handle capability.

A step may return something that stops its pending work. Plain
no-argument callables are accepted as-is. Objects with a ``cancel()``
method (``asyncio.Task``, ``asyncio.Future``, ``asyncio.TimerHandle``,
``concurrent.futures.Future``) are accepted through that method, so a
step can simply return the handle of whatever it scheduled.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CancelHandle(Protocol):
    """Anything that can be told to stop its pending work."""

    def cancel(self) -> Any: ...


def as_cancel_callable(value: Any) -> Callable[[], Any] | None:
    """
    Normalise a step's return value into a no-argument cancel callable.

    Returns:
        ``value.cancel`` for CancelHandle objects, ``value`` itself for
        other callables, and None for everything else.
    """
    if value is None:
        return None
    if isinstance(value, CancelHandle) and callable(value.cancel):
        return value.cancel
    if callable(value):
        return value
    return None
