import inspect
from collections.abc import Callable
from typing import Any


async def notify(callback: Callable[[Any], Any] | None, value: Any) -> None:
    """Call an optional observer with ``value``, awaiting it when it returns an awaitable."""
    if callback is None:
        return
    result = callback(value)
    if inspect.isawaitable(result):
        await result
