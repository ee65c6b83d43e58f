"""Invoke helpers: call sync or async callables uniformly.

Handlers, error handlers, lifecycle hooks, guard callbacks and client
loaders can all be ``def`` or ``async def``. This module keeps the
sync/async check in exactly one place.

Usage::

    from warbler._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
