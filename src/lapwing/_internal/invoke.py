"""Invoke helpers — call sync or async callbacks uniformly.

``AsyncCursor`` callbacks can be ``def`` or ``async def``. Any code that
calls a user-provided callback must handle both cases. This module keeps
the sync/async check in exactly one place.

Usage::

    from lapwing._internal.invoke import invoke, resolve

    keep = await invoke(predicate, value)
"""

import inspect
from typing import Any


async def resolve(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as-is."""
    if inspect.isawaitable(value):
        value = await value
    return value


async def invoke(callback: Any, *args: Any) -> Any:
    """Call a callback and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returns immediately, no await needed
        cursor.filter(lambda n: n % 2 == 0)

        # async: returns a coroutine, awaited automatically
        async def is_active(user):
            return await lookup(user.id)

        cursor.filter(is_active)
    """
    return await resolve(callback(*args))
