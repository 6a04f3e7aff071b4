"""Lapwing — lazy, restartable, composable sequences.

A cursor wraps a source and produces its values on demand. When the
source runs dry the cursor starts a new lap, so it can be iterated
again and again. Every transformation returns a new cursor, so they
chain::

    from lapwing import Cursor

    Cursor([1, 2, 3, 4]).filter(lambda n: n % 2).map(str).collect()
    # ['1', '3']

The async twin takes sync or async sources and callbacks::

    from lapwing import AsyncCursor

    async def rows():
        async for row in db.stream(Row, "SELECT * FROM rows"):
            yield row

    await AsyncCursor(rows).find(is_interesting)
"""

import importlib

__version__ = "0.1.0"
__all__ = [
    "SKIP",
    "STOP",
    "AsyncCursor",
    "ConfigurationError",
    "Cursor",
    "CursorOptions",
    "CursorState",
    "LapwingError",
    "Pull",
    "Source",
    "SourceError",
    "SourceKind",
]

# Public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "AsyncCursor": "lapwing.async_cursor",
    "ConfigurationError": "lapwing.errors",
    "Cursor": "lapwing.cursor",
    "CursorOptions": "lapwing.config",
    "CursorState": "lapwing._internal.laps",
    "LapwingError": "lapwing.errors",
    "Pull": "lapwing._internal.laps",
    "SKIP": "lapwing._internal.sentinels",
    "STOP": "lapwing._internal.sentinels",
    "Source": "lapwing.sources",
    "SourceError": "lapwing.errors",
    "SourceKind": "lapwing.sources",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import lapwing`` fast while providing a clean top-level API.
    """
    module_path = _LAZY_IMPORTS.get(name)
    if module_path is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(importlib.import_module(module_path), name)
