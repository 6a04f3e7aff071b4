"""Source normalization — one shape for everything a cursor can read.

A *source* is where a cursor's values come from. Three shapes are
accepted:

- **static**: an iterable, re-iterated from the start on every lap
  (``Cursor([1, 2, 3])``)
- **factory**: a zero-argument callable returning a fresh iterable per
  lap (``Cursor(read_lines)``, typically a generator function)
- **cursor**: another cursor; each lap reads a fresh single-pass view of
  it, so the other cursor's own position is never touched

Async cursors additionally accept async iterables and factories that
return them, and resolve awaitable values as they are pulled.

The shape is resolved once, eagerly, into a ``Source``. Everything past
construction only ever sees the normalized producer factory.

A generator *object* passed as a static source is single-use: once it
runs dry, every later lap is empty. Pass the generator *function*
instead when the cursor needs to restart.

Coroutine objects inside a static source are single-use too: the second
lap awaits them again and Python raises ``RuntimeError``. Use Futures or
Tasks (which can be awaited any number of times), or a factory that
builds fresh coroutines per lap.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from lapwing._internal.types import AsyncProducer, AsyncProducerFactory, Producer, ProducerFactory
from lapwing.errors import SourceError


class SourceKind(Enum):
    """The shape a source was given in."""

    STATIC = "static"
    FACTORY = "factory"
    CURSOR = "cursor"


@dataclass(frozen=True, slots=True)
class Source:
    """A source with its shape resolved.

    Build with ``Source.of()``; ``factory`` then yields a fresh iterable
    on every call regardless of the shape it was given in.
    """

    kind: SourceKind
    payload: Any

    @classmethod
    def of(cls, obj: object, *, allow_async: bool = False) -> Source:
        """Resolve the shape of ``obj``.

        Raises ``SourceError`` when ``obj`` is none of the accepted shapes.
        """
        from lapwing.async_cursor import AsyncCursor
        from lapwing.cursor import Cursor

        if isinstance(obj, Cursor):
            return cls(SourceKind.CURSOR, obj)
        if isinstance(obj, AsyncCursor):
            if not allow_async:
                raise SourceError(obj, "An AsyncCursor cannot be read by a sync Cursor")
            return cls(SourceKind.CURSOR, obj)
        if isinstance(obj, Iterable) or (allow_async and isinstance(obj, AsyncIterable)):
            return cls(SourceKind.STATIC, obj)
        if isinstance(obj, AsyncIterable):
            raise SourceError(obj, f"{type(obj).__name__!r} is async; use AsyncCursor")
        if callable(obj):
            return cls(SourceKind.FACTORY, obj)
        raise SourceError(obj)

    @property
    def factory(self) -> Callable[[], Any]:
        """Zero-argument callable returning a fresh iterable per call."""
        match self.kind:
            case SourceKind.STATIC:
                payload = self.payload
                return lambda: payload
            case SourceKind.CURSOR:
                return self.payload.single_pass
            case SourceKind.FACTORY:
                return self.payload


def from_source(obj: object) -> ProducerFactory:
    """Normalize a sync source into a producer factory.

    ::

        produce = from_source([1, 2, 3])
        list(produce())  # [1, 2, 3]
        list(produce())  # [1, 2, 3]
    """
    generate = Source.of(obj).factory

    def produce() -> Producer:
        iterable = generate()
        if not isinstance(iterable, Iterable):
            raise SourceError(
                iterable,
                f"Source factory returned {type(iterable).__name__!r}, expected an iterable",
            )
        return iter(iterable)

    return produce


def from_async_source(obj: object) -> AsyncProducerFactory:
    """Normalize a sync or async source into a producer factory.

    The producer is either a sync or an async iterator; ``AsyncCursor``
    pulls from both.
    """
    generate = Source.of(obj, allow_async=True).factory

    def produce() -> AsyncProducer:
        iterable = generate()
        if isinstance(iterable, AsyncIterable):
            return aiter(iterable)
        if isinstance(iterable, Iterable):
            return iter(iterable)
        raise SourceError(
            iterable,
            f"Source factory returned {type(iterable).__name__!r}, expected an iterable",
        )

    return produce
