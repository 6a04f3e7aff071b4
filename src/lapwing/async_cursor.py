"""AsyncCursor — the suspending twin of ``Cursor``.

Same operations, same restart rules. The differences are where it
suspends:

- pulling awaits the producer, which may be a sync or an async iterator
- awaitable values coming out of the source are resolved before they
  are handed on
- callbacks may be ``def`` or ``async def``; results are awaited when
  awaitable

Usage::

    from lapwing import AsyncCursor

    async def fetch_pages():
        for page in range(3):
            yield await client.get_page(page)

    titles = AsyncCursor(fetch_pages).flat_map(lambda row: row.title)
    await titles.take(10).collect()

A deferred value is awaited on every lap that reaches it. A coroutine
object can only be awaited once, so a static list of coroutines works
for one lap; hold Futures or Tasks there, or pass a factory.

A composed cursor pulls from its parent one value at a time. A single
instance must not be pulled from two tasks at once; clones share no
state and can be consumed concurrently.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

from lapwing._internal.invoke import invoke, resolve
from lapwing._internal.laps import (
    CursorState,
    EmptyLapTracker,
    Outcome,
    Pull,
    classify_filter_map,
    classify_map,
    classify_map_while,
    classify_pipe,
    countdown,
    countup,
)
from lapwing._internal.types import AsyncProducer, AsyncProducerFactory
from lapwing.config import CursorOptions, resolve_options
from lapwing.cursor import Cursor
from lapwing.sources import from_async_source

logger = logging.getLogger("lapwing.async_cursor")


async def _nothing() -> AsyncIterator[Any]:
    return
    yield


class AsyncCursor[T]:
    """Restartable pull-based sequence that may suspend.

    ``source`` is any sync or async iterable, a zero-argument factory
    returning one, or a ``Cursor``/``AsyncCursor``.
    """

    __slots__ = ("_options", "_producer", "_source", "_state")

    def __init__(
        self,
        source: object,
        /,
        *,
        options: CursorOptions | None = None,
        restart: bool | None = None,
    ) -> None:
        self._init(from_async_source(source), resolve_options(options, restart))

    def _init(self, source: AsyncProducerFactory, options: CursorOptions) -> None:
        self._source = source
        self._options = options
        self._producer: AsyncProducer | None = None
        self._state = CursorState.READY

    @classmethod
    def _wrap(cls, source: AsyncProducerFactory, options: CursorOptions) -> AsyncCursor[Any]:
        cursor = cls.__new__(cls)
        cursor._init(source, options)
        return cursor

    @classmethod
    def from_cursor(cls, cursor: Cursor[T]) -> AsyncCursor[T]:
        """Async view over a sync cursor's source, with the same options."""
        return cls(cursor, options=cursor.options)

    def _derive(self, generate: AsyncProducerFactory) -> AsyncCursor[Any]:
        return AsyncCursor._wrap(generate, self._options)

    # ── Protocol ─────────────────────────────────────────────────────────

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def options(self) -> CursorOptions:
        return self._options

    async def pull(self) -> Pull[T]:
        """Pull the next value, suspending on the producer and on deferred values."""
        if self._state is CursorState.EXHAUSTED:
            return Pull(done=True)
        if self._producer is None:
            self._producer = self._source()
        producer = self._producer
        try:
            if isinstance(producer, AsyncIterator):
                value = await anext(producer)
            else:
                value = next(producer)
        except (StopIteration, StopAsyncIteration):
            self._end_lap()
            return Pull(done=True)
        return Pull(done=False, value=await resolve(value))

    def _end_lap(self) -> None:
        if self._options.restart:
            logger.debug("%r exhausted, starting a new lap", self)
            self._producer = self._source()
        else:
            self._producer = None
            self._state = CursorState.EXHAUSTED

    async def reset(self, value: Any = None) -> Pull[Any]:
        """Drop the current lap and rewind. Always reports done."""
        logger.debug("%r reset", self)
        self._producer = self._source()
        self._state = CursorState.READY
        return Pull(done=True, value=value)

    def clone(self) -> AsyncCursor[T]:
        return AsyncCursor._wrap(self._source, self._options)

    def single_pass(self) -> AsyncCursor[T]:
        """Clone that stays exhausted after one lap."""
        return AsyncCursor._wrap(self._source, self._options.with_restart(False))

    def __aiter__(self) -> AsyncCursor[T]:
        return self

    async def __anext__(self) -> T:
        result = await self.pull()
        if result.done:
            raise StopAsyncIteration
        return result.value  # type: ignore[return-value]

    def __repr__(self) -> str:
        name = f"{self._options.name!r}, " if self._options.name else ""
        return f"AsyncCursor({name}state={self._state.value})"

    # ── Termination & position ───────────────────────────────────────────

    async def first(self) -> T | None:
        """First value of a fresh lap, or ``None``. Does not move the receiver."""
        return (await self.single_pass().pull()).value

    async def last(self) -> T | None:
        previous = None
        while True:
            result = await self.pull()
            if result.done:
                return previous
            previous = result.value

    async def size(self) -> int:
        count = 0
        async for _ in self:
            count += 1
        return count

    async def nth(self, index: int) -> T | None:
        if index < 0:
            return None
        position = 0
        async for value in self:
            if position == index:
                return value
            position += 1
        return None

    async def position(self, target: object) -> int:
        index = 0
        async for value in self:
            if value == target:
                return index
            index += 1
        return -1

    async def exists(self, target: object) -> bool:
        return await self.position(target) != -1

    # ── Conditional slicing ──────────────────────────────────────────────

    def take_while(self, predicate: Callable[[T], Any]) -> AsyncCursor[T]:
        """Emit values up to and including the first one failing ``predicate``."""
        return self._take_while(lambda: predicate)

    def _take_while(self, make_predicate: Callable[[], Callable[[Any], Any]]) -> AsyncCursor[T]:
        parent = self.clone()

        async def generate() -> AsyncIterator[T]:
            predicate = make_predicate()
            async for value in parent.single_pass():
                yield value
                if not await invoke(predicate, value):
                    break

        return self._derive(generate)

    def skip_while(self, predicate: Callable[[T], Any]) -> AsyncCursor[T]:
        """Drop the leading values for which ``predicate`` holds."""
        return self._skip_while(lambda: predicate)

    def _skip_while(self, make_predicate: Callable[[], Callable[[Any], Any]]) -> AsyncCursor[T]:
        parent = self.clone()

        async def generate() -> AsyncIterator[T]:
            predicate = make_predicate()
            values = parent.single_pass()
            async for value in values:
                if not await invoke(predicate, value):
                    yield value
                    break
            async for value in values:
                yield value

        return self._derive(generate)

    def take(self, n: int) -> AsyncCursor[T]:
        if n <= 0:
            return self._derive(_nothing)
        return self._take_while(lambda: countdown(n))

    def skip(self, n: int) -> AsyncCursor[T]:
        return self._skip_while(lambda: countup(n))

    # ── Transform family ─────────────────────────────────────────────────

    def _transform(
        self,
        callback: Callable[[T], Any],
        classify: Callable[[Any], Outcome],
    ) -> AsyncCursor[Any]:
        parent = self.clone()

        async def generate() -> AsyncIterator[Any]:
            async for value in parent.single_pass():
                result = await invoke(callback, value)
                outcome = classify(result)
                if outcome is Outcome.STOP:
                    return
                if outcome is Outcome.EMIT:
                    yield result

        return self._derive(generate)

    def pipe[U](self, callback: Callable[[T], Any]) -> AsyncCursor[U]:
        """Map, filter and stop in one callback (see ``Cursor.pipe``)."""
        return self._transform(callback, classify_pipe)

    def map_while[U](self, callback: Callable[[T], Any]) -> AsyncCursor[U]:
        return self._transform(callback, classify_map_while)

    def map[U](self, callback: Callable[[T], Any]) -> AsyncCursor[U]:
        return self._transform(callback, classify_map)

    def filter(self, predicate: Callable[[T], Any]) -> AsyncCursor[T]:
        parent = self.clone()

        async def generate() -> AsyncIterator[T]:
            async for value in parent.single_pass():
                if await invoke(predicate, value):
                    yield value

        return self._derive(generate)

    def filter_map[U](self, callback: Callable[[T], Any]) -> AsyncCursor[U]:
        return self._transform(callback, classify_filter_map)

    # ── Folding & collecting ─────────────────────────────────────────────

    async def fold[A](self, seed: A, combine: Callable[[A, T], Any]) -> A:
        accumulator = seed
        async for value in self:
            accumulator = await invoke(combine, accumulator, value)
        return accumulator

    async def collect(self) -> list[T]:
        return [value async for value in self]

    async def for_each(self, callback: Callable[[T], Any]) -> None:
        async for value in self:
            await invoke(callback, value)

    # ── Search ───────────────────────────────────────────────────────────

    async def find(self, predicate: Callable[[T], Any]) -> T | None:
        return await self.filter(predicate).first()

    async def find_map[U](self, callback: Callable[[T], Any]) -> U | None:
        return await self.filter_map(callback).first()

    async def every(self, predicate: Callable[[T], Any]) -> bool:
        async def fails(value: T) -> bool:
            return not await invoke(predicate, value)

        return (await self.filter(fails).single_pass().pull()).done

    async def some(self, predicate: Callable[[T], Any]) -> bool:
        return not (await self.filter(predicate).single_pass().pull()).done

    # ── Combinators ──────────────────────────────────────────────────────

    def chain(self, other: object) -> AsyncCursor[Any]:
        """All of the receiver's values, then all of ``other``'s.

        ``other`` may be any sync or async source, including a ``Cursor``.
        """
        parent = self.clone()
        other_pass = AsyncCursor._wrap(
            from_async_source(other), self._options.with_restart(False)
        )

        async def generate() -> AsyncIterator[Any]:
            async for value in parent.single_pass():
                yield value
            async for value in other_pass.clone():
                yield value

        return self._derive(generate)

    def cycle(self) -> AsyncCursor[T]:
        """Repeat the receiver's laps until a whole lap comes back empty."""
        parent = self.clone()

        async def generate() -> AsyncIterator[T]:
            laps = AsyncCursor._wrap(parent._source, parent._options.with_restart(True))
            tracker = EmptyLapTracker()
            while True:
                result = await laps.pull()
                if result.done:
                    if tracker.saw_done():
                        return
                    continue
                tracker.saw_value()
                yield result.value  # type: ignore[misc]

        return self._derive(generate)

    def enumerate(self) -> AsyncCursor[tuple[int, T]]:
        parent = self.clone()

        async def generate() -> AsyncIterator[tuple[int, T]]:
            index = 0
            async for value in parent.single_pass():
                yield (index, value)
                index += 1

        return self._derive(generate)

    def flat_map[U](self, callback: Callable[[Any], Any]) -> AsyncCursor[U]:
        """Flatten nested cursors depth-first, applying ``callback`` to leaves.

        Both ``AsyncCursor`` and ``Cursor`` values are descended into, at
        any depth and in any mix.
        Each level of nesting is one level of Python recursion, so depth is
        bounded by ``sys.getrecursionlimit()``.
        """
        parent = self.clone()
        single_pass = self._options.with_restart(False)

        async def descend(cursor: AsyncCursor[Any]) -> AsyncIterator[U]:
            async for value in cursor:
                if isinstance(value, AsyncCursor | Cursor):
                    async for leaf in descend(AsyncCursor(value, options=single_pass)):
                        yield leaf
                else:
                    yield await invoke(callback, value)

        return self._derive(lambda: descend(parent.single_pass()))

    def flat(self) -> AsyncCursor[Any]:
        return self.flat_map(lambda value: value)
