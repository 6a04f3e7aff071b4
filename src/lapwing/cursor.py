"""Cursor — a lazy sequence that restarts and composes.

A ``Cursor`` pulls values from its source one at a time. Nothing runs
until a value is requested, and once the source runs dry the cursor
quietly starts a new lap, so the same cursor can be iterated again::

    from lapwing import Cursor

    def numbers():
        yield from range(10)

    evens = Cursor(numbers).filter(lambda n: n % 2 == 0).map(str)
    evens.take(3).collect()  # ['0', '2', '4']
    evens.take(3).collect()  # ['0', '2', '4'] (a new lap, not an empty one)

Transformations (``map``, ``filter``, ``take`` ...) return a new cursor
over a clone of the receiver. The receiver itself is never advanced by
them.

Terminal operations pull values:

- ``first``, ``find``, ``find_map``, ``every``, ``some`` read a fresh
  view and leave the receiver where it was
- ``last``, ``size``, ``collect``, ``fold``, ``for_each`` drain the
  receiver from its current position
- ``nth``, ``position``, ``exists`` pull the receiver until they have
  an answer, leaving it part-way through a lap

A ``for`` loop that breaks early leaves the cursor where the loop
stopped; call ``reset()`` to rewind.

Callback errors are not caught. They propagate out of the pull that
triggered them and leave the cursor mid-lap; ``reset()`` it (or drop
it) before using it again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

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
from lapwing._internal.types import ProducerFactory
from lapwing.config import CursorOptions, resolve_options
from lapwing.sources import from_source

logger = logging.getLogger("lapwing.cursor")


def _identity(value: Any) -> Any:
    return value


class Cursor[T]:
    """Restartable pull-based sequence.

    ``source`` is an iterable, a zero-argument factory returning one, or
    another ``Cursor``. ``restart=False`` (or ``CursorOptions``) keeps the
    cursor exhausted after its lap instead of starting a new one.
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
        self._init(from_source(source), resolve_options(options, restart))

    def _init(self, source: ProducerFactory, options: CursorOptions) -> None:
        self._source = source
        self._options = options
        self._producer: Iterator[T] | None = None
        self._state = CursorState.READY

    @classmethod
    def _wrap(cls, source: ProducerFactory, options: CursorOptions) -> Cursor[Any]:
        """Build a cursor around an already-normalized producer factory."""
        cursor = cls.__new__(cls)
        cursor._init(source, options)
        return cursor

    def _derive(self, generate: ProducerFactory) -> Cursor[Any]:
        return Cursor._wrap(generate, self._options)

    # ── Protocol ─────────────────────────────────────────────────────────

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def options(self) -> CursorOptions:
        return self._options

    def pull(self) -> Pull[T]:
        """Pull the next value.

        Returns ``Pull(done=True)`` exactly once per lap. With auto-restart
        on, the next pull starts a new lap from the source.
        """
        if self._state is CursorState.EXHAUSTED:
            return Pull(done=True)
        if self._producer is None:
            self._producer = self._source()
        try:
            value = next(self._producer)
        except StopIteration:
            self._end_lap()
            return Pull(done=True)
        return Pull(done=False, value=value)

    def _end_lap(self) -> None:
        if self._options.restart:
            logger.debug("%r exhausted, starting a new lap", self)
            self._producer = self._source()
        else:
            self._producer = None
            self._state = CursorState.EXHAUSTED

    def reset(self, value: Any = None) -> Pull[Any]:
        """Drop the current lap and rewind to the start of the source.

        Always reports done: it means "stop consuming me", not "here is
        a value".
        """
        logger.debug("%r reset", self)
        self._producer = self._source()
        self._state = CursorState.READY
        return Pull(done=True, value=value)

    def clone(self) -> Cursor[T]:
        """New cursor over the same source with its own position."""
        return Cursor._wrap(self._source, self._options)

    def single_pass(self) -> Cursor[T]:
        """Clone that stays exhausted after one lap."""
        return Cursor._wrap(self._source, self._options.with_restart(False))

    def __iter__(self) -> Cursor[T]:
        return self

    def __next__(self) -> T:
        result = self.pull()
        if result.done:
            raise StopIteration
        return result.value  # type: ignore[return-value]

    def __repr__(self) -> str:
        name = f"{self._options.name!r}, " if self._options.name else ""
        return f"Cursor({name}state={self._state.value})"

    # ── Termination & position ───────────────────────────────────────────

    def first(self) -> T | None:
        """First value of a fresh lap, or ``None``. Does not move the receiver."""
        return self.single_pass().pull().value

    def last(self) -> T | None:
        """Drain the receiver and return the last value seen, or ``None``."""
        previous = None
        while True:
            result = self.pull()
            if result.done:
                return previous
            previous = result.value

    def size(self) -> int:
        """Drain the receiver, counting the values left in the lap."""
        count = 0
        for _ in self:
            count += 1
        return count

    def nth(self, index: int) -> T | None:
        """Pull the receiver up to ``index`` and return that value, or ``None``."""
        if index < 0:
            return None
        for position, value in enumerate(self):
            if position == index:
                return value
        return None

    def position(self, target: object) -> int:
        """Zero-based index of the first value equal to ``target``, or -1."""
        for index, value in enumerate(self):
            if value == target:
                return index
        return -1

    def exists(self, target: object) -> bool:
        """Pull the receiver until a value equals ``target``."""
        return self.position(target) != -1

    # ── Conditional slicing ──────────────────────────────────────────────

    def take_while(self, predicate: Callable[[T], object]) -> Cursor[T]:
        """Emit values up to and including the first one failing ``predicate``.

        Each value is emitted *before* it is tested, so the boundary value
        is part of the result::

            Cursor([1, 2, 3]).take_while(lambda n: n < 2).collect()  # [1, 2]
        """
        return self._take_while(lambda: predicate)

    def _take_while(self, make_predicate: Callable[[], Callable[[Any], object]]) -> Cursor[T]:
        parent = self.clone()

        def generate() -> Iterator[T]:
            predicate = make_predicate()
            for value in parent.single_pass():
                yield value
                if not predicate(value):
                    break

        return self._derive(generate)

    def skip_while(self, predicate: Callable[[T], object]) -> Cursor[T]:
        """Drop the leading values for which ``predicate`` holds.

        The predicate is not consulted again once it has failed.
        """
        return self._skip_while(lambda: predicate)

    def _skip_while(self, make_predicate: Callable[[], Callable[[Any], object]]) -> Cursor[T]:
        parent = self.clone()

        def generate() -> Iterator[T]:
            predicate = make_predicate()
            values = parent.single_pass()
            for value in values:
                if not predicate(value):
                    yield value
                    break
            yield from values

        return self._derive(generate)

    def take(self, n: int) -> Cursor[T]:
        """First ``n`` values. The counter starts over on every lap."""
        if n <= 0:
            return self._derive(lambda: iter(()))
        return self._take_while(lambda: countdown(n))

    def skip(self, n: int) -> Cursor[T]:
        """Everything after the first ``n`` values."""
        return self._skip_while(lambda: countup(n))

    # ── Transform family ─────────────────────────────────────────────────

    def _transform(
        self,
        callback: Callable[[T], Any],
        classify: Callable[[Any], Outcome],
    ) -> Cursor[Any]:
        parent = self.clone()

        def generate() -> Iterator[Any]:
            for value in parent.single_pass():
                result = callback(value)
                outcome = classify(result)
                if outcome is Outcome.STOP:
                    return
                if outcome is Outcome.EMIT:
                    yield result

        return self._derive(generate)

    def pipe[U](self, callback: Callable[[T], Any]) -> Cursor[U]:
        """Map, filter and stop in one callback.

        Return a value to emit it, ``None``/``SKIP`` to drop the element,
        or ``STOP`` to end the sequence::

            Cursor(lines).pipe(lambda s: STOP if s == "END" else (s.strip() or SKIP))
        """
        return self._transform(callback, classify_pipe)

    def map_while[U](self, callback: Callable[[T], U | None]) -> Cursor[U]:
        """Map values until ``callback`` returns ``None``; that value is not emitted."""
        return self._transform(callback, classify_map_while)

    def map[U](self, callback: Callable[[T], U]) -> Cursor[U]:
        return self._transform(callback, classify_map)

    def filter(self, predicate: Callable[[T], object]) -> Cursor[T]:
        parent = self.clone()

        def generate() -> Iterator[T]:
            for value in parent.single_pass():
                if predicate(value):
                    yield value

        return self._derive(generate)

    def filter_map[U](self, callback: Callable[[T], U | None]) -> Cursor[U]:
        """Map values, dropping results that are ``None``."""
        return self._transform(callback, classify_filter_map)

    # ── Folding & collecting ─────────────────────────────────────────────

    def fold[A](self, seed: A, combine: Callable[[A, T], A]) -> A:
        accumulator = seed
        for value in self:
            accumulator = combine(accumulator, value)
        return accumulator

    def collect(self) -> list[T]:
        """Drain the receiver into a list, in pull order."""
        return list(self)

    def for_each(self, callback: Callable[[T], object]) -> None:
        for value in self:
            callback(value)

    # ── Search ───────────────────────────────────────────────────────────

    def find(self, predicate: Callable[[T], object]) -> T | None:
        """First value matching ``predicate``, or ``None``.

        Stops testing values as soon as one matches.
        """
        return self.filter(predicate).first()

    def find_map[U](self, callback: Callable[[T], U | None]) -> U | None:
        """First result of ``callback`` that is not ``None``."""
        return self.filter_map(callback).first()

    def every(self, predicate: Callable[[T], object]) -> bool:
        """True when no value fails ``predicate`` (vacuously true when empty)."""
        return self.filter(lambda value: not predicate(value)).single_pass().pull().done

    def some(self, predicate: Callable[[T], object]) -> bool:
        """True when at least one value matches ``predicate``."""
        return not self.filter(predicate).single_pass().pull().done

    # ── Combinators ──────────────────────────────────────────────────────

    def chain(self, other: object) -> Cursor[Any]:
        """All of the receiver's values, then all of ``other``'s.

        ``other`` is any sync source: an iterable, a factory or a cursor.
        """
        parent = self.clone()
        produce_other = from_source(other)

        def generate() -> Iterator[Any]:
            yield from parent.single_pass()
            yield from produce_other()

        return self._derive(generate)

    def cycle(self) -> Cursor[T]:
        """Repeat the receiver's laps forever.

        Ends only if a whole lap goes by without a value, so an empty
        source yields nothing instead of spinning.
        """
        parent = self.clone()

        def generate() -> Iterator[T]:
            laps = Cursor._wrap(parent._source, parent._options.with_restart(True))
            tracker = EmptyLapTracker()
            while True:
                result = laps.pull()
                if result.done:
                    if tracker.saw_done():
                        return
                    continue
                tracker.saw_value()
                yield result.value  # type: ignore[misc]

        return self._derive(generate)

    def enumerate(self) -> Cursor[tuple[int, T]]:
        """Pair every value with its zero-based index in the lap."""
        parent = self.clone()

        def generate() -> Iterator[tuple[int, T]]:
            yield from enumerate(parent.single_pass())

        return self._derive(generate)

    def flat_map[U](self, callback: Callable[[Any], U]) -> Cursor[U]:
        """Flatten nested cursors depth-first, applying ``callback`` to leaves.

        Only ``Cursor`` values are descended into; lists and other
        iterables are leaves. Nested cursors are read from a fresh view,
        their own positions are left alone.
        Each level of nesting is one level of Python recursion, so depth is
        bounded by ``sys.getrecursionlimit()``.
        """
        parent = self.clone()

        def descend(cursor: Cursor[Any]) -> Iterator[U]:
            for value in cursor.single_pass():
                if isinstance(value, Cursor):
                    yield from descend(value)
                else:
                    yield callback(value)

        return self._derive(lambda: descend(parent))

    def flat(self) -> Cursor[Any]:
        return self.flat_map(_identity)
