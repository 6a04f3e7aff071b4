"""Lap bookkeeping shared by ``Cursor`` and ``AsyncCursor``.

Both cursors run the same algorithms; they differ only in where they
suspend. Everything here is suspension-free, so the sync and async
variants import the same decisions instead of duplicating them:

- the two-state pull machine (``CursorState``) and its result (``Pull``)
- per-lap counters backing ``take(n)`` and ``skip(n)``
- cycle termination (``EmptyLapTracker``)
- sentinel classification for ``pipe``, ``map_while`` and ``filter_map``
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from lapwing._internal.sentinels import SKIP, STOP


class CursorState(Enum):
    """Where a cursor is in its lap."""

    READY = "ready"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True, slots=True)
class Pull[T]:
    """Result of a single pull: a value, or the end of a lap.

    ``value`` is only meaningful when ``done`` is false, except for
    ``reset(value)`` which echoes its argument back.
    """

    done: bool
    value: T | None = None


# -- Counters ----------------------------------------------------------------


def countdown(n: int) -> Callable[[object], bool]:
    """Predicate for ``take_while`` that lets exactly ``n`` values through.

    ``take_while`` emits a value *before* testing it, so the predicate
    must fail on the n-th call.
    """
    count = 0

    def keep_going(_: object) -> bool:
        nonlocal count
        count += 1
        return count < n

    return keep_going


def countup(n: int) -> Callable[[object], bool]:
    """Predicate for ``skip_while`` that holds for exactly ``n`` calls."""
    count = 0

    def still_skipping(_: object) -> bool:
        nonlocal count
        count += 1
        return count <= n

    return still_skipping


# -- Cycle -------------------------------------------------------------------


class EmptyLapTracker:
    """Decides when ``cycle()`` has to give up.

    An auto-restarting cursor reports done once per lap, so a single
    done between two values is just the seam between laps. Two dones in
    a row mean a whole lap went by without a value: the source is empty.
    """

    __slots__ = ("_previous_empty",)

    def __init__(self) -> None:
        self._previous_empty = False

    def saw_value(self) -> None:
        self._previous_empty = False

    def saw_done(self) -> bool:
        """Record a done; returns ``True`` when the cycle must stop."""
        if self._previous_empty:
            return True
        self._previous_empty = True
        return False


# -- Sentinels ---------------------------------------------------------------


class Outcome(Enum):
    EMIT = "emit"
    SKIP = "skip"
    STOP = "stop"


def classify_map(_: Any) -> Outcome:
    """``map``: every result is emitted, ``None`` included."""
    return Outcome.EMIT


def classify_pipe(result: Any) -> Outcome:
    """``pipe``: ``STOP`` ends the sequence, ``None``/``SKIP`` drop the element."""
    if result is STOP:
        return Outcome.STOP
    if result is None or result is SKIP:
        return Outcome.SKIP
    return Outcome.EMIT


def classify_map_while(result: Any) -> Outcome:
    """``map_while``: ``None`` (or ``STOP``) ends the sequence."""
    if result is None or result is STOP:
        return Outcome.STOP
    return Outcome.EMIT


def classify_filter_map(result: Any) -> Outcome:
    """``filter_map``/``find_map``: ``None`` (or ``SKIP``) only drops the element."""
    if result is None or result is SKIP:
        return Outcome.SKIP
    return Outcome.EMIT
