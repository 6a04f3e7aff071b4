"""Tests for lapwing.AsyncCursor — suspending pulls, async callbacks, isolation."""

import asyncio

import anyio
import pytest

from lapwing import SKIP, STOP, AsyncCursor, Cursor, CursorOptions, CursorState, Pull


def numbers():
    yield 1
    yield 2
    yield 3


async def async_numbers():
    for value in (1, 2, 3):
        await anyio.sleep(0)
        yield value


async def deferred(value):
    await anyio.sleep(0)
    return value


async def is_even(value: int) -> bool:
    await anyio.sleep(0)
    return value % 2 == 0


# =============================================================================
# Sources
# =============================================================================


class TestSources:
    @pytest.mark.anyio
    async def test_sync_generator_source(self) -> None:
        assert await AsyncCursor(numbers).collect() == [1, 2, 3]

    @pytest.mark.anyio
    async def test_async_generator_source(self) -> None:
        cursor = AsyncCursor(async_numbers)
        assert await cursor.collect() == [1, 2, 3]
        assert await cursor.collect() == [1, 2, 3]

    @pytest.mark.anyio
    async def test_static_list_source(self) -> None:
        assert await AsyncCursor([1, 2, 3]).collect() == [1, 2, 3]

    @pytest.mark.anyio
    async def test_deferred_values_are_resolved(self) -> None:
        def source():
            yield deferred(1)
            yield deferred(2)
            yield 3

        cursor = AsyncCursor(source)
        assert await cursor.collect() == [1, 2, 3]
        assert await cursor.collect() == [1, 2, 3]

    @pytest.mark.anyio
    async def test_async_generator_yielding_awaitables(self) -> None:
        async def source():
            yield deferred("a")
            yield deferred("b")

        assert await AsyncCursor(source).collect() == ["a", "b"]

    @pytest.mark.anyio
    async def test_static_coroutines_last_one_lap(self) -> None:
        cursor = AsyncCursor([deferred(1), deferred(2)])
        assert await cursor.collect() == [1, 2]
        with pytest.raises(RuntimeError, match="already awaited"):
            await cursor.collect()

    @pytest.mark.anyio
    async def test_static_tasks_restart(self) -> None:
        tasks = [asyncio.ensure_future(deferred(1)), asyncio.ensure_future(deferred(2))]
        cursor = AsyncCursor(tasks)
        assert await cursor.collect() == [1, 2]
        assert await cursor.collect() == [1, 2]

    @pytest.mark.anyio
    async def test_from_cursor(self) -> None:
        sync = Cursor(numbers, options=CursorOptions(name="sync"))
        cursor = AsyncCursor.from_cursor(sync)
        assert cursor.options.name == "sync"
        assert await cursor.collect() == [1, 2, 3]
        assert next(sync) == 1

    @pytest.mark.anyio
    async def test_async_cursor_as_source(self) -> None:
        inner = AsyncCursor(async_numbers)
        assert await AsyncCursor(inner).map(lambda v: v + 1).collect() == [2, 3, 4]


# =============================================================================
# Pull / reset protocol
# =============================================================================


class TestPullProtocol:
    @pytest.mark.anyio
    async def test_pull_sequence(self) -> None:
        cursor = AsyncCursor(async_numbers)
        assert await cursor.pull() == Pull(done=False, value=1)
        assert await cursor.__anext__() == 2
        assert await cursor.collect() == [3]
        assert (await cursor.pull()).value == 1

    @pytest.mark.anyio
    async def test_exactly_one_done_per_lap(self) -> None:
        cursor = AsyncCursor([1])
        first = await cursor.pull()
        second = await cursor.pull()
        third = await cursor.pull()
        assert (first.done, second.done, third.done) == (False, True, False)

    @pytest.mark.anyio
    async def test_reset(self) -> None:
        cursor = AsyncCursor(async_numbers)
        await cursor.pull()
        assert await cursor.reset("x") == Pull(done=True, value="x")
        assert await cursor.collect() == [1, 2, 3]

    @pytest.mark.anyio
    async def test_no_restart_stays_exhausted(self) -> None:
        cursor = AsyncCursor(async_numbers, restart=False)
        assert await cursor.collect() == [1, 2, 3]
        assert cursor.state is CursorState.EXHAUSTED
        assert await cursor.collect() == []
        await cursor.reset()
        assert await cursor.collect() == [1, 2, 3]

    @pytest.mark.anyio
    async def test_source_is_not_touched_at_construction(self) -> None:
        calls: list[int] = []

        def factory():
            calls.append(1)
            return [1]

        cursor = AsyncCursor(factory)
        assert calls == []
        await cursor.pull()
        assert calls == [1]

    def test_aiter_returns_self(self) -> None:
        cursor = AsyncCursor([])
        assert cursor.__aiter__() is cursor

    def test_repr(self) -> None:
        named = AsyncCursor([], options=CursorOptions(name="feed"))
        assert repr(named) == "AsyncCursor('feed', state=ready)"


# =============================================================================
# Isolation
# =============================================================================


class TestIsolation:
    @pytest.mark.anyio
    async def test_concurrent_clones_do_not_interfere(self) -> None:
        cursor = AsyncCursor(async_numbers)
        results: dict[str, list[int]] = {}

        async def run(key: str, target: AsyncCursor) -> None:
            results[key] = await target.collect()

        async with anyio.create_task_group() as tg:
            tg.start_soon(run, "original", cursor)
            tg.start_soon(run, "clone", cursor.clone())

        assert results == {"original": [1, 2, 3], "clone": [1, 2, 3]}

    @pytest.mark.anyio
    async def test_concurrent_clones_of_derived_cursor(self) -> None:
        doubled = AsyncCursor(async_numbers).map(lambda v: v * 2)
        results: list[list[int]] = []

        async def run(target: AsyncCursor) -> None:
            results.append(await target.collect())

        async with anyio.create_task_group() as tg:
            for _ in range(3):
                tg.start_soon(run, doubled.clone())

        assert results == [[2, 4, 6]] * 3

    @pytest.mark.anyio
    async def test_chain_with_own_clone(self) -> None:
        cursor = AsyncCursor(async_numbers)
        assert await cursor.chain(cursor.clone()).collect() == [1, 2, 3, 1, 2, 3]


# =============================================================================
# Termination & position
# =============================================================================


class TestTermination:
    @pytest.mark.anyio
    async def test_first_does_not_move_receiver(self) -> None:
        cursor = AsyncCursor(async_numbers)
        assert await cursor.first() == 1
        assert await cursor.first() == 1
        assert (await cursor.pull()).value == 1

    @pytest.mark.anyio
    async def test_first_of_empty(self) -> None:
        assert await AsyncCursor([]).first() is None

    @pytest.mark.anyio
    async def test_last_and_size(self) -> None:
        assert await AsyncCursor(async_numbers).last() == 3
        assert await AsyncCursor(async_numbers).size() == 3
        assert await AsyncCursor([]).last() is None

    @pytest.mark.anyio
    async def test_nth(self) -> None:
        cursor = AsyncCursor(async_numbers)
        assert await cursor.nth(1) == 2
        assert (await cursor.pull()).value == 3
        assert await AsyncCursor(async_numbers).nth(3) is None

    @pytest.mark.anyio
    async def test_position_and_exists(self) -> None:
        assert await AsyncCursor(async_numbers).position(3) == 2
        assert await AsyncCursor(async_numbers).position(9) == -1
        assert await AsyncCursor(async_numbers).exists(2) is True
        assert await AsyncCursor(async_numbers).exists(9) is False


# =============================================================================
# Slicing & transforms
# =============================================================================


class TestSlicing:
    @pytest.mark.anyio
    async def test_take_while_emits_boundary(self) -> None:
        cursor = AsyncCursor(async_numbers).take_while(lambda v: v < 2)
        assert await cursor.collect() == [1, 2]

    @pytest.mark.anyio
    async def test_take_while_async_predicate(self) -> None:
        async def small(value: int) -> bool:
            return value < 1

        assert await AsyncCursor(async_numbers).take_while(small).collect() == [1]

    @pytest.mark.anyio
    async def test_skip_while(self) -> None:
        cursor = AsyncCursor(async_numbers).skip_while(lambda v: v < 2)
        assert await cursor.collect() == [2, 3]

    @pytest.mark.anyio
    async def test_skip_while_only_drops_prefix(self) -> None:
        tested: list[int] = []

        async def small(value: int) -> bool:
            tested.append(value)
            return value < 2

        assert await AsyncCursor([1, 5, 1]).skip_while(small).collect() == [5, 1]
        assert tested == [1, 5]

    @pytest.mark.anyio
    async def test_take_and_skip(self) -> None:
        cursor = AsyncCursor(async_numbers)
        assert await cursor.take(2).collect() == [1, 2]
        assert await cursor.take(0).collect() == []
        assert await cursor.skip(1).collect() == [2, 3]
        assert await cursor.skip(2).take(5).collect() == [3]

    @pytest.mark.anyio
    async def test_take_restarts_each_lap(self) -> None:
        first_two = AsyncCursor(async_numbers).take(2)
        assert await first_two.collect() == [1, 2]
        assert await first_two.collect() == [1, 2]


class TestTransforms:
    @pytest.mark.anyio
    async def test_map_with_async_callback(self) -> None:
        cursor = AsyncCursor(numbers).map(deferred)
        assert await cursor.collect() == [1, 2, 3]

    @pytest.mark.anyio
    async def test_filter_with_async_predicate(self) -> None:
        assert await AsyncCursor(async_numbers).filter(is_even).collect() == [2]

    @pytest.mark.anyio
    async def test_map_emits_none(self) -> None:
        assert await AsyncCursor(async_numbers).map(lambda v: None).collect() == [None] * 3

    @pytest.mark.anyio
    async def test_map_while(self) -> None:
        cursor = AsyncCursor(async_numbers).map_while(lambda v: None if v == 3 else v * 2)
        assert await cursor.collect() == [2, 4]

    @pytest.mark.anyio
    async def test_filter_map(self) -> None:
        async def halve(value: int) -> int | None:
            return value // 2 if value % 2 == 0 else None

        assert await AsyncCursor([2, 3, 4]).filter_map(halve).collect() == [1, 2]

    @pytest.mark.anyio
    async def test_pipe(self) -> None:
        def step(value: int) -> object:
            if value == 3:
                return STOP
            if value == 1:
                return SKIP
            return value * 10

        assert await AsyncCursor([1, 2, 3, 4]).pipe(step).collect() == [20]

    @pytest.mark.anyio
    async def test_pipe_skips_none(self) -> None:
        async def label(value: int) -> str | None:
            return f"position:{value}" if value == 3 else None

        assert await AsyncCursor(async_numbers).pipe(label).collect() == ["position:3"]


# =============================================================================
# Folding, search, combinators
# =============================================================================


class TestFolding:
    @pytest.mark.anyio
    async def test_fold_with_async_combine(self) -> None:
        async def add(acc: int, value: int) -> int:
            return acc + value

        assert await AsyncCursor(async_numbers).fold(0, add) == 6

    @pytest.mark.anyio
    async def test_enumerate_fold(self) -> None:
        cursor = AsyncCursor([1, 2, 3]).enumerate()
        assert await cursor.fold(0, lambda acc, pair: acc + pair[0] * pair[1]) == 8

    @pytest.mark.anyio
    async def test_for_each(self) -> None:
        seen: list[int] = []

        async def record(value: int) -> None:
            seen.append(value)

        await AsyncCursor(async_numbers).for_each(record)
        assert seen == [1, 2, 3]


class TestSearch:
    @pytest.mark.anyio
    async def test_find(self) -> None:
        assert await AsyncCursor(async_numbers).find(is_even) == 2
        assert await AsyncCursor(async_numbers).find(lambda v: False) is None

    @pytest.mark.anyio
    async def test_find_map(self) -> None:
        cursor = AsyncCursor(async_numbers)
        assert await cursor.find_map(lambda v: f"#{v}" if v > 1 else None) == "#2"

    @pytest.mark.anyio
    async def test_every_and_some(self) -> None:
        cursor = AsyncCursor(async_numbers)
        assert await cursor.every(lambda v: v < 7) is True
        assert await cursor.every(is_even) is False
        assert await cursor.some(is_even) is True
        assert await cursor.some(lambda v: v == 4) is False

    @pytest.mark.anyio
    async def test_empty_every_is_true_some_is_false(self) -> None:
        assert await AsyncCursor([]).every(lambda v: False) is True
        assert await AsyncCursor([]).some(lambda v: True) is False


class TestCombinators:
    @pytest.mark.anyio
    async def test_chain_mixed_sources(self) -> None:
        cursor = AsyncCursor(async_numbers).chain(Cursor([4])).chain([5])
        assert await cursor.collect() == [1, 2, 3, 4, 5]
        assert await cursor.collect() == [1, 2, 3, 4, 5]

    @pytest.mark.anyio
    async def test_chain_async_factory(self) -> None:
        cursor = AsyncCursor([0]).chain(async_numbers)
        assert await cursor.collect() == [0, 1, 2, 3]

    @pytest.mark.anyio
    async def test_chain_leaves_receiver_alone(self) -> None:
        cursor = AsyncCursor(async_numbers)
        await cursor.chain([4]).collect()
        assert await cursor.__anext__() == 1
        assert await cursor.collect() == [2, 3]

    @pytest.mark.anyio
    async def test_cycle_take(self) -> None:
        cursor = AsyncCursor(async_numbers).cycle().take(6)
        assert await cursor.collect() == [1, 2, 3, 1, 2, 3]

    @pytest.mark.anyio
    async def test_cycle_of_empty_terminates(self) -> None:
        assert await AsyncCursor([]).cycle().collect() == []

    @pytest.mark.anyio
    async def test_cycle_single_value_repeats(self) -> None:
        assert await AsyncCursor(["x"]).cycle().take(4).collect() == ["x"] * 4

    @pytest.mark.anyio
    async def test_enumerate(self) -> None:
        pairs = await AsyncCursor(async_numbers).enumerate().collect()
        assert pairs == [(0, 1), (1, 2), (2, 3)]


class TestFlat:
    @pytest.mark.anyio
    async def test_flat_nested_async(self) -> None:
        async def inner():
            yield 3
            yield 4

        async def middle():
            yield 1
            yield 2
            yield AsyncCursor(inner)

        async def outer():
            yield AsyncCursor(middle)

        cursor = AsyncCursor(outer)
        assert await cursor.flat().collect() == [1, 2, 3, 4]
        assert await cursor.flat_map(lambda v: v * 2).collect() == [2, 4, 6, 8]

    @pytest.mark.anyio
    async def test_flat_interleaved_sync_and_async(self) -> None:
        cursor = AsyncCursor([1, Cursor([2, AsyncCursor([3])]), 4])
        assert await cursor.flat().collect() == [1, 2, 3, 4]

    @pytest.mark.anyio
    async def test_flat_map_async_callback(self) -> None:
        cursor = AsyncCursor([AsyncCursor([1, 2]), 3]).flat_map(deferred)
        assert await cursor.collect() == [1, 2, 3]
        assert await cursor.collect() == [1, 2, 3]

    @pytest.mark.anyio
    async def test_flat_deep_nesting(self) -> None:
        nested: object = AsyncCursor([0])
        for depth in range(1, 200):
            nested = AsyncCursor([nested, depth]) if depth % 2 else Cursor([nested, depth])
        assert await AsyncCursor([nested]).flat().collect() == list(range(200))


# =============================================================================
# Callback failures
# =============================================================================


class TestCallbackErrors:
    @pytest.mark.anyio
    async def test_async_callback_error_propagates(self) -> None:
        async def boom(value: int) -> int:
            raise ValueError(f"bad {value}")

        with pytest.raises(ValueError, match="bad 1"):
            await AsyncCursor(async_numbers).map(boom).collect()

    @pytest.mark.anyio
    async def test_deferred_value_error_propagates(self) -> None:
        async def failing():
            raise RuntimeError("deferred failure")

        with pytest.raises(RuntimeError, match="deferred failure"):
            await AsyncCursor(lambda: (failing() for _ in range(1))).collect()
