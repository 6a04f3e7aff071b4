"""Shared type aliases used across lapwing modules."""

from collections.abc import AsyncIterator, Callable, Iterator
from typing import Any, TypeAlias

# Live, single-pass iteration object a cursor pulls from
Producer: TypeAlias = Iterator[Any]
AsyncProducer: TypeAlias = Iterator[Any] | AsyncIterator[Any]

# Normalized source: called once per lap
ProducerFactory: TypeAlias = Callable[[], Producer]
AsyncProducerFactory: TypeAlias = Callable[[], AsyncProducer]
