"""Callback sentinels — markers a callback returns instead of a value.

``None`` already means "no value" for ``filter_map``, ``find_map`` and
``map_while``. ``pipe`` needs two distinct signals, so it understands:

- ``SKIP`` (or ``None``): drop this element and keep going
- ``STOP``: end the sequence here

Both are singletons; compare with ``is``.
"""

from typing import Final, final


@final
class _Sentinel:
    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return f"lapwing.{self._name}"

    def __reduce__(self) -> str:
        return self._name


SKIP: Final = _Sentinel("SKIP")
STOP: Final = _Sentinel("STOP")
