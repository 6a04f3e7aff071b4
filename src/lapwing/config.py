"""Cursor configuration.

CursorOptions is a frozen dataclass: immutable after creation, shared
freely between a cursor and everything derived from it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from lapwing.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class CursorOptions:
    """Per-cursor options. Immutable after creation.

    Override what you need::

        options = CursorOptions(restart=False, name="orders")
        cursor = Cursor(load_orders, options=options)
    """

    # Exhaustion policy: start a fresh lap after the source runs dry
    # (default), or stay exhausted until reset() is called.
    restart: bool = True

    # Label shown in repr() and in log records
    name: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.restart, bool):
            msg = f"restart must be a bool, got {type(self.restart).__name__}"
            raise ConfigurationError(msg)
        if self.name is not None and not isinstance(self.name, str):
            msg = f"name must be a str or None, got {type(self.name).__name__}"
            raise ConfigurationError(msg)

    def with_restart(self, restart: bool) -> CursorOptions:
        """Same options with the given exhaustion policy."""
        if self.restart is restart:
            return self
        return replace(self, restart=restart)


DEFAULT_OPTIONS = CursorOptions()


def resolve_options(options: CursorOptions | None, restart: bool | None) -> CursorOptions:
    """Merge the ``options=`` and ``restart=`` constructor keywords."""
    if options is not None and restart is not None:
        msg = "Pass either options= or restart=, not both"
        raise ConfigurationError(msg)
    if restart is not None:
        return CursorOptions(restart=restart)
    if options is None:
        return DEFAULT_OPTIONS
    if not isinstance(options, CursorOptions):
        msg = f"options must be CursorOptions, got {type(options).__name__}"
        raise ConfigurationError(msg)
    return options
