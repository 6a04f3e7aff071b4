"""Lapwing exception hierarchy.

Only misuse of the library itself raises these. Exceptions raised by
user callbacks (predicates, mappers, accumulators) are never wrapped:
they propagate unchanged out of the pull that triggered them.
"""


class LapwingError(Exception):
    """Base for all lapwing-specific errors."""


class ConfigurationError(LapwingError):
    """Raised when cursor options are invalid.

    Typically raised by ``CursorOptions`` or at cursor construction.
    """


class SourceError(LapwingError, TypeError):
    """Raised when a value cannot be used as a cursor source.

    A source must be an iterable, a zero-argument factory returning one,
    or another cursor. Async cursors also accept async iterables.
    """

    def __init__(self, source: object, detail: str = "") -> None:
        self.source = source
        kind = type(source).__name__
        message = detail or f"{kind!r} object is not a valid cursor source"
        super().__init__(message)
