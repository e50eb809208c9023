"""Exception types raised inside the notes pad core.

None of these escape the public ``NotesPad`` operations; they are caught at
the component boundary, reported through the notifier, and turned into a
``False`` result.
"""

from __future__ import annotations


class NotesPadError(Exception):
    """Base class for notes pad errors."""


class HostOperationError(NotesPadError):
    """The host editor rejected a buffer or window operation."""


class NoteReadError(NotesPadError):
    """An existing note file could not be read."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path
