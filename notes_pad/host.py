"""Host editor abstraction.

Everything the notes pad needs from the editor it runs inside: text buffers,
windows, key bindings and lifecycle events.  The core only ever talks to an
``EditorHost``; ``notes_pad.memory_host.MemoryHost`` is the in-process
implementation used by the CLI and the tests.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable

from notes_pad.notify import Level


class Event(str, Enum):
    """Lifecycle notifications exchanged with the host."""

    WIN_ENTER = "win_enter"
    BUF_WIN_ENTER = "buf_win_enter"
    BUF_ENTER = "buf_enter"
    FILETYPE = "filetype"
    BUF_LEAVE = "buf_leave"
    BUF_WIN_LEAVE = "buf_win_leave"
    WIN_LEAVE = "win_leave"
    BUF_HIDDEN = "buf_hidden"
    WIN_CLOSED = "win_closed"
    RESIZED = "resized"
    EXIT_PRE = "exit_pre"
    BUF_READ_PRE = "buf_read_pre"
    BUF_READ_POST = "buf_read_post"
    BUF_NEW_FILE = "buf_new_file"
    BUF_WRITE_PRE = "buf_write_pre"
    FILE_WRITE_PRE = "file_write_pre"
    FILE_WRITE_POST = "file_write_post"
    BUF_WRITE_POST = "buf_write_post"


FOCUS_ENTER_EVENTS = (
    Event.WIN_ENTER,
    Event.BUF_WIN_ENTER,
    Event.BUF_ENTER,
    Event.FILETYPE,
)
FOCUS_LEAVE_EVENTS = (Event.BUF_LEAVE, Event.BUF_WIN_LEAVE, Event.WIN_LEAVE)


@dataclass(frozen=True)
class EventArgs:
    """Payload handed to event callbacks."""

    event: Event
    buffer: int | None = None
    window: int | None = None


@dataclass(frozen=True)
class FloatingGeometry:
    """Position, size and decoration of a floating window."""

    width: int
    height: int
    row: int
    col: int
    relative: str = "editor"
    style: str = "minimal"
    border: str = "rounded"
    focusable: bool = True
    zindex: int = 50
    title: str | None = None
    title_pos: str | None = None


Callback = Callable[[EventArgs], Any]


class EditorHost(abc.ABC):
    """Operations the notes pad consumes from its host editor.

    Handles are opaque ints.  Operations the host refuses raise
    ``notes_pad.errors.HostOperationError``.
    """

    # -- buffers -----------------------------------------------------------

    @abc.abstractmethod
    def create_buffer(self) -> int:
        """Allocate a new, unlisted scratch buffer and return its handle."""

    @abc.abstractmethod
    def delete_buffer(self, buf: int, force: bool = False) -> None:
        """Wipe *buf*, discarding its content when *force* is set."""

    @abc.abstractmethod
    def buffer_is_valid(self, buf: int | None) -> bool:
        """Return whether *buf* refers to a live buffer."""

    @abc.abstractmethod
    def get_lines(self, buf: int) -> list[str]:
        """Return the full content of *buf* as lines."""

    @abc.abstractmethod
    def set_lines(self, buf: int, lines: list[str]) -> None:
        """Replace the content of *buf*."""

    @abc.abstractmethod
    def get_buffer_name(self, buf: int) -> str:
        """Return the file name *buf* is bound to ("" when unnamed)."""

    @abc.abstractmethod
    def set_buffer_name(self, buf: int, name: str) -> None:
        """Bind *buf* to the file *name*."""

    @abc.abstractmethod
    def get_buffer_option(self, buf: int, name: str) -> Any:
        """Return a buffer-local option such as ``modified``."""

    @abc.abstractmethod
    def set_buffer_option(self, buf: int, name: str, value: Any) -> None:
        """Set a buffer-local option."""

    # -- windows -----------------------------------------------------------

    @abc.abstractmethod
    def open_floating(self, buf: int, geometry: FloatingGeometry) -> int:
        """Open *buf* in a floating window, enter it, and return the handle."""

    @abc.abstractmethod
    def open_split(self, buf: int, vertical: bool, size: int) -> int:
        """Open *buf* in a new split of *size* rows (or columns if *vertical*)."""

    @abc.abstractmethod
    def close_window(self, win: int) -> None:
        """Close *win*."""

    @abc.abstractmethod
    def window_is_valid(self, win: int | None) -> bool:
        """Return whether *win* refers to an open window."""

    @abc.abstractmethod
    def get_window_size(self, win: int) -> tuple[int, int]:
        """Return ``(width, height)`` of *win*."""

    @abc.abstractmethod
    def set_window_option(self, win: int, name: str, value: Any) -> None:
        """Set a window-local option."""

    @abc.abstractmethod
    def set_current_window(self, win: int) -> None:
        """Move focus to *win*."""

    @abc.abstractmethod
    def edit_file(self, path: str) -> None:
        """Open *path* in the current window."""

    @abc.abstractmethod
    def screen_size(self) -> tuple[int, int] | None:
        """Return ``(width, height)`` of the attached display, or ``None``."""

    # -- key bindings and events ----------------------------------------

    @abc.abstractmethod
    def set_keymap(
        self,
        buf: int,
        modes: Iterable[str],
        lhs: str,
        action: Callable[[], Any],
        desc: str = "",
    ) -> None:
        """Bind *lhs* to *action* in *modes*, scoped to *buf*."""

    @abc.abstractmethod
    def subscribe(
        self,
        events: Iterable[Event],
        callback: Callback,
        *,
        buffer: int | None = None,
        group: str | None = None,
    ) -> int:
        """Register *callback* for *events* and return a subscription id.

        Buffer-scoped subscriptions only fire for events on that buffer and
        are dropped when the buffer is deleted.
        """

    @abc.abstractmethod
    def clear_group(self, group: str) -> None:
        """Drop every subscription registered under *group*."""

    @abc.abstractmethod
    def emit(
        self,
        event: Event,
        *,
        buffer: int | None = None,
        window: int | None = None,
    ) -> None:
        """Synchronously deliver *event* to matching subscribers."""

    @abc.abstractmethod
    def notify(self, message: str, level: Level = Level.INFO) -> None:
        """Show a message to the user."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
