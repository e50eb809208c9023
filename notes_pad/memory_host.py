"""In-process editor host.

``MemoryHost`` keeps buffers, windows, key bindings and event subscriptions
in plain Python objects.  It follows the behaviour the notes pad relies on
from a real editor closely enough to drive the whole core headlessly: it is
what the CLI runs against and what the tests assert on.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable

from loguru import logger

from notes_pad.errors import HostOperationError
from notes_pad.host import (
    FOCUS_LEAVE_EVENTS,
    Callback,
    EditorHost,
    Event,
    EventArgs,
    FloatingGeometry,
)
from notes_pad.notify import Level

# Grid used to lay out splits when no display is attached.
HEADLESS_GRID = (80, 24)


@dataclass
class MemoryBuffer:
    """A text buffer held by ``MemoryHost``."""

    handle: int
    name: str = ""
    lines: list[str] = field(default_factory=lambda: [""])
    options: dict[str, Any] = field(
        default_factory=lambda: {"modified": False, "undolevels": 1000}
    )
    keymaps: dict[tuple[str, str], tuple[Callable[[], Any], str]] = field(
        default_factory=dict
    )


@dataclass
class MemoryWindow:
    """A window held by ``MemoryHost``."""

    handle: int
    buffer: int
    kind: str
    width: int
    height: int
    row: int = 0
    col: int = 0
    geometry: FloatingGeometry | None = None
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class Subscription:
    id: int
    events: frozenset[Event]
    callback: Callback
    buffer: int | None = None
    group: str | None = None


class MemoryHost(EditorHost):
    """Headless editor host backed by dictionaries.

    Parameters
    ----------
    screen:
        ``(width, height)`` of the simulated display, or ``None`` to run
        without a display (floating windows are then unavailable).
    """

    def __init__(self, screen: tuple[int, int] | None = (120, 40)) -> None:
        self.screen = screen
        self.buffers: dict[int, MemoryBuffer] = {}
        self.windows: dict[int, MemoryWindow] = {}
        self.subscriptions: list[Subscription] = []
        self.messages: list[tuple[str, Level]] = []
        self._buffer_ids = itertools.count(1)
        self._window_ids = itertools.count(1000)
        self._subscription_ids = itertools.count(1)

        main_buf = self.create_buffer()
        width, height = self._grid()
        main = MemoryWindow(
            handle=next(self._window_ids),
            buffer=main_buf,
            kind="main",
            width=width,
            height=height - 2,
        )
        self.windows[main.handle] = main
        self.main_window = main.handle
        self.current_window = main.handle

    # -- buffers -----------------------------------------------------------

    def create_buffer(self) -> int:
        buf = MemoryBuffer(handle=next(self._buffer_ids))
        self.buffers[buf.handle] = buf
        return buf.handle

    def delete_buffer(self, buf: int, force: bool = False) -> None:
        target = self._buffer(buf)
        if target.options.get("modified") and not force:
            raise HostOperationError(
                f"No write since last change for buffer {buf}"
            )
        for win in [w for w in self.windows.values() if w.buffer == buf]:
            if win.handle == self.main_window:
                win.buffer = self.create_buffer()
            else:
                self.emit(Event.WIN_CLOSED, window=win.handle)
                self._remove_window(win.handle)
        del self.buffers[buf]
        self.subscriptions = [s for s in self.subscriptions if s.buffer != buf]
        logger.debug("MemoryHost: deleted buffer {}", buf)

    def buffer_is_valid(self, buf: int | None) -> bool:
        return buf is not None and buf in self.buffers

    def get_lines(self, buf: int) -> list[str]:
        return list(self._buffer(buf).lines)

    def set_lines(self, buf: int, lines: list[str]) -> None:
        target = self._buffer(buf)
        target.lines = list(lines) or [""]
        target.options["modified"] = True

    def get_buffer_name(self, buf: int) -> str:
        return self._buffer(buf).name

    def set_buffer_name(self, buf: int, name: str) -> None:
        target = self._buffer(buf)
        for other in self.buffers.values():
            if other.handle != buf and other.name == name:
                raise HostOperationError(
                    f"Buffer with this name already exists: {name}"
                )
        target.name = name

    def get_buffer_option(self, buf: int, name: str) -> Any:
        return self._buffer(buf).options.get(name)

    def set_buffer_option(self, buf: int, name: str, value: Any) -> None:
        self._buffer(buf).options[name] = value

    # -- windows -----------------------------------------------------------

    def open_floating(self, buf: int, geometry: FloatingGeometry) -> int:
        self._buffer(buf)
        if self.screen is None:
            raise HostOperationError(
                "Cannot open a floating window without a display"
            )
        win = MemoryWindow(
            handle=next(self._window_ids),
            buffer=buf,
            kind="floating",
            width=geometry.width,
            height=geometry.height,
            row=geometry.row,
            col=geometry.col,
            geometry=geometry,
        )
        self.windows[win.handle] = win
        self._enter(win.handle)
        return win.handle

    def open_split(self, buf: int, vertical: bool, size: int) -> int:
        self._buffer(buf)
        if size < 1:
            raise HostOperationError(f"Invalid split size: {size}")
        grid_width, grid_height = self._grid()
        if vertical:
            width, height = max(1, min(size, grid_width - 2)), grid_height - 2
        else:
            width, height = grid_width, max(1, min(size, grid_height - 2))
        win = MemoryWindow(
            handle=next(self._window_ids),
            buffer=buf,
            kind="vsplit" if vertical else "hsplit",
            width=width,
            height=height,
        )
        self.windows[win.handle] = win
        self._enter(win.handle)
        return win.handle

    def close_window(self, win: int) -> None:
        self._window(win)
        if len(self.windows) == 1:
            raise HostOperationError("Cannot close last window")
        self.emit(Event.WIN_CLOSED, window=win)
        self._remove_window(win)

    def window_is_valid(self, win: int | None) -> bool:
        return win is not None and win in self.windows

    def get_window_size(self, win: int) -> tuple[int, int]:
        target = self._window(win)
        return target.width, target.height

    def set_window_option(self, win: int, name: str, value: Any) -> None:
        self._window(win).options[name] = value

    def set_current_window(self, win: int) -> None:
        self._window(win)
        self._enter(win)

    def edit_file(self, path: str) -> None:
        target = Path(path)
        if target.is_dir():
            raise HostOperationError(f"{path} is a directory")
        existing = [b for b in self.buffers.values() if b.name == path]
        if existing:
            buf = existing[0].handle
        else:
            lines = [""]
            try:
                if target.exists():
                    lines = target.read_text(encoding="utf-8").split("\n")
            except (OSError, UnicodeDecodeError) as exc:
                raise HostOperationError(f"Cannot read {path}: {exc}") from exc
            buf = self.create_buffer()
            self.buffers[buf].name = path
            self.buffers[buf].lines = lines
        self.windows[self.current_window].buffer = buf

    def screen_size(self) -> tuple[int, int] | None:
        return self.screen

    # -- key bindings and events ----------------------------------------

    def set_keymap(
        self,
        buf: int,
        modes: Iterable[str],
        lhs: str,
        action: Callable[[], Any],
        desc: str = "",
    ) -> None:
        target = self._buffer(buf)
        for mode in modes:
            target.keymaps[(mode, lhs)] = (action, desc)

    def subscribe(
        self,
        events: Iterable[Event],
        callback: Callback,
        *,
        buffer: int | None = None,
        group: str | None = None,
    ) -> int:
        sub = Subscription(
            id=next(self._subscription_ids),
            events=frozenset(events),
            callback=callback,
            buffer=buffer,
            group=group,
        )
        self.subscriptions.append(sub)
        return sub.id

    def clear_group(self, group: str) -> None:
        self.subscriptions = [s for s in self.subscriptions if s.group != group]

    def emit(
        self,
        event: Event,
        *,
        buffer: int | None = None,
        window: int | None = None,
    ) -> None:
        args = EventArgs(event=event, buffer=buffer, window=window)
        for sub in list(self.subscriptions):
            if event not in sub.events:
                continue
            if sub.buffer is not None and sub.buffer != buffer:
                continue
            sub.callback(args)

    def notify(self, message: str, level: Level = Level.INFO) -> None:
        self.messages.append((message, level))

    # -- simulated user actions ------------------------------------------

    def press(self, buf: int, lhs: str, mode: str = "n") -> Any:
        """Trigger the key binding *lhs* in *buf* as if the user typed it."""
        action, _ = self._buffer(buf).keymaps[(mode, lhs)]
        return action()

    def append_line(self, buf: int, text: str) -> None:
        """Append *text* as a new line, as if typed by the user."""
        target = self._buffer(buf)
        if target.lines == [""]:
            target.lines = [text]
        else:
            target.lines.append(text)
        target.options["modified"] = True

    def resize_window(
        self, win: int, width: int | None = None, height: int | None = None
    ) -> None:
        """Resize *win* as if the user dragged its border."""
        target = self._window(win)
        if width is not None:
            target.width = width
        if height is not None:
            target.height = height

    def resize_screen(self, width: int, height: int) -> None:
        """Change the display size and emit ``Event.RESIZED``."""
        self.screen = (width, height)
        self.emit(Event.RESIZED)

    def quit_window(self, win: int) -> None:
        """Close *win* the way a user's quit command would."""
        target = self._window(win)
        for event in FOCUS_LEAVE_EVENTS:
            self.emit(event, buffer=target.buffer, window=win)
        self.close_window(win)
        if not any(w.buffer == target.buffer for w in self.windows.values()):
            self.emit(Event.BUF_HIDDEN, buffer=target.buffer)

    def exit(self) -> None:
        """Emit ``Event.EXIT_PRE`` as the editor would before quitting."""
        self.emit(Event.EXIT_PRE)

    def messages_at(self, level: Level) -> list[str]:
        """Return the notifications recorded at *level*."""
        return [m for m, lvl in self.messages if lvl == level]

    # -- internal helpers -------------------------------------------------

    def _grid(self) -> tuple[int, int]:
        return self.screen or HEADLESS_GRID

    def _buffer(self, buf: int) -> MemoryBuffer:
        try:
            return self.buffers[buf]
        except KeyError:
            raise HostOperationError(f"Invalid buffer id: {buf}") from None

    def _window(self, win: int) -> MemoryWindow:
        try:
            return self.windows[win]
        except KeyError:
            raise HostOperationError(f"Invalid window id: {win}") from None

    def _enter(self, win: int) -> None:
        previous = self.current_window
        if previous != win and previous in self.windows:
            prev_buf = self.windows[previous].buffer
            self.emit(Event.WIN_LEAVE, buffer=prev_buf, window=previous)
            self.emit(Event.BUF_LEAVE, buffer=prev_buf, window=previous)
        self.current_window = win

    def _remove_window(self, win: int) -> None:
        del self.windows[win]
        if self.current_window == win:
            self.current_window = self.main_window

    def __repr__(self) -> str:
        return (
            f"MemoryHost(screen={self.screen!r}, buffers={len(self.buffers)}, "
            f"windows={len(self.windows)})"
        )
