"""Creation, sizing and focusing of the note window."""

from __future__ import annotations

from typing import Any

from loguru import logger

from notes_pad.config import DisplayMode
from notes_pad.errors import HostOperationError
from notes_pad.host import FOCUS_ENTER_EVENTS, EditorHost, FloatingGeometry
from notes_pad.notify import Notifier
from notes_pad.state import SessionState

# Margin kept free around a floating window, in cells.
SCREEN_MARGIN = 4

WINDOW_OPTIONS: tuple[tuple[str, Any], ...] = (
    ("wrap", True),
    ("linebreak", True),
    ("number", False),
    ("relativenumber", False),
    ("cursorline", True),
    ("signcolumn", "no"),
    ("foldcolumn", "0"),
    ("colorcolumn", ""),
)


class WindowController:
    """Opens note windows and keeps ``state.window_sizes`` current."""

    def __init__(
        self, host: EditorHost, state: SessionState, notifier: Notifier
    ) -> None:
        self.host = host
        self.state = state
        self.notify = notifier

    def remember_size(self) -> None:
        """Record the tracked window's geometry for the current display mode."""
        win = self.state.window
        if not self.host.window_is_valid(win):
            return

        width, height = self.host.get_window_size(win)
        sizes = self.state.window_sizes
        mode = self.state.current_display_mode
        if mode is DisplayMode.FLOATING:
            sizes.floating_width = width
            sizes.floating_height = height
        elif mode is DisplayMode.HSPLIT:
            sizes.hsplit_height = height
        elif mode is DisplayMode.VSPLIT:
            sizes.vsplit_width = width

    def display_available(self) -> bool:
        return self.host.screen_size() is not None

    def floating_geometry(self) -> FloatingGeometry | None:
        """Return a centered floating rectangle of the remembered size.

        The size is clamped so the window fits on screen.  Returns ``None``
        when the host has no display to draw on.
        """
        screen = self.host.screen_size()
        if screen is None:
            return None

        screen_width, screen_height = screen
        sizes = self.state.window_sizes
        width = max(1, min(sizes.floating_width, screen_width - SCREEN_MARGIN))
        height = max(1, min(sizes.floating_height, screen_height - SCREEN_MARGIN))

        cfg = self.state.config.floating
        title = cfg.get("title") or None
        return FloatingGeometry(
            width=width,
            height=height,
            row=(screen_height - height) // 2,
            col=(screen_width - width) // 2,
            relative=cfg.relative,
            style=cfg.style,
            border=cfg.border,
            focusable=cfg.focusable,
            zindex=cfg.zindex,
            title=title,
            title_pos=cfg.get("title_pos") if title else None,
        )

    def open_floating(self, buf: int, geometry: FloatingGeometry) -> int | None:
        """Open *buf* in a floating window; ``None`` if the host refuses."""
        try:
            win = self.host.open_floating(buf, geometry)
        except HostOperationError as exc:
            self.notify.error(f"Failed to create floating window: {exc}")
            return None
        logger.debug(
            "Opened floating window {} ({}x{})", win, geometry.width, geometry.height
        )
        return win

    def create_split(self, buf: int, mode: DisplayMode | str) -> int | None:
        """Open *buf* in a split sized from the remembered geometry.

        Returns ``None`` after notifying when *mode* is not a split mode or
        the host rejects the split.
        """
        if mode == DisplayMode.HSPLIT:
            vertical, size = False, self.state.window_sizes.hsplit_height
        elif mode == DisplayMode.VSPLIT:
            vertical, size = True, self.state.window_sizes.vsplit_width
        else:
            self.notify.error(f"Invalid split mode: {mode}")
            return None

        try:
            win = self.host.open_split(buf, vertical, size)
        except HostOperationError as exc:
            self.notify.error(f"Failed to create split: {exc}")
            return None
        logger.debug("Opened {} window {} (size {})", mode, win, size)
        return win

    def apply_window_options(self, win: int) -> None:
        for name, value in WINDOW_OPTIONS:
            self.host.set_window_option(win, name, value)

    def focus(self, win: int, buf: int) -> None:
        """Make *win* current and announce that *buf* was entered."""
        self.host.set_current_window(win)
        for event in FOCUS_ENTER_EVENTS:
            self.host.emit(event, buffer=buf, window=win)
