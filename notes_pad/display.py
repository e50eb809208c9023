"""Show/hide state machine for the note window.

The note is either hidden (no tracked window, or the tracked handle is no
longer valid) or visible in one display mode for one file.  ``show`` reuses
the window when mode and file already match, tears it down first when they
do not, and only commits the new mode, path and window once the window
actually exists.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from notes_pad.buffer import BufferRegistry
from notes_pad.config import DisplayMode, validate_display_mode
from notes_pad.errors import HostOperationError
from notes_pad.host import FOCUS_LEAVE_EVENTS, EditorHost, Event
from notes_pad.note import NoteStore
from notes_pad.notify import Notifier
from notes_pad.state import SessionState
from notes_pad.window import WindowController

SETUP_ERROR = "Plugin not set up. Call NotesPad.setup() first."
NO_DISPLAY_ERROR = "Failed to get floating window configuration: no display available"


class DisplayReconciler:
    """Composes buffers, windows and session state into show/hide/toggle."""

    def __init__(
        self,
        host: EditorHost,
        state: SessionState,
        store: NoteStore,
        registry: BufferRegistry,
        window: WindowController,
        notifier: Notifier,
    ) -> None:
        self.host = host
        self.state = state
        self.store = store
        self.registry = registry
        self.window = window
        self.notify = notifier

    def is_visible(self) -> bool:
        return self.host.window_is_valid(self.state.window)

    def show(
        self,
        mode: DisplayMode | str | None = None,
        path: str | Path | None = None,
    ) -> bool:
        """Show the note at *path* in *mode*, reusing the window if possible.

        *mode* defaults to the current display mode and *path* to the
        configured note file.
        """
        if not self._require_setup():
            return False

        mode = validate_display_mode(
            mode, self.state.current_display_mode, self.notify
        )
        path = self.store.resolve_path(path)

        buf = self.registry.get_or_create(path)
        if buf is None:
            return False

        if self.is_visible():
            if (
                mode is self.state.current_display_mode
                and path == self.state.current_file_path
            ):
                self.window.focus(self.state.window, buf)
                return True

        if mode is DisplayMode.FLOATING and not self.window.display_available():
            self.notify.error(NO_DISPLAY_ERROR)
            return False

        if self.is_visible():
            logger.debug(
                "Switching from {} {} to {} {}",
                self.state.current_display_mode,
                self.state.current_file_path,
                mode,
                path,
            )
            self.hide()

        win = self._open(buf, mode)
        if win is None:
            return False

        self.state.window = win
        self.state.current_display_mode = mode
        self.state.current_file_path = path
        self.window.apply_window_options(win)
        self.window.focus(win, buf)
        return True

    def hide(self) -> bool:
        """Close the note window, remembering its size and saving the note.

        Hiding an already hidden note succeeds without side effects.
        """
        if not self._require_setup():
            return False
        if not self.is_visible():
            return True

        self.window.remember_size()

        path = self.state.current_file_path
        if self.state.config.auto_save:
            # A failed save is already reported; the window still closes.
            self.store.save(path, self.state.buffers.get(path))

        buf = self.registry.get(path)
        if buf is not None:
            for event in FOCUS_LEAVE_EVENTS:
                self.host.emit(event, buffer=buf, window=self.state.window)

        win, self.state.window = self.state.window, None
        try:
            self.host.close_window(win)
        except HostOperationError as exc:
            self.notify.warn(f"Failed to close window: {exc}")

        if self.host.buffer_is_valid(buf):
            self.host.emit(Event.BUF_HIDDEN, buffer=buf)
        logger.debug("Hid window {} for {}", win, path)
        return True

    def toggle(
        self,
        mode: DisplayMode | str | None = None,
        path: str | Path | None = None,
    ) -> bool:
        """Hide the visible note, or show it.

        An explicit *mode* always shows, switching the visible window to that
        mode if needed.
        """
        if not self._require_setup():
            return False
        if self.is_visible() and mode is None:
            return self.hide()
        return self.show(mode, path)

    def save(self) -> bool:
        """Save the current note if it has unsaved changes."""
        if not self._require_setup():
            return False
        path = self.state.current_file_path
        return self.store.save(path, self.state.buffers.get(path))

    def edit(self, path: str | Path | None = None) -> bool:
        """Open the note file in the host's current window.

        Leaves the note window and the session's mode and path untouched.
        """
        if not self._require_setup():
            return False
        path = self.store.resolve_path(path)
        try:
            self.host.edit_file(path)
        except HostOperationError as exc:
            self.notify.error(f"Failed to edit notes file: {exc}")
            return False
        return True

    def _open(self, buf: int, mode: DisplayMode) -> int | None:
        if mode is DisplayMode.FLOATING:
            geometry = self.window.floating_geometry()
            if geometry is None:
                self.notify.error(NO_DISPLAY_ERROR)
                return None
            return self.window.open_floating(buf, geometry)
        return self.window.create_split(buf, mode)

    def _require_setup(self) -> bool:
        if not self.state.is_setup:
            self.notify.error(SETUP_ERROR)
            return False
        return True
