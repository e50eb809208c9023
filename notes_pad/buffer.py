"""Registry of host buffers backing note files.

One buffer per absolute note path.  A registered buffer is reused for as long
as it is still valid and in sync with its file; a stale one is wiped and
rebuilt from disk (or from the template) on the next access.
"""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from notes_pad.errors import HostOperationError, NoteReadError
from notes_pad.host import EditorHost, Event, EventArgs
from notes_pad.note import NoteStore
from notes_pad.notify import Notifier
from notes_pad.scheduler import Scheduler
from notes_pad.state import SessionState

UNDO_LEVELS = 1000
BUFFER_GROUP = "notes_pad.buffers"

BUFFER_OPTIONS: tuple[tuple[str, Any], ...] = (
    ("buftype", ""),
    ("swapfile", False),
    ("bufhidden", "hide"),
    ("buflisted", False),
    ("undolevels", -1),
)

AUTO_SAVE_EVENTS = (Event.BUF_LEAVE, Event.BUF_HIDDEN, Event.WIN_LEAVE)


class BufferRegistry:
    """Owns the mapping from note path to host buffer.

    Parameters
    ----------
    host, state, store, scheduler, notifier:
        Collaborators shared with the rest of the notes pad.
    on_quit:
        Bound to the configured quit keys of every note buffer.
    on_save:
        Bound to the configured save key of every note buffer.
    on_leave:
        Called with the note path when its buffer loses focus and
        ``auto_save`` is enabled.
    """

    def __init__(
        self,
        host: EditorHost,
        state: SessionState,
        store: NoteStore,
        scheduler: Scheduler,
        notifier: Notifier,
        on_quit: Callable[[], Any],
        on_save: Callable[[], Any],
        on_leave: Callable[[str], Any],
    ) -> None:
        self.host = host
        self.state = state
        self.store = store
        self.scheduler = scheduler
        self.notify = notifier
        self.on_quit = on_quit
        self.on_save = on_save
        self.on_leave = on_leave

    def get(self, path: str) -> int | None:
        """Return the live buffer registered for *path*, if any."""
        buf = self.state.buffers.get(path)
        return buf if self.host.buffer_is_valid(buf) else None

    def items(self) -> list[tuple[str, int]]:
        return list(self.state.buffers.items())

    def is_valid_and_synced(self, buf: int | None, path: str) -> bool:
        """Return whether *buf* can keep serving the note at *path*.

        A buffer whose file was deleted is only kept if it holds unsaved
        changes, so that edits are never thrown away.
        """
        if not self.host.buffer_is_valid(buf):
            return False
        if self.host.get_buffer_name(buf) != path:
            return False
        if not self.store.exists(path):
            return bool(self.host.get_buffer_option(buf, "modified"))
        return True

    def evict_stale(self, path: str) -> None:
        """Wipe the buffer registered for *path* and forget it."""
        buf = self.state.buffers.pop(path, None)
        if buf is None:
            return
        logger.debug("Evicting stale buffer {} for {}", buf, path)
        if self.host.buffer_is_valid(buf):
            try:
                self.host.delete_buffer(buf, force=True)
            except HostOperationError as exc:
                self.notify.warn(f"Failed to delete stale buffer: {exc}")

    def get_or_create(self, path: str) -> int | None:
        """Return a buffer for *path*, creating and loading one if needed.

        Returns ``None`` (after notifying) when the host refuses to allocate
        a buffer or the existing note cannot be read.
        """
        buf = self.state.buffers.get(path)
        if self.is_valid_and_synced(buf, path):
            return buf
        if buf is not None:
            self.evict_stale(path)

        try:
            buf = self.host.create_buffer()
        except HostOperationError as exc:
            self.notify.error(f"Failed to create notes buffer: {exc}")
            return None

        try:
            self.host.set_buffer_name(buf, path)
        except HostOperationError as exc:
            self.notify.warn(f"Failed to set buffer name: {exc}")

        from_file = self.store.exists(path)
        self.host.emit(
            Event.BUF_READ_PRE if from_file else Event.BUF_NEW_FILE, buffer=buf
        )
        try:
            lines = self.store.load(path) if from_file else self.store.create()
        except NoteReadError as exc:
            self.notify.error(str(exc))
            self.host.delete_buffer(buf, force=True)
            return None

        self.host.set_lines(buf, lines)
        if from_file:
            self.host.emit(Event.BUF_READ_POST, buffer=buf)
        # Template content counts as unsaved until first written.
        self.host.set_buffer_option(buf, "modified", not from_file)

        self._set_options(buf)
        self._set_keymaps(buf)
        self._set_hooks(buf, path)

        self.state.buffers[path] = buf
        logger.debug(
            "Created buffer {} for {} ({})",
            buf,
            path,
            "file" if from_file else "template",
        )
        return buf

    def _set_options(self, buf: int) -> None:
        for name, value in BUFFER_OPTIONS:
            self.host.set_buffer_option(buf, name, value)
        self.host.set_buffer_option(buf, "filetype", self.state.config.filetype)

        def restore_undo() -> None:
            if self.host.buffer_is_valid(buf):
                self.host.set_buffer_option(buf, "undolevels", UNDO_LEVELS)

        # The initial load must not be undoable.
        self.scheduler.schedule(restore_undo)

    def _set_keymaps(self, buf: int) -> None:
        keymaps = self.state.config.buffer_keymaps
        for key in ("quit", "quit_alt"):
            if keymaps.get(key):
                self.host.set_keymap(
                    buf,
                    ["n"],
                    keymaps.get(key),
                    self.on_quit,
                    desc="Close notes window",
                )
        if keymaps.get("save"):
            self.host.set_keymap(
                buf, ["n", "i"], keymaps.get("save"), self.on_save, desc="Save notes"
            )

    def _set_hooks(self, buf: int, path: str) -> None:
        if not self.state.config.auto_save:
            return

        def leave(_args: EventArgs) -> None:
            self.on_leave(path)

        self.host.subscribe(
            AUTO_SAVE_EVENTS, leave, buffer=buf, group=BUFFER_GROUP
        )
