"""Public entry points of the notes pad.

``NotesPad`` wires the components together around one ``SessionState`` and
exposes the operations a command front end calls: ``setup``, ``show``,
``hide``, ``toggle``, ``save``, ``edit`` and ``status``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from notes_pad.buffer import BufferRegistry
from notes_pad.config import ConfigNode, DisplayMode, validate_config
from notes_pad.display import DisplayReconciler
from notes_pad.host import EditorHost, Event, EventArgs
from notes_pad.note import NoteStore
from notes_pad.notify import Notifier
from notes_pad.scheduler import Debouncer, EventLoopScheduler, Scheduler
from notes_pad.state import SessionState, WindowSizes
from notes_pad.window import WindowController

HOOK_GROUP = "notes_pad"
AUTO_SAVE_DELAY_MS = 50


@dataclass(frozen=True)
class Status:
    """Snapshot returned by ``NotesPad.status``.

    ``window_sizes`` holds the remembered size per display mode and
    ``display_mode`` is the configured default mode.
    """

    is_setup: bool
    buffer_valid: bool
    window_valid: bool
    current_display_mode: DisplayMode
    current_file_path: str
    window_sizes: dict[str, Any]
    display_mode: DisplayMode

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["current_display_mode"] = self.current_display_mode.value
        data["display_mode"] = self.display_mode.value
        return data


class NotesPad:
    """A persistent markdown scratchpad shown in a floating window or split.

    Parameters
    ----------
    host:
        The editor the notes pad runs inside.
    scheduler:
        Event-loop scheduler for deferred saves.  Defaults to a fresh
        ``EventLoopScheduler``.
    notifier:
        Notification channel.  Defaults to one that forwards to
        ``host.notify``.
    """

    def __init__(
        self,
        host: EditorHost,
        scheduler: Scheduler | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.host = host
        self.scheduler = scheduler or EventLoopScheduler()
        self.notify = notifier or Notifier(sink=host.notify)
        self.state = SessionState.from_config()
        self.store = NoteStore(host, self.state, self.notify)
        self.registry = BufferRegistry(
            host,
            self.state,
            self.store,
            self.scheduler,
            self.notify,
            on_quit=self.hide,
            on_save=self.save,
            on_leave=self._on_leave,
        )
        self.window = WindowController(host, self.state, self.notify)
        self.display = DisplayReconciler(
            host, self.state, self.store, self.registry, self.window, self.notify
        )
        self._auto_save = Debouncer(self.scheduler, AUTO_SAVE_DELAY_MS)

    def setup(self, config: dict[str, Any] | ConfigNode | None = None) -> None:
        """Validate *config* and make the notes pad ready for use.

        May be called again to apply a new configuration; a visible note is
        hidden (and saved) first, and remembered window sizes are reset to
        the configured ones.
        """
        if self.state.is_setup and self.display.is_visible():
            self.display.hide()
        validated = validate_config(config, self.notify)
        self.state.config = validated
        self.state.current_display_mode = DisplayMode(validated.display_mode)
        self.state.current_file_path = self.store.resolve_path()
        self.state.window_sizes = WindowSizes.from_config(validated)
        self._register_hooks()
        self.state.is_setup = True
        logger.debug(
            "notes-pad set up: mode={} path={}",
            self.state.current_display_mode,
            self.state.current_file_path,
        )

    def show(
        self, mode: DisplayMode | str | None = None, path: str | Path | None = None
    ) -> bool:
        return self.display.show(mode, path)

    def hide(self) -> bool:
        return self.display.hide()

    def toggle(
        self, mode: DisplayMode | str | None = None, path: str | Path | None = None
    ) -> bool:
        return self.display.toggle(mode, path)

    def save(self) -> bool:
        return self.display.save()

    def edit(self, path: str | Path | None = None) -> bool:
        return self.display.edit(path)

    def status(self) -> Status:
        path = self.state.current_file_path
        return Status(
            is_setup=self.state.is_setup,
            buffer_valid=self.registry.get(path) is not None,
            window_valid=self.display.is_visible(),
            current_display_mode=self.state.current_display_mode,
            current_file_path=path,
            window_sizes=self.state.window_sizes.to_dict(),
            display_mode=DisplayMode(self.state.config.display_mode),
        )

    # -- host hooks --------------------------------------------------------

    def _register_hooks(self) -> None:
        self.host.clear_group(HOOK_GROUP)
        self.host.subscribe(
            [Event.RESIZED],
            lambda _args: self.window.remember_size(),
            group=HOOK_GROUP,
        )
        self.host.subscribe([Event.WIN_CLOSED], self._on_win_closed, group=HOOK_GROUP)
        if self.state.config.auto_save_on_exit:
            self.host.subscribe([Event.EXIT_PRE], self._on_exit, group=HOOK_GROUP)

    def _on_win_closed(self, args: EventArgs) -> None:
        if args.window is None or args.window != self.state.window:
            return
        self.window.remember_size()
        self.state.window = None
        logger.debug("Note window {} closed by the host", args.window)

    def _on_exit(self, _args: EventArgs) -> None:
        for path, buf in self.registry.items():
            if self.host.buffer_is_valid(buf):
                self.store.save(path, buf)

    def _on_leave(self, path: str) -> None:
        self.window.remember_size()
        self._auto_save.trigger(path, lambda: self._deferred_save(path))

    def _deferred_save(self, path: str) -> None:
        buf = self.registry.get(path)
        if buf is None:
            logger.debug("Skipping deferred save of {}: buffer is gone", path)
            return
        self.store.save(path, buf)

    def __repr__(self) -> str:
        return f"NotesPad(host={self.host!r}, setup={self.state.is_setup})"
