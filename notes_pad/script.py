"""Session scripts for driving a notes pad from the command line.

A script holds one command per line, e.g.::

    show floating ~/notes/today.md
    type "- [ ] call the bank"
    resize-window 100 30
    hide
    wait 50

Lines are split with shell quoting rules; blank lines and ``#`` comments
are ignored.  Commands run against a ``MemoryHost`` so that a whole editing
session, including deferred auto-saves, can be replayed headlessly.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import Any

import yaml

from notes_pad.api import NotesPad
from notes_pad.config import ConfigNode
from notes_pad.memory_host import MemoryHost
from notes_pad.scheduler import EventLoopScheduler

# name -> (min args, max args); None means unbounded.
_ARITY: dict[str, tuple[int, int | None]] = {
    "toggle": (0, 2),
    "show": (0, 2),
    "hide": (0, 0),
    "save": (0, 0),
    "edit": (0, 1),
    "status": (0, 0),
    "type": (1, None),
    "resize-window": (2, 2),
    "resize-screen": (2, 2),
    "close": (0, 0),
    "exit": (0, 0),
    "wait": (1, 1),
}

_INT_ARGS = {"resize-window", "resize-screen", "wait"}

# Placeholder for "current mode" when only a path is wanted: ``show - a.md``.
DEFAULT_MODE = "-"


@dataclass(frozen=True)
class ScriptCommand:
    """One parsed script line."""

    raw: str
    name: str
    args: tuple[str, ...]
    is_valid: bool
    rejection_reason: str = ""


@dataclass(frozen=True)
class ScriptResult:
    """Outcome of running one ``ScriptCommand``."""

    command: ScriptCommand
    success: bool
    output: str = ""


def parse_line(line: str) -> ScriptCommand | None:
    """Parse a script line; returns ``None`` for blank lines and comments."""
    try:
        tokens = shlex.split(line, comments=True)
    except ValueError as exc:
        return ScriptCommand(
            raw=line,
            name="",
            args=(),
            is_valid=False,
            rejection_reason=f"Failed to parse line: {exc}",
        )
    if not tokens:
        return None

    name, args = tokens[0].lower(), tuple(tokens[1:])
    arity = _ARITY.get(name)
    if arity is None:
        return ScriptCommand(
            raw=line,
            name=name,
            args=args,
            is_valid=False,
            rejection_reason=f"Unknown command: {name!r}. "
            f"Available: {', '.join(sorted(_ARITY))}",
        )

    low, high = arity
    if len(args) < low or (high is not None and len(args) > high):
        upper = "n" if high is None else high
        expected = str(low) if low == high else f"{low}-{upper}"
        return ScriptCommand(
            raw=line,
            name=name,
            args=args,
            is_valid=False,
            rejection_reason=f"{name} takes {expected} argument(s), got {len(args)}",
        )

    if name in _INT_ARGS and not all(a.isdigit() for a in args):
        return ScriptCommand(
            raw=line,
            name=name,
            args=args,
            is_valid=False,
            rejection_reason=f"{name} expects non-negative integers",
        )

    return ScriptCommand(raw=line, name=name, args=args, is_valid=True)


def parse_script(text: str) -> list[ScriptCommand]:
    """Parse every non-blank, non-comment line of *text*."""
    commands = (parse_line(line) for line in text.splitlines())
    return [c for c in commands if c is not None]


class ScriptSession:
    """Runs script commands against one notes pad on a ``MemoryHost``.

    Deferred actions that are due run after every command, and everything
    still pending runs when ``run`` finishes.
    """

    def __init__(
        self,
        pad: NotesPad,
        host: MemoryHost,
        scheduler: EventLoopScheduler,
    ) -> None:
        self.pad = pad
        self.host = host
        self.scheduler = scheduler

    def run(self, commands: list[ScriptCommand]) -> list[ScriptResult]:
        results = [self.execute(c) for c in commands]
        self.scheduler.run_until_idle()
        return results

    def execute(self, command: ScriptCommand) -> ScriptResult:
        if not command.is_valid:
            return ScriptResult(command, False, command.rejection_reason)
        result = self._dispatch(command)
        self.scheduler.advance(0)
        return result

    def _dispatch(self, command: ScriptCommand) -> ScriptResult:
        pad, args = self.pad, command.args
        name = command.name

        if name in ("toggle", "show"):
            mode = args[0] if args and args[0] != DEFAULT_MODE else None
            path = args[1] if len(args) > 1 else None
            op = pad.toggle if name == "toggle" else pad.show
            return ScriptResult(command, op(mode, path))
        if name == "hide":
            return ScriptResult(command, pad.hide())
        if name == "save":
            return ScriptResult(command, pad.save())
        if name == "edit":
            return ScriptResult(command, pad.edit(args[0] if args else None))
        if name == "status":
            output = yaml.safe_dump(
                pad.status().to_dict(),
                sort_keys=False,
                default_flow_style=True,
                width=float("inf"),
            ).strip()
            return ScriptResult(command, True, output)
        if name == "resize-screen":
            self.host.resize_screen(int(args[0]), int(args[1]))
            return ScriptResult(command, True)
        if name == "exit":
            self.host.exit()
            return ScriptResult(command, True)
        if name == "wait":
            self.scheduler.advance(int(args[0]))
            return ScriptResult(command, True)

        # The remaining commands act on the visible note window.
        win = pad.state.window
        if not pad.display.is_visible():
            return ScriptResult(command, False, "The note window is not visible")
        if name == "type":
            buf = pad.registry.get(pad.state.current_file_path)
            if buf is None:
                return ScriptResult(command, False, "No notes buffer loaded")
            self.host.append_line(buf, " ".join(args))
            return ScriptResult(command, True)
        if name == "resize-window":
            self.host.resize_window(win, int(args[0]), int(args[1]))
            return ScriptResult(command, True)
        # close
        self.host.quit_window(win)
        return ScriptResult(command, True)


def new_session(
    config: dict[str, Any] | ConfigNode | None = None,
    screen: tuple[int, int] | None = (120, 40),
) -> ScriptSession:
    """Build a set-up notes pad on a fresh ``MemoryHost``."""
    host = MemoryHost(screen=screen)
    scheduler = EventLoopScheduler()
    pad = NotesPad(host, scheduler=scheduler)
    pad.setup(config)
    return ScriptSession(pad, host, scheduler)
