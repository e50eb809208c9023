"""Note file persistence.

The note is plain UTF-8 text on disk; in memory it is the list of lines held
by a host buffer.  Lines are joined with ``\\n`` on save and split on ``\\n``
on load, so an empty file is a single empty line.
"""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger

from notes_pad.errors import NoteReadError
from notes_pad.host import EditorHost, Event
from notes_pad.notify import Notifier
from notes_pad.state import SessionState


class NoteStore:
    """Load, create and save the markdown note.

    Parameters
    ----------
    host:
        Editor host owning the buffers that are saved.
    state:
        Session state; its config provides the default path and key names.
    notifier:
        Channel for save results and I/O failures.
    """

    def __init__(
        self, host: EditorHost, state: SessionState, notifier: Notifier
    ) -> None:
        self.host = host
        self.state = state
        self.notify = notifier

    def resolve_path(self, path: str | Path | None = None) -> str:
        """Return *path* (or the configured note path) as an absolute path."""
        raw = str(path) if path else self.state.config.notes_file_path
        return os.path.abspath(os.path.expandvars(os.path.expanduser(raw)))

    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def create(self) -> list[str]:
        """Return the onboarding content shown for a brand-new note."""
        keys = self.state.config.buffer_keymaps
        close_keys = " or ".join(
            f"`{k}`" for k in (keys.get("quit"), keys.get("quit_alt")) if k
        )
        lines = [
            "# My Notes",
            "",
            "Welcome to notes-pad!",
            "",
            "## Quick Start",
            "- This file auto-saves when you hide it or quit the editor",
        ]
        if keys.get("save"):
            lines.append(f"- Press `{keys.get('save')}` to save manually anytime")
        if close_keys:
            lines.append(f"- Press {close_keys} to close this window")
        lines += [
            "",
            "## Todo",
            "- [ ] Example task",
            "- [x] Completed task",
            "",
            "## Ideas",
            "- Add your ideas here...",
            "",
            "---",
            "",
            "*Happy note-taking!*",
            "",
        ]
        return lines

    def load(self, path: str) -> list[str]:
        """Read the note at *path* as lines.

        Returns the ``create()`` template when the file does not exist.

        Raises
        ------
        NoteReadError
            If the file exists but cannot be read or decoded.
        """
        try:
            content = Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            return self.create()
        except (OSError, UnicodeDecodeError) as exc:
            raise NoteReadError(f"Failed to read {path}: {exc}", path=path) from exc
        return content.split("\n")

    def save(self, path: str, buf: int | None) -> bool:
        """Write the content of *buf* to *path* if it has unsaved changes.

        An unmodified buffer is a successful no-op.  The modified flag is
        cleared only once the whole file has been written.
        """
        if not self.host.buffer_is_valid(buf):
            self.notify.warn(f"No notes buffer loaded for {path}")
            return False

        if not self.host.get_buffer_option(buf, "modified"):
            return True

        self.host.emit(Event.BUF_WRITE_PRE, buffer=buf)
        self.host.emit(Event.FILE_WRITE_PRE, buffer=buf)

        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self.notify.error(f"Failed to create directory: {exc}")
            return False

        content = "\n".join(self.host.get_lines(buf))
        try:
            f = open(target, "w", encoding="utf-8")
        except OSError as exc:
            self.notify.error(f"Failed to open file for writing: {exc}")
            return False
        try:
            with f:
                f.write(content)
        except OSError as exc:
            self.notify.error(f"Failed to write to file: {exc}")
            return False

        self.host.set_buffer_option(buf, "modified", False)
        self.host.emit(Event.FILE_WRITE_POST, buffer=buf)
        self.host.emit(Event.BUF_WRITE_POST, buffer=buf)
        logger.debug("Wrote {} lines to {}", content.count("\n") + 1, path)
        self.notify.info("Notes saved!")
        return True
