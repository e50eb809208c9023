"""Shared fixtures: a headless host, a virtual-clock scheduler and a set-up pad."""

import pytest

from notes_pad.api import NotesPad
from notes_pad.memory_host import MemoryHost
from notes_pad.scheduler import EventLoopScheduler


@pytest.fixture
def host():
    """Return a MemoryHost with a 120x40 display."""
    return MemoryHost(screen=(120, 40))


@pytest.fixture
def scheduler():
    return EventLoopScheduler()


@pytest.fixture
def notes_path(tmp_path):
    """Return a note path whose parent directory does not exist yet."""
    return tmp_path / "notes" / "notes.md"


@pytest.fixture
def config(notes_path):
    return {"notes_file_path": str(notes_path)}


@pytest.fixture
def pad(host, scheduler, config):
    """Return a NotesPad that has been set up against *host*."""
    notes = NotesPad(host, scheduler=scheduler)
    notes.setup(config)
    return notes
