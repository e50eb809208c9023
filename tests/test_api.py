"""Tests for NotesPad setup, status and the auto-save hooks."""

import os

import pytest

from notes_pad.api import AUTO_SAVE_DELAY_MS, HOOK_GROUP, NotesPad
from notes_pad.config import DisplayMode
from notes_pad.host import Event
from notes_pad.notify import Level


def _saves(host):
    return sum("Notes saved!" in message for message, _ in host.messages)


def _note_buffer(pad):
    return pad.registry.get(pad.state.current_file_path)


class TestSetup:
    def test_seeds_state_from_config(self, host, scheduler, notes_path):
        pad = NotesPad(host, scheduler=scheduler)
        pad.setup(
            {
                "display_mode": "vsplit",
                "notes_file_path": str(notes_path),
                "split": {"vsplit_width": 50},
            }
        )
        assert pad.state.is_setup is True
        assert pad.state.current_display_mode is DisplayMode.VSPLIT
        assert pad.state.current_file_path == str(notes_path)
        assert pad.state.window_sizes.vsplit_width == 50

    def test_setup_twice_does_not_duplicate_hooks(self, pad, host, config):
        pad.setup(config)
        groups = [s.group for s in host.subscriptions]
        assert groups.count(HOOK_GROUP) == 3

    def test_no_exit_hook_when_disabled(self, host, scheduler, config):
        pad = NotesPad(host, scheduler=scheduler)
        pad.setup({**config, "auto_save_on_exit": False})
        events = {e for s in host.subscriptions for e in s.events}
        assert Event.EXIT_PRE not in events

    def test_setup_resets_remembered_sizes(self, pad, host, config):
        pad.show()
        host.resize_window(pad.state.window, 100, 30)
        pad.hide()
        pad.setup(config)
        assert pad.state.window_sizes.floating_width == 80

    def test_setup_while_visible_hides_first(self, pad, host, config, tmp_path):
        """Re-running setup never leaves a window the new state does not describe."""
        other = tmp_path / "b.md"
        pad.show("vsplit", str(other))
        win = pad.state.window

        pad.setup(config)
        assert pad.state.window is None
        assert not host.window_is_valid(win)
        assert other.exists()

        assert pad.show() is True
        assert pad.state.window != win
        assert host.windows[pad.state.window].kind == "floating"
        assert pad.status().current_display_mode is DisplayMode.FLOATING

    @pytest.mark.parametrize("bad_path", [None, 123, ""])
    def test_malformed_path_uses_default(self, host, scheduler, bad_path):
        pad = NotesPad(host, scheduler=scheduler)
        pad.setup({"notes_file_path": bad_path})
        assert pad.state.is_setup is True
        assert pad.state.current_file_path.endswith(
            os.path.join("notes_pad", "notes.md")
        )
        assert "Invalid notes_file_path" in host.messages_at(Level.WARN)[0]

    @pytest.mark.parametrize("bad_keymaps", [None, "q", {"quit": 7}])
    def test_malformed_keymaps_still_show(self, host, scheduler, config, bad_keymaps):
        pad = NotesPad(host, scheduler=scheduler)
        pad.setup({**config, "buffer_keymaps": bad_keymaps})
        assert pad.show() is True
        buf = pad.registry.get(pad.state.current_file_path)
        assert ("n", "q") in host.buffers[buf].keymaps
        assert host.messages_at(Level.WARN)


class TestStatus:
    def test_hidden(self, pad, notes_path):
        status = pad.status()
        assert status.is_setup is True
        assert status.buffer_valid is False
        assert status.window_valid is False
        assert status.current_file_path == str(notes_path)

    def test_visible(self, pad):
        pad.show("hsplit")
        data = pad.status().to_dict()
        assert data["buffer_valid"] is True
        assert data["window_valid"] is True
        assert data["current_display_mode"] == "hsplit"
        assert data["display_mode"] == "floating"
        assert data["window_sizes"] == {
            "floating": {"width": 80, "height": 24},
            "hsplit_height": 24,
            "vsplit_width": 80,
        }


class TestAutoSave:
    def test_leave_events_are_debounced(self, pad, host, scheduler, notes_path):
        """A burst of focus-loss events results in a single save."""
        pad.show()
        buf = _note_buffer(pad)
        for event in (Event.BUF_LEAVE, Event.WIN_LEAVE, Event.BUF_HIDDEN):
            host.emit(event, buffer=buf)

        scheduler.advance(AUTO_SAVE_DELAY_MS - 1)
        assert _saves(host) == 0
        scheduler.advance(1)
        assert _saves(host) == 1
        assert notes_path.exists()

    def test_focus_loss_saves(self, pad, host, scheduler, notes_path):
        pad.show()
        host.set_current_window(host.main_window)
        scheduler.run_until_idle()
        assert notes_path.exists()
        assert pad.state.window is not None

    def test_deferred_save_after_buffer_deleted(self, pad, host, scheduler, notes_path):
        pad.show()
        buf = _note_buffer(pad)
        host.emit(Event.BUF_LEAVE, buffer=buf)
        host.delete_buffer(buf, force=True)

        scheduler.run_until_idle()
        assert _saves(host) == 0
        assert not notes_path.exists()

    def test_leave_remembers_size(self, pad, host):
        pad.show()
        host.resize_window(pad.state.window, 77, 22)
        host.emit(Event.WIN_LEAVE, buffer=_note_buffer(pad))
        assert pad.state.window_sizes.floating_width == 77

    def test_exit_saves_every_note(self, pad, host, tmp_path, notes_path):
        other = tmp_path / "other.md"
        pad.show()
        pad.show("hsplit", str(other))
        host.append_line(_note_buffer(pad), "more")

        host.exit()
        assert notes_path.exists()
        assert other.read_text(encoding="utf-8").endswith("\nmore")

    def test_exit_without_auto_save_on_exit(self, host, scheduler, config, notes_path):
        pad = NotesPad(host, scheduler=scheduler)
        pad.setup({**config, "auto_save": False, "auto_save_on_exit": False})
        pad.show()
        host.exit()
        assert not notes_path.exists()


def test_resize_event_remembers_size(pad, host):
    pad.show("vsplit")
    host.resize_window(pad.state.window, 60, 38)
    host.resize_screen(100, 40)
    assert pad.state.window_sizes.vsplit_width == 60
