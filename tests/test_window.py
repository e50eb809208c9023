"""Tests for note window geometry and creation."""

from unittest.mock import patch

import pytest

from notes_pad.api import NotesPad
from notes_pad.config import DisplayMode
from notes_pad.errors import HostOperationError
from notes_pad.memory_host import MemoryHost
from notes_pad.notify import Level
from notes_pad.window import WINDOW_OPTIONS


@pytest.fixture
def buf(pad):
    return pad.registry.get_or_create(pad.state.current_file_path)


class TestFloatingGeometry:
    def test_centered_at_configured_size(self, pad):
        geometry = pad.window.floating_geometry()
        assert (geometry.width, geometry.height) == (80, 24)
        assert (geometry.row, geometry.col) == (8, 20)
        assert geometry.border == "rounded"
        assert geometry.title == " Notes "
        assert geometry.title_pos == "center"
        assert geometry.zindex == 50

    def test_clamped_to_small_screen(self, pad, host):
        host.screen = (60, 20)
        geometry = pad.window.floating_geometry()
        assert (geometry.width, geometry.height) == (56, 16)
        assert (geometry.row, geometry.col) == (2, 2)

    def test_never_below_one_cell(self, pad, host):
        host.screen = (3, 2)
        geometry = pad.window.floating_geometry()
        assert (geometry.width, geometry.height) == (1, 1)

    def test_uses_remembered_size(self, pad):
        pad.state.window_sizes.floating_width = 100
        pad.state.window_sizes.floating_height = 30
        geometry = pad.window.floating_geometry()
        assert (geometry.width, geometry.height) == (100, 30)
        assert (geometry.row, geometry.col) == (5, 10)

    def test_empty_title_is_omitted(self, host, scheduler, config):
        pad = NotesPad(host, scheduler=scheduler)
        pad.setup({**config, "floating": {"title": ""}})
        geometry = pad.window.floating_geometry()
        assert geometry.title is None
        assert geometry.title_pos is None

    def test_no_display(self, scheduler, config):
        pad = NotesPad(MemoryHost(screen=None), scheduler=scheduler)
        pad.setup(config)
        assert pad.window.display_available() is False
        assert pad.window.floating_geometry() is None


class TestCreateSplit:
    def test_hsplit_uses_height(self, pad, host, buf):
        win = pad.window.create_split(buf, DisplayMode.HSPLIT)
        assert host.windows[win].kind == "hsplit"
        assert host.windows[win].height == 24

    def test_vsplit_uses_width(self, pad, host, buf):
        pad.state.window_sizes.vsplit_width = 42
        win = pad.window.create_split(buf, "vsplit")
        assert host.windows[win].kind == "vsplit"
        assert host.windows[win].width == 42

    def test_invalid_mode(self, pad, host, buf):
        assert pad.window.create_split(buf, DisplayMode.FLOATING) is None
        assert host.messages_at(Level.ERROR) == [
            "[notes-pad] Invalid split mode: floating"
        ]

    def test_host_rejects_split(self, pad, host, buf):
        with patch.object(
            host, "open_split", side_effect=HostOperationError("E36: Not enough room")
        ):
            assert pad.window.create_split(buf, DisplayMode.HSPLIT) is None
        assert "Failed to create split: E36" in host.messages_at(Level.ERROR)[0]


def test_open_floating_failure(pad, host, buf):
    geometry = pad.window.floating_geometry()
    with patch.object(host, "open_floating", side_effect=HostOperationError("E5")):
        assert pad.window.open_floating(buf, geometry) is None
    assert "Failed to create floating window: E5" in host.messages_at(Level.ERROR)[0]


def test_apply_window_options(pad, host, buf):
    win = pad.window.create_split(buf, DisplayMode.HSPLIT)
    pad.window.apply_window_options(win)
    assert host.windows[win].options == dict(WINDOW_OPTIONS)


class TestRememberSize:
    @pytest.mark.parametrize(
        "mode,expected",
        [
            ("floating", {"floating": {"width": 70, "height": 20},
                          "hsplit_height": 24, "vsplit_width": 80}),
            ("hsplit", {"floating": {"width": 80, "height": 24},
                        "hsplit_height": 20, "vsplit_width": 80}),
            ("vsplit", {"floating": {"width": 80, "height": 24},
                        "hsplit_height": 24, "vsplit_width": 70}),
        ],
    )
    def test_records_only_the_current_mode(self, pad, host, mode, expected):
        pad.show(mode)
        host.resize_window(pad.state.window, 70, 20)
        pad.window.remember_size()
        assert pad.state.window_sizes.to_dict() == expected

    def test_without_window_is_noop(self, pad):
        before = pad.state.window_sizes.to_dict()
        pad.window.remember_size()
        assert pad.state.window_sizes.to_dict() == before
