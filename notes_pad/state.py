"""Per-session mutable state shared by the notes pad components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from notes_pad.config import ConfigNode, DisplayMode, validate_config


@dataclass
class WindowSizes:
    """Remembered geometry for each display mode."""

    floating_width: int
    floating_height: int
    hsplit_height: int
    vsplit_width: int

    @classmethod
    def from_config(cls, config: ConfigNode) -> WindowSizes:
        return cls(
            floating_width=config.floating.width,
            floating_height=config.floating.height,
            hsplit_height=config.split.hsplit_height,
            vsplit_width=config.split.vsplit_width,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "floating": {
                "width": self.floating_width,
                "height": self.floating_height,
            },
            "hsplit_height": self.hsplit_height,
            "vsplit_width": self.vsplit_width,
        }


@dataclass
class SessionState:
    """Everything the notes pad remembers between calls.

    ``buffers`` maps an absolute note path to the host buffer editing it and
    ``window`` is the single note window currently on screen, if any.
    """

    config: ConfigNode
    current_display_mode: DisplayMode
    current_file_path: str
    window_sizes: WindowSizes
    buffers: dict[str, int] = field(default_factory=dict)
    window: int | None = None
    is_setup: bool = False

    @classmethod
    def from_config(
        cls, config: ConfigNode | None = None, file_path: str | None = None
    ) -> SessionState:
        config = config or validate_config()
        return cls(
            config=config,
            current_display_mode=DisplayMode(config.display_mode),
            current_file_path=file_path or config.notes_file_path,
            window_sizes=WindowSizes.from_config(config),
        )
