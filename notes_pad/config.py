"""Configuration defaults, validation and loading.

User settings are deep-merged over ``DEFAULTS`` and then sanitised: numeric
geometry is clamped to sane minimums and the display mode is checked against
``DisplayMode``.  Validation never fails; bad values fall back with a warning.
Settings are exposed via attribute access, e.g. ``config.floating.width``.
"""

from __future__ import annotations

import copy
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

import yaml

from notes_pad.notify import Notifier

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "notes_config.yml"


class DisplayMode(str, Enum):
    """How the note window is presented."""

    FLOATING = "floating"
    HSPLIT = "hsplit"
    VSPLIT = "vsplit"

    def __str__(self) -> str:
        return self.value

    @property
    def is_split(self) -> bool:
        return self is not DisplayMode.FLOATING


DEFAULTS: dict[str, Any] = {
    "display_mode": DisplayMode.FLOATING.value,
    "floating": {
        "width": 80,
        "height": 24,
        "border": "rounded",
        "title": " Notes ",
        "title_pos": "center",
        "relative": "editor",
        "style": "minimal",
        "focusable": True,
        "zindex": 50,
    },
    "split": {
        "hsplit_height": 24,
        "vsplit_width": 80,
    },
    "notes_file_path": "~/.local/share/notes_pad/notes.md",
    "filetype": "markdown",
    "auto_save": True,
    "auto_save_on_exit": True,
    "buffer_keymaps": {
        "save": "<C-s>",
        "quit": "q",
        "quit_alt": "<Esc>",
    },
}

# (section, key) -> minimum
_MINIMUMS: dict[tuple[str, str], int] = {
    ("floating", "width"): 20,
    ("floating", "height"): 10,
    ("split", "hsplit_height"): 10,
    ("split", "vsplit_width"): 20,
}

_STRINGS = ("notes_file_path", "filetype")
_FLAGS = ("auto_save", "auto_save_on_exit")
_SECTIONS = ("floating", "split", "buffer_keymaps")


class ConfigNode:
    """Recursive wrapper that turns a dict into an object with attribute access."""

    def __init__(self, data: dict[str, Any]) -> None:
        self._data = data
        for key, value in data.items():
            if isinstance(value, dict):
                setattr(self, key, ConfigNode(value))
            else:
                setattr(self, key, value)

    def __repr__(self) -> str:
        return f"ConfigNode({self._data!r})"

    def __getattr__(self, name: str) -> Any:
        # Only reached for missing keys; raising keeps getattr(obj, key, default)
        # working.
        if name.startswith("_"):
            raise AttributeError(name)
        raise AttributeError(
            f"Config has no attribute {name!r}. "
            f"Available keys: {', '.join(sorted(self._data)) or '(none)'}"
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for *key* if present, else *default*."""
        return self._data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return getattr(self, key)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def to_dict(self) -> dict[str, Any]:
        """Return the raw dictionary."""
        return self._data


def defaults() -> dict[str, Any]:
    """Return a fresh copy of the canonical default configuration."""
    return copy.deepcopy(DEFAULTS)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge *override* into a copy of *base*; keys from *override* win.

    Nested dicts are merged recursively, anything else is replaced.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_display_mode(
    mode: DisplayMode | str | None,
    fallback: DisplayMode | str,
    notifier: Notifier | None = None,
) -> DisplayMode:
    """Coerce *mode* into a ``DisplayMode``, falling back on bad input.

    ``None`` silently selects *fallback*.  Anything that does not name a
    display mode selects *fallback* and emits a warning.
    """
    fallback = DisplayMode(fallback)
    if mode is None:
        return fallback
    if isinstance(mode, DisplayMode):
        return mode

    try:
        return DisplayMode(str(mode).strip().lower())
    except ValueError:
        (notifier or Notifier()).warn(
            f"Invalid display_mode: {mode}. Using fallback ({fallback})."
        )
        return fallback


def validate_config(
    user_config: dict[str, Any] | ConfigNode | None = None,
    notifier: Notifier | None = None,
) -> ConfigNode:
    """Merge *user_config* over the defaults and sanitise the result.

    Parameters
    ----------
    user_config:
        Partial user settings.  ``None`` means "all defaults".
    notifier:
        Receives a warning for every value that had to be replaced.

    Returns
    -------
    ConfigNode
        The validated configuration.
    """
    notifier = notifier or Notifier()
    if isinstance(user_config, ConfigNode):
        user_config = user_config.to_dict()
    config = deep_merge(DEFAULTS, user_config or {})

    if config.get("display_mode") is None:
        notifier.warn(
            f"Invalid display_mode: None. Using fallback ({DEFAULTS['display_mode']})."
        )
    config["display_mode"] = validate_display_mode(
        config.get("display_mode"), DEFAULTS["display_mode"], notifier
    ).value

    for key in _STRINGS:
        value = config.get(key)
        if not isinstance(value, str) or not value.strip():
            config[key] = _fallback(key, value, notifier)
    for key in _FLAGS:
        if not isinstance(config.get(key), bool):
            config[key] = _fallback(key, config.get(key), notifier)

    for section in _SECTIONS:
        if not isinstance(config.get(section), dict):
            notifier.warn(f"Invalid {section} section. Using defaults.")
            config[section] = copy.deepcopy(DEFAULTS[section])

    for (section, key), minimum in _MINIMUMS.items():
        value = _as_int(
            f"{section}.{key}",
            config[section].get(key),
            DEFAULTS[section][key],
            notifier,
        )
        config[section][key] = max(minimum, value)

    floating = config["floating"]
    for key in ("border", "title", "title_pos", "relative", "style"):
        if not isinstance(floating.get(key), str):
            floating[key] = _fallback(f"floating.{key}", floating.get(key), notifier)
    if not isinstance(floating.get("focusable"), bool):
        floating["focusable"] = _fallback(
            "floating.focusable", floating.get("focusable"), notifier
        )
    floating["zindex"] = _as_int(
        "floating.zindex",
        floating.get("zindex"),
        DEFAULTS["floating"]["zindex"],
        notifier,
    )

    # An empty or null key leaves the binding unset.
    keymaps = config["buffer_keymaps"]
    for key in DEFAULTS["buffer_keymaps"]:
        value = keymaps.get(key)
        if value is not None and not isinstance(value, str):
            keymaps[key] = _fallback(f"buffer_keymaps.{key}", value, notifier)

    return ConfigNode(config)


def load_config(
    path: Path | str | None = None,
    notifier: Notifier | None = None,
) -> ConfigNode:
    """Load a YAML config file and return the validated ``ConfigNode``.

    Parameters
    ----------
    path:
        Path to the YAML config file.  Defaults to ``notes_config.yml``
        in the project root.

    Raises
    ------
    FileNotFoundError
        If the config file does not exist.
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        (notifier or Notifier()).warn(
            f"Ignoring {config_path}: expected a mapping at the top level."
        )
        data = {}
    return validate_config(data, notifier)


def _as_int(name: str, value: Any, default: int, notifier: Notifier) -> int:
    """Return *value* as an int, or *default* with a warning."""
    if not isinstance(value, bool):
        try:
            return int(value)
        except (TypeError, ValueError):
            pass
    notifier.warn(f"Invalid {name}: {value!r}. Using default ({default}).")
    return default


def _fallback(name: str, value: Any, notifier: Notifier) -> Any:
    """Return the default for dotted *name* after warning about *value*."""
    default: Any = DEFAULTS
    for part in name.split("."):
        default = default[part]
    notifier.warn(f"Invalid {name}: {value!r}. Using default ({default!r}).")
    return copy.deepcopy(default)
