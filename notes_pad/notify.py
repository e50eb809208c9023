"""User-facing notification channel.

Every message goes to the loguru logger and, when a sink is attached, to the
host editor's message area prefixed with the plugin name.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Callable

from loguru import logger

NAME = "notes-pad"


class Level(IntEnum):
    """Severity of a notification."""

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @property
    def loguru_name(self) -> str:
        return "WARNING" if self is Level.WARN else self.name


Sink = Callable[[str, Level], None]


class Notifier:
    """Single channel for every human-readable notification.

    Parameters
    ----------
    sink:
        Callable receiving ``(message, level)``, usually ``host.notify``.
        When ``None`` messages are only logged.
    """

    def __init__(self, sink: Sink | None = None, name: str = NAME) -> None:
        self.sink = sink
        self.name = name

    def __call__(self, message: str, level: Level = Level.INFO) -> None:
        logger.log(level.loguru_name, message)
        if self.sink is not None:
            self.sink(f"[{self.name}] {message}", level)

    def info(self, message: str) -> None:
        self(message, Level.INFO)

    def warn(self, message: str) -> None:
        self(message, Level.WARN)

    def error(self, message: str) -> None:
        self(message, Level.ERROR)

    def __repr__(self) -> str:
        return f"Notifier(name={self.name!r}, sink={self.sink!r})"
