"""notes-pad command line.

Typer app providing: run a session script against a headless editor,
print the validated configuration, and print the note's content.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
import yaml
from loguru import logger

from notes_pad.config import ConfigNode, load_config, validate_config
from notes_pad.errors import NoteReadError
from notes_pad.notify import Notifier
from notes_pad.script import new_session, parse_script

app = typer.Typer(help="Persistent markdown scratchpad for editor hosts.")


def _configure_logging(verbose: bool) -> int:
    logger.remove()
    return logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="{level}: {message}",
    )


def _load(config: str) -> ConfigNode:
    try:
        return load_config(config, Notifier()) if config else validate_config()
    except FileNotFoundError:
        typer.echo(f"Error: config file not found: {config}")
        raise typer.Exit(code=1)


@app.command()
def run(
    script: str,
    config: str = "",
    width: int = 120,
    height: int = 40,
    headless: bool = False,
    verbose: bool = False,
) -> None:
    """Replay a session script ("-" reads it from stdin).

    Prints one line per command and exits with code 1 if any failed.
    """
    handler = _configure_logging(verbose)
    try:
        if script == "-":
            text = sys.stdin.read()
        else:
            path = Path(script)
            if not path.is_file():
                typer.echo(f"Error: script not found: {script}")
                raise typer.Exit(code=1)
            text = path.read_text(encoding="utf-8")

        cfg = _load(config)
        session = new_session(cfg, screen=None if headless else (width, height))
        results = session.run(parse_script(text))

        for result in results:
            marker = "ok" if result.success else "FAILED"
            typer.echo(f"{marker:<6} {result.command.raw.strip()}")
            if result.output:
                typer.echo(f"       {result.output}")

        if not all(r.success for r in results):
            raise typer.Exit(code=1)
    finally:
        logger.remove(handler)


@app.command()
def show_config(config: str = "") -> None:
    """Print the validated configuration as YAML."""
    handler = _configure_logging(False)
    try:
        cfg = _load(config)
        typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False).rstrip())
    finally:
        logger.remove(handler)


@app.command()
def cat(path: str = "", config: str = "") -> None:
    """Print the note's content (the template if it does not exist yet)."""
    handler = _configure_logging(False)
    try:
        session = new_session(_load(config), screen=None)
        store = session.pad.store
        note_path = store.resolve_path(path or None)
        try:
            lines = store.load(note_path)
        except NoteReadError as exc:
            typer.echo(f"Error: {exc}")
            raise typer.Exit(code=1)
        typer.echo("\n".join(lines))
    finally:
        logger.remove(handler)


if __name__ == "__main__":
    app()
