from __future__ import annotations

import sys
from pathlib import Path

import typer

from ..config import load_config
from ..runner import make_theme
from ..selector import Selector
from ..terminal import ENTER
from .common import pick


def read_options(file: Path | None) -> list[str]:
    if file is None:
        text = sys.stdin.read()
    else:
        text = file.read_text(encoding="utf-8")
    return [line for line in text.splitlines() if line.strip()]


def select(
        file: Path | None = typer.Argument(None, exists=True, dir_okay=False, help="Read options from FILE instead of stdin."),
        offset: int = typer.Option(1, "--offset", min=0, help="Number shown next to the first option."),
        sequence: str = typer.Option("", "--sequence", help="Keys to play back before reading the keyboard."),
        multi: bool = typer.Option(False, "--multi", help="Allow selecting a range with v/V."),
):
    """Pick one (or, with --multi, several) lines and print them to stdout."""
    cfg = load_config()
    options = read_options(file)

    selector = Selector(options, offset=offset, theme=make_theme(cfg))
    if multi:
        selector.register_keys_virtual(ENTER, lambda lo, hi, picked: None, "select the range", single=False)

    result = pick(selector, sequence=sequence, empty_msg="Nothing to select")
    for line in result.options:
        typer.echo(line)
