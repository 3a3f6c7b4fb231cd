from __future__ import annotations

import os

from rich.console import Console
from rich.markup import escape

# stdout carries payloads (selected lines, paths); everything else goes to stderr
console = Console(stderr=True, no_color=bool(os.getenv("NO_COLOR")))


def info(msg: str) -> None:
    console.print(f"[bold cyan]•[/] {escape(msg)}")


def ok(msg: str) -> None:
    console.print(f"[bold green]OK[/] {escape(msg)}")


def warn(msg: str) -> None:
    console.print(f"[bold yellow]WARN[/] {escape(msg)}")


def err(msg: str) -> None:
    console.print(f"[bold red]ERR[/] {escape(msg)}")


def print(*args, **kwargs):
    """Proxy to underlying rich Console.print()."""
    console.print(*args, **kwargs)


def status(*args, **kwargs):
    """Proxy to underlying rich Console.status()."""
    return console.status(*args, **kwargs)
