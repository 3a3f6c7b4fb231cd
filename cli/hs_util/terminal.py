from __future__ import annotations

import os
import shutil
import sys
from typing import TextIO

import click

ENTER = "\r"
NL = "\n"
BACKSPACES = ("\b", "\x7f")
CTRL_C = "\x03"
CTRL_D = "\x04"
ESC = "\x1b"
ARROW_UP = "\x1b[A"
ARROW_DOWN = "\x1b[B"

CURSOR_UP = "\x1b[A"
CLEAR_TO_END = "\r\x1b[J"

DEFAULT_WIDTH = 80


def compute_lines(length: int, width: int) -> int:
    """Rows a string of `length` printable chars occupies at `width` columns."""
    width = max(1, width)
    lines = 1 + length // width
    if length % width == 0:
        lines -= 1
    return lines


def erase_sequence(line_count: int) -> str:
    return CURSOR_UP * max(0, line_count) + CLEAR_TO_END


def normalize_key(key: str) -> str:
    if key == NL:
        return ENTER
    return key


def split_keys(sequence: str) -> list[str]:
    """Split a recorded key sequence; `ESC [ X` arrow sequences stay whole."""
    keys: list[str] = []
    i = 0
    while i < len(sequence):
        if sequence.startswith(ESC + "[", i) and i + 2 < len(sequence):
            keys.append(sequence[i:i + 3])
            i += 3
            continue
        keys.append(normalize_key(sequence[i]))
        i += 1
    return keys


class Terminal:
    """Raw keyboard input and row output on the error stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._pending: list[str] = []

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def width(self) -> int:
        # rows go to the error stream, stdout may be a pipe
        try:
            columns = os.get_terminal_size(self.stream.fileno()).columns
        except (OSError, ValueError):
            columns = shutil.get_terminal_size((DEFAULT_WIDTH, 24)).columns
        return columns or DEFAULT_WIDTH

    def write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()

    def erase_lines(self, line_count: int) -> None:
        self.write(erase_sequence(line_count))

    def read_key(self) -> str:
        if not self._pending:
            try:
                raw = click.getchar()
            except KeyboardInterrupt:
                raise SystemExit(1)
            except EOFError:
                raw = CTRL_D
            if raw.startswith(ESC):
                self._pending = [raw]
            else:
                # pasted text arrives in one read; hand it out one key at a time
                self._pending = list(raw)
        key = self._pending.pop(0) if self._pending else ""
        if key == CTRL_C:
            raise SystemExit(1)
        return normalize_key(key)
