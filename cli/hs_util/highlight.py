from __future__ import annotations

from dataclasses import dataclass, replace
from typing import NamedTuple, Sequence


@dataclass(frozen=True)
class Theme:
    """ANSI codes used by the selector renderer."""

    match: str = "\033[1;31m"
    selection: str = "\033[0;44m"
    selection_match: str = "\033[31;44m\033[1m"
    reset: str = "\033[0m"
    emphasis: str = "\033[1;37m"
    help_key: str = "\033[1;32m"
    help_terminal: str = "\033[1;31m"
    help_virtual: str = "\033[1;34m"
    help_single: str = "\033[1;33m"

    def plain(self) -> "Theme":
        return replace(
            self,
            match="",
            selection="",
            selection_match="",
            reset="",
            emphasis="",
            help_key="",
            help_terminal="",
            help_virtual="",
            help_single="",
        )


DEFAULT_THEME = Theme()
PLAIN_THEME = DEFAULT_THEME.plain()


class EmphasisRange(NamedTuple):
    start: int
    end: int
    color: str


@dataclass(frozen=True)
class FormattedLine:
    text: str
    emphasis: tuple[EmphasisRange, ...] = ()


def is_case_sensitive(needle: str) -> bool:
    return any(ch.isupper() for ch in needle)


def contains(text: str, needle: str) -> bool:
    if not is_case_sensitive(needle):
        text = text.lower()
    return needle in text


def find_matches(text: str, needle: str) -> list[tuple[int, int]]:
    """Non-overlapping spans of `needle` in `text`, smart case."""
    if not needle:
        return []
    target = text if is_case_sensitive(needle) else text.lower()
    spans: list[tuple[int, int]] = []
    pos = target.find(needle)
    while pos != -1:
        spans.append((pos, pos + len(needle)))
        pos = target.find(needle, pos + len(needle))
    return spans


def highlight(
        text: str,
        search: str = "",
        emphasis: Sequence[EmphasisRange] = (),
        *,
        selected: bool = False,
        theme: Theme = DEFAULT_THEME,
) -> str:
    """Insert color codes for search matches and emphasis ranges.

    Every position is painted with the match color, the color of the
    emphasis range covering it, or nothing (the row's base color). A code is
    inserted wherever the paint changes; switching from one color to another
    restates the base first so a previous bold/color never leaks through.
    """
    if not text or (not search and not emphasis):
        return text

    if selected:
        base, match_color = theme.selection, theme.selection_match
    else:
        base, match_color = theme.reset, theme.match

    n = len(text)
    paint: list[str | None] = [None] * n
    for start, end, color in emphasis:
        for i in range(max(0, start), min(n, end)):
            paint[i] = color
    for start, end in find_matches(text, search):
        for i in range(start, min(n, end)):
            paint[i] = match_color

    insertions: list[tuple[int, str]] = []
    prev: str | None = None
    for i, color in enumerate(paint):
        if color == prev:
            continue
        if color is None:
            code = base
        elif prev is None:
            code = color
        else:
            code = base + color
        insertions.append((i, code))
        prev = color
    if prev is not None:
        insertions.append((n, base))

    out = text
    for pos, code in sorted(insertions, key=lambda item: item[0], reverse=True):
        out = out[:pos] + code + out[pos:]
    return out
