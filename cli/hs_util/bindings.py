from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable

from .highlight import PLAIN_THEME, Theme
from .terminal import ARROW_DOWN, ARROW_UP, ENTER

SingleHandler = Callable[[int, Any], Any]
RangeHandler = Callable[[int, int, list], Any]

KEY_NAMES = {
    ENTER: "<Enter>",
    ARROW_UP: "<Arrow Up>",
    ARROW_DOWN: "<Arrow Down>",
}


class Scope(str, Enum):
    SINGLE = "single"
    VIRTUAL = "virtual"
    BOTH = "both"


@dataclass(frozen=True)
class KeyBinding:
    keys: tuple[str, ...]
    handler: Callable[..., Any]
    message: str = ""
    recurring: bool = False
    # ranged handlers take (lo, hi, options); plain ones take (index, option)
    ranged: bool = False


@dataclass(frozen=True)
class HelpEntry:
    keys: tuple[str, ...]
    message: str
    scope: Scope
    recurring: bool


def _as_keys(keys: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(keys, str):
        return (keys,)
    return tuple(keys)


class BindingTable:
    def __init__(self) -> None:
        self.single: dict[str, KeyBinding] = {}
        self.virtual: dict[str, KeyBinding] = {}
        self._order: list[KeyBinding] = []

    def add_single(
            self,
            keys: str | Iterable[str],
            handler: SingleHandler,
            message: str = "",
            recurring: bool = False,
    ) -> KeyBinding:
        binding = KeyBinding(_as_keys(keys), handler, message, recurring, ranged=False)
        for key in binding.keys:
            self.single[key] = binding
        self._order.append(binding)
        return binding

    def add_virtual(
            self,
            keys: str | Iterable[str],
            handler: RangeHandler,
            message: str = "",
            recurring: bool = False,
            *,
            single: bool = True,
    ) -> KeyBinding:
        binding = KeyBinding(_as_keys(keys), handler, message, recurring, ranged=True)
        for key in binding.keys:
            self.virtual[key] = binding
            current = self.single.get(key)
            if single and (current is None or current.ranged):
                self.single[key] = binding
        self._order.append(binding)
        return binding

    def lookup(self, key: str, *, virtual: bool) -> KeyBinding | None:
        table = self.virtual if virtual else self.single
        return table.get(key)

    def can_virtual(self) -> bool:
        return bool(self.virtual)

    def enter_overridden(self) -> bool:
        return ENTER in self.single

    def help_entries(self) -> list[HelpEntry]:
        entries: list[HelpEntry] = []
        for binding in self._order:
            in_single = [k for k in binding.keys if self.single.get(k) is binding]
            in_virtual = [k for k in binding.keys if self.virtual.get(k) is binding]
            keys = tuple(k for k in binding.keys if k in in_single or k in in_virtual)
            if not keys:
                continue
            if in_single and in_virtual:
                scope = Scope.BOTH
            elif in_virtual:
                scope = Scope.VIRTUAL
            else:
                scope = Scope.SINGLE
            entries.append(HelpEntry(keys, binding.message, scope, binding.recurring))
        return entries


def builtin_help(table: BindingTable) -> list[HelpEntry]:
    entries: list[HelpEntry] = []
    if not table.enter_overridden():
        entries.append(HelpEntry((ENTER,), "select the option", Scope.SINGLE, False))
    if table.can_virtual():
        entries.append(HelpEntry(("v", "V"), "start or quit virtual mode", Scope.BOTH, True))
    entries += [
        HelpEntry(("k", "K", ARROW_UP), "move up", Scope.BOTH, True),
        HelpEntry(("j", "J", ARROW_DOWN), "move down", Scope.BOTH, True),
        HelpEntry(("q", "Q"), "quit selector or virtual mode", Scope.BOTH, False),
        HelpEntry(("[0~9]",), "go to the option at given number", Scope.BOTH, True),
        HelpEntry(("/",), "search for string", Scope.BOTH, True),
        HelpEntry(("n/N",), "search forwards/search backwards", Scope.BOTH, True),
    ]
    return entries


def format_help(entry: HelpEntry, *, can_virtual: bool, theme: Theme) -> str:
    keys = "/".join(KEY_NAMES.get(k, k) for k in entry.keys)
    s = f" * {theme.help_key}{keys}{theme.reset}: {entry.message}"
    if not entry.recurring:
        s += f" {theme.help_terminal}(ends the selector){theme.reset}"
    if can_virtual:
        if entry.scope is Scope.VIRTUAL:
            s += f" {theme.help_virtual}(virtual){theme.reset}"
        elif entry.scope is Scope.SINGLE:
            s += f" {theme.help_single}(non-virtual){theme.reset}"
    return s


def help_lines(table: BindingTable, theme: Theme) -> list[tuple[str, int]]:
    """(colored line, printable length) per help entry."""
    can_virtual = table.can_virtual()
    lines: list[tuple[str, int]] = []
    for entry in builtin_help(table) + table.help_entries():
        colored = format_help(entry, can_virtual=can_virtual, theme=theme)
        plain = format_help(entry, can_virtual=can_virtual, theme=PLAIN_THEME)
        lines.append((colored, len(plain)))
    return lines
