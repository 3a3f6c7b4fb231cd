from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Iterable, Union

from .bindings import BindingTable, KeyBinding, RangeHandler, SingleHandler, help_lines
from .highlight import DEFAULT_THEME, FormattedLine, Theme, contains, highlight
from .terminal import (
    ARROW_DOWN,
    ARROW_UP,
    BACKSPACES,
    CTRL_C,
    ENTER,
    Terminal,
    compute_lines,
    split_keys,
)
from .virtual import VirtualState

logger = logging.getLogger(__name__)

HELP_HINT = "press h/H for help"
CONTINUE_HINT = "(press any key to continue)"
DIGITS = "0123456789"


class SelectorError(Exception):
    """Base selector outcome that is not a selection."""


class Empty(SelectorError):
    """There is no option to select from."""


class Quit(SelectorError):
    """The user left the selector."""


@dataclass(frozen=True)
class SingleResult:
    index: int
    option: Any

    is_multi: ClassVar[bool] = False

    @property
    def options(self) -> tuple[Any, ...]:
        return (self.option,)


@dataclass(frozen=True)
class MultiResult:
    lo: int
    hi: int
    options: tuple[Any, ...]

    is_multi: ClassVar[bool] = True


Result = Union[SingleResult, MultiResult]


class Mode(str, Enum):
    NORMAL = "normal"
    SEARCH = "search"
    NUMBER = "number"


def default_formatter(option: Any) -> FormattedLine:
    format_line = getattr(option, "format_line", None)
    if callable(format_line):
        line = format_line()
        if isinstance(line, FormattedLine):
            return line
        return FormattedLine(str(line))
    return FormattedLine(str(option))


class Selector:
    """Keystroke-driven list picker drawn on the error stream.

    Every frame renders the options, reads one key, dispatches it according
    to the current mode, and erases exactly the rows it drew. `run()` ends
    with a SingleResult or MultiResult, or raises Empty/Quit.
    """

    def __init__(
            self,
            options: Iterable[Any] = (),
            *,
            offset: int = 1,
            formatter: Callable[[Any], FormattedLine] | None = None,
            theme: Theme = DEFAULT_THEME,
            terminal: Terminal | None = None,
    ) -> None:
        self.options: list[Any] = list(options)
        self.display_offset = offset
        self.formatter = formatter or default_formatter
        self.theme = theme
        self.terminal = terminal
        self.bindings = BindingTable()
        self.cursor = 0
        self.mode = Mode.NORMAL
        self.search_string = ""
        self.pending_number: int | None = None
        self.virtual: VirtualState | None = None
        self._sequence: list[str] = []
        self._help_hinted = False

    # --- setup ---
    def load(self, options: Iterable[Any]) -> None:
        self.options = list(options)
        self._clamp()

    def register_keys(
            self,
            keys: str | Iterable[str],
            handler: SingleHandler,
            msg: str = "",
            recur: bool = False,
    ) -> KeyBinding:
        return self.bindings.add_single(keys, handler, msg, recur)

    def register_keys_virtual(
            self,
            keys: str | Iterable[str],
            handler: RangeHandler,
            msg: str = "",
            recur: bool = False,
            *,
            single: bool = True,
    ) -> KeyBinding:
        return self.bindings.add_virtual(keys, handler, msg, recur, single=single)

    @property
    def enter_overridden(self) -> bool:
        return self.bindings.enter_overridden()

    def can_virtual(self) -> bool:
        return self.bindings.can_virtual()

    def is_virtual_selected(self, index: int) -> bool:
        return self.virtual is not None and self.virtual.in_range(index)

    def exit_virtual(self) -> None:
        self.virtual = None

    # --- formatting ---
    def format_option(self, index: int) -> FormattedLine:
        return self.formatter(self.options[index])

    def color_line(self, index: int, line: FormattedLine) -> str:
        return highlight(
            line.text,
            self.search_string,
            line.emphasis,
            selected=self.is_virtual_selected(index),
            theme=self.theme,
        )

    def search(self, start: int, reverse: bool = False) -> int | None:
        if not self.search_string or not self.options:
            return None
        count = len(self.options)
        for step in range(count):
            index = (start - step) % count if reverse else (start + step) % count
            if contains(self.format_option(index).text, self.search_string):
                return index
        return None

    # --- loop ---
    def run(self, sequence: str = "") -> Result:
        self._sequence = split_keys(sequence)
        self.cursor = 0
        self.mode = Mode.NORMAL
        self.pending_number = None
        self.virtual = None

        while True:
            if not self.options:
                raise Empty()
            if self.virtual is not None:
                self.virtual.set_point(self.cursor)

            interactive = not self._sequence
            line_count = self._render() if interactive else 0

            key = self._next_key()
            binding: KeyBinding | None = None
            if self.mode is Mode.SEARCH:
                self._handle_search(key)
            elif self.mode is Mode.NUMBER:
                self._handle_number(key)
            elif key == ENTER and self.virtual is None and not self.enter_overridden:
                return SingleResult(self.cursor, self.options[self.cursor])
            else:
                binding = self._handle_normal(key)

            if interactive and (binding is None or binding.recurring):
                self._term().erase_lines(line_count)

            if binding is None:
                continue

            result = self._invoke(binding)
            if result is not None:
                return result
            # the callback may have replaced the options
            self._clamp()

    def _render(self) -> int:
        term = self._term()
        if not self._help_hinted:
            term.write(f"{self.theme.help_key}{HELP_HINT}{self.theme.reset}\n")
            self._help_hinted = True

        width = term.width()
        line_count = 0
        rows: list[str] = []
        for i in range(len(self.options)):
            leading = ">" if i == self.cursor else " "
            prefix = f"{leading} {i + self.display_offset}. "
            line = self.format_option(i)
            # measured on the plain text, color codes take no columns
            line_count += compute_lines(len(prefix) + len(line.text), width)
            row = prefix + self.color_line(i, line)
            if self.is_virtual_selected(i):
                row = f"{self.theme.selection}{row}{self.theme.reset}"
            rows.append(row + "\n")

        if self.mode is Mode.SEARCH:
            rows.append(f"/{self.search_string}")
        elif self.mode is Mode.NUMBER:
            rows.append(f":{self.pending_number}")
        term.write("".join(rows))
        return line_count

    def _next_key(self) -> str:
        if self._sequence:
            key = self._sequence.pop(0)
            if key == CTRL_C:
                raise SystemExit(1)
            return key
        return self._term().read_key()

    def _term(self) -> Terminal:
        if self.terminal is None:
            self.terminal = Terminal()
        return self.terminal

    def _handle_search(self, key: str) -> None:
        if key in BACKSPACES:
            if not self.search_string:
                self.mode = Mode.NORMAL
            else:
                self.search_string = self.search_string[:-1]
        elif key == ENTER:
            self.mode = Mode.NORMAL
        elif len(key) == 1 and key.isprintable():
            self.search_string += key
            found = self.search(self.cursor)
            if found is not None:
                self.cursor = found

    def _handle_number(self, key: str) -> None:
        number = self.pending_number or 0
        if key in BACKSPACES:
            number //= 10
            self.pending_number = number
            if number == 0:
                self.mode = Mode.NORMAL
                self.pending_number = None
        elif key == ENTER:
            target = max(number, self.display_offset) - self.display_offset
            self.cursor = min(target, len(self.options) - 1)
            self.mode = Mode.NORMAL
            self.pending_number = None
        elif len(key) == 1 and key in DIGITS:
            self.pending_number = number * 10 + int(key)

    def _handle_normal(self, key: str) -> KeyBinding | None:
        count = len(self.options)
        if key in ("h", "H"):
            self._show_help()
        elif key in ("q", "Q"):
            if self.virtual is None:
                raise Quit()
            self.virtual = None
        elif key in ("j", "J", ARROW_DOWN):
            self.cursor = (self.cursor + 1) % count
        elif key in ("k", "K", ARROW_UP):
            self.cursor = (self.cursor - 1 + count) % count
        elif key == "n":
            found = self.search(self.cursor + 1)
            if found is not None:
                self.cursor = found
        elif key == "N":
            found = self.search(self.cursor - 1, reverse=True)
            if found is not None:
                self.cursor = found
        elif key == "/":
            self.mode = Mode.SEARCH
            self.search_string = ""
        elif key in ("v", "V"):
            if self.virtual is not None:
                self.virtual = None
            elif self.can_virtual():
                self.virtual = VirtualState(self.cursor)
        elif len(key) == 1 and key in DIGITS:
            self.mode = Mode.NUMBER
            self.pending_number = int(key)
        else:
            return self.bindings.lookup(key, virtual=self.virtual is not None)
        return None

    def _show_help(self) -> None:
        if self._sequence:
            return
        term = self._term()
        width = term.width()
        line_count = 0
        for colored, length in help_lines(self.bindings, self.theme):
            term.write(colored + "\n")
            line_count += compute_lines(length, width)
        term.write(CONTINUE_HINT + "\n")
        line_count += 1
        self._next_key()
        term.erase_lines(line_count)

    def _invoke(self, binding: KeyBinding) -> Result | None:
        if self.virtual is None:
            index = self.cursor
            option = self.options[index]
            logger.debug("key %r on option %d", binding.keys, index)
            if binding.ranged:
                picked = [option]
                binding.handler(index, index + 1, picked)
                if not binding.recurring:
                    return MultiResult(index, index + 1, tuple(picked))
                return None
            binding.handler(index, option)
            if not binding.recurring:
                # refers to the option as it was before the callback ran
                return SingleResult(index, option)
            return None

        lo, hi = self.virtual.range()
        picked = self.options[lo:hi]
        logger.debug("key %r on range %d..%d", binding.keys, lo, hi)
        binding.handler(lo, hi, picked)
        if not binding.recurring:
            return MultiResult(lo, hi, tuple(picked))
        return None

    def _clamp(self) -> None:
        length = len(self.options)
        self.cursor = max(0, min(length - 1, self.cursor))
        if self.virtual is not None:
            self.virtual.truncate(length)
