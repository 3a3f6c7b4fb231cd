from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .errors import ParseError

HISTORY_DISPLAYS = {"args", "env", "all"}


@dataclass(frozen=True)
class RootFlags:
    select: list[str] = field(default_factory=list)
    timeless: bool = False
    recent: int | None = None
    all: bool = False

    def to_args(self) -> list[str]:
        args: list[str] = []
        if self.all:
            args.append("--all")
        for selector in self.select:
            args += ["-s", selector]
        if self.recent is not None:
            args += ["--recent", str(self.recent)]
        elif self.timeless:
            args.append("--timeless")
        return args


@dataclass(frozen=True)
class HistoryShowArgs:
    queries: list[str]
    limit: int = 10
    offset: int = 0
    display: str = "args"


@dataclass(frozen=True)
class DumpedArgs:
    root: RootFlags
    history_show: HistoryShowArgs | None = None


def parse_dump_args(text: str) -> DumpedArgs:
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ParseError(f"invalid --dump-args output: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError("invalid --dump-args output: expected an object")

    # Newer runners nest the root flags under `root_args`.
    root_raw = data.get("root_args") if isinstance(data.get("root_args"), dict) else data
    root = RootFlags(
        select=_str_list(root_raw.get("select") or root_raw.get("filter")),
        timeless=bool(root_raw.get("timeless")),
        recent=_opt_int(root_raw.get("recent")),
        all=bool(root_raw.get("all")),
    )
    return DumpedArgs(root=root, history_show=_history_show(data.get("subcmd")))


def _history_show(subcmd: Any) -> HistoryShowArgs | None:
    if not isinstance(subcmd, dict):
        return None
    history = subcmd.get("History")
    if not isinstance(history, dict):
        return None
    inner = history.get("subcmd")
    if not isinstance(inner, dict):
        return None
    show = inner.get("Show")
    if not isinstance(show, dict):
        return None
    queries = show.get("queries")
    if queries is None and show.get("script") is not None:
        queries = [show.get("script")]
    display = str(show.get("display") or "args").lower()
    if display not in HISTORY_DISPLAYS:
        raise ParseError(f"unknown history display: {display}")
    return HistoryShowArgs(
        queries=_str_list(queries) or ["-"],
        limit=_opt_int(show.get("limit")) or 10,
        offset=_opt_int(show.get("offset")) or 0,
        display=display,
    )


def _str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


def _opt_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
