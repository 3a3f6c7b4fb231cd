from __future__ import annotations

import shlex
from typing import Iterable, Mapping, Sequence

from .args import DumpedArgs, RootFlags, parse_dump_args
from .config_types import RunnerConfig
from .history import HistoryEntry, parse_history
from .processes import ProcessInfo, parse_top
from .scripts import ScriptEntry, parse_id_name_lines, parse_ls_plain
from .transport import Args, Transport


def escape_wildcard(s: str) -> str:
    return s.replace("*", "\\*")


def exact(name: str) -> str:
    """Query matching exactly one script by name, bypassing fuzzy search."""
    return f"={name}!"


class HostRunner:
    def __init__(self, cfg: RunnerConfig):
        self._t = Transport(cfg)

    @property
    def config(self) -> RunnerConfig:
        return self._t.config

    @property
    def transport(self) -> Transport:
        return self._t

    def invoke(self, args: Args, *, all_visible: bool = False, envs: Mapping[str, str] | None = None) -> str:
        return self._t.run(args, all_visible=all_visible, envs=envs)

    def with_home(self, home: str) -> "HostRunner":
        cfg = self.config
        return HostRunner(RunnerConfig(exe=cfg.exe, home=home, prefix=cfg.prefix, timeout_s=cfg.timeout_s))

    # --- arguments ---
    def dump_args(self, args: Sequence[str]) -> DumpedArgs:
        return parse_dump_args(self._t.run(["--dump-args", *args]))

    # --- listing ---
    def ls_names(self, queries: Sequence[str], *, root: RootFlags | None = None) -> list[str]:
        flags = root.to_args() if root else []
        out = self._t.run([*flags, "ls", *queries, "--grouping", "none", "--plain", "--name"])
        return out.split()

    def ls_all_names(self) -> list[str]:
        return self._t.run(["ls", "--grouping=none", "--name", "--plain"], all_visible=True).split()

    def ls_plain(self, *, all_visible: bool = True) -> list[ScriptEntry]:
        return parse_ls_plain(self._t.run(["ls", "--plain"], all_visible=all_visible))

    def ls_format(self, fmt: str, queries: Sequence[str] = (), *, all_visible: bool = False) -> str:
        args = ["ls", "--grouping=none", "--plain", "--format", fmt, *[escape_wildcard(q) for q in queries]]
        return self._t.run(args, all_visible=all_visible)

    def ls_ids(self, queries: Sequence[str]) -> list[tuple[int, str]]:
        return parse_id_name_lines(self.ls_format("{{id}} {{name}}", queries))

    # --- history ---
    def history_show(self, script: str, *, limit: int, offset: int, display: str = "args") -> list[HistoryEntry]:
        out = self._t.run(
            [
                "history",
                "show",
                exact(script),
                "--limit",
                str(limit),
                "--offset",
                str(offset),
                "--display",
                display,
            ]
        )
        return parse_history(out)

    def history_rm(self, script: str, range_query: str, *, display: str = "args") -> None:
        self._t.run(["history", "rm", exact(script), "--display", display, "--", range_query])

    def history_humble(self, event_id: int) -> None:
        self._t.run(["history", "humble", str(event_id)])

    # --- processes ---
    def top(self, queries: Sequence[str] = (), *, run_ids: Iterable[int] = ()) -> list[ProcessInfo]:
        args = ["top"]
        for run_id in run_ids:
            args += ["--id", str(run_id)]
        args += [escape_wildcard(q) for q in queries]
        return parse_top(self._t.run(args))

    @staticmethod
    def top_wait_args(run_ids: Iterable[int]) -> list[str]:
        args = ["top", "--wait"]
        for run_id in run_ids:
            args += ["--id", str(run_id)]
        return args

    def top_wait(self, run_ids: Iterable[int]) -> None:
        self._t.exec(self.top_wait_args(run_ids))

    # --- scripts ---
    def which(self, name: str, *, all_visible: bool = True) -> str | None:
        out = self._t.probe(["which", exact(name)], all_visible=all_visible)
        if out is None:
            return None
        return out.rstrip("\n")

    def cat(self, name: str, *, all_visible: bool = True) -> str:
        return self._t.run(["cat", exact(name)], all_visible=all_visible)

    def edit(
            self,
            name: str | None,
            *,
            content: str | None = None,
            tags: Sequence[str] = (),
            ty: str | None = None,
            fast: bool = False,
            no_template: bool = False,
            interactive: bool = False,
    ) -> str:
        """Create or update a script. `interactive` hands the terminal to the editor."""
        args = ["edit"]
        if name is not None:
            args.append(exact(name))
        if tags:
            args += ["-t", ",".join(tags)]
        if ty:
            args += ["-T", ty]
        if no_template:
            args.append("--no-template")
        if fast:
            args.append("--fast")
        if content is not None:
            args += ["--", content]
        if interactive:
            self._t.exec(args)
            return ""
        return self._t.run(args)

    def exec_script(self, name: str, args: str = "", *, envs: Mapping[str, str] | None = None) -> None:
        """Replace this process with a run of `name`, recorded args appended."""
        self._t.exec([exact(name), *shlex.split(args)], envs=envs)

    def rm_purge(self, name: str) -> None:
        self._t.run(["rm", "--purge", exact(name)], all_visible=True)

    def config_path(self) -> str:
        return self._t.run(["config"]).strip()
