from __future__ import annotations

import logging
from typing import Sequence

import typer
from hs_client import HostRunner, HsClientError
from hs_client.client import exact
from hs_client.env import HsEnv
from hs_client.history import HistoryEntry

from .. import console, shell
from ..config import load_config
from ..highlight import Theme
from ..runner import make_runner, make_theme
from ..selector import Selector
from .common import pick, runner_errors

logger = logging.getLogger(__name__)


def humble_own_run(runner: HostRunner, env: HsEnv) -> None:
    """Keep this utility's own run from bumping the script it was started as."""
    run_id = env.run_id()
    if run_id is not None:
        runner.history_humble(run_id)


class Historian:
    """Selector over the recorded runs of one script."""

    def __init__(
            self,
            runner: HostRunner,
            args: Sequence[str],
            *,
            theme: Theme,
            display: str | None = None,
    ):
        self.runner = runner
        dump = ["history", "show", *args]
        if display is not None:
            dump.append(f"--display={display}")
        dumped = runner.dump_args(dump)
        show = dumped.history_show
        if show is None:
            raise HsClientError("arguments do not describe `history show`")
        self.show = show

        names = runner.ls_names(show.queries, root=dumped.root)
        if not names:
            raise HsClientError(f"no script matches {' '.join(show.queries)}")
        self.script = names[0]
        console.info(f"Historian for {self.script}")

        self.selector = Selector(self.load(), offset=show.offset + 1, theme=theme)
        self.selector.register_keys_virtual(["d", "D"], self._delete, "delete the history", recur=True)

    def load(self) -> list[HistoryEntry]:
        return self.runner.history_show(
            self.script,
            limit=self.show.limit,
            offset=self.show.offset,
            display=self.show.display,
        )

    def range_query(self, lo: int, hi: int) -> str:
        """1-based, max-exclusive range as `history rm` expects it."""
        first = self.show.offset + lo + 1
        if hi - lo == 1:
            return str(first)
        return f"{first}..{self.show.offset + hi + 1}"

    def remove(self, lo: int, hi: int) -> None:
        query = self.range_query(lo, hi)
        logger.debug("history rm %s %s", self.script, query)
        self.runner.history_rm(self.script, query, display=self.show.display)

    def _delete(self, lo: int, hi: int, _options) -> None:
        self.remove(lo, hi)
        self.selector.exit_virtual()
        self.selector.load(self.load())

    def command(self, entry: HistoryEntry) -> str:
        cmd = exact(self.script)
        if entry.args:
            cmd += f" {entry.args}"
        return cmd


def historian(
        args: list[str] | None = typer.Argument(None, help="Arguments for `history show`."),
        sequence: str = typer.Option("", "--sequence", hidden=True),
):
    """Interactively run a script from its history.

    \b
    e.g.:
        hs-util historian -s hs hs/test --limit 20
    """
    cfg = load_config()
    env = HsEnv.from_environ()
    sourcing = False

    with runner_errors():
        runner = make_runner(cfg, env)
        humble_own_run(runner, env)
        h = Historian(runner, args or [], theme=make_theme(cfg))

        def _source(_index, _entry) -> None:
            nonlocal sourcing
            sourcing = True

        def _replace(index, _entry) -> None:
            nonlocal sourcing
            sourcing = True
            h.remove(index, index + 1)

        h.selector.register_keys(["c", "C"], _source, "put the command on the command line")
        h.selector.register_keys(["r", "R"], _replace, "replace the argument")

        result = pick(h.selector, sequence=sequence, empty_msg="No history")
        entry: HistoryEntry = result.options[0]
        cmd = h.command(entry)

        if sourcing:
            hs_cmd = env.get("cmd") or runner.config.exe
            shell.commandline(f"{hs_cmd} {cmd}", env.require("source"))
            return
        console.info(cmd)
        runner.exec_script(h.script, entry.args, envs=dict(entry.envs))
