from __future__ import annotations

import typer
from hs_client.env import HsEnv

from .. import shell
from ..config import load_config
from ..runner import make_runner, make_theme
from ..terminal import ENTER
from .common import pick, runner_errors
from .historian_cmd import Historian, humble_own_run


def env(
        args: list[str] | None = typer.Argument(None, help="Arguments for `history show`."),
        sequence: str = typer.Option("", "--sequence", hidden=True),
):
    """Interactively apply (or clear) env sets recorded in a script's history.

    \b
    e.g.:
        hs-util env -s hs hs/test --limit 20
    """
    cfg = load_config()
    hs_env = HsEnv.from_environ()
    clear = False

    with runner_errors():
        runner = make_runner(cfg, hs_env)
        humble_own_run(runner, hs_env)
        h = Historian(runner, args or [], theme=make_theme(cfg), display="env")

        def _clear(_index, _entry) -> None:
            nonlocal clear
            clear = True

        h.selector.register_keys_virtual(ENTER, lambda lo, hi, picked: None, "apply multiple envs", single=False)
        h.selector.register_keys(["c", "C"], _clear, "clear the selected env")

        result = pick(h.selector, sequence=sequence, empty_msg="No env in history")
        envs = [pair for entry in result.options for pair in entry.envs]
        shell.apply_envs(envs, hs_env.require("source"), clear=clear)
