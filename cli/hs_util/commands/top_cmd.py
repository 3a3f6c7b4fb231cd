from __future__ import annotations

import re
import subprocess
from enum import Enum
from typing import Sequence

import typer
from hs_client import HostRunner
from hs_client.env import HsEnv
from hs_client.polling import wait_for_processes
from hs_client.processes import ProcessInfo

from .. import console, shell
from ..config import AppConfig, load_config
from ..runner import make_runner, make_theme
from ..selector import Selector
from ..terminal import ENTER
from .common import pick, runner_errors


class Action(str, Enum):
    CREATE = "create"
    WAIT = "wait"
    SOURCE = "source"


def should_ignore(msg: str, ignore: Sequence[str]) -> bool:
    return any(re.match(rf"{re.escape(name)}\b", msg) for name in ignore)


def list_processes(
        runner: HostRunner,
        queries: Sequence[str],
        *,
        ignore: Sequence[str],
        self_run_id: int | None,
) -> list[ProcessInfo]:
    return [
        p
        for p in runner.top(queries)
        if p.run_id != self_run_id and not should_ignore(p.msg, ignore)
    ]


def print_pstree(pid: int) -> None:
    subprocess.run(["pstree", "-plsT", str(pid)], check=False)


def wait_command(hs_cmd: str, run_ids: Sequence[int]) -> str:
    return " ".join([hs_cmd, "--no-alias", *HostRunner.top_wait_args(run_ids)])


def anonymous_script(hs_cmd: str, processes: Sequence[ProcessInfo]) -> str:
    msg = ",".join(p.msg for p in processes)
    content = f"# [HS_HELP]: created from top {msg}\n"
    content += f"\n{wait_command(hs_cmd, [p.run_id for p in processes])}"
    return content


def poll_until_done(runner: HostRunner, cfg: AppConfig, run_ids: Sequence[int]) -> None:
    with console.status("waiting for processes...") as status:
        def _on_status(alive: list[int]) -> None:
            status.update(f"waiting for {len(alive)} process(es): {' '.join(map(str, alive))}")

        wait_for_processes(runner, run_ids, interval_s=cfg.top.poll_interval_s, on_status=_on_status)
    console.ok("all processes ended")


def top(
        queries: list[str] | None = typer.Argument(None, help="Script queries."),
        poll: bool = typer.Option(False, "--poll/--no-poll", help="Wait by polling instead of `top --wait`."),
        sequence: str = typer.Option("", "--sequence", hidden=True),
):
    """Interactively manage the running scripts.

    \b
    e.g.:
        hs-util top -s hs hs/test
    """
    cfg = load_config()
    env = HsEnv.from_environ()
    action: Action | None = None

    with runner_errors():
        runner = make_runner(cfg, env)
        processes = list_processes(runner, queries or [], ignore=cfg.top.ignore, self_run_id=env.run_id())

        selector = Selector(processes, theme=make_theme(cfg))

        def _set(value: Action):
            def _handler(_lo, _hi, _options) -> None:
                nonlocal action
                action = value

            return _handler

        selector.register_keys(["p", "P"], lambda _, p: print_pstree(p.pid), "print the ps tree")
        selector.register_keys_virtual(ENTER, lambda lo, hi, picked: None, "do nothing", recur=True)
        selector.register_keys_virtual(["a", "A"], _set(Action.CREATE), "create new anonymous script")
        selector.register_keys_virtual(["w", "W"], _set(Action.WAIT), "wait for process to end")
        selector.register_keys_virtual(
            ["c", "C"], _set(Action.SOURCE), "wait for process to end, but in the next commandline"
        )

        result = pick(selector, sequence=sequence, empty_msg="No existing process")
        picked: list[ProcessInfo] = list(result.options)
        run_ids = [p.run_id for p in picked]
        hs_cmd = env.get("cmd") or runner.config.exe

        if action is Action.WAIT:
            console.info("start waiting!")
            if poll:
                poll_until_done(runner, cfg, run_ids)
            else:
                runner.top_wait(run_ids)
        elif action is Action.SOURCE:
            shell.commandline(f"{wait_command(hs_cmd, run_ids)} && ", env.require("source"))
        elif action is Action.CREATE:
            runner.edit(
                None,
                content=anonymous_script(hs_cmd, picked),
                tags=["+top"],
                no_template=True,
                interactive=True,
            )
