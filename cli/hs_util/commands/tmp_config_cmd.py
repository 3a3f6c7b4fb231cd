from __future__ import annotations

import os
import shutil
import sys

import typer
from hs_client.env import HsEnv

from .. import console
from ..config import load_config
from ..runner import make_runner
from .common import runner_errors

CONFIG_ENV = "HYPER_SCRIPTER_CONFIG"


def tty_slug() -> str:
    try:
        tty = os.ttyname(sys.stdin.fileno())
    except (OSError, ValueError):
        tty = "notty"
    return tty.replace("/", "_")


def tmp_config_path(slug: str) -> str:
    return f"/tmp/.hs_config_{slug}.toml"


def tmp_config():
    """Spawn $SHELL on a temporary copy of the current runner config."""
    cfg = load_config()
    with runner_errors():
        runner = make_runner(cfg, HsEnv.from_environ())
        current = runner.config_path()

    target = tmp_config_path(tty_slug())
    shutil.copyfile(current, target)
    console.info(f"using temporary config {target}")

    shell = os.getenv("SHELL")
    if not shell:
        console.err("SHELL is not set")
        raise typer.Exit(code=2)
    env = dict(os.environ)
    env[CONFIG_ENV] = target
    os.execvpe(shell, [shell], env)
