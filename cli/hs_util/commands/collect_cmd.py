from __future__ import annotations

import os
from typing import Iterator

import typer
from hs_client import EnvError, HostRunner, ParseError
from hs_client.env import HsEnv

from .. import console
from ..config import load_config
from ..runner import make_runner
from .common import runner_errors

ANONYMOUS_DIR = ".anonymous"


def walk_files(root: str) -> Iterator[str]:
    """Paths of every file under `root`, relative to it, `/`-separated."""
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            rel = os.path.relpath(os.path.join(dirpath, filename), root)
            yield rel.replace(os.sep, "/")


def should_collect(rel: str) -> bool:
    parts = rel.split("/")
    if parts[0] == ANONYMOUS_DIR:
        parts = parts[1:]
    return not any(p.startswith(".") for p in parts)


def extract_name(rel: str) -> tuple[str, str]:
    """Script name and type (file extension) of a file under the home."""
    name, dot, ext = rel.rpartition(".")
    if not dot:
        return rel, ""
    prefix = ANONYMOUS_DIR + "/"
    if name.startswith(prefix):
        num = name[len(prefix):]
        if not num.isdigit():
            raise ParseError(f"unexpected anonymous script {rel}")
        name = f".{int(num)}"
    return name, ext


def collect_new(runner: HostRunner, root: str) -> list[str]:
    collected: list[str] = []
    for rel in sorted(walk_files(root)):
        if not should_collect(rel):
            continue
        name, ext = extract_name(rel)
        if runner.which(name) is not None:
            continue
        typer.echo(f"collecting script {rel}!")
        runner.edit(name, ty=ext or None, fast=True)
        collected.append(name)
    return collected


def purge_missing(runner: HostRunner) -> list[str]:
    purged: list[str] = []
    for name in runner.ls_all_names():
        path = runner.which(name)
        if path is None or os.path.exists(path):
            continue
        typer.echo(f"removing script {path}!")
        runner.rm_purge(name)
        purged.append(name)
    return purged


def collect():
    """Track untracked files in the home directory and purge scripts whose file is gone."""
    cfg = load_config()
    with runner_errors():
        runner = make_runner(cfg, HsEnv.from_environ())
        root = runner.config.home
        if not root:
            raise EnvError("No environment variable HS_HOME found")
        collected = collect_new(runner, root)
        purged = purge_missing(runner)
    console.ok(f"collected {len(collected)}, purged {len(purged)}")
