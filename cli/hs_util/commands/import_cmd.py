from __future__ import annotations

import os
import shutil
import subprocess
import tempfile

import typer
from hs_client import EnvError, HostRunner, NonZeroExit
from hs_client.env import HsEnv

from .. import console
from ..config import load_config
from ..runner import make_runner
from .common import runner_errors

GIT_FILES = (".git", ".gitignore")


def target_name(name: str, namespace: str | None) -> str:
    # anonymous scripts keep their numbered names
    if namespace is None or name.startswith("."):
        return name
    return f"{namespace}/{name}"


def copy_unless_exists(src_dir: str, dst_dir: str, target: str) -> bool:
    src = os.path.join(src_dir, target)
    dst = os.path.join(dst_dir, target)
    if not os.path.exists(src) or os.path.exists(dst):
        return False
    if os.path.isdir(src):
        shutil.copytree(src, dst)
    else:
        shutil.copy2(src, dst)
    console.info(f"copied {src} -> {dst}")
    return True


def import_dir(runner: HostRunner, directory: str, namespace: str | None) -> int:
    """Import every script of the home at `directory`; returns the number imported."""
    other = runner.with_home(os.path.abspath(directory))
    console.info(f"import directory {directory}")

    imported = 0
    for script in other.ls_plain(all_visible=True):
        new_name = target_name(script.name, namespace)
        if runner.which(new_name) is not None:
            console.warn(f"{new_name} already exists!")
            continue
        console.info(f"importing {script.name} as {new_name}...")
        try:
            content = other.cat(script.name)
        except NonZeroExit as exc:
            console.warn(str(exc))
            continue
        runner.edit(
            new_name,
            content=content,
            tags=script.tags,
            ty=script.ty,
            no_template=True,
            fast=True,
        )
        imported += 1

    if namespace is None:
        home = runner.config.home
        if not home:
            raise EnvError("No environment variable HS_HOME found")
        for target in GIT_FILES:
            copy_unless_exists(directory, home, target)
    return imported


def git_clone(source: str, dest: str) -> None:
    cmd = ["git", "clone", source, dest]
    res = subprocess.run(cmd, check=False)
    if res.returncode != 0:
        raise NonZeroExit(res.returncode, cmd)


def import_source(runner: HostRunner, source: str, namespace: str | None) -> int:
    if os.path.isdir(source):
        return import_dir(runner, source, namespace)
    with tempfile.TemporaryDirectory(prefix="hs-import-") as tmp:
        repo = os.path.join(tmp, "repo")
        git_clone(source, repo)
        return import_dir(runner, repo, namespace)


def import_scripts(
        sources: list[str] = typer.Argument(..., help="Home directories or git repository addresses."),
        namespace: str | None = typer.Option(None, "--namespace", "-n", help="Put every imported script under NAMESPACE."),
):
    """Import scripts from another home directory or git repository."""
    cfg = load_config()
    if namespace:
        console.info(f"import with namespace {namespace}")
    with runner_errors():
        runner = make_runner(cfg, HsEnv.from_environ())
        total = sum(import_source(runner, source, namespace) for source in sources)
    console.ok(f"imported {total} script(s)")
