from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

import typer
from hs_client import EnvError, HostRunner, HsClientError
from hs_client.env import HsEnv

from .. import console
from ..config import load_config
from ..highlight import EmphasisRange, FormattedLine
from ..runner import make_runner, make_theme
from ..selector import Selector
from ..terminal import ENTER
from .common import pick, runner_errors

logger = logging.getLogger(__name__)

RESOURCE_DIR = ".resource"


@dataclass(frozen=True)
class Script:
    id: int
    name: str


@dataclass(frozen=True)
class Resource:
    script: Script
    name: str
    base: str

    @property
    def base_path(self) -> str:
        return os.path.join(self.base, str(self.script.id))

    @property
    def path(self) -> str:
        return os.path.join(self.base_path, self.name)


def parent_pid(pid: int) -> int | None:
    res = subprocess.run(["ps", "-o", "ppid=", str(pid)], stdout=subprocess.PIPE, text=True, check=False)
    try:
        return int(res.stdout.strip())
    except ValueError:
        return None


def find_parent_script(start: int | None, running: Mapping[int, Script]) -> Script | None:
    seen: set[int] = set()
    pid = start
    while pid and pid not in seen:
        if pid in running:
            return running[pid]
        seen.add(pid)
        pid = parent_pid(pid)
    return None


def scripts_from_ls(runner: HostRunner, ls_args: Sequence[str]) -> list[Script]:
    return [Script(id=i, name=name) for i, name in runner.ls_ids(ls_args)]


def find_scripts(runner: HostRunner, ls_args: Sequence[str]) -> list[Script]:
    if ls_args:
        return scripts_from_ls(runner, ls_args)

    running: dict[int, Script] = {}
    for p in runner.top():
        name = p.msg.split(maxsplit=1)[0] if p.msg else ""
        running[p.pid] = Script(id=p.script_id, name=name)

    # start from the grand-parent in case we were called through `hs`
    start = parent_pid(os.getppid())
    script = find_parent_script(start, running)
    if script is not None:
        return [script]

    console.warn("Can't find script with top. List all resources for active scripts")
    return scripts_from_ls(runner, [])


def list_resources(base: str, scripts: Iterable[Script]) -> list[Resource]:
    """Existing resource files per script, newest first."""
    ret: list[Resource] = []
    for script in scripts:
        directory = os.path.join(base, str(script.id))
        if not os.path.isdir(directory):
            continue
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.stat().st_mtime, reverse=True)
        ret.extend(Resource(script=script, name=e.name, base=base) for e in entries)
    return ret


class ResourceSelector(Selector):
    """Rows read `<script name right-aligned> <resource name>`."""

    _max_name_len = 0

    def load_resources(self, resources: Sequence[Resource]) -> None:
        self.load(resources)
        self._max_name_len = max(
            (len(r.script.name) + self._pos_len(i) for i, r in enumerate(self.options)),
            default=0,
        )

    def _pos_len(self, index: int) -> int:
        return len(str(index + self.display_offset))

    def format_option(self, index: int) -> FormattedLine:
        resource: Resource = self.options[index]
        just = self._max_name_len - self._pos_len(index)
        head = f"{resource.script.name} ".rjust(just + 1)
        end = len(head) - 1
        emphasis = (EmphasisRange(end - len(resource.script.name), end, self.theme.emphasis),)
        return FormattedLine(head + resource.name, emphasis)


def resource(
        ls_args: list[str] | None = typer.Argument(None, help="`ls` queries selecting the script."),
        names: list[str] | None = typer.Option(None, "--resource", "-r", help="Resource name (repeatable)."),
        sequence: str = typer.Option("", "--sequence", hidden=True),
):
    """Locate the resource files of a script.

    Without queries, the script that invoked this utility is looked up
    through its parent processes. Without resource names, a selector over
    the existing resources is shown.
    """
    cfg = load_config()
    env = HsEnv.from_environ()
    edit = False

    with runner_errors():
        runner = make_runner(cfg, env)
        home = runner.config.home
        if not home:
            raise EnvError("No environment variable HS_HOME found")
        base = os.path.join(home, RESOURCE_DIR)

        scripts = find_scripts(runner, ls_args or [])
        if not scripts:
            raise HsClientError("Can't find script!")

        if names:
            if len(scripts) != 1:
                raise HsClientError(f"Should have exactly one script, got {len(scripts)}")
            picked = [Resource(script=scripts[0], name=n, base=base) for n in names]
        else:
            selector = ResourceSelector(theme=make_theme(cfg))
            selector.load_resources(list_resources(base, scripts))

            def _edit(_lo, _hi, _options) -> None:
                nonlocal edit
                edit = True

            selector.register_keys_virtual(["e", "E"], _edit, "edit the resource file")
            selector.register_keys_virtual(["p", "P"], lambda lo, hi, opts: None, "print the resource file path")
            selector.register_keys_virtual(ENTER, lambda lo, hi, opts: None, "do nothing", recur=True)

            picked = list(pick(selector, sequence=sequence, empty_msg="No existing resource").options)

        if edit:
            editor = shlex.split(env.require("editor"))
            paths = [r.path for r in picked]
            logger.debug("exec %s %s", editor, paths)
            os.execvp(editor[0], [*editor, *paths])

        for r in picked:
            os.makedirs(r.base_path, exist_ok=True)
            typer.echo(r.path)
