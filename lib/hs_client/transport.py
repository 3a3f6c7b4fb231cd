from __future__ import annotations

import logging
import os
import shlex
import subprocess
from typing import Mapping, Sequence

from .config_types import RunnerConfig
from .errors import LaunchError, NonZeroExit

logger = logging.getLogger(__name__)

Args = str | Sequence[str]

VISIBLE_ALL = ("-s", "all", "--timeless")


class Transport:
    def __init__(self, cfg: RunnerConfig):
        self._cfg = cfg

    @property
    def config(self) -> RunnerConfig:
        return self._cfg

    def command(self, args: Args, *, all_visible: bool = False) -> list[str]:
        if isinstance(args, str):
            args = shlex.split(args)
        cmd = [self._cfg.exe, "--no-alias"]
        if self._cfg.home:
            cmd += ["-H", self._cfg.home]
        if all_visible:
            cmd += list(VISIBLE_ALL)
        cmd += list(self._cfg.prefix)
        cmd += list(args)
        return cmd

    def environ(self, envs: Mapping[str, str] | None = None) -> dict[str, str]:
        env = dict(os.environ)
        if envs:
            env.update({str(k): str(v) for k, v in envs.items()})
        return env

    def _capture(self, cmd: list[str], envs: Mapping[str, str] | None, **kwargs) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=self.environ(envs),
                timeout=self._cfg.timeout_s,
                **kwargs,
            )
        except subprocess.TimeoutExpired as e:
            raise LaunchError(f"Command `{shlex.join(cmd)}` timed out after {e.timeout}s") from e
        except OSError as e:
            raise LaunchError(f"Cannot start `{cmd[0]}`: {e.strerror or e}") from e

    def run(
            self,
            args: Args,
            *,
            all_visible: bool = False,
            envs: Mapping[str, str] | None = None,
    ) -> str:
        cmd = self.command(args, all_visible=all_visible)
        logger.debug("run %s", shlex.join(cmd))
        res = self._capture(cmd, envs)
        if res.returncode != 0:
            raise NonZeroExit(res.returncode, cmd)
        return res.stdout

    def probe(
            self,
            args: Args,
            *,
            all_visible: bool = False,
            envs: Mapping[str, str] | None = None,
    ) -> str | None:
        cmd = self.command(args, all_visible=all_visible)
        logger.debug("probe %s", shlex.join(cmd))
        res = self._capture(cmd, envs, stderr=subprocess.DEVNULL)
        if res.returncode != 0:
            return None
        return res.stdout

    def exec(
            self,
            args: Args,
            *,
            all_visible: bool = False,
            envs: Mapping[str, str] | None = None,
    ) -> None:
        cmd = self.command(args, all_visible=all_visible)
        logger.debug("exec %s", shlex.join(cmd))
        try:
            os.execvpe(cmd[0], cmd, self.environ(envs))
        except OSError as e:
            raise LaunchError(f"Cannot start `{cmd[0]}`: {e.strerror or e}") from e
