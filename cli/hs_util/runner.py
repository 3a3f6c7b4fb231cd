from __future__ import annotations

from hs_client import HostRunner
from hs_client.config_types import RunnerConfig
from hs_client.env import HsEnv

from .config import AppConfig
from .highlight import DEFAULT_THEME, PLAIN_THEME, Theme


def make_runner(
        cfg: AppConfig,
        env: HsEnv | None = None,
        *,
        home_override: str | None = None,
) -> HostRunner:
    """Runner for the host the current utility was started from.

    The variables the host runner exports win over the local config.
    """
    env = env or HsEnv.from_environ()
    exe = env.get("exe") or cfg.exe
    home = home_override or env.get("home") or cfg.home or None
    return HostRunner(RunnerConfig(exe=exe, home=home, timeout_s=cfg.timeout_s or None))


def make_theme(cfg: AppConfig) -> Theme:
    return DEFAULT_THEME if cfg.color else PLAIN_THEME
