from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from typing import Any

import tomli_w
from platformdirs import user_config_dir

APP_NAME = "hs-util"
CONFIG_FILENAME = "config.toml"
EXE_DEFAULT = "hs"
ENV_EXE = "HS_UTIL_EXE"
ENV_NO_COLOR = "NO_COLOR"
TOP_IGNORE_DEFAULT = ("util/top",)
POLL_INTERVAL_DEFAULT_S = 1.0


@dataclass
class TopConfig:
    ignore: list[str] = field(default_factory=lambda: list(TOP_IGNORE_DEFAULT))
    poll_interval_s: float = POLL_INTERVAL_DEFAULT_S


@dataclass
class AppConfig:
    exe: str = EXE_DEFAULT
    home: str = ""
    color: bool = True
    # seconds a captured runner call may take, 0 for no limit
    timeout_s: float = 0.0
    top: TopConfig = field(default_factory=TopConfig)


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig()


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    return {
        "exe": cfg.exe,
        "home": cfg.home,
        "color": cfg.color,
        "timeout_s": cfg.timeout_s,
        "top": {
            "ignore": list(cfg.top.ignore),
            "poll_interval_s": cfg.top.poll_interval_s,
        },
    }


def from_toml(data: dict[str, Any]) -> AppConfig:
    cfg = default_config()
    exe = str(data.get("exe") or "").strip()
    if exe:
        cfg.exe = exe
    cfg.home = str(data.get("home") or "").strip()
    color = data.get("color")
    if isinstance(color, bool):
        cfg.color = color
    timeout = data.get("timeout_s")
    if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout >= 0:
        cfg.timeout_s = float(timeout)

    top_raw = data.get("top") or {}
    if isinstance(top_raw, dict):
        ignore = top_raw.get("ignore")
        if isinstance(ignore, list):
            cfg.top.ignore = [str(v) for v in ignore if str(v).strip()]
        interval = top_raw.get("poll_interval_s")
        if isinstance(interval, (int, float)) and not isinstance(interval, bool) and interval > 0:
            cfg.top.poll_interval_s = float(interval)
    return cfg


def apply_env(cfg: AppConfig) -> AppConfig:
    exe = os.getenv(ENV_EXE, "").strip()
    if exe:
        cfg.exe = exe
    if os.getenv(ENV_NO_COLOR):
        cfg.color = False
    return cfg


def load_config() -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        cfg = from_toml(data)
    except FileNotFoundError:
        cfg = default_config()
    return apply_env(cfg)


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path
