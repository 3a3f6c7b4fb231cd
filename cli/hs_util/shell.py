from __future__ import annotations

import os
import shlex
from typing import Iterable

from . import console

SUPPORTED_SHELLS = ("fish", "zsh")


def shell_name(shell: str | None = None) -> str:
    raw = shell if shell is not None else os.getenv("SHELL", "")
    return os.path.basename(raw.rstrip("/"))


def commandline_script(text: str, shell: str) -> str | None:
    """Shell code that puts `text` on the user's next command line."""
    quoted = shlex.quote(text)
    if shell == "fish":
        return f"commandline {quoted}"
    if shell == "zsh":
        return f"print -z {quoted}"
    return None


def env_script(envs: Iterable[tuple[str, str]], shell: str, *, clear: bool = False) -> str | None:
    if shell not in SUPPORTED_SHELLS:
        return None
    lines: list[str] = []
    for key, value in envs:
        if shell == "fish":
            lines.append(f"set -e {key}" if clear else f"set -gx {key} {shlex.quote(value)}")
        else:
            lines.append(f"unset {key}" if clear else f"export {key}={shlex.quote(value)}")
    return "\n".join(lines)


def _write_source(source_path: str, script: str | None, shell: str) -> bool:
    if script is None:
        console.warn(f"{shell or '(unknown shell)'} not supported")
        return False
    with open(source_path, "w", encoding="utf-8") as f:
        f.write(script)
    return True


def commandline(text: str, source_path: str, shell: str | None = None) -> bool:
    name = shell_name(shell)
    return _write_source(source_path, commandline_script(text, name), name)


def apply_envs(
        envs: Iterable[tuple[str, str]],
        source_path: str,
        shell: str | None = None,
        *,
        clear: bool = False,
) -> bool:
    name = shell_name(shell)
    return _write_source(source_path, env_script(envs, name, clear=clear), name)
