from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RunnerConfig:
    exe: str
    home: str | None = None
    prefix: tuple[str, ...] = ()
    timeout_s: float | None = None
