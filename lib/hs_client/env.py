from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .errors import EnvError

ENV_MAP = {
    "name": "NAME",
    "cmd": "HS_CMD",
    "run_id": "HS_RUN_ID",
    "editor": "HS_EDITOR",
    "source": "HS_SOURCE",
    "home": "HS_HOME",
    "exe": "HS_EXE",
}


@dataclass(frozen=True)
class HsEnv:
    """Variables the host runner exports to the utilities it runs."""

    values: Mapping[str, str]

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "HsEnv":
        source = os.environ if environ is None else environ
        values = {key: source[var] for key, var in ENV_MAP.items() if source.get(var)}
        return cls(values=values)

    def get(self, key: str) -> str | None:
        if key not in ENV_MAP:
            raise KeyError(key)
        return self.values.get(key)

    def require(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise EnvError(f"No environment variable {ENV_MAP[key]} found")
        return value

    def run_id(self) -> int | None:
        raw = self.get("run_id")
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None
