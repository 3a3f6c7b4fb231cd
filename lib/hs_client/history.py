from __future__ import annotations

from dataclasses import dataclass, field

ENV_INDENT = "  "


@dataclass(frozen=True)
class HistoryEntry:
    args: str
    envs: list[tuple[str, str]] = field(default_factory=list)

    def env_str(self) -> str:
        return " ".join(f"{k}={v}" for k, v in self.envs)

    def __str__(self) -> str:
        if not self.envs:
            return self.args
        if not self.args:
            return self.env_str()
        return f"{self.args} [{self.env_str()}]"


def parse_env_pair(text: str) -> tuple[str, str] | None:
    key, sep, value = text.partition("=")
    if not sep or not key:
        return None
    return key, value


def parse_history(text: str) -> list[HistoryEntry]:
    """Parse `history show` output.

    Each unindented line starts an entry (the recorded arguments, possibly
    empty); the indented `KEY=VALUE` lines under it are its env pairs.
    """
    entries: list[tuple[str, list[tuple[str, str]]]] = []
    for raw in text.splitlines():
        if raw.startswith(ENV_INDENT) and entries:
            pair = parse_env_pair(raw.strip())
            if pair is not None:
                entries[-1][1].append(pair)
            continue
        entries.append((raw.strip(), []))
    return [HistoryEntry(args=args, envs=envs) for args, envs in entries]
