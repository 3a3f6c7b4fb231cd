from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessInfo:
    pid: int
    run_id: int
    script_id: int
    msg: str

    def __str__(self) -> str:
        return f"{self.pid} {self.msg}"


def parse_top(text: str) -> list[ProcessInfo]:
    """Parse `top` lines of the form `pid run_id script_id content...`."""
    ret: list[ProcessInfo] = []
    for line in text.splitlines():
        parts = line.split(maxsplit=3)
        if len(parts) < 3:
            continue
        try:
            pid, run_id, script_id = (int(p) for p in parts[:3])
        except ValueError:
            continue
        msg = parts[3].strip() if len(parts) > 3 else ""
        ret.append(ProcessInfo(pid=pid, run_id=run_id, script_id=script_id, msg=msg))
    return ret
