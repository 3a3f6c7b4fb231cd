from __future__ import annotations

import time
from typing import Callable, Iterable


def wait_for_processes(
        runner,
        run_ids: Iterable[int],
        *,
        interval_s: float,
        timeout_s: float | None = None,
        on_status: Callable[[list[int]], None] | None = None,
        on_timeout: Callable[[list[int]], None] | None = None,
) -> list[int]:
    """Repoll `top --id ...` until none of the runs is alive.

    Returns the run ids still alive (empty unless the timeout hit).
    """
    ids = [int(i) for i in run_ids]
    if not ids:
        return []
    deadline = None if timeout_s is None else time.monotonic() + max(0.0, timeout_s)
    last_alive: list[int] | None = None
    while True:
        alive = sorted({p.run_id for p in runner.top(run_ids=ids)})
        if alive != last_alive:
            if on_status:
                on_status(alive)
            last_alive = alive
        if not alive:
            return []
        if deadline is not None and time.monotonic() >= deadline:
            if on_timeout:
                on_timeout(alive)
            return alive
        time.sleep(max(0.05, float(interval_s)))
