from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer
from hs_client import EnvError, HsClientError, NonZeroExit, ParseError

from .. import console
from ..selector import Empty, Quit, Result, Selector


@contextmanager
def runner_errors() -> Iterator[None]:
    """Report host-runner failures and leave with a matching exit code."""
    try:
        yield
    except NonZeroExit as exc:
        console.err(str(exc))
        raise typer.Exit(code=exc.exit_code or 1)
    except (EnvError, ParseError) as exc:
        console.err(str(exc))
        raise typer.Exit(code=2)
    except HsClientError as exc:
        console.err(str(exc))
        raise typer.Exit(code=1)


def pick(selector: Selector, *, sequence: str = "", empty_msg: str | None = None) -> Result:
    try:
        return selector.run(sequence)
    except Empty:
        if empty_msg:
            console.warn(empty_msg)
        raise typer.Exit(code=0)
    except Quit:
        raise typer.Exit(code=0)
