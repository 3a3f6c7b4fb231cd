from __future__ import annotations

import os

import typer

from .. import console
from ..config import config_path, default_config, load_config, save_config

app = typer.Typer(help="Manage local CLI settings (~/.config/hs-util/config.toml).")

KEYS = ("exe", "home", "color", "timeout_s", "top.ignore", "top.poll_interval_s")


@app.command("init")
def init_settings(
        force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
        exe: str = typer.Option(
            "hs",
            "--exe",
            prompt="Host runner executable",
            help="Executable used when HS_EXE is not exported.",
        ),
):
    path = config_path()
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    cfg = default_config()
    cfg.exe = exe.strip()
    if not cfg.exe:
        console.err("Executable cannot be empty.")
        raise typer.Exit(code=2)
    saved = save_config(cfg)
    console.ok(f"Config written: {saved}")


@app.command("show")
def show_settings():
    cfg = load_config()
    typer.echo(
        f"exe={cfg.exe} home={cfg.home or '(unset)'} color={str(cfg.color).lower()} timeout_s={cfg.timeout_s} "
        f"top.ignore={','.join(cfg.top.ignore)} top.poll_interval_s={cfg.top.poll_interval_s}"
    )


@app.command("get")
def get_setting(
        key: str = typer.Argument(..., help=f"Setting key ({', '.join(KEYS)})."),
):
    cfg = load_config()
    k = key.strip().lower()
    values = {
        "exe": cfg.exe,
        "home": cfg.home,
        "color": str(cfg.color).lower(),
        "timeout_s": str(cfg.timeout_s),
        "top.ignore": ",".join(cfg.top.ignore),
        "top.poll_interval_s": str(cfg.top.poll_interval_s),
    }
    if k not in values:
        console.err(f"Unknown setting: {key}")
        raise typer.Exit(code=2)
    typer.echo(values[k])


@app.command("set")
def set_setting(
        exe: str | None = typer.Option(None, "--exe", help="Set the host runner executable."),
        home: str | None = typer.Option(None, "--home", help="Set the fallback home directory."),
        color: bool | None = typer.Option(None, "--color/--no-color", help="Enable or disable colors."),
        timeout_s: float | None = typer.Option(
            None, "--timeout", min=0, help="Seconds a host runner call may take (0 disables the limit)."
        ),
        top_ignore: list[str] | None = typer.Option(
            None, "--top-ignore", help="Script name prefix hidden from `top` (repeatable, replaces the list)."
        ),
        poll_interval_s: float | None = typer.Option(
            None, "--poll-interval", min=0.05, help="Seconds between polls for `top --poll`."
        ),
):
    cfg = load_config()
    if exe is not None:
        if not exe.strip():
            console.err("Executable cannot be empty.")
            raise typer.Exit(code=2)
        cfg.exe = exe.strip()
    if home is not None:
        cfg.home = home.strip()
    if color is not None:
        cfg.color = color
    if timeout_s is not None:
        cfg.timeout_s = timeout_s
    if top_ignore:
        cfg.top.ignore = [v for v in top_ignore if v.strip()]
    if poll_interval_s is not None:
        cfg.top.poll_interval_s = poll_interval_s
    saved = save_config(cfg)
    console.ok(f"Settings updated: {saved}")
