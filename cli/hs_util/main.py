from __future__ import annotations

import typer

from .commands import (
    collect_cmd,
    env_cmd,
    historian_cmd,
    import_cmd,
    resource_cmd,
    select_cmd,
    settings_cmd,
    tmp_config_cmd,
    top_cmd,
)
from .logging_ import setup_logging

# host-runner arguments (`-s hs`, `--limit 20`) are passed through untouched
PASSTHROUGH = {"ignore_unknown_options": True, "allow_extra_args": True}


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="hs-util",
        help="Companion utilities for the hs script manager",
        no_args_is_help=True,
    )

    app.add_typer(settings_cmd.app, name="settings")
    app.command("select")(select_cmd.select)
    app.command("historian", context_settings=PASSTHROUGH)(historian_cmd.historian)
    app.command("env", context_settings=PASSTHROUGH)(env_cmd.env)
    app.command("top", context_settings=PASSTHROUGH)(top_cmd.top)
    app.command("resource", context_settings=PASSTHROUGH)(resource_cmd.resource)
    app.command("import")(import_cmd.import_scripts)
    app.command("collect")(collect_cmd.collect)
    app.command("tmp-config")(tmp_config_cmd.tmp_config)

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose)

    return app


app = _build_app()
