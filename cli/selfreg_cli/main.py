from __future__ import annotations

import typer

from .commands import config_cmd
from .commands.install_cmd import install, render
from .commands.verify import verify
from .logging_ import setup_logging


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="selfreg",
        help="Provision a self-hosted Docker registry (TLS + htpasswd) on this host.",
        no_args_is_help=True,
    )

    app.command("install")(install)
    app.command("verify")(verify)
    app.command("render")(render)
    app.add_typer(config_cmd.app, name="config")

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose)

    return app


app = _build_app()
