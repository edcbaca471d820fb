from __future__ import annotations

import os

import typer

from .. import console
from ..config import ENV_PASSWORD, config_path, effective_config, load_config, save_config
from ..errors import ProvisionError
from .inputs import normalize_address

app = typer.Typer(help="Manage selfreg defaults (config.toml under the system config dir).")


@app.command("init")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
    address: str | None = typer.Option(None, "--address", help="Default server IP (env: REGISTRY_IP)."),
    username: str | None = typer.Option(None, "--username", help="Default registry user (env: REGISTRY_USER)."),
    port: int | None = typer.Option(None, "--port", help="Published registry port (env: REGISTRY_PORT)."),
    infra_dir: str | None = typer.Option(None, "--infra-dir", help="Directory for certs/, auth/, compose."),
    data_dir: str | None = typer.Option(None, "--data-dir", help="Directory for registry blobs."),
    docker_certs_dir: str | None = typer.Option(None, "--docker-certs-dir", help="certs.d root."),
    config_file: str | None = typer.Option(None, "--config", help="Write to this path instead."),
):
    """Write the effective settings (options, env, defaults) to config.toml."""
    path = config_path(config_file)
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    try:
        cfg = effective_config(
            load_config(config_file),
            address=address,
            username=username,
            port=port,
            infra_dir=infra_dir,
            data_dir=data_dir,
            docker_certs_dir=docker_certs_dir,
        )
        if cfg.address:
            cfg.address = normalize_address(cfg.address)
    except (ProvisionError, ValueError) as exc:
        console.err(str(exc))
        raise typer.Exit(code=1)
    saved = save_config(cfg, config_file)
    console.ok(f"Config written: {saved}")


@app.command("show")
def show_config(
    config_file: str | None = typer.Option(None, "--config", help="Read this path instead."),
):
    """Print the settings `install` would use, before prompting."""
    path = config_path(config_file)
    try:
        cfg = effective_config(load_config(config_file))
    except ValueError as exc:
        console.err(f"Failed to resolve settings from {path}: {exc}")
        raise typer.Exit(code=1)
    exists = os.path.exists(path)
    password_state = "(set)" if os.getenv(ENV_PASSWORD) else "(empty)"
    console.print(f"config={path}{'' if exists else ' (missing, defaults apply)'}", markup=False, soft_wrap=True)
    console.print(
        f"address={cfg.address or '-'} username={cfg.username} port={cfg.port} password={password_state}",
        markup=False,
        soft_wrap=True,
    )
    console.print(
        f"infra_dir={cfg.infra_dir} data_dir={cfg.data_dir} docker_certs_dir={cfg.docker_certs_dir}",
        markup=False,
        soft_wrap=True,
    )
