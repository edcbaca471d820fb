from __future__ import annotations

import typer

from .. import console
from ..config import load_config
from ..errors import ProvisionError, report_failure
from .compose import render_compose, start_registry, write_compose
from .credentials import generate_htpasswd
from .docker_install import ensure_docker
from .inputs import RegistrySettings, collect_inputs, require_root
from .tls import generate_certificate, install_trust
from .verify import docker_login


def prepare_dirs(settings: RegistrySettings) -> None:
    console.info("Creating directory structure...")
    for path in (settings.cert_dir, settings.auth_dir, settings.data_path):
        path.mkdir(parents=True, exist_ok=True)
    console.ok("Directories ready.")


def provision(settings: RegistrySettings, *, skip_docker_install: bool = False) -> None:
    """Run every step in order; the first ProvisionError aborts the rest."""
    if skip_docker_install:
        console.info("Skipping Docker installation check.")
    else:
        ensure_docker()
    prepare_dirs(settings)
    generate_certificate(settings)
    generate_htpasswd(settings)
    write_compose(settings)
    start_registry(settings)
    install_trust(settings)
    docker_login(settings)


def print_summary(settings: RegistrySettings) -> None:
    # Values are printed literally: bracketed IPv6 hosts and ${{ }} are not rich markup.
    def line(text: str = "") -> None:
        console.print(text, markup=False, soft_wrap=True)

    line()
    console.rule("[bold]Self-hosted Docker Registry is READY![/]")
    line(f"   Registry URL : {settings.registry_url}")
    line(f"   Username     : {settings.username}")
    line("   Password     : [hidden]")
    line()
    line("To push from GitHub Actions, use:")
    line(f"   registry: {settings.registry_host}")
    line("   username: ${{ secrets.REGISTRY_USER }}")
    line("   password: ${{ secrets.REGISTRY_PASS }}")
    line(f"   CA cert : copy the content of {settings.cert_path} into a secret")
    console.rule()


def install(
    address: str | None = typer.Option(None, "--address", help="Server public IP (env: REGISTRY_IP)."),
    username: str | None = typer.Option(None, "--username", help="Registry user (env: REGISTRY_USER, default admin)."),
    port: int | None = typer.Option(None, "--port", help="Published registry port (env: REGISTRY_PORT, default 5000)."),
    infra_dir: str | None = typer.Option(None, "--infra-dir", help="Directory for certs/, auth/ and compose file."),
    data_dir: str | None = typer.Option(None, "--data-dir", help="Directory for registry blobs."),
    docker_certs_dir: str | None = typer.Option(None, "--docker-certs-dir", help="Docker daemon certs.d root."),
    config_file: str | None = typer.Option(None, "--config", help="Path to config.toml (env: SELFREG_CONFIG)."),
    skip_docker_install: bool = typer.Option(
        False,
        "--skip-docker-install",
        help="Do not check for or install Docker.",
    ),
    non_interactive: bool = typer.Option(False, "--non-interactive", help="Fail if required values are missing."),
):
    """Install Docker if needed and bring up a TLS + htpasswd protected registry.

    Examples:
      sudo selfreg install --address 203.0.113.10
      sudo REGISTRY_IP=203.0.113.10 REGISTRY_PASS=... selfreg install --non-interactive
    """
    console.rule("[bold]Self-hosted Docker Registry Setup[/]")
    try:
        require_root()
        settings = collect_inputs(
            address=address,
            username=username,
            password=None,
            port=port,
            infra_dir=infra_dir,
            data_dir=data_dir,
            docker_certs_dir=docker_certs_dir,
            file_cfg=load_config(config_file),
            non_interactive=non_interactive,
        )
        provision(settings, skip_docker_install=skip_docker_install)
    except (ProvisionError, ValueError, OSError) as exc:
        report_failure(exc)
        raise typer.Exit(code=1)
    print_summary(settings)


def render(
    address: str | None = typer.Option(None, "--address", help="Server public IP (env: REGISTRY_IP)."),
    port: int | None = typer.Option(None, "--port", help="Published registry port (env: REGISTRY_PORT)."),
    infra_dir: str | None = typer.Option(None, "--infra-dir", help="Directory for certs/, auth/ and compose file."),
    data_dir: str | None = typer.Option(None, "--data-dir", help="Directory for registry blobs."),
    config_file: str | None = typer.Option(None, "--config", help="Path to config.toml (env: SELFREG_CONFIG)."),
):
    """Print the compose file `install` would write, without touching disk."""
    try:
        settings = collect_inputs(
            address=address,
            username=None,
            # Not part of the compose file; set so collection does not prompt.
            password="unused",
            port=port,
            infra_dir=infra_dir,
            data_dir=data_dir,
            docker_certs_dir=None,
            file_cfg=load_config(config_file),
            non_interactive=True,
        )
    except (ProvisionError, ValueError) as exc:
        report_failure(exc)
        raise typer.Exit(code=1)
    typer.echo(render_compose(settings), nl=False)
