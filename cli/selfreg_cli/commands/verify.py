from __future__ import annotations

import typer

from selfreg_client import ApiError, AuthError, ClientConfig, NetworkError, RegistryClient

from .. import console
from ..config import load_config
from ..errors import ProvisionError, report_failure
from ..shell import run
from .compose import logs_hint
from .inputs import RegistrySettings, collect_inputs


def docker_login(settings: RegistrySettings) -> None:
    console.info(f"Testing login as '{settings.username}'...")
    try:
        run(
            ["docker", "login", settings.registry_host, "-u", settings.username, "--password-stdin"],
            input=settings.password,
            label=f"docker login {settings.registry_host}",
        )
    except ProvisionError as exc:
        raise ProvisionError(
            f"Login failed - check logs with: {logs_hint(settings)}",
            stdout=exc.stdout,
            stderr=exc.stderr,
        ) from exc
    console.ok("Login successful!")


def probe_api(settings: RegistrySettings, *, client: RegistryClient | None = None) -> list[str]:
    """Hit /v2/ and /v2/_catalog over TLS pinned to the generated certificate."""
    console.info(f"Probing registry API at {settings.registry_url}...")
    own_client = client is None
    if client is None:
        client = RegistryClient(
            ClientConfig(
                base_url=settings.registry_url,
                username=settings.username,
                password=settings.password,
                ca_cert=str(settings.cert_path),
            )
        )
    try:
        client.ping()
        repositories = client.catalog()
    except AuthError as exc:
        raise ProvisionError(f"Registry rejected credentials for '{settings.username}': {exc}") from exc
    except (ApiError, NetworkError) as exc:
        raise ProvisionError(f"Registry API check failed: {exc}. Check logs with: {logs_hint(settings)}") from exc
    finally:
        if own_client:
            client.close()
    console.ok(f"Registry API reachable; {len(repositories)} repositor{'y' if len(repositories) == 1 else 'ies'}.")
    for name in repositories:
        console.print(f"  - {name}")
    return repositories


def verify(
    address: str | None = typer.Option(None, "--address", help="Registry server IP (env: REGISTRY_IP)."),
    username: str | None = typer.Option(None, "--username", help="Registry user (env: REGISTRY_USER)."),
    port: int | None = typer.Option(None, "--port", help="Published registry port (env: REGISTRY_PORT)."),
    infra_dir: str | None = typer.Option(None, "--infra-dir", help="Directory holding certs/, auth/ and compose."),
    config_file: str | None = typer.Option(None, "--config", help="Path to config.toml (env: SELFREG_CONFIG)."),
    skip_login: bool = typer.Option(False, "--skip-login", help="Only probe the HTTP API, skip docker login."),
    non_interactive: bool = typer.Option(False, "--non-interactive", help="Fail instead of prompting."),
):
    """Check an existing registry: docker login plus an HTTP API probe.

    Examples:
      selfreg verify --address 203.0.113.10
      REGISTRY_PASS=... selfreg verify --skip-login
    """
    try:
        settings = collect_inputs(
            address=address,
            username=username,
            password=None,
            port=port,
            infra_dir=infra_dir,
            data_dir=None,
            docker_certs_dir=None,
            file_cfg=load_config(config_file),
            non_interactive=non_interactive,
        )
        if not settings.cert_path.exists():
            raise ProvisionError(f"Certificate not found at {settings.cert_path}. Run `selfreg install` first.")
        if not skip_login:
            docker_login(settings)
        probe_api(settings)
    except (ProvisionError, ValueError) as exc:
        report_failure(exc)
        raise typer.Exit(code=1)
