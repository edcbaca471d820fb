from __future__ import annotations

import ipaddress
import os
from dataclasses import dataclass, field
from pathlib import Path

import typer

from ..config import (
    DEFAULT_DATA_DIR,
    DEFAULT_DOCKER_CERTS_DIR,
    DEFAULT_INFRA_DIR,
    DEFAULT_PORT,
    ENV_ADDRESS,
    ENV_PASSWORD,
    FileConfig,
    effective_config,
)
from ..errors import MissingInput, ProvisionError

CERT_FILENAME = "registry.crt"
KEY_FILENAME = "registry.key"
HTPASSWD_FILENAME = "htpasswd"
COMPOSE_FILENAME = "docker-compose.yml"


@dataclass(frozen=True)
class RegistrySettings:
    address: str
    username: str
    password: str = field(repr=False)
    port: int = DEFAULT_PORT
    infra_dir: str = DEFAULT_INFRA_DIR
    data_dir: str = DEFAULT_DATA_DIR
    docker_certs_dir: str = DEFAULT_DOCKER_CERTS_DIR

    @property
    def infra_path(self) -> Path:
        return Path(self.infra_dir)

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)

    @property
    def cert_dir(self) -> Path:
        return self.infra_path / "certs"

    @property
    def auth_dir(self) -> Path:
        return self.infra_path / "auth"

    @property
    def compose_path(self) -> Path:
        return self.infra_path / COMPOSE_FILENAME

    @property
    def cert_path(self) -> Path:
        return self.cert_dir / CERT_FILENAME

    @property
    def key_path(self) -> Path:
        return self.cert_dir / KEY_FILENAME

    @property
    def htpasswd_path(self) -> Path:
        return self.auth_dir / HTPASSWD_FILENAME

    @property
    def registry_host(self) -> str:
        # Docker expects bracketed IPv6 literals in registry references.
        if ":" in self.address:
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"

    @property
    def registry_url(self) -> str:
        return f"https://{self.registry_host}"

    @property
    def trust_dir(self) -> Path:
        return Path(self.docker_certs_dir) / self.registry_host

    @property
    def trust_anchor_path(self) -> Path:
        return self.trust_dir / "ca.crt"


def require_root() -> None:
    if os.geteuid() != 0:
        raise ProvisionError("This command must be run as root (or with sudo).")


def normalize_address(raw: str) -> str:
    value = (raw or "").strip()
    if value.startswith("[") and value.endswith("]"):
        value = value[1:-1]
    try:
        return str(ipaddress.ip_address(value))
    except ValueError:
        raise ProvisionError(f"Invalid IP address: {raw!r}. The certificate is bound to an IP, not a hostname.")


def collect_inputs(
    *,
    address: str | None,
    username: str | None,
    password: str | None,
    port: int | None,
    infra_dir: str | None,
    data_dir: str | None,
    docker_certs_dir: str | None,
    file_cfg: FileConfig,
    non_interactive: bool,
) -> RegistrySettings:
    try:
        cfg = effective_config(
            file_cfg,
            address=address,
            username=username,
            port=port,
            infra_dir=infra_dir,
            data_dir=data_dir,
            docker_certs_dir=docker_certs_dir,
        )
    except ValueError as exc:
        raise ProvisionError(str(exc))
    address = cfg.address
    password = password if password else os.getenv(ENV_PASSWORD, "")

    if not address and not non_interactive:
        address = typer.prompt(
            "Enter your server's public IP address (e.g. 203.0.113.10)",
            default="",
            show_default=False,
        )
    if not (address or "").strip():
        raise MissingInput(f"IP address is required (pass --address or set {ENV_ADDRESS}).")

    if not password and not non_interactive:
        password = typer.prompt(
            f"Enter password for registry user '{cfg.username}'",
            default="",
            show_default=False,
            hide_input=True,
        )
    if not password:
        raise MissingInput(f"Password cannot be empty (set {ENV_PASSWORD} or answer the prompt).")

    if not 1 <= cfg.port <= 65535:
        raise ProvisionError(f"Port out of range: {cfg.port}")

    return RegistrySettings(
        address=normalize_address(address),
        username=cfg.username,
        password=password,
        port=cfg.port,
        infra_dir=cfg.infra_dir,
        data_dir=cfg.data_dir,
        docker_certs_dir=cfg.docker_certs_dir,
    )
