from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterable

import yaml

from .. import console
from ..shell import run
from .inputs import CERT_FILENAME, HTPASSWD_FILENAME, KEY_FILENAME, RegistrySettings

REGISTRY_IMAGE = "registry:2"
REGISTRY_CONTAINER_PORT = 5000
AUTH_REALM = "Registry Realm"


def render_compose(settings: RegistrySettings) -> str:
    compose = {
        "services": {
            "registry": {
                "image": REGISTRY_IMAGE,
                "restart": "always",
                "ports": [f"{settings.port}:{REGISTRY_CONTAINER_PORT}"],
                "environment": {
                    "REGISTRY_HTTP_TLS_CERTIFICATE": f"/certs/{CERT_FILENAME}",
                    "REGISTRY_HTTP_TLS_KEY": f"/certs/{KEY_FILENAME}",
                    "REGISTRY_AUTH": "htpasswd",
                    "REGISTRY_AUTH_HTPASSWD_PATH": f"/auth/{HTPASSWD_FILENAME}",
                    "REGISTRY_AUTH_HTPASSWD_REALM": AUTH_REALM,
                },
                "volumes": [
                    f"{settings.data_path}:/var/lib/registry",
                    f"{settings.cert_dir}:/certs:ro",
                    f"{settings.auth_dir}:/auth:ro",
                ],
            }
        }
    }
    dumped = yaml.safe_dump(compose, sort_keys=False, default_flow_style=False)
    return dumped if dumped.endswith("\n") else dumped + "\n"


def write_compose(settings: RegistrySettings, *, validate: bool = True) -> Path:
    console.info(f"Writing {settings.compose_path.name}...")
    settings.compose_path.write_text(render_compose(settings), encoding="utf-8")
    if validate:
        console.info("Validating compose file...")
        run_compose(settings, ["config", "-q"])
    console.ok(f"Wrote compose file to {settings.compose_path}")
    return settings.compose_path


def run_compose(settings: RegistrySettings, args: Iterable[str]) -> subprocess.CompletedProcess:
    cmd = ["docker", "compose", "-f", str(settings.compose_path), *args]
    return run(cmd, cwd=settings.infra_path)


def start_registry(settings: RegistrySettings) -> None:
    console.info("Starting Docker registry...")
    run_compose(settings, ["up", "-d"])
    console.ok(f"Registry is running on {settings.registry_url}")


def logs_hint(settings: RegistrySettings) -> str:
    return f"docker compose -f {settings.compose_path} logs"
