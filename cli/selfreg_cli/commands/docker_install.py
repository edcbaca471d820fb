from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import httpx

from .. import console
from ..errors import ProvisionError
from ..shell import command_exists, command_success, run

logger = logging.getLogger(__name__)

DOCKER_REPO_BASE = "https://download.docker.com/linux"
KEYRING_DIR = Path("/etc/apt/keyrings")
KEYRING_PATH = KEYRING_DIR / "docker.gpg"
SOURCES_LIST_PATH = Path("/etc/apt/sources.list.d/docker.list")
OS_RELEASE_PATH = Path("/etc/os-release")

PREREQ_PACKAGES = ["ca-certificates", "curl", "gnupg"]
DOCKER_PACKAGES = [
    "docker-ce",
    "docker-ce-cli",
    "containerd.io",
    "docker-buildx-plugin",
    "docker-compose-plugin",
]
SUPPORTED_DISTROS = {"ubuntu", "debian"}
DEFAULT_DISTRO = "ubuntu"


@dataclass
class PrereqResult:
    docker_installed: bool
    compose_installed: bool

    @property
    def ready(self) -> bool:
        return self.docker_installed and self.compose_installed


def check_prereqs() -> PrereqResult:
    docker_installed = command_exists("docker")
    compose_installed = False
    if docker_installed:
        compose_installed = command_success(["docker", "compose", "version"])
    return PrereqResult(docker_installed=docker_installed, compose_installed=compose_installed)


def ensure_docker() -> bool:
    """Install Docker Engine and the Compose plugin unless both are present.

    Returns True when an installation was performed. The presence check is
    repeated afterwards, so a package set that installs cleanly but still
    leaves ``docker compose`` unusable is reported as a failure.
    """
    prereqs = check_prereqs()
    if prereqs.ready:
        console.info("Docker already installed.")
        return False
    if prereqs.docker_installed:
        console.warn("Docker is installed but the Compose plugin is missing.")
    install_docker()
    prereqs = check_prereqs()
    if not prereqs.docker_installed:
        raise ProvisionError("Docker installation finished but the docker CLI is still not on PATH.")
    if not prereqs.compose_installed:
        raise ProvisionError("Docker Compose plugin is still unavailable (docker compose version failed).")
    return True


def install_docker(
    *,
    keyring_path: Path = KEYRING_PATH,
    sources_list_path: Path = SOURCES_LIST_PATH,
    os_release_path: Path = OS_RELEASE_PATH,
) -> None:
    # No rollback: a failure after the repo is registered leaves docker.list in place.
    console.info("Installing Docker and Docker Compose...")
    run(["apt-get", "update", "-y"])
    run(["apt-get", "install", "-y", *PREREQ_PACKAGES])

    distro = detect_distro(os_release_path)
    keyring_path.parent.mkdir(parents=True, exist_ok=True)
    os.chmod(keyring_path.parent, 0o755)
    key_data = fetch_gpg_key(f"{DOCKER_REPO_BASE}/{distro}/gpg")
    run(["gpg", "--batch", "--yes", "--dearmor", "-o", str(keyring_path)], input=key_data)
    os.chmod(keyring_path, 0o644)

    arch = run(["dpkg", "--print-architecture"]).stdout.strip()
    codename = run(["lsb_release", "-cs"]).stdout.strip()
    if not arch or not codename:
        raise ProvisionError("Could not determine dpkg architecture or distribution codename.")
    sources_list_path.parent.mkdir(parents=True, exist_ok=True)
    sources_list_path.write_text(
        render_apt_source(arch=arch, distro=distro, codename=codename, keyring_path=keyring_path),
        encoding="utf-8",
    )

    run(["apt-get", "update", "-y"])
    run(["apt-get", "install", "-y", *DOCKER_PACKAGES])
    run(["systemctl", "enable", "--now", "docker"])
    console.ok("Docker installed.")


def detect_distro(os_release_path: Path = OS_RELEASE_PATH) -> str:
    values = read_os_release(os_release_path)
    distro = values.get("ID", "").lower()
    if distro in SUPPORTED_DISTROS:
        return distro
    logger.debug("os-release ID %r not in %s, using %s repo", distro, sorted(SUPPORTED_DISTROS), DEFAULT_DISTRO)
    return DEFAULT_DISTRO


def read_os_release(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    data: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        data[key.strip()] = value.strip().strip('"').strip("'")
    return data


def fetch_gpg_key(url: str) -> bytes:
    logger.debug("fetching apt key from %s", url)
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
    except httpx.RequestError as exc:
        raise ProvisionError(f"Failed to download Docker GPG key from {url}: {exc}")
    if response.status_code >= 400:
        raise ProvisionError(f"Failed to download Docker GPG key: HTTP {response.status_code} from {url}")
    return response.content


def render_apt_source(*, arch: str, distro: str, codename: str, keyring_path: Path) -> str:
    return (
        f"deb [arch={arch} signed-by={keyring_path}] "
        f"{DOCKER_REPO_BASE}/{distro} {codename} stable\n"
    )
