from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from typing import Any

import tomli_w
from platformdirs import site_config_dir

APP_NAME = "selfreg"
CONFIG_FILENAME = "config.toml"

ENV_CONFIG_PATH = "SELFREG_CONFIG"
ENV_ADDRESS = "REGISTRY_IP"
ENV_USERNAME = "REGISTRY_USER"
ENV_PASSWORD = "REGISTRY_PASS"
ENV_PORT = "REGISTRY_PORT"
ENV_INFRA_DIR = "SELFREG_INFRA_DIR"
ENV_DATA_DIR = "SELFREG_DATA_DIR"

DEFAULT_USERNAME = "admin"
DEFAULT_PORT = 5000
DEFAULT_INFRA_DIR = "/srv/infra/registry"
DEFAULT_DATA_DIR = "/srv/data/registry"
DEFAULT_DOCKER_CERTS_DIR = "/etc/docker/certs.d"


@dataclass
class FileConfig:
    address: str = ""
    username: str = ""
    port: int | None = None
    infra_dir: str = ""
    data_dir: str = ""
    docker_certs_dir: str = ""


def config_path(override: str | None = None) -> str:
    if override:
        return override
    env_value = os.getenv(ENV_CONFIG_PATH, "").strip()
    if env_value:
        return env_value
    return f"{site_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def to_toml(cfg: FileConfig) -> dict[str, Any]:
    # Passwords never go to disk here; htpasswd holds the only copy.
    data: dict[str, Any] = {
        "address": cfg.address,
        "username": cfg.username,
        "port": cfg.port,
        "infra_dir": cfg.infra_dir,
        "data_dir": cfg.data_dir,
        "docker_certs_dir": cfg.docker_certs_dir,
    }
    return {k: v for k, v in data.items() if v not in (None, "")}


def from_toml(data: dict[str, Any]) -> FileConfig:
    port_raw = data.get("port")
    port: int | None = None
    if port_raw is not None:
        try:
            port = int(port_raw)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid port in config file: {port_raw!r}")
    return FileConfig(
        address=str(data.get("address") or "").strip(),
        username=str(data.get("username") or "").strip(),
        port=port,
        infra_dir=str(data.get("infra_dir") or "").strip(),
        data_dir=str(data.get("data_dir") or "").strip(),
        docker_certs_dir=str(data.get("docker_certs_dir") or "").strip(),
    )


def load_config(path: str | None = None) -> FileConfig:
    try:
        with open(config_path(path), "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return FileConfig()
    return from_toml(data)


def save_config(cfg: FileConfig, path: str | None = None) -> str:
    target = config_path(path)
    parent = os.path.dirname(target)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(target, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    return target


def resolve_value(option: str | None, env_name: str, file_value: str, default: str = "") -> str:
    """Option beats env, env beats the config file, the file beats the default."""
    if option is not None and option.strip():
        return option.strip()
    env_value = os.getenv(env_name, "").strip()
    if env_value:
        return env_value
    return file_value or default


def resolve_port(option: int | None, file_value: int | None) -> int:
    if option is not None:
        return option
    env_value = os.getenv(ENV_PORT, "").strip()
    if env_value:
        try:
            return int(env_value)
        except ValueError:
            raise ValueError(f"{ENV_PORT} must be an integer, got {env_value!r}")
    return file_value if file_value is not None else DEFAULT_PORT


def effective_config(
    file_cfg: FileConfig,
    *,
    address: str | None = None,
    username: str | None = None,
    port: int | None = None,
    infra_dir: str | None = None,
    data_dir: str | None = None,
    docker_certs_dir: str | None = None,
) -> FileConfig:
    """Apply option > env > file > default to every non-secret field; never prompts."""
    return FileConfig(
        address=resolve_value(address, ENV_ADDRESS, file_cfg.address),
        username=resolve_value(username, ENV_USERNAME, file_cfg.username, DEFAULT_USERNAME),
        port=resolve_port(port, file_cfg.port),
        infra_dir=resolve_value(infra_dir, ENV_INFRA_DIR, file_cfg.infra_dir, DEFAULT_INFRA_DIR),
        data_dir=resolve_value(data_dir, ENV_DATA_DIR, file_cfg.data_dir, DEFAULT_DATA_DIR),
        docker_certs_dir=(docker_certs_dir or "").strip() or file_cfg.docker_certs_dir or DEFAULT_DOCKER_CERTS_DIR,
    )
