from __future__ import annotations

from pathlib import Path

from .. import console
from ..errors import ProvisionError
from ..shell import run
from .inputs import RegistrySettings

HTPASSWD_IMAGE = "httpd:2"


def htpasswd_command(username: str, *, image: str = HTPASSWD_IMAGE) -> list[str]:
    # -i reads the password from stdin so it never shows up in `ps`.
    return ["docker", "run", "--rm", "-i", image, "htpasswd", "-iBn", username]


def generate_htpasswd(settings: RegistrySettings) -> Path:
    """Write a single bcrypt entry for the configured user.

    The file is replaced, not merged: a previous user's entry is dropped.
    """
    console.info(f"Creating htpasswd file for user '{settings.username}'...")
    res = run(
        htpasswd_command(settings.username),
        input=settings.password + "\n",
        label=f"htpasswd for {settings.username!r}",
    )
    entry = parse_htpasswd_output(res.stdout, settings.username)
    settings.htpasswd_path.write_text(entry + "\n", encoding="utf-8")
    console.ok("htpasswd file created.")
    return settings.htpasswd_path


def parse_htpasswd_output(stdout: str, username: str) -> str:
    lines = [line.strip() for line in (stdout or "").splitlines() if line.strip()]
    prefix = f"{username}:"
    for line in lines:
        if line.startswith(prefix) and len(line) > len(prefix):
            hashed = line[len(prefix):]
            if not hashed.startswith("$2"):
                raise ProvisionError(f"htpasswd returned a non-bcrypt hash for {username!r}.")
            return line
    raise ProvisionError(f"htpasswd produced no entry for {username!r}.", stdout=stdout)


def read_htpasswd_users(path: Path) -> list[str]:
    if not path.exists():
        return []
    users = []
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or ":" not in line:
            continue
        users.append(line.split(":", 1)[0])
    return users
