from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

from .errors import ProvisionError

logger = logging.getLogger(__name__)


def run(
    cmd: Sequence[str],
    *,
    input: str | bytes | None = None,
    cwd: str | Path | None = None,
    label: str | None = None,
) -> subprocess.CompletedProcess:
    """Run a command to completion and raise ProvisionError on a non-zero exit.

    Secrets must go through ``input``; argv is logged verbatim at DEBUG.
    Passing bytes as ``input`` switches the call to binary mode.
    """
    args = [str(part) for part in cmd]
    display = label or shlex.join(args)
    logger.debug("run: %s (cwd=%s)", shlex.join(args), cwd or ".")
    text = not isinstance(input, bytes)
    try:
        res = subprocess.run(
            args,
            input=input,
            cwd=str(cwd) if cwd is not None else None,
            text=text,
            capture_output=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise ProvisionError(f"Command not found: {args[0]}") from exc
    if res.returncode != 0:
        raise ProvisionError(
            f"{display} failed with exit code {res.returncode}",
            stdout=_as_text(res.stdout),
            stderr=_as_text(res.stderr),
        )
    return res


def command_exists(cmd: str) -> bool:
    return shutil.which(cmd) is not None


def command_success(cmd: Sequence[str]) -> bool:
    try:
        subprocess.run(list(cmd), check=True, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False
    return True


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
