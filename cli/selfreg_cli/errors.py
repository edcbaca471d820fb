from __future__ import annotations

from . import console


class ProvisionError(RuntimeError):
    def __init__(self, message: str, *, stdout: str | None = None, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stdout = stdout or ""
        self.stderr = stderr or ""


class MissingInput(ProvisionError):
    """A required value is still empty after options, env, config and prompts."""


def _tail(text: str, *, limit: int = 8) -> str:
    if not text:
        return ""
    lines = [line for line in text.strip().splitlines() if line.strip()]
    if len(lines) <= limit:
        return "\n".join(lines)
    return "\n".join(lines[-limit:])


def report_failure(exc: Exception) -> None:
    console.err(str(exc))
    if isinstance(exc, ProvisionError):
        stdout = _tail(exc.stdout)
        stderr = _tail(exc.stderr)
        if stdout:
            console.err(f"Last stdout:\n{stdout}")
        if stderr:
            console.err(f"Last stderr:\n{stderr}")
