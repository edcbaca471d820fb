from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console()
err_console = Console(stderr=True)


def info(msg: str) -> None:
    console.print(f"[bold blue]•[/] {escape(msg)}")


def ok(msg: str) -> None:
    console.print(f"[bold green]OK[/] {escape(msg)}")


def warn(msg: str) -> None:
    console.print(f"[bold yellow]WARN[/] {escape(msg)}")


def err(msg: str) -> None:
    err_console.print(f"[bold red]ERR[/] {escape(msg)}")


def print(*args, **kwargs):
    """Proxy to underlying rich Console.print()."""
    console.print(*args, **kwargs)


def rule(*args, **kwargs):
    """Proxy to underlying rich Console.rule()."""
    console.rule(*args, **kwargs)
