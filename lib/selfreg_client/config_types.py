from __future__ import annotations
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    ca_cert: str | None = None
    timeout_s: float = 15.0
