from __future__ import annotations

import httpx

from .config_types import ClientConfig
from .errors import ApiError
from .transport import Transport


class RegistryClient:
    """Minimal Docker Registry HTTP API v2 client."""

    def __init__(self, cfg: ClientConfig, *, transport: httpx.BaseTransport | None = None):
        self._t = Transport(cfg, transport=transport)

    def close(self) -> None:
        self._t.close()

    def ping(self) -> bool:
        """GET /v2/; raises AuthError when the credentials are rejected."""
        self._t.request("GET", "/v2/")
        return True

    def catalog(self) -> list[str]:
        data = self._t.request("GET", "/v2/_catalog")
        if not isinstance(data, dict):
            raise ApiError(500, "catalog returned a non-JSON body", str(data)[:1000])
        repos = data.get("repositories") or []
        return [str(r) for r in repos if isinstance(r, str)]
