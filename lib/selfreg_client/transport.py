from __future__ import annotations

import json
import ssl
from typing import Any

import httpx

from .errors import ApiError, AuthError, NetworkError
from .config_types import ClientConfig


def _verify_setting(cfg: ClientConfig) -> ssl.SSLContext | bool:
    if cfg.ca_cert:
        return ssl.create_default_context(cafile=cfg.ca_cert)
    return True


class Transport:
    def __init__(self, cfg: ClientConfig, *, transport: httpx.BaseTransport | None = None):
        self._cfg = cfg
        auth = None
        if cfg.username is not None and cfg.password is not None:
            auth = httpx.BasicAuth(cfg.username, cfg.password)

        self._client = httpx.Client(
            base_url=cfg.base_url.rstrip("/"),
            timeout=cfg.timeout_s,
            headers={"User-Agent": "selfreg-client/0.1.0"},
            auth=auth,
            verify=_verify_setting(cfg),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def request(self, method: str, path: str) -> Any:
        try:
            r = self._client.request(method, path)
        except httpx.RequestError as e:
            raise NetworkError(str(e)) from e

        data: Any = None
        text = None
        try:
            data = r.json()
        except ValueError:
            text = r.text

        if r.status_code >= 400:
            msg = f"{method} {path} failed with {r.status_code}"
            details = None

            # Distribution API errors: {"errors": [{"code": ..., "message": ...}]}
            if isinstance(data, dict) and isinstance(data.get("errors"), list) and data["errors"]:
                first = data["errors"][0]
                details = json.dumps(data, ensure_ascii=False)
                if isinstance(first, dict) and first.get("message"):
                    msg = f"{msg}: {first['message']}"
            elif text:
                details = text[:1000]

            if r.status_code in (401, 403):
                raise AuthError(r.status_code, msg, details)
            raise ApiError(r.status_code, msg, details)

        return data if data is not None else r.text
