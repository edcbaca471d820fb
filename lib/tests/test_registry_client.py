import base64

import httpx
import pytest

from selfreg_client import ApiError, AuthError, ClientConfig, NetworkError, RegistryClient


def _client(handler) -> RegistryClient:
    cfg = ClientConfig(base_url="https://203.0.113.10:5000", username="admin", password="Secr3t!")
    return RegistryClient(cfg, transport=httpx.MockTransport(handler))


def test_ping_sends_basic_auth() -> None:
    seen = {}

    def _handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["path"] = request.url.path
        return httpx.Response(200, json={})

    assert _client(_handler).ping() is True
    assert seen["path"] == "/v2/"
    assert seen["auth"] == "Basic " + base64.b64encode(b"admin:Secr3t!").decode("ascii")


def test_ping_wrong_password_raises_auth_error() -> None:
    def _handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            401,
            json={"errors": [{"code": "UNAUTHORIZED", "message": "authentication required", "detail": None}]},
        )

    with pytest.raises(AuthError) as exc:
        _client(_handler).ping()
    assert exc.value.status_code == 401
    assert "authentication required" in str(exc.value)


def test_catalog_filters_junk() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v2/_catalog"
        return httpx.Response(200, json={"repositories": ["app", 3, "worker"]})

    assert _client(_handler).catalog() == ["app", "worker"]


def test_catalog_not_found_is_api_error() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"errors": [{"code": "UNSUPPORTED", "message": "catalog disabled"}]})

    with pytest.raises(ApiError) as exc:
        _client(_handler).catalog()
    assert exc.value.status_code == 404
    assert not isinstance(exc.value, AuthError)


def test_connect_error_is_network_error() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        _client(_handler).catalog()

