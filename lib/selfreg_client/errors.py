from __future__ import annotations


class RegistryClientError(Exception):
    """Base client error."""


class NetworkError(RegistryClientError):
    """Transport/network layer error, including TLS verification failures."""


class ApiError(RegistryClientError):
    def __init__(self, status_code: int, message: str, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AuthError(ApiError):
    """Auth-related API error."""
