from .client import RegistryClient
from .config_types import ClientConfig
from .errors import ApiError, AuthError, NetworkError

__all__ = ["RegistryClient", "ClientConfig", "ApiError", "AuthError", "NetworkError"]
