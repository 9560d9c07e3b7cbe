"""Test client for hybrid (RSA-OAEP + AES-256-GCM) encrypted API endpoints."""
from .client import ClientState, HybridUnwrapClient
from .config import Settings, load_settings
from .envelope import EncryptedEnvelope
from .exceptions import (
    AuthenticationFailure,
    ConfigError,
    DecryptError,
    HttpStatusError,
    HybridUnwrapError,
    InvalidStateError,
    KeyGenError,
    KeyUnwrapError,
    MalformedResponseError,
    TransportError,
)
from .version import __version__
from .logging import configure_library_defaults

__all__ = [
    "AuthenticationFailure",
    "ClientState",
    "ConfigError",
    "DecryptError",
    "EncryptedEnvelope",
    "HttpStatusError",
    "HybridUnwrapClient",
    "HybridUnwrapError",
    "InvalidStateError",
    "KeyGenError",
    "KeyUnwrapError",
    "MalformedResponseError",
    "Settings",
    "TransportError",
    "__version__",
    "load_settings",
]

configure_library_defaults()
