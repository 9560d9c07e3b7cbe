"""Central exception hierarchy"""
from __future__ import annotations


class HybridUnwrapError(Exception):
    """Base exception for all failures"""

    stage = "client"
    exit_code = 1

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__ or self.__class__.__name__)


class ConfigError(HybridUnwrapError):
    """Raised when configuration is missing or invalid"""

    stage = "config"
    exit_code = 3


class KeyGenError(HybridUnwrapError):
    """Raised when the RSA key pair cannot be generated"""

    stage = "keygen"
    exit_code = 10


class TransportError(HybridUnwrapError):
    """Raised on network, TLS or timeout failures"""

    stage = "transport"
    exit_code = 20


class HttpStatusError(TransportError):
    """Raised when the server answers with a non-2xx status"""

    exit_code = 21

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(message or f"Server responded with HTTP {status_code}")


class MalformedResponseError(TransportError):
    """Raised when required response headers or body fields are absent"""

    exit_code = 22


class KeyUnwrapError(HybridUnwrapError):
    """Raised when the wrapped symmetric key cannot be recovered"""

    stage = "unwrap"
    exit_code = 30


class AuthenticationFailure(HybridUnwrapError):
    """Raised when the AEAD tag does not validate"""

    stage = "decrypt"
    exit_code = 40


class DecryptError(HybridUnwrapError):
    """Raised for malformed iv, tag or key lengths"""

    stage = "decrypt"
    exit_code = 41


class InvalidStateError(HybridUnwrapError):
    """Raised when a pipeline step is invoked out of order"""

    stage = "client"
    exit_code = 50


__all__ = [
    "HybridUnwrapError",
    "ConfigError",
    "KeyGenError",
    "TransportError",
    "HttpStatusError",
    "MalformedResponseError",
    "KeyUnwrapError",
    "AuthenticationFailure",
    "DecryptError",
    "InvalidStateError",
]
