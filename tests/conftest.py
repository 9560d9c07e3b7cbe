from __future__ import annotations

import base64
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import httpx
import pytest
import structlog
from cryptography.hazmat.primitives import serialization

from hybrid_unwrap.config import Settings
from hybrid_unwrap.crypto.aead import encrypt_payload
from hybrid_unwrap.crypto.asymmetric import RsaKeyPair
from hybrid_unwrap.logging import configure_library_defaults

TOKEN = "test-token"
ENDPOINT = "https://api.test/api/test/encrypt"


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    logging.basicConfig(level=logging.WARNING, handlers=[logging.NullHandler()], force=True)
    structlog.reset_defaults()
    configure_library_defaults()


@pytest.fixture(scope="session")
def keypair() -> RsaKeyPair:
    return RsaKeyPair.generate(2048)


@pytest.fixture
def settings() -> Settings:
    return Settings(endpoint=ENDPOINT, bearer_token=TOKEN)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@dataclass
class FakeServer:
    """Plays the encrypt endpoint: wraps a fresh AES key for the caller's public key."""

    plaintext: bytes = b"hello-world"
    status_code: int = 200
    drop_headers: tuple[str, ...] = ()
    oaep_hash: str = "SHA256"
    mutate: Optional[Callable[[dict], None]] = None
    requests: List[httpx.Request] = field(default_factory=list)
    last_key: bytes | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return httpx.Response(401, json={"error": "unauthorized"})
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "nope"})

        der = base64.b64decode(request.headers["X-Public-Key"])
        public = RsaKeyPair(public=serialization.load_der_public_key(der))
        key = os.urandom(32)
        self.last_key = key
        ciphertext, iv, tag = encrypt_payload(self.plaintext, key)
        parts = {
            "data": _b64(ciphertext),
            "X-Requested-IV": _b64(iv),
            "X-Requested-Tag": _b64(tag),
            "X-Requested-Encryption-Key": _b64(public.wrap_key(key, oaep_hash=self.oaep_hash)),
        }
        if self.mutate is not None:
            self.mutate(parts)
        headers = {
            name: value
            for name, value in parts.items()
            if name != "data" and name not in self.drop_headers
        }
        return httpx.Response(200, json={"data": parts["data"]}, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_server() -> FakeServer:
    return FakeServer()
