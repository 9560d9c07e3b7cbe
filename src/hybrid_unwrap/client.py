"""Hybrid unwrap pipeline: keygen, request, key unwrap, payload decrypt."""
from __future__ import annotations

import enum
from typing import Callable, Optional, TypeVar

import httpx
import structlog

from .config import Settings
from .crypto.aead import AES256_KEY_SIZE, decrypt_payload
from .crypto.asymmetric import RsaKeyPair
from .envelope import EncryptedEnvelope
from .exceptions import InvalidStateError, MalformedResponseError
from .transport import submit_public_key

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ClientState(str, enum.Enum):
    INIT = "init"
    KEY_GENERATED = "key_generated"
    RESPONSE_RECEIVED = "response_received"
    KEY_UNWRAPPED = "key_unwrapped"
    DECRYPTED = "decrypted"
    FAILED = "failed"


class HybridUnwrapClient:
    """Runs one hybrid-decryption exchange against the encrypt endpoint.

    Every step requires the state left by the previous one. A failing step
    moves the client to ``FAILED`` for good; build a new client to retry, which
    also means a new key pair.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = settings
        self._transport = transport
        self._state = ClientState.INIT
        self._keypair: RsaKeyPair | None = None
        self._envelope: EncryptedEnvelope | None = None
        self._session_key: bytes | None = None
        self._plaintext: bytes | None = None

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def keypair(self) -> RsaKeyPair | None:
        return self._keypair

    @property
    def envelope(self) -> EncryptedEnvelope | None:
        return self._envelope

    def generate_identity(self) -> RsaKeyPair:
        self._expect(ClientState.INIT, "generate_identity")
        keypair = self._step(lambda: RsaKeyPair.generate(self.settings.key_size))
        self._keypair = keypair
        self._state = ClientState.KEY_GENERATED
        logger.info("client.identity.generated", key_size=keypair.key_size)
        return keypair

    def submit_public_key(self, bearer_token: Optional[str] = None) -> EncryptedEnvelope:
        self._expect(ClientState.KEY_GENERATED, "submit_public_key")
        assert self._keypair is not None
        keypair = self._keypair
        envelope = self._step(
            lambda: submit_public_key(
                self.settings,
                keypair.public_der_b64(),
                bearer_token or self.settings.require_token(),
                transport=self._transport,
            ),
        )
        self._envelope = envelope
        self._state = ClientState.RESPONSE_RECEIVED
        logger.info("client.response.received", endpoint=self.settings.endpoint)
        return envelope

    def unwrap_key(self) -> bytes:
        self._expect(ClientState.RESPONSE_RECEIVED, "unwrap_key")
        assert self._keypair is not None and self._envelope is not None
        keypair, envelope = self._keypair, self._envelope
        key = self._step(
            lambda: keypair.unwrap_key(
                self._decode(envelope.wrapped_key_bytes),
                oaep_hash=self.settings.oaep_hash,
                expected_length=AES256_KEY_SIZE,
            ),
        )
        self._session_key = key
        self._state = ClientState.KEY_UNWRAPPED
        logger.info("client.key.unwrapped", oaep_hash=self.settings.oaep_hash)
        return key

    def decrypt_payload(self) -> bytes:
        self._expect(ClientState.KEY_UNWRAPPED, "decrypt_payload")
        assert self._envelope is not None and self._session_key is not None
        envelope, key = self._envelope, self._session_key
        # The session key is single use whatever the outcome.
        self._session_key = None
        plaintext = self._step(
            lambda: decrypt_payload(
                self._decode(envelope.ciphertext_bytes),
                self._decode(envelope.iv_bytes),
                self._decode(envelope.auth_tag_bytes),
                key,
            ),
        )
        self._plaintext = plaintext
        self._state = ClientState.DECRYPTED
        logger.info("client.payload.decrypted", plaintext_bytes=len(plaintext))
        return plaintext

    def run(self, bearer_token: Optional[str] = None) -> bytes:
        """Execute the full pipeline and return the decrypted payload."""
        self.generate_identity()
        self.submit_public_key(bearer_token)
        self.unwrap_key()
        return self.decrypt_payload()

    def _expect(self, state: ClientState, operation: str) -> None:
        if self._state is not state:
            raise InvalidStateError(
                f"{operation} requires state {state.value}, client is {self._state.value}"
            )

    def _step(self, action: Callable[[], T]) -> T:
        try:
            return action()
        except Exception as exc:
            self._fail(exc)
            raise

    def _fail(self, exc: Exception) -> None:
        self._state = ClientState.FAILED
        self._session_key = None
        logger.error(
            "client.failed",
            stage=getattr(exc, "stage", "client"),
            error=type(exc).__name__,
            detail=str(exc),
        )

    @staticmethod
    def _decode(accessor: Callable[[], bytes]) -> bytes:
        try:
            return accessor()
        except ValueError as exc:
            raise MalformedResponseError(str(exc)) from exc


__all__ = ["ClientState", "HybridUnwrapClient"]
