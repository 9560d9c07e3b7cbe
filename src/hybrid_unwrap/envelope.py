"""Server response contract: JSON body plus out-of-band crypto headers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .exceptions import MalformedResponseError
from .utils import b64d

PUBLIC_KEY_HEADER = "X-Public-Key"
AUTHORIZATION_HEADER = "Authorization"
IV_HEADER = "X-Requested-IV"
TAG_HEADER = "X-Requested-Tag"
WRAPPED_KEY_HEADER = "X-Requested-Encryption-Key"
DATA_FIELD = "data"


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        wanted = name.lower()
        for key, candidate in headers.items():
            if key.lower() == wanted:
                value = candidate
                break
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(slots=True, frozen=True)
class EncryptedEnvelope:
    """Base64 fields of one encrypted server response"""

    ciphertext: str
    iv: str
    auth_tag: str
    wrapped_key: str

    @classmethod
    def from_response(cls, headers: Mapping[str, str], body: Any) -> "EncryptedEnvelope":
        if not isinstance(body, Mapping):
            raise MalformedResponseError("Response body must be a JSON object")

        data = body.get(DATA_FIELD)
        fields = {
            DATA_FIELD: data if isinstance(data, str) else None,
            IV_HEADER: _header(headers, IV_HEADER),
            TAG_HEADER: _header(headers, TAG_HEADER),
            WRAPPED_KEY_HEADER: _header(headers, WRAPPED_KEY_HEADER),
        }
        missing = [name for name, value in fields.items() if value is None]
        if missing:
            raise MalformedResponseError(f"Response is missing: {', '.join(missing)}")

        envelope = cls(
            ciphertext=fields[DATA_FIELD],
            iv=fields[IV_HEADER],
            auth_tag=fields[TAG_HEADER],
            wrapped_key=fields[WRAPPED_KEY_HEADER],
        )
        envelope.validate()
        return envelope

    def validate(self) -> None:
        for name, value in (
            (DATA_FIELD, self.ciphertext),
            (IV_HEADER, self.iv),
            (TAG_HEADER, self.auth_tag),
            (WRAPPED_KEY_HEADER, self.wrapped_key),
        ):
            try:
                b64d(value)
            except ValueError as exc:
                raise MalformedResponseError(f"{name} is not valid base64") from exc

    def ciphertext_bytes(self) -> bytes:
        return b64d(self.ciphertext)

    def iv_bytes(self) -> bytes:
        return b64d(self.iv)

    def auth_tag_bytes(self) -> bytes:
        return b64d(self.auth_tag)

    def wrapped_key_bytes(self) -> bytes:
        return b64d(self.wrapped_key)


__all__ = [
    "AUTHORIZATION_HEADER",
    "DATA_FIELD",
    "EncryptedEnvelope",
    "IV_HEADER",
    "PUBLIC_KEY_HEADER",
    "TAG_HEADER",
    "WRAPPED_KEY_HEADER",
]
