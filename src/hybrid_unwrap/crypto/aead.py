from __future__ import annotations

import os
from typing import Final

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import AuthenticationFailure, DecryptError

AES256_KEY_SIZE: Final[int] = 32
IV_SIZE_BYTES: Final[int] = 12
MIN_IV_SIZE: Final[int] = 12
MAX_IV_SIZE: Final[int] = 128
TAG_SIZE_BYTES: Final[int] = 16


def _check_lengths(key: bytes, iv: bytes) -> None:
    if len(key) != AES256_KEY_SIZE:
        raise DecryptError(f"AES-256-GCM requires a 32-byte key, got {len(key)}")
    if not MIN_IV_SIZE <= len(iv) <= MAX_IV_SIZE:
        raise DecryptError(
            f"AES-GCM iv must be {MIN_IV_SIZE}-{MAX_IV_SIZE} bytes, got {len(iv)}"
        )


def encrypt_payload(
    plaintext: bytes,
    key: bytes,
    iv: bytes | None = None,
    aad: bytes | None = None,
) -> tuple[bytes, bytes, bytes]:
    """Seal ``plaintext`` and return ``(ciphertext, iv, tag)`` with a detached tag"""
    iv = iv if iv is not None else os.urandom(IV_SIZE_BYTES)
    _check_lengths(key, iv)
    sealed = AESGCM(key).encrypt(iv, plaintext, aad)
    return sealed[:-TAG_SIZE_BYTES], iv, sealed[-TAG_SIZE_BYTES:]


def decrypt_payload(
    ciphertext: bytes,
    iv: bytes,
    auth_tag: bytes,
    key: bytes,
    aad: bytes | None = None,
) -> bytes:
    """Open an AES-256-GCM payload whose tag travels separately.

    The tag is re-attached and the whole message is opened in one call, so
    nothing is returned unless the tag validates.
    """
    _check_lengths(key, iv)
    if len(auth_tag) != TAG_SIZE_BYTES:
        raise DecryptError(f"AES-GCM tag must be {TAG_SIZE_BYTES} bytes, got {len(auth_tag)}")
    try:
        return AESGCM(key).decrypt(iv, ciphertext + auth_tag, aad)
    except InvalidTag as exc:
        raise AuthenticationFailure("AEAD tag verification failed") from exc


__all__ = [
    "AES256_KEY_SIZE",
    "IV_SIZE_BYTES",
    "TAG_SIZE_BYTES",
    "decrypt_payload",
    "encrypt_payload",
]
