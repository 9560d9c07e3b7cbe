"""RSA identity key pair and RSA-OAEP key unwrap.

The client holds a single fresh key pair per run; the public half travels to the
server as base64 SubjectPublicKeyInfo DER and the private half unwraps the
server's session key.
"""
from __future__ import annotations

import base64
from typing import Literal

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..exceptions import KeyGenError, KeyUnwrapError

DEFAULT_KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537

OaepHash = Literal["SHA1", "SHA256", "SHA512"]


def hash_algorithm(name: str) -> hashes.HashAlgorithm:
    n = name.upper()
    if n == "SHA1":
        return hashes.SHA1()
    if n == "SHA256":
        return hashes.SHA256()
    if n == "SHA512":
        return hashes.SHA512()
    raise ValueError(f"Unsupported OAEP hash: {name}")


def _oaep(name: str) -> padding.OAEP:
    h = hash_algorithm(name)
    return padding.OAEP(mgf=padding.MGF1(algorithm=h), algorithm=h, label=None)


class RsaKeyPair:
    """In-memory RSA key pair with OAEP wrap/unwrap helpers"""

    def __init__(self, private: rsa.RSAPrivateKey | None = None, public: rsa.RSAPublicKey | None = None):
        if private is None and public is None:
            raise ValueError("RsaKeyPair needs a private or a public key")
        self._priv = private
        self._pub = public or private.public_key()

    @staticmethod
    def generate(bits: int = DEFAULT_KEY_SIZE) -> "RsaKeyPair":
        try:
            priv = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=bits)
        except (ValueError, TypeError) as exc:
            raise KeyGenError(f"RSA-{bits} key generation failed: {exc}") from exc
        return RsaKeyPair(private=priv)

    @property
    def key_size(self) -> int:
        return self._pub.key_size

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        return self._pub

    # Serialization helpers
    def public_der(self) -> bytes:
        return self._pub.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def public_der_b64(self) -> str:
        return base64.b64encode(self.public_der()).decode("ascii")

    # RSA-OAEP key wrap/unwrap
    def wrap_key(self, data: bytes, oaep_hash: OaepHash = "SHA256") -> bytes:
        return self._pub.encrypt(data, _oaep(oaep_hash))

    def unwrap_key(
        self,
        ct: bytes,
        oaep_hash: OaepHash = "SHA256",
        expected_length: int | None = 32,
    ) -> bytes:
        if self._priv is None:
            raise KeyUnwrapError("No private key available to unwrap the session key")
        padding_scheme = _oaep(oaep_hash)
        try:
            key = self._priv.decrypt(ct, padding_scheme)
        except ValueError as exc:
            raise KeyUnwrapError(f"RSA-OAEP-{oaep_hash.upper()} unwrap failed") from exc
        if expected_length is not None and len(key) != expected_length:
            raise KeyUnwrapError(
                f"Unwrapped key is {len(key)} bytes, expected {expected_length}"
            )
        return key


__all__ = ["DEFAULT_KEY_SIZE", "OaepHash", "RsaKeyPair", "hash_algorithm"]
