import base64
import os

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding

from hybrid_unwrap.crypto.asymmetric import RsaKeyPair, hash_algorithm
from hybrid_unwrap.exceptions import KeyGenError, KeyUnwrapError


def test_generate_uses_2048_bit_modulus(keypair: RsaKeyPair) -> None:
    assert keypair.key_size == 2048


def test_generate_rejects_unusable_size() -> None:
    with pytest.raises(KeyGenError):
        RsaKeyPair.generate(512)


def test_public_key_is_base64_spki_der(keypair: RsaKeyPair) -> None:
    encoded = keypair.public_der_b64()
    der = base64.b64decode(encoded, validate=True)
    loaded = serialization.load_der_public_key(der)
    assert loaded.public_numbers() == keypair.public_key.public_numbers()


def test_unwrap_recovers_session_key(keypair: RsaKeyPair) -> None:
    key = os.urandom(32)
    wrapped = keypair.wrap_key(key)
    assert len(wrapped) == 256
    assert keypair.unwrap_key(wrapped) == key


def test_unwrap_rejects_pkcs1v15_wrapping(keypair: RsaKeyPair) -> None:
    wrapped = keypair.public_key.encrypt(os.urandom(32), padding.PKCS1v15())
    with pytest.raises(KeyUnwrapError):
        keypair.unwrap_key(wrapped)


def test_unwrap_rejects_oaep_sha1_wrapping(keypair: RsaKeyPair) -> None:
    wrapped = keypair.wrap_key(os.urandom(32), oaep_hash="SHA1")
    with pytest.raises(KeyUnwrapError):
        keypair.unwrap_key(wrapped, oaep_hash="SHA256")


def test_unwrap_rejects_mixed_mgf_hash(keypair: RsaKeyPair) -> None:
    wrapped = keypair.public_key.encrypt(
        os.urandom(32),
        padding.OAEP(mgf=padding.MGF1(algorithm=hashes.SHA1()), algorithm=hashes.SHA256(), label=None),
    )
    with pytest.raises(KeyUnwrapError):
        keypair.unwrap_key(wrapped)


def test_unwrap_rejects_wrong_key_length(keypair: RsaKeyPair) -> None:
    wrapped = keypair.wrap_key(os.urandom(16))
    with pytest.raises(KeyUnwrapError):
        keypair.unwrap_key(wrapped)
    assert len(keypair.unwrap_key(wrapped, expected_length=None)) == 16


def test_unwrap_rejects_corrupt_ciphertext(keypair: RsaKeyPair) -> None:
    wrapped = bytearray(keypair.wrap_key(os.urandom(32)))
    wrapped[-1] ^= 0x01
    with pytest.raises(KeyUnwrapError):
        keypair.unwrap_key(bytes(wrapped))


def test_unwrap_with_other_key_pair_fails(keypair: RsaKeyPair) -> None:
    other = RsaKeyPair.generate(2048)
    wrapped = other.wrap_key(os.urandom(32))
    with pytest.raises(KeyUnwrapError):
        keypair.unwrap_key(wrapped)


def test_public_only_pair_cannot_unwrap(keypair: RsaKeyPair) -> None:
    public_only = RsaKeyPair(public=keypair.public_key)
    with pytest.raises(KeyUnwrapError):
        public_only.unwrap_key(public_only.wrap_key(os.urandom(32)))


@pytest.mark.parametrize("name", ["MD5", "sha3", ""])
def test_hash_algorithm_rejects_unknown_names(name: str) -> None:
    with pytest.raises(ValueError):
        hash_algorithm(name)
