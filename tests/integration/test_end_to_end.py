import base64

import pytest

from hybrid_unwrap.client import ClientState, HybridUnwrapClient
from hybrid_unwrap.config import Settings
from hybrid_unwrap.exceptions import (
    AuthenticationFailure,
    DecryptError,
    HttpStatusError,
    KeyUnwrapError,
    MalformedResponseError,
)


def _flip(field: str, byte: int = 0, bit: int = 0):
    def mutate(parts: dict) -> None:
        raw = bytearray(base64.b64decode(parts[field]))
        raw[byte] ^= 1 << bit
        parts[field] = base64.b64encode(bytes(raw)).decode("ascii")

    return mutate


def test_client_outputs_hello_world(settings: Settings, fake_server) -> None:
    plaintext = HybridUnwrapClient(settings, transport=fake_server.transport).run()
    assert plaintext.decode("utf-8") == "hello-world"


def test_unicode_payload(settings: Settings, fake_server) -> None:
    fake_server.plaintext = "grüße, 世界".encode("utf-8")
    assert HybridUnwrapClient(settings, transport=fake_server.transport).run() == fake_server.plaintext


def test_unauthorised_stops_before_decryption(fake_server) -> None:
    client = HybridUnwrapClient(
        Settings(endpoint="https://api.test/x", bearer_token="bad-token"),
        transport=fake_server.transport,
    )
    with pytest.raises(HttpStatusError) as excinfo:
        client.run()
    assert excinfo.value.status_code == 401
    assert client.state is ClientState.FAILED


def test_missing_tag_header_stops_before_decryption(settings: Settings, fake_server) -> None:
    fake_server.drop_headers = ("X-Requested-Tag",)
    client = HybridUnwrapClient(settings, transport=fake_server.transport)
    with pytest.raises(MalformedResponseError):
        client.run()
    assert client.envelope is None
    assert client.state is ClientState.FAILED


@pytest.mark.parametrize(
    "field, byte, bit",
    [
        ("data", 0, 0),
        ("data", 10, 7),
        ("X-Requested-IV", 0, 3),
        ("X-Requested-IV", 11, 0),
        ("X-Requested-Tag", 0, 0),
        ("X-Requested-Tag", 15, 7),
    ],
)
def test_tampering_is_detected(settings: Settings, fake_server, field: str, byte: int, bit: int) -> None:
    fake_server.mutate = _flip(field, byte, bit)
    client = HybridUnwrapClient(settings, transport=fake_server.transport)
    with pytest.raises(AuthenticationFailure):
        client.run()
    assert client.state is ClientState.FAILED


def test_wrapped_key_tampering_fails_unwrap(settings: Settings, fake_server) -> None:
    fake_server.mutate = _flip("X-Requested-Encryption-Key", 100, 2)
    with pytest.raises(KeyUnwrapError):
        HybridUnwrapClient(settings, transport=fake_server.transport).run()


def test_server_using_sha1_oaep_is_rejected(settings: Settings, fake_server) -> None:
    fake_server.oaep_hash = "SHA1"
    with pytest.raises(KeyUnwrapError):
        HybridUnwrapClient(settings, transport=fake_server.transport).run()


def test_configured_oaep_hash_is_honoured(settings: Settings, fake_server) -> None:
    fake_server.oaep_hash = "SHA512"
    configured = settings.model_copy(update={"oaep_hash": "SHA512"})
    assert HybridUnwrapClient(configured, transport=fake_server.transport).run() == b"hello-world"


def test_short_iv_is_decrypt_error(settings: Settings, fake_server) -> None:
    def shorten(parts: dict) -> None:
        parts["X-Requested-IV"] = base64.b64encode(b"\x00" * 8).decode("ascii")

    fake_server.mutate = shorten
    with pytest.raises(DecryptError):
        HybridUnwrapClient(settings, transport=fake_server.transport).run()
