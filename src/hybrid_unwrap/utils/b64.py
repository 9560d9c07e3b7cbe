import base64
import binascii


def b64e(data: bytes) -> str:
    """Standard base64 encode with padding"""
    return base64.b64encode(data).decode("ascii")


def b64d(value: str) -> bytes:
    """Base64 decode accepting both alphabets and missing padding.

    Raises ``ValueError`` when ``value`` is not base64 at all.
    """
    cleaned = "".join(value.split()).replace("-", "+").replace("_", "/").rstrip("=")
    pad = "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode((cleaned + pad).encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValueError(f"Invalid base64 value: {exc}") from exc
