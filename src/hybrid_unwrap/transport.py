"""Single-shot HTTPS exchange with the encrypt endpoint."""
from __future__ import annotations

from typing import Optional

import httpx
import structlog

from .config import Settings
from .envelope import (
    AUTHORIZATION_HEADER,
    PUBLIC_KEY_HEADER,
    EncryptedEnvelope,
)
from .exceptions import ConfigError, HttpStatusError, MalformedResponseError, TransportError

logger = structlog.get_logger(__name__)


def build_headers(public_key_b64: str, bearer_token: str) -> dict[str, str]:
    return {
        PUBLIC_KEY_HEADER: public_key_b64,
        AUTHORIZATION_HEADER: f"Bearer {bearer_token}",
        "Accept": "application/json",
    }


def submit_public_key(
    settings: Settings,
    public_key_b64: str,
    bearer_token: str,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> EncryptedEnvelope:
    """Send the public key to the endpoint and parse the encrypted reply.

    Exactly one GET is issued. TLS verification is switched off only for this
    client, and only when ``settings.insecure_skip_tls_verify`` is set.
    """

    verify = not settings.insecure_skip_tls_verify
    if not verify:
        logger.warning("transport.tls_verification_disabled", endpoint=settings.endpoint)

    headers = build_headers(public_key_b64, bearer_token)
    try:
        with httpx.Client(
            timeout=settings.timeout_seconds,
            verify=verify,
            transport=transport,
        ) as client:
            response = client.get(settings.endpoint, headers=headers)
    except (httpx.InvalidURL, UnicodeEncodeError) as exc:
        raise ConfigError(f"Cannot build request for {settings.endpoint}: {exc}") from exc
    except httpx.TransportError as exc:
        logger.error("transport.request_failed", endpoint=settings.endpoint, error=str(exc))
        raise TransportError(f"Request to {settings.endpoint} failed: {exc}") from exc

    logger.debug(
        "transport.response",
        status=response.status_code,
        headers=sorted(response.headers.keys()),
        body_bytes=len(response.content),
    )

    if not response.is_success:
        raise HttpStatusError(
            response.status_code,
            f"{settings.endpoint} responded with HTTP {response.status_code} {response.reason_phrase}".rstrip(),
        )

    try:
        body = response.json()
    except ValueError as exc:
        raise MalformedResponseError("Response body is not valid JSON") from exc

    return EncryptedEnvelope.from_response(response.headers, body)


__all__ = ["build_headers", "submit_public_key"]
