"""Typer-based command line interface."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from .client import HybridUnwrapClient
from .config import Settings, dump_default_config, load_settings
from .exceptions import HybridUnwrapError
from .logging import configure_logging

app = typer.Typer(help="Hybrid RSA-OAEP / AES-256-GCM endpoint test client")


def _fail(exc: HybridUnwrapError) -> None:
    typer.echo(f"error [{exc.stage}]: {exc}", err=True)
    raise typer.Exit(code=exc.exit_code)


def _render(plaintext: bytes, as_hex: bool) -> str:
    if as_hex:
        return plaintext.hex()
    return plaintext.decode("utf-8", errors="replace")


@app.command()
def fetch(
    config: Optional[Path] = typer.Option(None, "--config", metavar="PATH", help="Configuration file"),
    endpoint: Optional[str] = typer.Option(None, "--endpoint", help="Encrypt endpoint URL"),
    token: Optional[str] = typer.Option(None, "--token", help="Bearer token (prefer HYBRID_UNWRAP_BEARER_TOKEN)"),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Skip TLS certificate verification for this request (dev servers only)",
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="critical|error|warning|info|debug"),
    as_hex: bool = typer.Option(False, "--hex", help="Print the plaintext as hex"),
) -> None:
    """Request an encrypted payload for a fresh key pair and print the plaintext"""
    overrides: Dict[str, Any] = {
        "endpoint": endpoint,
        "bearer_token": token,
        "insecure_skip_tls_verify": True if insecure else None,
        "timeout_seconds": timeout,
    }
    if log_level:
        overrides["logging"] = {"level": log_level}
    try:
        settings = load_settings(config, overrides=overrides)
        configure_logging(settings.logging.normalized_level())
        plaintext = HybridUnwrapClient(settings).run()
    except HybridUnwrapError as exc:
        _fail(exc)
    typer.echo(_render(plaintext, as_hex))


@app.command()
def selftest() -> None:
    """Local wrap/encrypt/unwrap/decrypt round trip without network"""
    from .crypto.aead import AES256_KEY_SIZE, decrypt_payload, encrypt_payload
    from .crypto.asymmetric import RsaKeyPair

    data = b"hello-world"
    settings = Settings()
    try:
        keypair = RsaKeyPair.generate(settings.key_size)
        key = os.urandom(AES256_KEY_SIZE)
        ciphertext, iv, tag = encrypt_payload(data, key)
        wrapped = keypair.wrap_key(key, oaep_hash=settings.oaep_hash)
        recovered = keypair.unwrap_key(wrapped, oaep_hash=settings.oaep_hash)
        plaintext = decrypt_payload(ciphertext, iv, tag, recovered)
    except HybridUnwrapError as exc:
        _fail(exc)
    if plaintext != data:
        typer.echo("Selftest FAILED", err=True)
        raise typer.Exit(code=1)
    typer.echo("Selftest OK")


@app.command("config-init")
def config_init(
    target: Path = typer.Argument(..., help="Where to write the default configuration"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write the default configuration as YAML"""
    if target.exists() and not force:
        typer.echo(f"{target} already exists (use --force)", err=True)
        raise typer.Exit(code=1)
    dump_default_config(target)
    typer.echo(f"Configuration written to {target}")


@app.command()
def version() -> None:
    from .version import __version__

    typer.echo(f"hybrid-unwrap {__version__}")


def main() -> None:
    app(prog_name="hybrid-unwrap")


if __name__ == "__main__":  # pragma: no cover
    main()
