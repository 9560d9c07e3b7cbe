"""Configuration loading utilities."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .crypto.asymmetric import DEFAULT_KEY_SIZE, hash_algorithm
from .exceptions import ConfigError
from .paths import local_config_path, runtime_config_dir

DEFAULT_ENDPOINT = "https://localhost/api/test/encrypt"
DEFAULT_TIMEOUT_SECONDS = 30.0

ENV_PREFIX = "HYBRID_UNWRAP_"
_ENV_FIELDS = {
    "ENDPOINT": "endpoint",
    "BEARER_TOKEN": "bearer_token",
    "INSECURE_SKIP_TLS_VERIFY": "insecure_skip_tls_verify",
    "TIMEOUT": "timeout_seconds",
}
_ENV_LOG_LEVEL = ENV_PREFIX + "LOG_LEVEL"


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Logging verbosity level")

    def normalized_level(self) -> str:
        return self.level.upper()


class Settings(BaseModel):
    endpoint: str = Field(default=DEFAULT_ENDPOINT, description="URL of the encrypt endpoint")
    bearer_token: Optional[str] = Field(
        default=None, repr=False, exclude=True, description="Bearer credential for the endpoint"
    )
    insecure_skip_tls_verify: bool = Field(
        default=False,
        description="Skip TLS certificate verification for the endpoint call (dev servers only)",
    )
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    oaep_hash: str = Field(default="SHA256", description="RSA-OAEP hash the server wraps with")
    key_size: int = Field(default=DEFAULT_KEY_SIZE, ge=2048)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("endpoint")
    @classmethod
    def _validate_endpoint(cls, value: str) -> str:
        value = value.strip()
        if not value.lower().startswith(("https://", "http://")):
            raise ValueError("endpoint must be an http(s) URL")
        return value

    @field_validator("bearer_token")
    @classmethod
    def _validate_bearer_token(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value.isascii() or not value.isprintable() or " " in value:
            raise ValueError("bearer_token must be printable ASCII without spaces")
        return value or None

    @field_validator("oaep_hash")
    @classmethod
    def _validate_oaep_hash(cls, value: str) -> str:
        hash_algorithm(value)
        return value.upper()

    def require_token(self) -> str:
        if not self.bearer_token:
            raise ConfigError(
                f"A bearer token is required; pass --token or set {ENV_PREFIX}BEARER_TOKEN"
            )
        return self.bearer_token


DEFAULT_SETTINGS = Settings()


def config_search_paths(explicit: Optional[Path] = None) -> Iterable[Path]:
    if explicit:
        yield explicit
    yield local_config_path()
    yield runtime_config_dir() / "config.yaml"


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for suffix, field in _ENV_FIELDS.items():
        value = environ.get(ENV_PREFIX + suffix)
        if value:
            overrides[field] = value
    level = environ.get(_ENV_LOG_LEVEL)
    if level:
        overrides["logging"] = {"level": level}
    return overrides


def _merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _merge(dict(merged[key]), value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read configuration {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    return data


def load_settings(
    path: Optional[Path] = None,
    *,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Resolve settings from file, environment and explicit overrides.

    The first existing file from :func:`config_search_paths` is used. Environment
    variables override the file and ``overrides`` (typically CLI options) win
    over both.
    """

    if path is not None and not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    data: Dict[str, Any] = {}
    source = "defaults"
    for candidate in config_search_paths(path):
        if candidate.is_file():
            data = _read_yaml(candidate)
            source = str(candidate)
            break

    data = _merge(data, _env_overrides(os.environ if environ is None else environ))
    data = _merge(data, overrides or {})
    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration ({source}): {exc}") from exc


def dump_default_config(target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(DEFAULT_SETTINGS.model_dump(mode="json"), handle, sort_keys=False)


__all__ = [
    "DEFAULT_ENDPOINT",
    "DEFAULT_SETTINGS",
    "LoggingConfig",
    "Settings",
    "config_search_paths",
    "dump_default_config",
    "load_settings",
]
