"""Configuration management for the user service."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "info"

_LOG_LEVELS = {"critical", "error", "warning", "info", "debug"}


def _parse_port(value: object) -> int:
    try:
        port = int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid port: {value!r}") from exc
    if not 1 <= port <= 65535:
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return port


def _parse_log_level(value: object) -> str:
    level = str(value).strip().lower()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Unknown log level: {value!r}")
    return level


@dataclass(frozen=True)
class ServiceConfig:
    """Network and logging settings for the HTTP service."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "ServiceConfig":
        """Create a :class:`ServiceConfig` from raw dictionary data."""
        unknown = set(data.keys()) - {"host", "port", "log_level"}
        if unknown:
            raise ValueError(f"Unknown service configuration fields: {', '.join(sorted(unknown))}")

        host = str(data.get("host", DEFAULT_HOST)).strip()
        if not host:
            raise ValueError("Service host must not be empty")

        return ServiceConfig(
            host=host,
            port=_parse_port(data.get("port", DEFAULT_PORT)),
            log_level=_parse_log_level(data.get("log_level", DEFAULT_LOG_LEVEL)),
        )

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper())


def load_service_config(config_path: Path) -> ServiceConfig:
    """Load service settings from a YAML file, falling back to defaults if it is absent."""
    if not config_path.exists():
        return ServiceConfig()

    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping")

    section = raw.get("service", raw)
    if not isinstance(section, dict):
        raise ValueError("The 'service' section must be a mapping")
    return ServiceConfig.from_dict(section)


def apply_env_overrides(config: ServiceConfig, environ: Optional[Mapping[str, str]] = None) -> ServiceConfig:
    """Apply ``USERSTORE_HOST``, ``USERSTORE_PORT`` and ``USERSTORE_LOG_LEVEL``."""
    env = os.environ if environ is None else environ
    overrides: Dict[str, object] = {}

    host = env.get("USERSTORE_HOST")
    if host and host.strip():
        overrides["host"] = host.strip()
    port = env.get("USERSTORE_PORT")
    if port and port.strip():
        overrides["port"] = _parse_port(port)
    log_level = env.get("USERSTORE_LOG_LEVEL")
    if log_level and log_level.strip():
        overrides["log_level"] = _parse_log_level(log_level)

    return replace(config, **overrides) if overrides else config


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "userstore.yaml").resolve(strict=False)
    return candidate


def load_config(config_path: Optional[str] = None) -> ServiceConfig:
    """Resolve, load and apply environment overrides in one step."""
    path = resolve_config_path(config_path or os.getenv("USERSTORE_CONFIG"))
    return apply_env_overrides(load_service_config(path))


__all__ = [
    "ServiceConfig",
    "apply_env_overrides",
    "load_config",
    "load_service_config",
    "resolve_config_path",
]
