"""TOML configuration loader with env overrides."""

import logging
import os
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

from copychain.domain.ports.config import (
    AppConfig,
    AuthConfig,
    GatewayConfig,
    GenerationConfig,
    PersistenceConfig,
    ProvidersConfig,
    SecurityConfig,
    ServerConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"


def _csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


# env var -> (table path, key, converter); a converter raising ValueError skips the override
ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], str, Callable[[str], Any]]] = {
    "DEEPSEEK_API_KEY": (("providers", "deepseek"), "api_key", str.strip),
    "OPENAI_API_KEY": (("providers", "openai"), "api_key", str.strip),
    "DEFAULT_PROVIDER": (("providers",), "default", lambda v: v.strip().lower()),
    "SUPABASE_URL": (("auth",), "supabase_url", str.strip),
    "SUPABASE_ANON_KEY": (("auth",), "supabase_anon_key", str.strip),
    "COPYCHAIN_TOKEN": (("auth",), "client_token", str.strip),
    "GATEWAY_URL": (("gateway",), "url", str.strip),
    "PORT": (("server",), "port", int),
    "LOG_LEVEL": (("logging",), "level", str.upper),
    "LOG_FILE": (("logging",), "file", str.strip),
    "CORS_ORIGINS": (("security",), "cors_origins", _csv),
    "RATE_LIMIT_PER_MINUTE": (("security",), "rate_limit_requests_per_minute", int),
}


def _load_toml(path: Path) -> dict:
    """Load TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base; nested tables are merged key by key."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(config: dict) -> dict:
    """Apply environment variable overrides (see ENV_OVERRIDES)."""
    for name, (path, key, convert) in ENV_OVERRIDES.items():
        raw = os.getenv(name)
        if not raw:
            continue
        try:
            value = convert(raw)
        except ValueError:
            logger.warning("Invalid %s env value: %r, ignoring", name, raw)
            continue
        table = config
        for part in path:
            table = table.setdefault(part, {})
        table[key] = value
    return config


def load_config(config_dir: Path | None = None) -> AppConfig:
    """Load configuration from TOML files with env overrides.

    Loads default.toml, then development.toml if it exists (deep-merged),
    then environment variables.
    """
    config_dir = config_dir or DEFAULT_CONFIG_DIR

    config: dict = {}
    for name in ("default.toml", "development.toml"):
        path = config_dir / name
        if path.exists():
            config = _deep_merge(config, _load_toml(path))

    config = _apply_env_overrides(config)

    def section(name: str) -> dict:
        return config.get(name) or {}

    logging_raw = section("logging")
    return AppConfig(
        server=ServerConfig(**section("server")),
        # provider tables are partial overrides of the built-in deepseek/openai entries
        providers=ProvidersConfig(
            **_deep_merge(ProvidersConfig().model_dump(), section("providers"))
        ),
        generation=GenerationConfig(**section("generation")),
        auth=AuthConfig(**section("auth")),
        gateway=GatewayConfig(**section("gateway")),
        security=SecurityConfig(**section("security")),
        persistence=PersistenceConfig(**section("persistence")),
        log_level=logging_raw.get("level", "INFO"),
        log_file=(logging_raw.get("file") or "").strip(),
        log_rotation_max_mb=int(logging_raw.get("log_rotation_max_mb", 5)),
        log_rotation_backups=int(logging_raw.get("log_rotation_backups", 3)),
    )
