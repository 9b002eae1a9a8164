"""Validate configured LLM providers at startup."""

import structlog

from copychain.domain.ports.config import AppConfig

log = structlog.get_logger()

PROVIDER_NAMES = ("deepseek", "openai")


def configured_providers(config: AppConfig) -> list[str]:
    """Providers that have an API key."""
    return [
        name
        for name in PROVIDER_NAMES
        if (provider := config.providers.get(name)) is not None and provider.api_key
    ]


def validate_providers_config(config: AppConfig) -> list[str]:
    """Log warnings for providers that cannot serve requests. Never fails startup."""
    default = config.providers.default
    if default not in PROVIDER_NAMES:
        log.warning("default_provider_invalid", provider=default, valid=list(PROVIDER_NAMES))

    available = configured_providers(config)
    for name in PROVIDER_NAMES:
        if name not in available:
            log.warning("provider_not_configured", provider=name, env_var=f"{name.upper()}_API_KEY")

    if default in PROVIDER_NAMES and default not in available:
        log.warning("default_provider_unavailable", provider=default)

    if config.auth.require_auth and not (config.auth.api_tokens or config.auth.supabase_url):
        log.warning("auth_unverifiable", reason="require_auth set without api_tokens or supabase_url")

    log.info("providers_validated", available=available, default=default)
    return available
