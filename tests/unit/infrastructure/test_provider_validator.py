"""Tests for startup provider validation."""

from copychain.domain.ports.config import (
    AppConfig,
    AuthConfig,
    ProviderConfig,
    ProvidersConfig,
)
from copychain.infrastructure.config.provider_validator import (
    configured_providers,
    validate_providers_config,
)


def config_with(deepseek_key="", openai_key="", default="deepseek", auth=None):
    return AppConfig(
        providers=ProvidersConfig(
            default=default,
            deepseek=ProviderConfig(base_url="https://d.test", model="m", api_key=deepseek_key),
            openai=ProviderConfig(base_url="https://o.test", model="m", api_key=openai_key),
        ),
        auth=auth or AuthConfig(api_tokens=["t"]),
    )


class TestProviderValidator:
    """Tests for configured_providers / validate_providers_config."""

    def test_configured_providers(self):
        assert configured_providers(config_with("k1", "k2")) == ["deepseek", "openai"]
        assert configured_providers(config_with(openai_key="k")) == ["openai"]
        assert configured_providers(config_with()) == []

    def test_validate_returns_available_and_never_raises(self):
        assert validate_providers_config(config_with("k")) == ["deepseek"]
        assert validate_providers_config(config_with(default="anthropic")) == []

    def test_unverifiable_auth_still_passes(self):
        config = config_with("k", auth=AuthConfig(require_auth=True))
        assert validate_providers_config(config) == ["deepseek"]
