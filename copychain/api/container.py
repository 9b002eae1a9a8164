"""Dependency Injection Container - centralized service management."""

from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING

from copychain.domain.ports.config import AppConfig
from copychain.infrastructure.auth.gotrue import GoTrueIdentity
from copychain.infrastructure.auth.token_verifier import TokenVerifier
from copychain.infrastructure.config import load_config
from copychain.infrastructure.llm.openai_compatible import ProviderRegistry
from copychain.infrastructure.persistence.project_store import ProjectsStore

if TYPE_CHECKING:
    from copychain.application.generation.use_case import GenerateCopyUseCase


class Container:
    """Dependency Injection Container with lazy initialization.

    All dependencies are created on first access and cached.

    Usage:
        container = Container()
        use_case = container.generate_copy_use_case
    """

    def __init__(self, config: AppConfig | None = None):
        """Initialize container with optional config override."""
        self._config_override = config

    @cached_property
    def config(self) -> AppConfig:
        """Application configuration."""
        if self._config_override:
            return self._config_override
        return load_config()

    @cached_property
    def providers(self) -> ProviderRegistry:
        """DeepSeek / OpenAI adapters, created per provider on first use."""
        return ProviderRegistry(self.config.providers)

    @cached_property
    def identity(self) -> GoTrueIdentity | None:
        """GoTrue client for token lookups; None when Supabase is not configured."""
        auth = self.config.auth
        if not auth.supabase_url:
            return None
        return GoTrueIdentity(auth.supabase_url, auth.supabase_anon_key, timeout=auth.timeout)

    @cached_property
    def token_verifier(self) -> TokenVerifier:
        return TokenVerifier(self.config.auth, self.identity)

    @cached_property
    def projects_store(self) -> ProjectsStore:
        """Saved projects (product brief + copy_results)."""
        return ProjectsStore(Path(self.config.persistence.projects_file))

    @cached_property
    def generate_copy_use_case(self) -> "GenerateCopyUseCase":
        from copychain.application.generation.use_case import GenerateCopyUseCase

        return GenerateCopyUseCase(self.providers, self.config.generation)

    async def aclose(self) -> None:
        """Close HTTP clients that were actually created."""
        if "providers" in self.__dict__:
            await self.providers.close()
        if "identity" in self.__dict__ and self.identity is not None:
            await self.identity.close()

    def reset(self) -> None:
        """Reset all cached instances (useful for testing)."""
        for attr in list(self.__dict__.keys()):
            if not attr.startswith("_"):
                delattr(self, attr)


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """Get or create global container instance."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def set_container(container: Container) -> None:
    """Install a prepared container (tests, embedding apps)."""
    global _container
    _container = container


def reset_container() -> None:
    """Reset global container (for testing)."""
    global _container
    if _container:
        _container.reset()
    _container = None
