"""Configuration models (TOML + env, see infrastructure.config)."""

from pydantic import BaseModel, ConfigDict


class ProviderConfig(BaseModel):
    """One OpenAI-compatible provider endpoint."""

    base_url: str
    model: str
    api_key: str = ""
    timeout: int = 300


def _deepseek() -> ProviderConfig:
    return ProviderConfig(base_url="https://api.deepseek.com", model="deepseek-chat")


def _openai() -> ProviderConfig:
    return ProviderConfig(base_url="https://api.openai.com/v1", model="gpt-4o")


class ProvidersConfig(BaseModel):
    """Provider selection and per-provider endpoints."""

    default: str = "deepseek"  # "deepseek" | "openai"
    deepseek: ProviderConfig = _deepseek()
    openai: ProviderConfig = _openai()

    model_config = ConfigDict(extra="ignore")

    def get(self, name: str) -> ProviderConfig | None:
        if name == "deepseek":
            return self.deepseek
        if name == "openai":
            return self.openai
        return None


class GenerationConfig(BaseModel):
    """Sampling parameters for /generate-copy."""

    temperature: float = 0.8
    max_tokens: int | None = 8000


class AuthConfig(BaseModel):
    """Identity settings for both the backend (verification) and the client (session)."""

    # Backend: bearer tokens accepted without a remote lookup. Empty = none.
    api_tokens: list[str] = []
    # Backend: reject requests without a valid bearer token.
    require_auth: bool = True
    # GoTrue (Supabase auth). Empty url = not configured.
    supabase_url: str = ""
    supabase_anon_key: str = ""
    timeout: int = 15
    # Client: static token used when no GoTrue session is available.
    client_token: str = ""


class GatewayConfig(BaseModel):
    """Client-side generation gateway."""

    url: str = "http://localhost:8000/generate-copy"
    timeout: int = 300
    # Delay between steps when generating the whole pipeline.
    step_delay: float = 0.5


class SecurityConfig(BaseModel):
    """Security settings."""

    rate_limit_requests_per_minute: int = 100
    cors_origins: list[str] = ["http://localhost:5173"]


class PersistenceConfig(BaseModel):
    """Persistence settings."""

    output_dir: str = "output"
    projects_file: str = "output/projects.json"


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Full application configuration."""

    server: ServerConfig = ServerConfig()
    providers: ProvidersConfig = ProvidersConfig()
    generation: GenerationConfig = GenerationConfig()
    auth: AuthConfig = AuthConfig()
    gateway: GatewayConfig = GatewayConfig()
    security: SecurityConfig = SecurityConfig()
    persistence: PersistenceConfig = PersistenceConfig()
    log_level: str = "INFO"
    # Log file: path relative to cwd or absolute. Empty = only stdout. Rotation when file exceeds max_mb.
    log_file: str = ""
    log_rotation_max_mb: int = 5
    log_rotation_backups: int = 3
