"""Pytest configuration and shared fixtures."""

import json
from types import SimpleNamespace

import httpx
import pytest
from sse_starlette.sse import AppStatus

from copychain.api.container import Container, reset_container, set_container
from copychain.domain.ports.config import (
    AppConfig,
    AuthConfig,
    PersistenceConfig,
    ProviderConfig,
    ProvidersConfig,
    SecurityConfig,
)
from copychain.infrastructure.llm.openai_compatible import OpenAICompatibleProvider

TEST_TOKEN = "test-token"
AUTH_HEADERS = {"Authorization": f"Bearer {TEST_TOKEN}"}


def sse_lines(*records: object, done: bool = True) -> bytes:
    """Build an OpenAI-style SSE body from delta strings or raw dict records."""
    parts = []
    for record in records:
        if isinstance(record, str):
            record = {"choices": [{"delta": {"content": record}}]}
        parts.append(f"data: {json.dumps(record)}\n\n")
    if done:
        parts.append("data: [DONE]\n\n")
    return "".join(parts).encode("utf-8")


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """sse_starlette keeps a module-level exit event bound to the first event loop."""
    AppStatus.should_exit_event = None
    yield
    AppStatus.should_exit_event = None


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(
        providers=ProvidersConfig(
            deepseek=ProviderConfig(
                base_url="https://deepseek.test", model="deepseek-chat", api_key="sk-ds"
            ),
            openai=ProviderConfig(base_url="https://openai.test/v1", model="gpt-4o"),
        ),
        auth=AuthConfig(api_tokens=[TEST_TOKEN], require_auth=True),
        security=SecurityConfig(rate_limit_requests_per_minute=10_000),
        persistence=PersistenceConfig(
            output_dir=str(tmp_path),
            projects_file=str(tmp_path / "projects.json"),
        ),
    )


@pytest.fixture
def container(app_config):
    """Global container built from app_config for the duration of one test."""
    reset_container()
    c = Container(config=app_config)
    set_container(c)
    yield c
    reset_container()


@pytest.fixture
def sse_body():
    """The sse_lines builder, for test modules outside this directory."""
    return sse_lines


@pytest.fixture
def upstream(container):
    """Scripted provider API behind the container's adapters.

    Set upstream.handler to a function (httpx.Request) -> httpx.Response;
    every provider request is recorded in upstream.requests.
    """
    state = SimpleNamespace(
        requests=[],
        handler=lambda request: httpx.Response(200, content=sse_lines("Hello", " world")),
    )

    def dispatch(request: httpx.Request) -> httpx.Response:
        state.requests.append(request)
        return state.handler(request)

    for name in ("deepseek", "openai"):
        container.providers.register(
            OpenAICompatibleProvider(
                name,
                container.config.providers.get(name),
                client=httpx.AsyncClient(transport=httpx.MockTransport(dispatch)),
            )
        )
    return state


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return dict(AUTH_HEADERS)
