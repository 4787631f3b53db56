from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from ngo_agent.llm.provider_config import CREDENTIAL_ENV_VARS, MODEL_ENV_VARS, Credentials
from ngo_agent.llm.types import CallConfig, CallResult, Message, Provider


_NOT_JSON = object()


@dataclass
class FakeResponse:
    status_code: int
    payload: Any = None
    text: str = ""

    def json(self) -> Any:
        if self.payload is _NOT_JSON:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    def __init__(self, responses: list[Any]) -> None:
        self.responses = responses
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if not self.responses:
            raise RuntimeError("No fake response left")
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@dataclass
class FakeAdapter:
    """Adapter double recording every call into a shared list."""

    provider: Provider
    calls: list[tuple[Provider, list[Message], CallConfig]]
    reply: str = "{}"
    error: Exception | None = None
    model: str = ""

    def call(self, messages: list[Message], config: CallConfig) -> CallResult:
        self.calls.append((self.provider, list(messages), config))
        if self.error is not None:
            raise self.error
        return CallResult(
            content=self.reply,
            provider=self.provider,
            model=self.model or f"{self.provider.value}-test-model",
            tokens_used=7,
        )


def not_json() -> Any:
    return _NOT_JSON


@pytest.fixture(autouse=True)
def clean_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in [*CREDENTIAL_ENV_VARS.values(), *MODEL_ENV_VARS.values()]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("AI_REQUEST_TIMEOUT", raising=False)


@pytest.fixture
def all_credentials() -> Credentials:
    return Credentials(openai="sk-openai", gemini="gemini-key", anthropic="sk-ant")


@pytest.fixture
def calls() -> list[tuple[Provider, list[Message], CallConfig]]:
    return []
