"""Shared message/config vocabulary for every provider adapter.

Architectural role:
    Defines the provider-neutral request and response contracts exchanged between
    the capability router (`ngo_agent.core.engine`), the resilient dispatcher
    (`ngo_agent.llm.service`) and the vendor adapters (`ngo_agent.llm.client`).

Lifecycle:
    Every value here is created per call and discarded when the call returns.
    Nothing is cached or persisted.

Determinism:
    Pure data containers; no I/O and no global state.
"""

from dataclasses import dataclass, replace
from enum import Enum


DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4000


class Role(str, Enum):
    """Conversation role of one message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Provider(str, Enum):
    """Supported model back-ends.

    Declaration order is the enumeration order used for fallback tails
    (OpenAI, Gemini, Claude). It is not the "best provider" priority.
    """

    OPENAI = "openai"
    GEMINI = "gemini"
    CLAUDE = "claude"

    @classmethod
    def coerce(cls, value) -> "Provider | None":
        """Map a provider or provider name to a `Provider`.

        Returns `None` for empty or unknown values instead of raising, so callers
        can treat an unknown preference like an unavailable one.
        """
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Message:
    """One role-tagged message. Conversations are ordered earliest-first."""

    role: Role
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(Role.ASSISTANT, content)


@dataclass(frozen=True)
class CallConfig:
    """Per-call generation settings.

    Attributes:
        provider: Explicit provider for `call_once`, or preferred provider for
            `call_with_fallback`.
        model: Model override; adapters fall back to their configured default.
        temperature: Sampling temperature.
        max_tokens: Completion budget, mapped to each vendor's field name.
        timeout: Per-attempt HTTP timeout in seconds; `None` uses the configured
            default.
    """

    provider: Provider | None = None
    model: str | None = None
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout: float | None = None

    def with_provider(self, provider: Provider) -> "CallConfig":
        return replace(self, provider=provider)


@dataclass(frozen=True)
class CallResult:
    """Normalized adapter reply.

    `provider` and `model` always name the adapter that produced `content`, not
    the one that was requested. `content` is the raw reply text.
    """

    content: str
    provider: Provider
    model: str
    tokens_used: int | None = None
