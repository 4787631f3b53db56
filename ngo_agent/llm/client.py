"""Provider-specific transport adapters for LLM requests.

Architectural role:
    Translates the shared `Message`/`CallConfig` model into one vendor's wire
    format, performs the HTTP call, and translates the reply into `CallResult`.

Model invocation flow:
    `service.call_once` / `service.call_with_fallback` -> `build_adapter(provider)`
    -> `adapter.call(messages, config)` -> vendor endpoint -> `CallResult`.

Vendor mapping:
    - OpenAI: every message (system included) is forwarded 1:1 with its role;
      `max_tokens` and `temperature` at top level; usage from
      `usage.total_tokens`.
    - Gemini: the first system message becomes `systemInstruction`; remaining
      messages become `contents` with `assistant` renamed to `model`; sampling
      settings nest under `generationConfig`; usage from
      `usageMetadata.totalTokenCount`.
    - Claude: the first system message becomes the top-level `system` string;
      roles stay `user`/`assistant`; usage is input plus output tokens.

Retry behavior:
    None. Each adapter call is exactly one HTTP request. Fallback across
    providers is the dispatcher's job.

Failure handling model:
    - Non-2xx status -> `ProviderHTTPError` carrying the response body verbatim.
    - `requests` connection/DNS/timeout errors -> `ProviderTransportError`.
    - A 2xx reply that is not JSON -> `ProviderTransportError`.
    Missing fields inside a successful reply degrade to empty content rather
    than raising.
"""

from typing import Any, Protocol

import requests

from ngo_agent.llm.errors import (
    ConfigurationError,
    ProviderHTTPError,
    ProviderTransportError,
)
from ngo_agent.llm.provider_config import (
    ANTHROPIC_URL,
    ANTHROPIC_VERSION,
    GEMINI_URL_TEMPLATE,
    OPENAI_URL,
    Credentials,
    default_model,
    request_timeout,
)
from ngo_agent.llm.types import CallConfig, CallResult, Message, Provider, Role


class ProviderAdapter(Protocol):
    """Uniform adapter contract shared by all vendors."""

    provider: Provider

    def call(self, messages: list[Message], config: CallConfig) -> CallResult:
        """Execute one conversation and return the normalized reply."""


def _dig(data: Any, *path) -> Any:
    """Walk nested dicts/lists, returning `None` on any missing step."""
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or len(current) <= step:
                return None
            current = current[step]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(step)
    return current


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def _split_system(messages: list[Message]) -> tuple[str | None, list[Message]]:
    """Separate the first system message from the conversation.

    Only the first system message is used. Later system messages are dropped
    and never appear in the conversation array.
    """
    system_prompt = None
    conversation = []
    for message in messages:
        if message.role == Role.SYSTEM:
            if system_prompt is None:
                system_prompt = message.content
            continue
        conversation.append(message)
    return system_prompt, conversation


class _HTTPAdapter:
    """Shared request/response plumbing for the JSON-over-HTTP vendors."""

    provider: Provider

    def __init__(self, api_key: str, session: requests.Session | None = None):
        self.api_key = api_key
        self.session = session

    def _model(self, config: CallConfig) -> str:
        return config.model or default_model(self.provider)

    def _timeout(self, config: CallConfig) -> float:
        return config.timeout if config.timeout is not None else request_timeout()

    def _post(self, url: str, headers: dict, payload: dict, timeout: float) -> dict:
        sender = self.session if self.session is not None else requests
        label = self.provider.value

        try:
            response = sender.post(url, headers=headers, json=payload, timeout=timeout)
        except requests.exceptions.RequestException as err:
            raise ProviderTransportError(
                self.provider, f"{label} request failed: {err}"
            ) from err

        if not 200 <= response.status_code < 300:
            raise ProviderHTTPError(self.provider, response.status_code, response.text)

        try:
            return response.json()
        except ValueError as err:
            raise ProviderTransportError(
                self.provider, f"{label} returned a non-JSON body"
            ) from err


class OpenAIAdapter(_HTTPAdapter):
    """OpenAI chat-completions adapter."""

    provider = Provider.OPENAI

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        url: str = OPENAI_URL,
    ):
        super().__init__(api_key, session)
        self.url = url

    def build_payload(self, messages: list[Message], config: CallConfig) -> dict:
        return {
            "model": self._model(config),
            "messages": [
                {"role": message.role.value, "content": message.content}
                for message in messages
            ],
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
        }

    def call(self, messages: list[Message], config: CallConfig) -> CallResult:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        data = self._post(
            self.url, headers, self.build_payload(messages, config), self._timeout(config)
        )

        return CallResult(
            content=_dig(data, "choices", 0, "message", "content") or "",
            provider=self.provider,
            model=self._model(config),
            tokens_used=_as_int(_dig(data, "usage", "total_tokens")),
        )


class GeminiAdapter(_HTTPAdapter):
    """Google Gemini `generateContent` adapter."""

    provider = Provider.GEMINI

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        url_template: str = GEMINI_URL_TEMPLATE,
    ):
        super().__init__(api_key, session)
        self.url_template = url_template

    def build_payload(self, messages: list[Message], config: CallConfig) -> dict:
        system_prompt, conversation = _split_system(messages)

        payload = {
            "contents": [
                {
                    "role": "model" if message.role == Role.ASSISTANT else "user",
                    "parts": [{"text": message.content}],
                }
                for message in conversation
            ],
            "generationConfig": {
                "temperature": config.temperature,
                "maxOutputTokens": config.max_tokens,
            },
        }

        if system_prompt is not None:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        return payload

    def call(self, messages: list[Message], config: CallConfig) -> CallResult:
        model = self._model(config)
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        data = self._post(
            self.url_template.format(model=model),
            headers,
            self.build_payload(messages, config),
            self._timeout(config),
        )

        return CallResult(
            content=_dig(data, "candidates", 0, "content", "parts", 0, "text") or "",
            provider=self.provider,
            model=model,
            tokens_used=_as_int(_dig(data, "usageMetadata", "totalTokenCount")),
        )


class ClaudeAdapter(_HTTPAdapter):
    """Anthropic Messages API adapter."""

    provider = Provider.CLAUDE

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        url: str = ANTHROPIC_URL,
    ):
        super().__init__(api_key, session)
        self.url = url

    def build_payload(self, messages: list[Message], config: CallConfig) -> dict:
        system_prompt, conversation = _split_system(messages)

        payload = {
            "model": self._model(config),
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "messages": [
                {"role": message.role.value, "content": message.content}
                for message in conversation
            ],
        }

        if system_prompt is not None:
            payload["system"] = system_prompt

        return payload

    def call(self, messages: list[Message], config: CallConfig) -> CallResult:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }
        data = self._post(
            self.url, headers, self.build_payload(messages, config), self._timeout(config)
        )

        # Reported as one combined number.
        input_tokens = _as_int(_dig(data, "usage", "input_tokens")) or 0
        output_tokens = _as_int(_dig(data, "usage", "output_tokens")) or 0

        return CallResult(
            content=_dig(data, "content", 0, "text") or "",
            provider=self.provider,
            model=self._model(config),
            tokens_used=input_tokens + output_tokens,
        )


ADAPTER_TYPES = {
    Provider.OPENAI: OpenAIAdapter,
    Provider.GEMINI: GeminiAdapter,
    Provider.CLAUDE: ClaudeAdapter,
}


def build_adapter(
    provider: Provider,
    credentials: Credentials,
    session: requests.Session | None = None,
) -> ProviderAdapter:
    """Construct a fresh adapter for `provider`.

    Raises:
        ConfigurationError: The provider has no credential.
    """
    api_key = credentials.key_for(provider)
    if not api_key:
        raise ConfigurationError(
            f"Providerul AI '{provider.value}' nu are cheie API configurata."
        )
    return ADAPTER_TYPES[provider](api_key, session=session)
