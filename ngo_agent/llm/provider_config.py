"""Provider configuration and availability resolution for the LLM layer.

Architectural role:
    Centralizes credential lookup, default models, endpoints and timeouts for
    `ngo_agent.llm.client` and `ngo_agent.llm.service`, and decides from
    credential presence alone which providers are usable.

Model call flow integration:
    - `service.call_once` consumes `best_provider`.
    - `service.call_with_fallback` consumes `available_providers`.
    - `client` adapters consume `default_model`, `request_timeout` and the
      endpoint constants.

Determinism:
    Deterministic for a fixed process environment. Credentials are read on every
    call through `Credentials.from_env`, never cached, so key rotation applies to
    the next call without a restart.

Failure behavior:
    Missing key material is represented as `None`. Having no credential at all is
    a valid state here; the dispatcher turns it into `ConfigurationError`.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from ngo_agent.llm.types import Provider

load_dotenv()


# Environment variable holding each provider's API key.
CREDENTIAL_ENV_VARS = {
    Provider.OPENAI: "OPENAI_API_KEY",
    Provider.GEMINI: "GEMINI_API_KEY",
    Provider.CLAUDE: "ANTHROPIC_API_KEY",
}

# Optional per-process model overrides.
MODEL_ENV_VARS = {
    Provider.OPENAI: "OPENAI_MODEL",
    Provider.GEMINI: "GEMINI_MODEL",
    Provider.CLAUDE: "ANTHROPIC_MODEL",
}

DEFAULT_MODELS = {
    Provider.OPENAI: "gpt-4o-mini",
    Provider.GEMINI: "gemini-2.0-flash",
    Provider.CLAUDE: "claude-sonnet-4-5-20250929",
}

# "Best single provider" policy. Independent of enumeration order.
BEST_PROVIDER_PRIORITY = (Provider.CLAUDE, Provider.OPENAI, Provider.GEMINI)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

GEMINI_URL_TEMPLATE = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "{model}:generateContent"
)

DEFAULT_REQUEST_TIMEOUT = 120.0


@dataclass(frozen=True)
class Credentials:
    """API keys for each provider; `None` when absent."""

    openai: str | None = None
    gemini: str | None = None
    anthropic: str | None = None

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> "Credentials":
        """Read credentials from `env` (defaults to the process environment).

        Blank or whitespace-only values are treated as missing.
        """
        source = os.environ if env is None else env
        return cls(
            openai=_clean(source.get(CREDENTIAL_ENV_VARS[Provider.OPENAI])),
            gemini=_clean(source.get(CREDENTIAL_ENV_VARS[Provider.GEMINI])),
            anthropic=_clean(source.get(CREDENTIAL_ENV_VARS[Provider.CLAUDE])),
        )

    def key_for(self, provider: Provider) -> str | None:
        if provider is Provider.OPENAI:
            return self.openai
        if provider is Provider.GEMINI:
            return self.gemini
        if provider is Provider.CLAUDE:
            return self.anthropic
        return None

    def has(self, provider: Provider) -> bool:
        return bool(self.key_for(provider))


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def resolve_credentials(credentials: Credentials | None = None) -> Credentials:
    """Return explicit credentials, or a fresh read of the environment."""
    return credentials if credentials is not None else Credentials.from_env()


def available_providers(credentials: Credentials | None = None) -> list[Provider]:
    """Return every provider with a credential, in enumeration order.

    Args:
        credentials: Injected credentials; `None` reads the environment.

    Returns:
        Providers ordered OpenAI, Gemini, Claude, filtered to those with a key.
        Empty when nothing is configured.

    Notes:
        This is enumeration order, consumed as the fallback tail. It is not the
        preference order used by `best_provider`.
    """
    creds = resolve_credentials(credentials)
    return [provider for provider in Provider if creds.has(provider)]


def best_provider(credentials: Credentials | None = None) -> Provider | None:
    """Return the single preferred provider: Claude > OpenAI > Gemini.

    Returns `None` when no credential is present.
    """
    creds = resolve_credentials(credentials)
    for provider in BEST_PROVIDER_PRIORITY:
        if creds.has(provider):
            return provider
    return None


def default_model(provider: Provider, env: dict[str, str] | None = None) -> str:
    """Return the model used when a call does not name one."""
    source = os.environ if env is None else env
    override = _clean(source.get(MODEL_ENV_VARS[provider]))
    return override or DEFAULT_MODELS[provider]


def request_timeout(env: dict[str, str] | None = None) -> float:
    """Per-attempt HTTP timeout in seconds (`AI_REQUEST_TIMEOUT`, default 120)."""
    source = os.environ if env is None else env
    raw = _clean(source.get("AI_REQUEST_TIMEOUT"))
    if not raw:
        return DEFAULT_REQUEST_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_REQUEST_TIMEOUT
    return value if value > 0 else DEFAULT_REQUEST_TIMEOUT
