"""Resilient dispatch of conversations to configured providers.

Architectural role:
    Canonical model-invocation entrypoint for the capability router. Resolves
    which provider(s) to use from credentials and hands the conversation to the
    matching adapter in `ngo_agent.llm.client`.

Entry points:
    - `call_once`: exactly one provider (explicit, else `best_provider`), no
      retry, failures propagate unchanged.
    - `call_with_fallback`: preferred provider first (when available), then every
      other available provider in enumeration order. Strictly sequential; each
      provider is attempted at most once.
    - `probe_providers`: minimal health check of every provider.

Failure handling:
    - No credential at all -> `ConfigurationError` before any network call.
    - Inside `call_with_fallback` every `ProviderError` is logged and recorded;
      when all candidates fail, `ProvidersExhaustedError` carries the last one.

Concurrency:
    No shared mutable state. Adapters are built per call, so concurrent callers
    are independent.
"""

import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

import requests

from ngo_agent.llm.client import ProviderAdapter, build_adapter
from ngo_agent.llm.errors import (
    AgentError,
    ConfigurationError,
    ProviderError,
    ProviderHTTPError,
    ProvidersExhaustedError,
)
from ngo_agent.llm.provider_config import (
    Credentials,
    available_providers,
    best_provider,
    resolve_credentials,
)
from ngo_agent.llm.types import CallConfig, CallResult, Message, Provider


logger = logging.getLogger(__name__)

PROBE_PROMPT = "Spune doar: OK"
PROBE_MAX_TOKENS = 10


def _adapter_for(
    provider: Provider,
    credentials: Credentials,
    adapters: Mapping[Provider, ProviderAdapter] | None,
    session: requests.Session | None,
) -> ProviderAdapter:
    if adapters is not None and provider in adapters:
        return adapters[provider]
    return build_adapter(provider, credentials, session=session)


def fallback_order(
    preferred: Provider | None, available: Sequence[Provider]
) -> list[Provider]:
    """Compute the attempt order for one fallback call.

    Args:
        preferred: Requested provider, or `None`.
        available: Usable providers in enumeration order.

    Returns:
        `[preferred] + (available without preferred)` when `preferred` is
        available; otherwise `available` unchanged. Never contains duplicates.
    """
    ordered = list(dict.fromkeys(available))
    if preferred is None or preferred not in ordered:
        return ordered
    return [preferred] + [provider for provider in ordered if provider != preferred]


def call_once(
    messages: Sequence[Message],
    config: CallConfig | None = None,
    *,
    credentials: Credentials | None = None,
    adapters: Mapping[Provider, ProviderAdapter] | None = None,
    session: requests.Session | None = None,
) -> CallResult:
    """Send `messages` to exactly one provider without retrying.

    Provider resolution:
        `config.provider` when set, else `best_provider()` (Claude > OpenAI >
        Gemini).

    Raises:
        ConfigurationError: No provider can be resolved, the explicit provider
            is unknown, or it has no credential. Raised before any network call.
        ProviderError: Any adapter failure, propagated as-is.
    """
    config = config or CallConfig()
    creds = resolve_credentials(credentials)

    if config.provider is not None:
        provider = Provider.coerce(config.provider)
        if provider is None:
            raise ConfigurationError(f"Provider necunoscut: {config.provider}")
        if not creds.has(provider):
            raise ConfigurationError(
                f"Providerul AI '{provider.value}' nu are cheie API configurata."
            )
    else:
        provider = best_provider(creds)
        if provider is None:
            raise ConfigurationError()

    adapter = _adapter_for(provider, creds, adapters, session)
    return adapter.call(list(messages), config.with_provider(provider))


def call_with_fallback(
    messages: Sequence[Message],
    config: CallConfig | None = None,
    *,
    credentials: Credentials | None = None,
    adapters: Mapping[Provider, ProviderAdapter] | None = None,
    session: requests.Session | None = None,
) -> CallResult:
    """Send `messages` to providers in fallback order until one succeeds.

    Args:
        messages: Conversation, earliest first.
        config: Generation settings; `config.provider` is the preference.
        credentials: Injected credentials; `None` reads the environment.
        adapters: Optional adapter overrides keyed by provider.
        session: Optional `requests` session shared by built adapters.

    Returns:
        The first successful `CallResult`. Its `provider`/`model` name the
        adapter that actually answered.

    Raises:
        ConfigurationError: No provider is available; nothing is attempted.
        ProvidersExhaustedError: Every candidate failed. `last_error` is the
            error of the last attempted provider.

    Edge cases:
        - An unknown or unavailable preferred provider is ignored.
        - A timeout is an ordinary provider failure and advances to the next
          candidate.
    """
    config = config or CallConfig()
    creds = resolve_credentials(credentials)
    providers = available_providers(creds)

    if not providers:
        raise ConfigurationError("Niciun provider AI disponibil.")

    order = fallback_order(Provider.coerce(config.provider), providers)
    conversation = list(messages)
    attempts: list[tuple[Provider, ProviderError]] = []

    for index, provider in enumerate(order):
        try:
            adapter = _adapter_for(provider, creds, adapters, session)
            result = adapter.call(conversation, config.with_provider(provider))
        except ProviderError as err:
            attempts.append((provider, err))
            if isinstance(err, ProviderHTTPError):
                logger.warning(
                    "Provider %s failed with HTTP %s: %s",
                    provider.value,
                    err.status_code,
                    err.body,
                )
            else:
                logger.warning(
                    "Provider %s failed (transport): %s", provider.value, err
                )
            continue

        if index > 0:
            logger.info(
                "Provider %s succeeded after %d failed attempt(s)",
                provider.value,
                index,
            )
        return result

    logger.error("All %d AI provider attempts failed", len(attempts))
    raise ProvidersExhaustedError(attempts) from attempts[-1][1]


@dataclass(frozen=True)
class ProviderStatus:
    """Outcome of probing one provider: `ok`, `error` or `not_configured`."""

    status: str
    model: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class ProbeReport:
    results: dict[Provider, ProviderStatus] = field(default_factory=dict)
    working_providers: list[Provider] = field(default_factory=list)
    summary: str = ""


def probe_providers(
    *,
    credentials: Credentials | None = None,
    adapters: Mapping[Provider, ProviderAdapter] | None = None,
    session: requests.Session | None = None,
) -> ProbeReport:
    """Check every provider with a minimal request.

    Providers without a credential are reported as `not_configured` and are not
    contacted. Failures are reported per provider and never raised.
    """
    creds = resolve_credentials(credentials)
    results: dict[Provider, ProviderStatus] = {}

    for provider in Provider:
        if not creds.has(provider):
            results[provider] = ProviderStatus(status="not_configured")
            continue

        try:
            result = call_once(
                [Message.user(PROBE_PROMPT)],
                CallConfig(provider=provider, max_tokens=PROBE_MAX_TOKENS),
                credentials=creds,
                adapters=adapters,
                session=session,
            )
        except AgentError as err:
            logger.warning("Probe of provider %s failed: %s", provider.value, err)
            results[provider] = ProviderStatus(status="error", error=str(err))
            continue

        results[provider] = ProviderStatus(status="ok", model=result.model)

    working = [provider for provider, status in results.items() if status.status == "ok"]
    if working:
        summary = (
            f"{len(working)} provider(i) functioneaza: "
            + ", ".join(provider.value for provider in working)
        )
    else:
        summary = "Niciun provider AI nu functioneaza. Verificati cheile API."

    return ProbeReport(results=results, working_providers=working, summary=summary)
