"""Capability router turning named business operations into model calls.

Architectural role:
    Single entry point (`run_agent`) used by the surrounding CRM's route handlers.
    Maps one `AgentRequest` onto a fixed capability definition, builds the
    prompt, dispatches through the resilient fallback layer, and shapes the reply
    into an `AgentResponse`.

Control-flow model:
    1. Validate the capability name (the only validation performed on it).
    2. Read the loose context map through the capability's typed context view.
    3. Build system + user messages (`ngo_agent.prompting.prompt_builder`).
    4. `call_with_fallback` with the capability temperature and preferred
       provider.
    5. Build the result: JSON extraction (`Structured` / `Raw`) for structured
       capabilities, `{text_key: content}` for chatbot and translator.
    6. Read suggestions/confidence from fixed result keys with safe defaults.

Error handling strategy:
    - Unknown capability -> `UnknownCapabilityError` before any network access.
    - Configuration and provider failures propagate from the dispatcher.
    - Malformed model output never raises; it degrades to `Raw`.

Determinism:
    Prompt assembly and result shaping are deterministic for fixed inputs.
    Model output is not.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import requests

from ngo_agent.core.capabilities import (
    Capability,
    CapabilityDefinition,
    get_capability_definition,
)
from ngo_agent.core.extraction import Raw, Structured, extract_json
from ngo_agent.llm.client import ProviderAdapter
from ngo_agent.llm.provider_config import Credentials
from ngo_agent.llm.service import call_with_fallback
from ngo_agent.llm.types import CallConfig, Provider


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgentRequest:
    """Inbound contract supplied by caller code.

    Attributes:
        capability: Capability enum or its string name.
        context: Capability-specific values, already fetched by the caller.
        language: Optional "ro" / "en"; used as the translator target when the
            context names none.
        provider: Optional preferred provider (enum or name).
    """

    capability: Capability | str
    context: Mapping[str, Any] = field(default_factory=dict)
    language: str | None = None
    provider: Provider | str | None = None


@dataclass(frozen=True)
class AgentResponse:
    """Outbound contract returned for every successful capability run."""

    result: Structured | Raw
    explanation: str
    provider: Provider
    model: str
    suggestions: list[str] | None = None
    confidence: float | None = None

    def to_dict(self) -> dict:
        """JSON-shaped view; optional fields are omitted when unset."""
        payload = {
            "result": self.result.to_dict(),
            "explanation": self.explanation,
            "provider": self.provider.value,
            "model": self.model,
        }
        if self.suggestions is not None:
            payload["suggestions"] = list(self.suggestions)
        if self.confidence is not None:
            payload["confidence"] = self.confidence
        return payload


def _suggestions(definition: CapabilityDefinition, result: Structured | Raw) -> list[str] | None:
    if definition.suggestions_key is None:
        return None
    value = result.get(definition.suggestions_key) if isinstance(result, Structured) else None
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _confidence(definition: CapabilityDefinition, result: Structured | Raw) -> float | None:
    if definition.confidence_key and isinstance(result, Structured):
        value = result.get(definition.confidence_key)
        if (
            isinstance(value, (int, float))
            and not isinstance(value, bool)
            and 0 <= value <= 100
        ):
            return value
    return definition.confidence


def _shape_result(definition: CapabilityDefinition, content: str) -> Structured | Raw:
    if definition.text_key is not None:
        return Structured({definition.text_key: content})

    result = extract_json(content)
    if isinstance(result, Raw):
        logger.info(
            "Capability %s returned unparseable output; passing it through as raw",
            definition.capability.value,
        )
    return result


def run_agent(
    request: AgentRequest,
    *,
    credentials: Credentials | None = None,
    adapters: Mapping[Provider, ProviderAdapter] | None = None,
    session: requests.Session | None = None,
) -> AgentResponse:
    """Execute one capability request end to end.

    Args:
        request: Capability name, context map, language and preferred provider.
        credentials: Injected credentials; `None` reads the environment.
        adapters: Optional adapter overrides keyed by provider.
        session: Optional `requests` session for built adapters.

    Returns:
        `AgentResponse` whose `provider`/`model` name the adapter that answered.

    Raises:
        UnknownCapabilityError: Capability is outside the fixed set; raised
            before any network activity.
        ConfigurationError: No provider is configured.
        ProvidersExhaustedError: Every provider failed.
    """
    definition = get_capability_definition(request.capability)
    ctx = definition.context_type.from_mapping(request.context, request.language)
    messages = definition.build_messages(ctx)

    reply = call_with_fallback(
        messages,
        CallConfig(
            provider=Provider.coerce(request.provider),
            temperature=definition.temperature,
        ),
        credentials=credentials,
        adapters=adapters,
        session=session,
    )
    logger.debug(
        "Capability %s answered by %s/%s (temperature=%s)",
        definition.capability.value,
        reply.provider.value,
        reply.model,
        definition.temperature,
    )

    result = _shape_result(definition, reply.content)

    return AgentResponse(
        result=result,
        explanation=definition.explain(ctx),
        provider=reply.provider,
        model=reply.model,
        suggestions=_suggestions(definition, result),
        confidence=_confidence(definition, result),
    )
