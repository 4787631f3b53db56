"""Multi-provider AI orchestration layer for the NGO fundraising CRM.

Callers build an `AgentRequest` from already-fetched CRM data and call
`run_agent`. Lower-level access to the providers is available through
`call_once`, `call_with_fallback` and `probe_providers`.
"""

from ngo_agent.core.capabilities import Capability
from ngo_agent.core.engine import AgentRequest, AgentResponse, run_agent
from ngo_agent.core.extraction import Raw, Structured, extract_json
from ngo_agent.llm.errors import (
    AgentError,
    ConfigurationError,
    ProviderError,
    ProviderHTTPError,
    ProvidersExhaustedError,
    ProviderTransportError,
    UnknownCapabilityError,
)
from ngo_agent.llm.provider_config import Credentials, available_providers, best_provider
from ngo_agent.llm.service import call_once, call_with_fallback, probe_providers
from ngo_agent.llm.types import CallConfig, CallResult, Message, Provider, Role

__all__ = [
    "AgentError",
    "AgentRequest",
    "AgentResponse",
    "CallConfig",
    "CallResult",
    "Capability",
    "ConfigurationError",
    "Credentials",
    "Message",
    "Provider",
    "ProviderError",
    "ProviderHTTPError",
    "ProviderTransportError",
    "ProvidersExhaustedError",
    "Raw",
    "Role",
    "Structured",
    "UnknownCapabilityError",
    "available_providers",
    "best_provider",
    "call_once",
    "call_with_fallback",
    "extract_json",
    "probe_providers",
    "run_agent",
]
