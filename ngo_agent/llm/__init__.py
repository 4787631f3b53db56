"""LLM access package.

Architectural role:
    Provides the shared message model, provider configuration, vendor transport
    adapters and the resilient dispatcher used by the capability router to
    invoke text-generation back-ends.

Module split:
    - `types`: role-tagged messages, per-call configuration, normalized result.
    - `errors`: configuration, provider and capability error taxonomy.
    - `provider_config`: environment-driven credentials, models, endpoints and
      provider availability/priority resolution.
    - `client`: provider-specific HTTP transport and response parsing.
    - `service`: single-provider and fallback dispatch, provider health probe.
"""
