"""Error taxonomy for provider dispatch and capability routing.

Failure classes:
    - `ConfigurationError`: no provider can be resolved from credentials. Raised
      before any network call.
    - `ProviderHTTPError`: vendor answered with a non-2xx status. Carries the raw
      response body for operator debugging.
    - `ProviderTransportError`: DNS/connection/timeout failure, or a reply that
      could not be decoded.
    - `ProvidersExhaustedError`: every fallback candidate failed. Surfaces the
      last recorded error.
    - `UnknownCapabilityError`: capability outside the fixed set.

Malformed model output has no error class here: the router absorbs
it into a `Raw` result instead of raising.
"""


class AgentError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(AgentError):
    """No usable AI provider is configured for the request."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "Niciun provider AI configurat. Adaugati OPENAI_API_KEY, "
            "GEMINI_API_KEY sau ANTHROPIC_API_KEY."
        )


class ProviderError(AgentError):
    """One provider attempt failed."""

    def __init__(self, provider, message: str):
        self.provider = provider
        self.message = message
        super().__init__(message)


class ProviderHTTPError(ProviderError):
    """Vendor responded with a non-success HTTP status."""

    def __init__(self, provider, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        label = getattr(provider, "value", provider)
        super().__init__(provider, f"{label} API error ({status_code}): {body}")


class ProviderTransportError(ProviderError):
    """Request failed before a usable HTTP response was obtained."""


class ProvidersExhaustedError(ProviderError):
    """Every candidate in a fallback call failed.

    Attributes:
        attempts: Ordered `(provider, error)` pairs, one per attempt.
        last_error: Error recorded for the last attempted provider.
    """

    def __init__(self, attempts: list):
        self.attempts = list(attempts)
        last_provider, last_error = self.attempts[-1]
        self.last_error = last_error
        super().__init__(
            last_provider,
            f"Toti providerii AI au esuat ({len(self.attempts)} incercari). "
            f"Ultima eroare: {last_error}",
        )


class UnknownCapabilityError(AgentError, ValueError):
    """Requested capability is not part of the fixed capability set."""

    def __init__(self, capability):
        self.capability = capability
        super().__init__(f"Capabilitate necunoscuta: {capability}")
