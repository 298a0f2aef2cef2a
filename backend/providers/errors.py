"""Provider routing errors."""

from typing import Optional


class ProviderError(Exception):
    """Base class for errors raised by the provider layer."""


class NoProviderAvailable(ProviderError):
    """No active, healthy provider matches the requested capability."""

    def __init__(self, capability: Optional[str] = None):
        self.capability = capability
        if capability:
            message = f"No healthy AI provider available for capability '{capability}'"
        else:
            message = "No healthy AI provider available"
        super().__init__(message)


class AllProvidersFailed(ProviderError):
    """Every provider in the fallback chain failed; wraps the last error."""

    def __init__(self, last_error: BaseException, attempted: Optional[list[str]] = None):
        self.last_error = last_error
        self.attempted = attempted or []
        chain = ", ".join(self.attempted) if self.attempted else "none"
        super().__init__(f"All AI providers failed (tried: {chain}). Last error: {last_error}")


class ProviderConfigurationError(ProviderError):
    """A client could not be constructed for a provider (missing key, unsupported vendor)."""
