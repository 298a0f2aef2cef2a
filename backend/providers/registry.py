"""
AI provider registry: selection, health tracking and sequential fallback.

One instance is built at startup with its store, client factory, credential
decryptor and pricing table, and passed to whoever needs it. Health lives in
the store; nothing is cached in-process.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, TypeVar

from backend.providers.clients import ChatCapableClient, ClientFactory, create_client
from backend.providers.credentials import CredentialError, decrypt_credential
from backend.providers.errors import AllProvidersFailed, NoProviderAvailable
from backend.providers.models import (
    Capability,
    CompletionResponse,
    ProviderConfig,
    ProviderSelection,
    ProviderStatus,
    TokenUsage,
    TrackedResult,
    UsageLogEntry,
)
from backend.providers.pricing import PROVIDER_PRICING, estimate_cost

logger = logging.getLogger(__name__)

# Consecutive failures before a provider is taken out of rotation
FAILURE_THRESHOLD = 3

T = TypeVar("T")
Operation = Callable[[ChatCapableClient, ProviderConfig], Awaitable[T]]


def _parse_capability(capability: Optional[Capability | str]) -> Optional[Capability]:
    """None means any capability. Raises ValueError for unknown names."""
    if capability is None or capability == "":
        return None
    return Capability(capability)


def _usage_of(outcome) -> TokenUsage:
    if isinstance(outcome, CompletionResponse):
        return outcome.usage
    usage = getattr(outcome, "usage", None)
    if isinstance(usage, TokenUsage):
        return usage
    return TokenUsage()


class ProviderRegistry:
    def __init__(
        self,
        store,
        client_factory: ClientFactory = create_client,
        decrypt: Callable[[str], str] = decrypt_credential,
        pricing: dict[str, dict[str, float]] = PROVIDER_PRICING,
        failure_threshold: int = FAILURE_THRESHOLD,
    ):
        self.store = store
        self._client_factory = client_factory
        self._decrypt = decrypt
        self._pricing = pricing
        self.failure_threshold = failure_threshold

    # --- Selection ---

    async def _attach_credential(self, config: ProviderConfig) -> ProviderConfig:
        """Decrypt the credential of a provider about to be tried.

        Key derivation is CPU-bound, so it runs in a worker thread.
        """
        if not config.encrypted_credential:
            return config
        try:
            config.api_key = await asyncio.to_thread(self._decrypt, config.encrypted_credential)
        except CredentialError as e:
            # Left empty: client construction fails and counts as a normal attempt
            logger.error("Could not decrypt credential for provider '%s': %s", config.provider, e)
            config.api_key = ""
        return config

    async def get_active_providers(self, capability: Optional[Capability | str] = None) -> list[ProviderConfig]:
        """Active, healthy providers supporting `capability`, lowest priority value first.

        Never raises: an unknown capability or a store failure is logged and
        yields an empty list. Credentials stay encrypted until a provider is
        actually tried.
        """
        try:
            wanted = _parse_capability(capability)
        except ValueError:
            logger.warning("Unknown AI capability %r", capability)
            return []

        try:
            configs = await self.store.list_providers(status=ProviderStatus.ACTIVE)
        except Exception:
            logger.error("Failed to load AI providers from store", exc_info=True)
            return []

        eligible = [
            c for c in configs
            if c.status == ProviderStatus.ACTIVE and c.is_healthy and c.supports(wanted)
        ]
        # sorted() is stable: equal priorities keep store order
        return sorted(eligible, key=lambda c: c.priority)

    async def select_provider(
        self,
        capability: Optional[Capability | str] = None,
        preferred_provider: Optional[str] = None,
        exclude_providers: Optional[list[str]] = None,
    ) -> Optional[ProviderConfig]:
        providers = await self.get_active_providers(capability)
        if exclude_providers:
            providers = [p for p in providers if p.provider not in exclude_providers]
        if not providers:
            return None
        if preferred_provider:
            for p in providers:
                if p.provider == preferred_provider:
                    return p
        return providers[0]

    async def select_provider_with_fallback(
        self,
        capability: Optional[Capability | str] = None,
        preferred_provider: Optional[str] = None,
    ) -> Optional[ProviderSelection]:
        """Primary provider plus ordered fallbacks, or None if nothing is eligible.

        An eligible preferred provider becomes primary regardless of its
        priority; the rest keep their priority order.
        """
        providers = await self.get_active_providers(capability)
        if not providers:
            return None

        primary = providers[0]
        if preferred_provider:
            primary = next((p for p in providers if p.provider == preferred_provider), primary)
        fallbacks = [p for p in providers if p is not primary]
        return ProviderSelection(provider=primary, fallbacks=fallbacks)

    # --- Health ---

    async def report_success(self, provider: str) -> None:
        try:
            await self.store.update_provider(provider, consecutive_failures=0, is_healthy=True)
        except Exception:
            logger.error("Failed to record success for provider '%s'", provider, exc_info=True)

    async def report_failure(self, provider: str) -> None:
        try:
            config = await self.store.get_provider(provider)
            if config is None:
                logger.warning("Failure reported for unknown provider '%s'", provider)
                return
            failures = config.consecutive_failures + 1
            is_healthy = failures < self.failure_threshold
            await self.store.update_provider(
                provider,
                consecutive_failures=failures,
                total_failures=config.total_failures + 1,
                last_failure_at=datetime.now(timezone.utc),
                is_healthy=is_healthy,
            )
            if config.is_healthy and not is_healthy:
                logger.warning(
                    "Provider '%s' marked unhealthy after %d consecutive failures", provider, failures
                )
        except Exception:
            logger.error("Failed to record failure for provider '%s'", provider, exc_info=True)

    async def reset_health(self, provider: str) -> Optional[ProviderConfig]:
        """Administrative reset. Returns the updated config, or None if unknown."""
        config = await self.store.update_provider(provider, consecutive_failures=0, is_healthy=True)
        if config is not None:
            logger.info("Health reset for provider '%s'", provider)
        return config

    # --- Execution ---

    async def execute_with_fallback(
        self,
        capability: Optional[Capability | str],
        operation: Operation,
        *,
        preferred_provider: Optional[str] = None,
        request_type: Optional[str] = None,
        user_id: Optional[str] = None,
    ):
        """
        Run `operation(client, provider)` against the fallback chain.

        Providers are tried strictly one after another; the first success is
        returned. Every attempt updates health and writes one usage entry.

        Raises:
            NoProviderAvailable: nothing eligible for `capability`.
            AllProvidersFailed: every provider in the chain failed.
        """
        return await self._execute(capability, operation, preferred_provider, request_type, user_id, tracked=False)

    async def execute_with_tracking(
        self,
        capability: Optional[Capability | str],
        operation: Operation,
        *,
        preferred_provider: Optional[str] = None,
        request_type: Optional[str] = None,
        user_id: Optional[str] = None,
    ):
        """Like execute_with_fallback, but `operation` returns a TrackedResult.

        Its usage is logged exactly and its `result` is returned.
        """
        return await self._execute(capability, operation, preferred_provider, request_type, user_id, tracked=True)

    async def _execute(self, capability, operation, preferred_provider, request_type, user_id, tracked: bool):
        try:
            wanted = _parse_capability(capability)
        except ValueError:
            raise NoProviderAvailable(str(capability)) from None
        capability_name = wanted.value if wanted else None

        selection = await self.select_provider_with_fallback(wanted, preferred_provider)
        if selection is None:
            raise NoProviderAvailable(capability_name)

        attempted: list[str] = []
        last_error: Optional[Exception] = None

        for provider in selection.chain():
            attempted.append(provider.provider)
            started = time.perf_counter()
            try:
                await self._attach_credential(provider)
                client = self._client_factory(provider)
                outcome = await operation(client, provider)
            except Exception as e:
                latency_ms = int((time.perf_counter() - started) * 1000)
                last_error = e
                logger.warning("AI provider '%s' failed: %s", provider.provider, e)
                await self.report_failure(provider.provider)
                await self._log_usage(UsageLogEntry(
                    provider=provider.provider,
                    model=provider.default_model,
                    request_type=request_type,
                    capability=capability_name,
                    success=False,
                    error_message=str(e)[:1000],
                    latency_ms=latency_ms,
                    user_id=user_id,
                ))
                continue

            latency_ms = int((time.perf_counter() - started) * 1000)
            if tracked:
                if not isinstance(outcome, TrackedResult):
                    raise TypeError(
                        f"execute_with_tracking operation must return TrackedResult, got {type(outcome).__name__}"
                    )
                usage, result = outcome.usage, outcome.result
                model = outcome.model or provider.default_model
            else:
                usage, result = _usage_of(outcome), outcome
                model = outcome.model if isinstance(outcome, CompletionResponse) else provider.default_model

            await self.report_success(provider.provider)
            await self._log_usage(UsageLogEntry(
                provider=provider.provider,
                model=model,
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
                total_tokens=usage.total_tokens,
                estimated_cost=estimate_cost(provider.provider, usage.input_tokens, usage.output_tokens, self._pricing),
                request_type=request_type,
                capability=capability_name,
                success=True,
                latency_ms=latency_ms,
                user_id=user_id,
            ))
            logger.info("AI request served by '%s' in %dms", provider.provider, latency_ms)
            return result

        raise AllProvidersFailed(last_error, attempted) from last_error

    async def _log_usage(self, entry: UsageLogEntry) -> None:
        try:
            await self.store.log_usage(entry)
        except Exception:
            logger.error("Failed to write usage log for provider '%s'", entry.provider, exc_info=True)
