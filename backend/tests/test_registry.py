"""
Tests for the provider registry.

Validates:
1. Selection order: priority ascending, preferred provider promoted, ineligible skipped
2. Sequential fallback: first success wins, every attempt logged
3. Health tracking: three consecutive failures take a provider out of rotation
4. Fail-open selection when the store is unreachable
5. Exact usage accounting through execute_with_tracking
6. Credentials decrypted only for providers actually tried
"""

import asyncio
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from backend.providers.credentials import CredentialError
from backend.providers.errors import AllProvidersFailed, NoProviderAvailable, ProviderConfigurationError
from backend.providers.models import (
    Capability,
    CompletionResponse,
    ProviderConfig,
    ProviderStatus,
    TokenUsage,
    TrackedResult,
)
from backend.providers.registry import FAILURE_THRESHOLD, ProviderRegistry
from backend.providers.store import InMemoryProviderStore


class FakeClient:
    def __init__(self, name, fail=False):
        self.name = name
        self.fail = fail

    async def complete(self, request):
        if self.fail:
            raise RuntimeError(f"{self.name} is down")
        return CompletionResponse(
            text=f"hello from {self.name}",
            model=f"{self.name}-model",
            usage=TokenUsage(input_tokens=1000, output_tokens=500),
        )


class BrokenStore(InMemoryProviderStore):
    async def list_providers(self, status=None):
        raise ConnectionError("database unavailable")


def _config(name, priority, capabilities=None, **kwargs):
    return ProviderConfig(
        provider=name,
        default_model=f"{name}-model",
        priority=priority,
        capabilities=capabilities or [Capability.CHAT, Capability.CODING],
        encrypted_credential=f"token-{name}",
        **kwargs,
    )


def _registry(store, failing=()):
    return ProviderRegistry(
        store,
        client_factory=lambda config: FakeClient(config.provider, fail=config.provider in failing),
        decrypt=lambda token: "sk-" + token,
    )


async def _complete(client, provider):
    return await client.complete(None)


@pytest.fixture
def store():
    return InMemoryProviderStore([
        _config("openai", 2),
        _config("anthropic", 1),
        _config("google", 3, capabilities=[Capability.CHAT]),
    ])


class TestSelection:
    """Ordering and filtering of eligible providers."""

    @pytest.mark.asyncio
    async def test_priority_order(self, store):
        providers = await _registry(store).get_active_providers(Capability.CHAT)
        assert [p.provider for p in providers] == ["anthropic", "openai", "google"]

    @pytest.mark.asyncio
    async def test_capability_filter(self, store):
        providers = await _registry(store).get_active_providers(Capability.CODING)
        assert [p.provider for p in providers] == ["anthropic", "openai"]

    @pytest.mark.asyncio
    async def test_no_capability_means_any(self, store):
        providers = await _registry(store).get_active_providers()
        assert len(providers) == 3

    @pytest.mark.asyncio
    async def test_excludes_inactive_and_unhealthy(self):
        store = InMemoryProviderStore([
            _config("anthropic", 1, status=ProviderStatus.INACTIVE),
            _config("openai", 2, is_healthy=False),
            _config("google", 3),
        ])
        providers = await _registry(store).get_active_providers(Capability.CHAT)
        assert [p.provider for p in providers] == ["google"]

    @pytest.mark.asyncio
    async def test_selection_leaves_credentials_encrypted(self, store):
        decrypted = []
        registry = ProviderRegistry(store, decrypt=lambda token: decrypted.append(token) or "k")
        providers = await registry.get_active_providers(Capability.CHAT)
        assert all(p.api_key == "" for p in providers)
        await registry.select_provider_with_fallback(Capability.CHAT)
        assert decrypted == []

    @pytest.mark.asyncio
    async def test_unknown_capability_yields_nothing(self, store):
        registry = _registry(store)
        assert await registry.get_active_providers("vision") == []
        assert await registry.select_provider("vision") is None
        assert await registry.select_provider_with_fallback("vision") is None

    def test_supports_unknown_capability(self):
        assert _config("openai", 1).supports("vision") is False

    @pytest.mark.asyncio
    async def test_preferred_provider_becomes_primary(self, store):
        selection = await _registry(store).select_provider_with_fallback(Capability.CHAT, "google")
        assert selection.provider.provider == "google"
        assert [p.provider for p in selection.fallbacks] == ["anthropic", "openai"]

    @pytest.mark.asyncio
    async def test_ineligible_preferred_provider_ignored(self, store):
        selection = await _registry(store).select_provider_with_fallback(Capability.CODING, "google")
        assert selection.provider.provider == "anthropic"
        assert [p.provider for p in selection.fallbacks] == ["openai"]

    @pytest.mark.asyncio
    async def test_exclude_providers(self, store):
        provider = await _registry(store).select_provider(Capability.CHAT, exclude_providers=["anthropic"])
        assert provider.provider == "openai"

    @pytest.mark.asyncio
    async def test_nothing_eligible(self, store):
        registry = _registry(store)
        assert await registry.select_provider(Capability.IMAGE) is None
        assert await registry.select_provider_with_fallback(Capability.IMAGE) is None

    @pytest.mark.asyncio
    async def test_store_failure_fails_open(self):
        registry = _registry(BrokenStore())
        assert await registry.get_active_providers(Capability.CHAT) == []
        assert await registry.select_provider_with_fallback(Capability.CHAT) is None


class TestFallback:
    """Sequential execution across the fallback chain."""

    @pytest.mark.asyncio
    async def test_primary_serves_request(self, store):
        registry = _registry(store)
        response = await registry.execute_with_fallback(Capability.CHAT, _complete, request_type="test")
        assert response.text == "hello from anthropic"

        usage = await store.list_usage()
        assert len(usage) == 1
        assert usage[0].success is True
        assert usage[0].model == "anthropic-model"
        assert usage[0].total_tokens == 1500
        assert usage[0].request_type == "test"
        assert usage[0].capability == "chat"

    @pytest.mark.asyncio
    async def test_falls_through_to_third_provider(self, store):
        registry = _registry(store, failing={"anthropic", "openai"})
        response = await registry.execute_with_fallback(Capability.CHAT, _complete)
        assert response.text == "hello from google"

        usage = await store.list_usage()
        assert len(usage) == 3
        by_provider = {u.provider: u for u in usage}
        assert by_provider["anthropic"].success is False
        assert by_provider["openai"].success is False
        assert by_provider["google"].success is True
        assert "anthropic is down" in by_provider["anthropic"].error_message

        anthropic = await store.get_provider("anthropic")
        assert anthropic.consecutive_failures == 1
        assert anthropic.total_failures == 1
        assert anthropic.last_failure_at is not None
        assert anthropic.is_healthy is True

    @pytest.mark.asyncio
    async def test_all_providers_fail(self, store):
        registry = _registry(store, failing={"anthropic", "openai", "google"})
        with pytest.raises(AllProvidersFailed) as exc_info:
            await registry.execute_with_fallback(Capability.CHAT, _complete)
        assert exc_info.value.attempted == ["anthropic", "openai", "google"]
        assert "google is down" in str(exc_info.value.last_error)
        assert len(await store.list_usage()) == 3

    @pytest.mark.asyncio
    async def test_no_provider_available(self, store):
        with pytest.raises(NoProviderAvailable):
            await _registry(store).execute_with_fallback(Capability.IMAGE, _complete)
        assert await store.list_usage() == []

    @pytest.mark.asyncio
    async def test_preferred_provider_tried_first(self, store):
        response = await _registry(store).execute_with_fallback(
            Capability.CHAT, _complete, preferred_provider="openai"
        )
        assert response.text == "hello from openai"

    @pytest.mark.asyncio
    async def test_client_construction_failure_falls_through(self, store):
        def factory(config):
            if config.provider == "anthropic":
                raise ProviderConfigurationError("no key")
            return FakeClient(config.provider)

        registry = ProviderRegistry(store, client_factory=factory, decrypt=lambda t: "k")
        response = await registry.execute_with_fallback(Capability.CHAT, _complete)
        assert response.text == "hello from openai"

    @pytest.mark.asyncio
    async def test_success_resets_consecutive_failures(self, store):
        await store.update_provider("anthropic", consecutive_failures=2)
        await _registry(store).execute_with_fallback(Capability.CHAT, _complete)
        anthropic = await store.get_provider("anthropic")
        assert anthropic.consecutive_failures == 0

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, store):
        async def cancelled(client, provider):
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await _registry(store).execute_with_fallback(Capability.CHAT, cancelled)
        assert await store.list_usage() == []

    @pytest.mark.asyncio
    async def test_decrypts_only_attempted_providers(self, store):
        decrypted = []
        seen_keys = []

        def decrypt(token):
            decrypted.append(token)
            return "sk-" + token

        def factory(config):
            seen_keys.append(config.api_key)
            return FakeClient(config.provider, fail=config.provider == "anthropic")

        registry = ProviderRegistry(store, client_factory=factory, decrypt=decrypt)
        response = await registry.execute_with_fallback(Capability.CHAT, _complete)
        assert response.text == "hello from openai"
        assert decrypted == ["token-anthropic", "token-openai"]
        assert seen_keys == ["sk-token-anthropic", "sk-token-openai"]

    @pytest.mark.asyncio
    async def test_primary_success_decrypts_once(self, store):
        decrypted = []

        def decrypt(token):
            decrypted.append(token)
            return "sk-" + token

        registry = ProviderRegistry(store, client_factory=lambda c: FakeClient(c.provider), decrypt=decrypt)
        await registry.execute_with_fallback(Capability.CHAT, _complete)
        assert decrypted == ["token-anthropic"]

    @pytest.mark.asyncio
    async def test_undecryptable_credential_counts_as_failed_attempt(self, store):
        def decrypt(token):
            raise CredentialError("bad token")

        def factory(config):
            if not config.api_key:
                raise ProviderConfigurationError(f"no API key for {config.provider}")
            return FakeClient(config.provider)

        registry = ProviderRegistry(store, client_factory=factory, decrypt=decrypt)
        with pytest.raises(AllProvidersFailed) as exc_info:
            await registry.execute_with_fallback(Capability.CHAT, _complete)
        assert exc_info.value.attempted == ["anthropic", "openai", "google"]
        usage = await store.list_usage()
        assert len(usage) == 3
        assert all(u.success is False for u in usage)

    @pytest.mark.asyncio
    async def test_unknown_capability_raises_no_provider(self, store):
        with pytest.raises(NoProviderAvailable):
            await _registry(store).execute_with_fallback("vision", _complete)
        assert await store.list_usage() == []

    @pytest.mark.asyncio
    async def test_capability_given_as_string(self, store):
        response = await _registry(store).execute_with_fallback("coding", _complete)
        assert response.text == "hello from anthropic"
        assert (await store.list_usage())[0].capability == "coding"


class TestHealth:
    """Circuit breaking and administrative reset."""

    @pytest.mark.asyncio
    async def test_unhealthy_after_threshold(self, store):
        registry = _registry(store, failing={"anthropic"})
        for _ in range(FAILURE_THRESHOLD):
            await registry.execute_with_fallback(Capability.CHAT, _complete)

        anthropic = await store.get_provider("anthropic")
        assert anthropic.consecutive_failures == FAILURE_THRESHOLD
        assert anthropic.is_healthy is False

        providers = await registry.get_active_providers(Capability.CHAT)
        assert "anthropic" not in [p.provider for p in providers]

    @pytest.mark.asyncio
    async def test_healthy_below_threshold(self, store):
        registry = _registry(store)
        for _ in range(FAILURE_THRESHOLD - 1):
            await registry.report_failure("anthropic")
        assert (await store.get_provider("anthropic")).is_healthy is True

    @pytest.mark.asyncio
    async def test_reset_health(self, store):
        registry = _registry(store)
        await store.update_provider("anthropic", consecutive_failures=5, is_healthy=False)
        config = await registry.reset_health("anthropic")
        assert config.is_healthy is True
        assert config.consecutive_failures == 0

    @pytest.mark.asyncio
    async def test_reset_unknown_provider(self, store):
        assert await _registry(store).reset_health("nobody") is None

    @pytest.mark.asyncio
    async def test_report_failure_unknown_provider_is_silent(self, store):
        await _registry(store).report_failure("nobody")

    @pytest.mark.asyncio
    async def test_report_swallows_store_errors(self):
        registry = _registry(BrokenStore())

        async def boom(*args, **kwargs):
            raise ConnectionError("down")

        registry.store.update_provider = boom
        registry.store.get_provider = boom
        await registry.report_success("anthropic")
        await registry.report_failure("anthropic")


class TestTracking:
    """Exact usage from TrackedResult operations."""

    @pytest.mark.asyncio
    async def test_tracked_usage_logged(self, store):
        async def operation(client, provider):
            return TrackedResult(result={"answer": 42}, usage=TokenUsage(input_tokens=1_000_000, output_tokens=0))

        registry = _registry(store)
        result = await registry.execute_with_tracking(Capability.CODING, operation, user_id="u1")
        assert result == {"answer": 42}

        usage = (await store.list_usage())[0]
        assert usage.input_tokens == 1_000_000
        assert usage.estimated_cost == pytest.approx(3.0)
        assert usage.user_id == "u1"
        assert usage.model == "anthropic-model"

    @pytest.mark.asyncio
    async def test_tracked_model_logged(self, store):
        async def operation(client, provider):
            return TrackedResult(result="ok", usage=TokenUsage(input_tokens=10, output_tokens=5), model="claude-x")

        await _registry(store).execute_with_tracking(Capability.CODING, operation)
        usage = (await store.list_usage())[0]
        assert usage.model == "claude-x"
        assert usage.total_tokens == 15

    @pytest.mark.asyncio
    async def test_untracked_result_rejected(self, store):
        async def operation(client, provider):
            return "plain string"

        with pytest.raises(TypeError):
            await _registry(store).execute_with_tracking(Capability.CHAT, operation)

    @pytest.mark.asyncio
    async def test_plain_result_logs_zero_usage(self, store):
        async def operation(client, provider):
            return "plain string"

        result = await _registry(store).execute_with_fallback(Capability.CHAT, operation)
        assert result == "plain string"
        usage = (await store.list_usage())[0]
        assert usage.total_tokens == 0
        assert usage.estimated_cost == 0.0
