"""
Vendor SDK adapters behind one chat-completion interface.

The registry only ever needs `complete(request) -> response`; each adapter
translates that to its SDK's call shape and token accounting.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from backend.providers.errors import ProviderConfigurationError
from backend.providers.models import CompletionRequest, CompletionResponse, ProviderConfig, TokenUsage

logger = logging.getLogger(__name__)

# Seconds per request
DEFAULT_TIMEOUT = 120.0

# Vendors that speak the OpenAI chat-completions protocol
OPENAI_COMPATIBLE_BASE_URLS = {
    "google": "https://generativelanguage.googleapis.com/v1beta/openai/",
    "mistral": "https://api.mistral.ai/v1",
    "deepseek": "https://api.deepseek.com/v1",
    "groq": "https://api.groq.com/openai/v1",
}


class ChatCapableClient(ABC):
    """Minimal capability surface the registry hands to operations."""

    provider: str
    default_model: str

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        ...


ClientFactory = Callable[[ProviderConfig], ChatCapableClient]


class AnthropicChatClient(ChatCapableClient):
    provider = "anthropic"

    def __init__(self, api_key: str, default_model: str, base_url: Optional[str] = None,
                 timeout: float = DEFAULT_TIMEOUT):
        self.default_model = default_model
        self._client = AsyncAnthropic(api_key=api_key, base_url=base_url, timeout=timeout)

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        model = request.model or self.default_model
        kwargs = dict(
            model=model,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
            messages=request.messages,
        )
        if request.system:
            kwargs["system"] = request.system
        response = await self._client.messages.create(**kwargs)

        text = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
        usage = TokenUsage(
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return CompletionResponse(text=text, model=response.model or model, usage=usage)


class OpenAIChatClient(ChatCapableClient):
    """OpenAI, and any vendor exposing an OpenAI-compatible endpoint."""

    def __init__(self, api_key: str, default_model: str, base_url: Optional[str] = None,
                 timeout: float = DEFAULT_TIMEOUT, provider: str = "openai"):
        self.provider = provider
        self.default_model = default_model
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        model = request.model or self.default_model
        messages = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.extend(request.messages)

        response = await self._client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""
        usage = TokenUsage()
        if response.usage is not None:
            usage = TokenUsage(
                input_tokens=response.usage.prompt_tokens or 0,
                output_tokens=response.usage.completion_tokens or 0,
            )
        return CompletionResponse(text=text, model=response.model or model, usage=usage)


def create_client(provider: ProviderConfig) -> ChatCapableClient:
    """Build the SDK adapter for a provider config.

    Raises:
        ProviderConfigurationError: missing credential or unsupported vendor.
    """
    if not provider.api_key:
        raise ProviderConfigurationError(f"No API key configured for provider '{provider.provider}'")

    if provider.provider == "anthropic":
        return AnthropicChatClient(provider.api_key, provider.default_model, base_url=provider.base_url)

    if provider.provider == "openai" or provider.provider in OPENAI_COMPATIBLE_BASE_URLS:
        base_url = provider.base_url or OPENAI_COMPATIBLE_BASE_URLS.get(provider.provider)
        return OpenAIChatClient(
            provider.api_key,
            provider.default_model,
            base_url=base_url,
            provider=provider.provider,
        )

    # Unknown vendors work only if they bring their own OpenAI-compatible endpoint
    if provider.base_url:
        logger.info("Treating provider '%s' as OpenAI-compatible at %s", provider.provider, provider.base_url)
        return OpenAIChatClient(
            provider.api_key,
            provider.default_model,
            base_url=provider.base_url,
            provider=provider.provider,
        )
    raise ProviderConfigurationError(f"Unsupported AI provider '{provider.provider}'")
