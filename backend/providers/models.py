"""Data models for AI provider routing and usage accounting."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Capability(str, Enum):
    CHAT = "chat"
    CODING = "coding"
    IMAGE = "image"
    EMBEDDING = "embedding"
    TOOLING = "tooling"


class ProviderStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


# --- Provider configuration ---

class ProviderConfig(BaseModel):
    """One configured upstream AI vendor account."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    provider: str = Field(..., min_length=1, description="Vendor key: anthropic, openai, google, mistral, deepseek, groq")
    display_name: str = ""
    default_model: str
    base_url: Optional[str] = None
    encrypted_credential: Optional[str] = Field(None, exclude=True)
    # Decrypted at selection time; never serialized
    api_key: str = Field("", exclude=True, repr=False)
    priority: int = Field(100, description="Lower is tried first")
    capabilities: list[Capability] = Field(default_factory=lambda: [Capability.CHAT])
    status: ProviderStatus = ProviderStatus.ACTIVE
    is_healthy: bool = True
    consecutive_failures: int = 0
    total_failures: int = 0
    last_failure_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def supports(self, capability: Optional[Capability | str]) -> bool:
        if capability is None:
            return True
        try:
            return Capability(capability) in self.capabilities
        except ValueError:
            return False


class ProviderSelection(BaseModel):
    """A fallback chain: primary first, then the rest in order."""
    provider: ProviderConfig
    fallbacks: list[ProviderConfig] = Field(default_factory=list)

    def chain(self) -> list[ProviderConfig]:
        return [self.provider, *self.fallbacks]


# --- Completions ---

class TokenUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class CompletionRequest(BaseModel):
    messages: list[dict]  # [{"role": "user" | "assistant", "content": str}]
    system: str = ""
    model: Optional[str] = None  # None means the provider's default_model
    max_tokens: int = 4096
    temperature: float = 0.7


class CompletionResponse(BaseModel):
    text: str
    model: str
    usage: TokenUsage = Field(default_factory=TokenUsage)


class TrackedResult(BaseModel):
    """An operation result paired with the exact token usage it consumed."""
    result: Any
    usage: TokenUsage
    model: Optional[str] = None  # None means the provider's default_model


# --- Usage accounting ---

class UsageLogEntry(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    provider: str
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    estimated_cost: float = 0.0
    request_type: Optional[str] = None
    capability: Optional[str] = None
    success: bool = True
    error_message: Optional[str] = None
    latency_ms: int = 0
    user_id: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class ProviderUsageSummary(BaseModel):
    provider: str
    requests: int = 0
    successes: int = 0
    failures: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    estimated_cost: float = 0.0
    avg_latency_ms: float = 0.0
