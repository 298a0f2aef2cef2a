"""Pydantic models for INFERA API requests and responses."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from backend.providers.models import Capability, ProviderStatus


# --- Generation ---

class GenerateRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=10000, description="What to build, Arabic or English")


class CodePayload(BaseModel):
    html: str = Field(..., max_length=500_000)
    css: str = Field("", max_length=500_000)
    js: str = Field("", max_length=500_000)


class RefineRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=10000, description="The change to apply")
    code: CodePayload


class ValidateRequest(CodePayload):
    pass


class CodeAssistRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=10000)
    code_context: str = Field("", max_length=100_000)
    file_name: str = ""
    language: Literal["ar", "en"] = "en"


class CodeAssistResponse(BaseModel):
    response: str


# --- Provider admin ---

class ProviderCreateRequest(BaseModel):
    provider: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9_-]+$")
    display_name: str = ""
    default_model: str = Field(..., min_length=1)
    base_url: Optional[str] = None
    api_key: Optional[str] = Field(None, description="Encrypted before it is stored")
    priority: int = Field(100, ge=0)
    capabilities: list[Capability] = Field(default_factory=lambda: [Capability.CHAT])
    status: ProviderStatus = ProviderStatus.ACTIVE


class ProviderUpdateRequest(BaseModel):
    display_name: Optional[str] = None
    default_model: Optional[str] = Field(None, min_length=1)
    base_url: Optional[str] = None
    api_key: Optional[str] = Field(None, description="Replaces the stored credential")
    priority: Optional[int] = Field(None, ge=0)
    capabilities: Optional[list[Capability]] = None
    status: Optional[ProviderStatus] = None


class ProviderSelectionResponse(BaseModel):
    capability: Optional[Capability] = None
    provider: Optional[str] = None
    fallbacks: list[str] = Field(default_factory=list)
