"""One-shot coding help, routed through the provider registry with exact usage tracking."""

import logging
from typing import Optional

from backend.ai.prompts import CODE_ASSIST_SYSTEM, build_code_assist_messages
from backend.providers.errors import ProviderError
from backend.providers.models import Capability, CompletionRequest, TrackedResult

logger = logging.getLogger(__name__)

FALLBACK_REPLIES = {
    "ar": "حدث خطأ. حاول مرة أخرى.",
    "en": "An error occurred. Please try again.",
}


class CodeAssistant:
    def __init__(self, registry, max_tokens: int = 2000, temperature: float = 0.3):
        self.registry = registry
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def assist(
        self,
        prompt: str,
        code_context: str = "",
        file_name: str = "",
        language: str = "en",
        user_id: Optional[str] = None,
    ) -> str:
        lang = "ar" if language == "ar" else "en"
        request = CompletionRequest(
            messages=build_code_assist_messages(prompt, code_context, file_name),
            system=CODE_ASSIST_SYSTEM[lang],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        async def operation(client, provider):
            response = await client.complete(request)
            return TrackedResult(result=response.text, usage=response.usage, model=response.model)

        try:
            text = await self.registry.execute_with_tracking(
                Capability.CODING, operation, request_type="code_assist", user_id=user_id
            )
        except ProviderError as e:
            logger.error("Code assistance failed: %s", e)
            return FALLBACK_REPLIES[lang]
        return text or FALLBACK_REPLIES[lang]
