"""Building stage: plan (plus template or previous output) to HTML/CSS/JS."""

import logging
from typing import Callable, Optional

from backend.ai.prompts import (
    build_builder_messages,
    build_builder_system,
    build_refine_system,
    build_retry_system,
)
from backend.generation.models import CorrectionHints, WebsitePlan
from backend.providers.errors import ProviderError
from backend.providers.models import Capability, CompletionRequest
from engine.json_repair import extract_string_field, loads_lenient
from engine.templates import TemplateBundle, find_best_template
from engine.validator import GeneratedCode

logger = logging.getLogger(__name__)

# Anything shorter is a refusal, an error message or a stub
MIN_USABLE_HTML_LENGTH = 500


def _text_field(data: dict, key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def parse_builder_response(text: str, fallback: GeneratedCode) -> GeneratedCode:
    """
    Extract {html, css, js} from a builder response.

    Tries the (repaired) JSON document first, then per-field regex extraction.
    The result is accepted only when its html is longer than
    MIN_USABLE_HTML_LENGTH; empty css/js are taken from `fallback`. Anything
    else returns `fallback` unchanged.
    """
    try:
        data = loads_lenient(text)
    except ValueError:
        data = None

    if isinstance(data, dict):
        html = _text_field(data, "html")
        if len(html) > MIN_USABLE_HTML_LENGTH:
            return GeneratedCode(
                html=html,
                css=_text_field(data, "css") or fallback.css,
                js=_text_field(data, "js") or fallback.js,
            )

    html = extract_string_field(text, "html") or ""
    if len(html) > MIN_USABLE_HTML_LENGTH:
        return GeneratedCode(
            html=html,
            css=extract_string_field(text, "css") or fallback.css,
            js=extract_string_field(text, "js") or fallback.js,
        )

    logger.warning("Builder response unusable (%d chars), keeping base code", len(text))
    return fallback


class WebsiteBuilder:
    def __init__(
        self,
        registry,
        template_matcher: Callable[[str], TemplateBundle] = find_best_template,
        max_tokens: int = 16000,
        temperature: float = 0.7,
    ):
        self.registry = registry
        self.template_matcher = template_matcher
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def build(
        self,
        plan: WebsitePlan,
        user_request: str,
        previous: Optional[GeneratedCode] = None,
        hints: Optional[CorrectionHints] = None,
    ) -> GeneratedCode:
        """First build from the matched template, or a corrective rebuild of `previous`."""
        if previous is not None:
            logger.info("Building (retry with fixes)")
            system = build_retry_system(plan, previous, hints or CorrectionHints())
            return await self._generate(system, build_builder_messages(user_request), previous, "website_retry")

        template = self.template_matcher(user_request)
        logger.info("Building with template: %s", template.id)
        system = build_builder_system(plan, template.to_code())
        return await self._generate(system, build_builder_messages(user_request), template.to_code(), "website_build")

    async def refine(self, plan: WebsitePlan, user_request: str, current_code: GeneratedCode) -> GeneratedCode:
        system = build_refine_system(plan, current_code)
        messages = build_builder_messages(user_request, modify=True)
        return await self._generate(system, messages, current_code, "website_refine")

    async def _generate(self, system: str, messages: list[dict], base: GeneratedCode, request_type: str) -> GeneratedCode:
        request = CompletionRequest(
            messages=messages,
            system=system,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        async def operation(client, provider):
            return await client.complete(request)

        try:
            response = await self.registry.execute_with_fallback(
                Capability.CODING, operation, request_type=request_type
            )
        except ProviderError as e:
            logger.error("Builder call failed, keeping base code: %s", e)
            return base
        return parse_builder_response(response.text, base)
