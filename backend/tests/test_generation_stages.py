"""
Tests for the planning, building and code-assist stages.

Validates:
1. Planner parses camelCase plans, repairs truncated JSON, falls back to the default plan
2. Builder accepts only usable output and keeps base code on failure
3. Retries and refinements are routed with their own request types
4. Code assistant returns a localized apology when no provider can answer
"""

import json
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from backend.generation.assistant import FALLBACK_REPLIES, CodeAssistant
from backend.generation.builder import WebsiteBuilder, parse_builder_response
from backend.generation.models import CorrectionHints, PlanLanguage, PlatformType
from backend.generation.planner import (
    WebsitePlanner,
    get_default_plan,
    get_default_sections,
    parse_plan_response,
)
from backend.providers.errors import AllProvidersFailed, NoProviderAvailable
from backend.providers.models import (
    Capability,
    CompletionResponse,
    ProviderConfig,
    TokenUsage,
    TrackedResult,
)
from engine.templates import ECOMMERCE_TEMPLATE
from engine.validator import GeneratedCode


LONG_HTML = "<main>" + "<section><h2>Title</h2><p>Body</p></section>" * 20 + "</main>"


class ScriptedClient:
    def __init__(self, text):
        self.text = text
        self.requests = []

    async def complete(self, request):
        self.requests.append(request)
        return CompletionResponse(text=self.text, model="m", usage=TokenUsage(input_tokens=10, output_tokens=5))


class FakeRegistry:
    """Runs the operation once against a scripted client, or raises `error`."""

    def __init__(self, text="", error=None):
        self.client = ScriptedClient(text)
        self.error = error
        self.calls = []

    async def _run(self, capability, operation, request_type=None, user_id=None):
        self.calls.append({"capability": capability, "request_type": request_type})
        if self.error:
            raise self.error
        return await operation(self.client, ProviderConfig(provider="fake", default_model="m"))

    async def execute_with_fallback(self, capability, operation, *, request_type=None, user_id=None, **kwargs):
        return await self._run(capability, operation, request_type, user_id)

    async def execute_with_tracking(self, capability, operation, *, request_type=None, user_id=None, **kwargs):
        outcome = await self._run(capability, operation, request_type, user_id)
        assert isinstance(outcome, TrackedResult)
        return outcome.result


PLAN_JSON = json.dumps({
    "type": "ecommerce",
    "language": "ar",
    "sections": [
        {"id": "hero", "type": "hero", "title": "الرئيسية", "components": ["cta"], "priority": 1},
    ],
    "colorScheme": {"primary": "#111111"},
    "targetAudience": "عشاق العطور",
    "tone": "luxury",
})


class TestPlanParsing:
    """Planner output normalization."""

    def test_camel_case_plan(self):
        plan = parse_plan_response(PLAN_JSON)
        assert plan.type == PlatformType.ECOMMERCE
        assert plan.language == PlanLanguage.AR
        assert plan.color_scheme.primary == "#111111"
        assert plan.target_audience == "عشاق العطور"
        assert plan.sections[0].title == "الرئيسية"

    def test_fenced_and_truncated_plan(self):
        text = "Here is the plan:\n```json\n" + PLAN_JSON[:-20]
        plan = parse_plan_response(text)
        assert plan.type == PlatformType.ECOMMERCE

    def test_empty_sections_get_defaults(self):
        plan = parse_plan_response('{"type": "portfolio", "sections": []}')
        assert [s.id for s in plan.sections] == [s.id for s in get_default_sections(PlatformType.PORTFOLIO)]

    def test_unknown_type_coerced(self):
        plan = parse_plan_response('{"type": "spaceship", "language": "fr"}')
        assert plan.type == PlatformType.LANDING
        assert plan.language == PlanLanguage.EN

    def test_no_json_raises(self):
        with pytest.raises(ValueError):
            parse_plan_response("I cannot help with that.")


class TestDefaultPlan:
    """Deterministic fallback plan."""

    def test_arabic_store(self):
        plan = get_default_plan("أريد متجر إلكتروني")
        assert plan.language == PlanLanguage.AR
        assert plan.type == PlatformType.ECOMMERCE
        assert plan.sections[0].id == "hero"

    def test_english_landing(self):
        plan = get_default_plan("A page for my consulting firm")
        assert plan.language == PlanLanguage.EN
        assert plan.type == PlatformType.LANDING
        assert len(plan.sections) == 6

    def test_deterministic(self):
        assert get_default_plan("shop") == get_default_plan("shop")


class TestPlanner:
    """Planner stage against a registry."""

    @pytest.mark.asyncio
    async def test_plan_from_provider(self):
        registry = FakeRegistry(text=PLAN_JSON)
        plan = await WebsitePlanner(registry).create_plan("متجر عطور")
        assert plan.tone == "luxury"
        assert registry.calls == [{"capability": Capability.CHAT, "request_type": "website_plan"}]
        assert "<user_input>" in registry.client.requests[0].messages[-1]["content"]

    @pytest.mark.asyncio
    async def test_provider_failure_gives_default(self):
        registry = FakeRegistry(error=AllProvidersFailed(RuntimeError("down"), ["a"]))
        plan = await WebsitePlanner(registry).create_plan("online store")
        assert plan == get_default_plan("online store")

    @pytest.mark.asyncio
    async def test_garbage_response_gives_default(self):
        plan = await WebsitePlanner(FakeRegistry(text="no json here")).create_plan("landing")
        assert plan == get_default_plan("landing")


class TestBuilderParsing:
    """Builder response extraction."""

    BASE = GeneratedCode(html="<p>base</p>", css="base-css", js="base-js")

    def test_json_response(self):
        text = json.dumps({"html": LONG_HTML, "css": "body{}", "js": ""})
        code = parse_builder_response(text, self.BASE)
        assert code.html == LONG_HTML
        assert code.css == "body{}"
        assert code.js == "base-js"

    def test_short_html_rejected(self):
        code = parse_builder_response('{"html": "<p>hi</p>"}', self.BASE)
        assert code is self.BASE

    def test_garbage_rejected(self):
        assert parse_builder_response("Sorry, I can't.", self.BASE) is self.BASE


class TestBuilder:
    """Builder stage against a registry."""

    @pytest.mark.asyncio
    async def test_first_build_uses_template(self):
        registry = FakeRegistry(text=json.dumps({"html": LONG_HTML, "css": "x", "js": "y"}))
        builder = WebsiteBuilder(registry, template_matcher=lambda prompt: ECOMMERCE_TEMPLATE)
        code = await builder.build(get_default_plan("store"), "store")
        assert code.html == LONG_HTML
        assert registry.calls[0] == {"capability": Capability.CODING, "request_type": "website_build"}
        assert ECOMMERCE_TEMPLATE.css[:50] in registry.client.requests[0].system

    @pytest.mark.asyncio
    async def test_retry_request_type(self):
        registry = FakeRegistry(text=json.dumps({"html": LONG_HTML}))
        previous = GeneratedCode(html="<p>old</p>", css="old-css")
        hints = CorrectionHints(features=["svg-icons-only"], feedback="- FIX: emojis")
        code = await WebsiteBuilder(registry).build(get_default_plan("x"), "x", previous=previous, hints=hints)
        assert registry.calls[0]["request_type"] == "website_retry"
        assert "- FIX: emojis" in registry.client.requests[0].system
        assert code.css == "old-css"

    @pytest.mark.asyncio
    async def test_provider_failure_returns_template(self):
        registry = FakeRegistry(error=NoProviderAvailable("coding"))
        builder = WebsiteBuilder(registry, template_matcher=lambda prompt: ECOMMERCE_TEMPLATE)
        code = await builder.build(get_default_plan("store"), "store")
        assert code == ECOMMERCE_TEMPLATE.to_code()

    @pytest.mark.asyncio
    async def test_refine_keeps_current_on_failure(self):
        current = GeneratedCode(html="<p>mine</p>")
        registry = FakeRegistry(error=NoProviderAvailable("coding"))
        code = await WebsiteBuilder(registry).refine(get_default_plan("x"), "change", current)
        assert code is current
        assert registry.calls[0]["request_type"] == "website_refine"


class TestCodeAssistant:
    """Tracked one-shot code help."""

    @pytest.mark.asyncio
    async def test_reply_returned(self):
        registry = FakeRegistry(text="Use flexbox.")
        reply = await CodeAssistant(registry).assist("center a div", code_context="<div></div>", file_name="index.html")
        assert reply == "Use flexbox."
        assert registry.calls[0] == {"capability": Capability.CODING, "request_type": "code_assist"}

    @pytest.mark.asyncio
    async def test_arabic_apology_on_failure(self):
        registry = FakeRegistry(error=NoProviderAvailable("coding"))
        reply = await CodeAssistant(registry).assist("ساعدني", language="ar")
        assert reply == FALLBACK_REPLIES["ar"]

    @pytest.mark.asyncio
    async def test_unknown_language_uses_english(self):
        registry = FakeRegistry(error=AllProvidersFailed(RuntimeError("x"), ["a"]))
        assert await CodeAssistant(registry).assist("help", language="fr") == FALLBACK_REPLIES["en"]
