"""Planning stage: free-text request to a structured WebsitePlan."""

import logging
import re

from backend.ai.prompts import PLANNER_SYSTEM, build_planner_messages
from backend.generation.models import PlanLanguage, PlatformType, SectionPlan, WebsitePlan
from backend.providers.models import Capability, CompletionRequest
from engine.json_repair import loads_lenient
from engine.validator import ARABIC_PATTERN

logger = logging.getLogger(__name__)

_ECOMMERCE_PATTERN = re.compile(r"متجر|shop|store|منتج|product", re.IGNORECASE)

# (id, type, title, description, components)
_LANDING_SECTIONS = [
    ("hero", "hero", "Hero", "Main landing", ["gradient-bg", "headline", "cta"]),
    ("features", "features", "Features", "Key features", ["cards", "icons"]),
    ("pricing", "pricing", "Pricing", "Plans", ["pricing-cards"]),
    ("testimonials", "testimonials", "Testimonials", "Reviews", ["review-cards"]),
    ("cta", "cta", "CTA", "Final call", ["gradient-bg", "cta"]),
    ("footer", "footer", "Footer", "Footer", ["links", "social"]),
]

_ECOMMERCE_SECTIONS = [
    ("hero", "hero", "Hero", "Featured collection and offer", ["gradient-bg", "headline", "cta"]),
    ("products", "products", "Products", "Best sellers grid", ["product-cards", "add-to-cart"]),
    ("benefits", "features", "Benefits", "Shipping, payment and returns", ["cards", "icons"]),
    ("testimonials", "testimonials", "Testimonials", "Customer reviews", ["review-cards"]),
    ("newsletter", "cta", "Newsletter", "Discount signup", ["email-form"]),
    ("footer", "footer", "Footer", "Footer", ["links", "social", "payment-icons"]),
]

_PORTFOLIO_SECTIONS = [
    ("about", "hero", "About", "Introduction and role", ["headline", "cta"]),
    ("skills", "features", "Skills", "Areas of expertise", ["cards", "icons"]),
    ("projects", "gallery", "Projects", "Selected work", ["project-cards", "tags"]),
    ("contact", "contact", "Contact", "Get in touch", ["email-link", "social"]),
    ("footer", "footer", "Footer", "Footer", ["links"]),
]

DEFAULT_SECTIONS = {
    PlatformType.ECOMMERCE: _ECOMMERCE_SECTIONS,
    PlatformType.PORTFOLIO: _PORTFOLIO_SECTIONS,
}


def get_default_sections(platform_type: PlatformType) -> list[SectionPlan]:
    rows = DEFAULT_SECTIONS.get(PlatformType(platform_type), _LANDING_SECTIONS)
    return [
        SectionPlan(id=sid, type=stype, title=title, description=desc, components=list(components), priority=i)
        for i, (sid, stype, title, desc, components) in enumerate(rows, start=1)
    ]


def get_default_plan(user_request: str) -> WebsitePlan:
    """Deterministic plan used whenever planning fails."""
    is_arabic = ARABIC_PATTERN.search(user_request) is not None
    platform_type = PlatformType.ECOMMERCE if _ECOMMERCE_PATTERN.search(user_request) else PlatformType.LANDING
    return WebsitePlan(
        type=platform_type,
        language=PlanLanguage.AR if is_arabic else PlanLanguage.EN,
        sections=get_default_sections(platform_type),
        features=["responsive", "animations"],
        target_audience="General",
        tone="professional",
    )


def parse_plan_response(text: str) -> WebsitePlan:
    """Parse and normalize planner output.

    Missing color scheme and typography take their defaults; missing or empty
    sections become the default sections for the plan's type.

    Raises:
        ValueError: no JSON object could be recovered.
        pydantic.ValidationError: the object does not fit the plan schema.
    """
    data = loads_lenient(text)
    if not isinstance(data, dict):
        raise ValueError("Plan is not a JSON object")
    plan = WebsitePlan.model_validate(data)
    if not plan.sections:
        plan.sections = get_default_sections(plan.type)
    return plan


class WebsitePlanner:
    def __init__(self, registry, max_tokens: int = 2000, temperature: float = 0.7):
        self.registry = registry
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def create_plan(self, user_request: str) -> WebsitePlan:
        """Plan a website. Never raises: any failure yields the default plan."""
        request = CompletionRequest(
            messages=build_planner_messages(user_request),
            system=PLANNER_SYSTEM,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        async def operation(client, provider):
            return await client.complete(request)

        try:
            response = await self.registry.execute_with_fallback(
                Capability.CHAT, operation, request_type="website_plan"
            )
            plan = parse_plan_response(response.text)
        except Exception as e:
            logger.warning("Planning failed, using default plan: %s", e)
            return get_default_plan(user_request)

        logger.info("Plan created: %s, %d sections", plan.type.value, len(plan.sections))
        return plan
