"""Models for the website generation pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from engine.validator import GeneratedCode, ValidationResult


class PlatformType(str, Enum):
    LANDING = "landing"
    ECOMMERCE = "ecommerce"
    PORTFOLIO = "portfolio"
    BUSINESS = "business"
    BLOG = "blog"
    SAAS = "saas"


class PlanLanguage(str, Enum):
    AR = "ar"
    EN = "en"
    BILINGUAL = "bilingual"


class GenerationStatus(str, Enum):
    COMPLETE = "complete"
    DEGRADED = "degraded"


class ProgressStage(str, Enum):
    PLANNING = "planning"
    BUILDING = "building"
    VALIDATING = "validating"
    COMPLETE = "complete"
    ERROR = "error"


# (stage, percent, message); called synchronously
ProgressCallback = Callable[[str, int, str], None]


class _PlanModel(BaseModel):
    """Accepts the camelCase keys the planner model emits."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Website plan ---

class SectionPlan(_PlanModel):
    id: str
    type: str = ""
    title: str = ""
    description: str = ""
    components: list[str] = Field(default_factory=list)
    priority: int = 0


class ColorScheme(_PlanModel):
    primary: str = "#6366f1"
    secondary: str = "#8b5cf6"
    accent: str = "#06b6d4"
    background: str = "#ffffff"
    text: str = "#1e293b"
    gradient: str = "linear-gradient(135deg, #6366f1 0%, #8b5cf6 100%)"


class Typography(_PlanModel):
    heading_font: str = "Tajawal"
    body_font: str = "Tajawal"
    arabic_font: str = "Tajawal"


class WebsitePlan(_PlanModel):
    type: PlatformType = PlatformType.LANDING
    language: PlanLanguage = PlanLanguage.EN
    sections: list[SectionPlan] = Field(default_factory=list)
    color_scheme: ColorScheme = Field(default_factory=ColorScheme)
    typography: Typography = Field(default_factory=Typography)
    features: list[str] = Field(default_factory=list)
    target_audience: str = ""
    tone: str = "professional"

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value):
        if isinstance(value, str) and value.strip().lower() in PlatformType._value2member_map_:
            return value.strip().lower()
        return PlatformType.LANDING

    @field_validator("language", mode="before")
    @classmethod
    def _coerce_language(cls, value):
        if isinstance(value, str) and value.strip().lower() in PlanLanguage._value2member_map_:
            return value.strip().lower()
        return PlanLanguage.EN

    @field_validator("color_scheme", "typography", mode="before")
    @classmethod
    def _none_to_default(cls, value):
        # Missing or null blocks fall back to the field defaults
        return {} if value is None else value


# --- Retry feedback ---

# Hint tag per failing validator category
HINT_TAGS = {
    "icons": "svg-icons-only",
    "responsive": "mobile-first",
    "rtl": "rtl-layout",
    "structure": "semantic-structure",
    "design": "css-variables",
    "ux": "hover-effects",
    "layout": "flex-grid-layout",
    "css": "complete-stylesheet",
    "content": "real-content",
    "meta": "charset-meta",
    "js": "valid-javascript",
}


class CorrectionHints(BaseModel):
    """What the next build attempt must fix. Derived from a validation, never stored on the plan."""
    features: list[str] = Field(default_factory=list)
    feedback: str = ""

    @classmethod
    def from_validation(cls, validation: ValidationResult) -> CorrectionHints:
        features = [HINT_TAGS[c] for c in validation.categories() if c in HINT_TAGS]

        lines = [f"Previous output had quality issues (score: {validation.score}/100)."]
        lines += [f"- FIX: {i.message}" for i in validation.issues if i.severity == "critical"]
        lines += [f"- IMPROVE: {i.message}" for i in validation.issues if i.severity == "warning"]
        lines.append("Please fix ALL these issues in your next output.")
        return cls(features=features, feedback="\n".join(lines))


# --- Result ---

class GenerationResult(BaseModel):
    html: str
    css: str = ""
    js: str = ""
    message: str = ""
    plan: Optional[WebsitePlan] = None
    validation: Optional[ValidationResult] = None
    attempts: int = 0
    status: GenerationStatus = GenerationStatus.COMPLETE

    @classmethod
    def from_code(cls, code: GeneratedCode, **kwargs) -> GenerationResult:
        return cls(html=code.html, css=code.css, js=code.js, **kwargs)

    def code(self) -> GeneratedCode:
        return GeneratedCode(html=self.html, css=self.css, js=self.js)
