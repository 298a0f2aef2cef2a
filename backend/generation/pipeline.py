"""
Website generation pipeline: plan, build, validate, retry.

Planning -> Building -> Validating -> {Complete | Building (retry) | Complete (degraded)}

`generate` and `refine` always return a GenerationResult. Planning failures
become the default plan, invalid builds are retried once with correction
hints, and anything unexpected falls back to a static template.
"""

import logging
from typing import Callable, Optional

from backend.generation.models import (
    CorrectionHints,
    GenerationResult,
    GenerationStatus,
    PlanLanguage,
    PlatformType,
    ProgressCallback,
    ProgressStage,
    WebsitePlan,
)
from backend.generation.builder import MIN_USABLE_HTML_LENGTH
from backend.generation.planner import get_default_sections
from engine.postprocess import post_process_code
from engine.templates import TemplateBundle, find_best_template
from engine.validator import ARABIC_PATTERN, GeneratedCode, ValidationResult, validate_generated_code

logger = logging.getLogger(__name__)

# Total build attempts per request, first one included
MAX_BUILD_ATTEMPTS = 2

MESSAGES = {
    "planning": {"ar": "جاري تحليل الطلب...", "en": "Analyzing request..."},
    "planned": {"ar": "تم إعداد الخطة", "en": "Plan ready"},
    "building": {"ar": "جاري بناء الموقع", "en": "Building website"},
    "validating": {"ar": "جاري فحص الجودة...", "en": "Checking quality..."},
    "complete": {"ar": "تم إنشاء موقع احترافي بجودة {score}%", "en": "Website generated with quality {score}%"},
    "degraded": {"ar": "تم إنشاء الموقع (جودة: {score}/100)", "en": "Website generated (quality: {score}/100)"},
    "template": {"ar": "تم إنشاء موقع احترافي", "en": "Website generated from a premium template"},
    "refined": {"ar": "تم تحديث الموقع", "en": "Website updated"},
    "kept": {"ar": "الكود محفوظ", "en": "Your current code was kept"},
    "error": {"ar": "حدث خطأ أثناء الإنشاء", "en": "Generation failed"},
}


def _msg(key: str, language: str, **kwargs) -> str:
    lang = "ar" if language == PlanLanguage.AR.value else "en"
    return MESSAGES[key][lang].format(**kwargs)


def _detect_language(text: str) -> str:
    return PlanLanguage.AR.value if ARABIC_PATTERN.search(text) else PlanLanguage.EN.value


class GenerationPipeline:
    def __init__(
        self,
        planner,
        builder,
        validator: Callable[[GeneratedCode], ValidationResult] = validate_generated_code,
        template_matcher: Callable[[str], TemplateBundle] = find_best_template,
        post_processor: Callable[[GeneratedCode], GeneratedCode] = post_process_code,
        max_attempts: int = MAX_BUILD_ATTEMPTS,
    ):
        self.planner = planner
        self.builder = builder
        self.validator = validator
        self.template_matcher = template_matcher
        self.post_processor = post_processor
        self.max_attempts = max_attempts

    def _emit(self, on_progress: Optional[ProgressCallback], stage: ProgressStage, percent: int, message: str) -> None:
        if on_progress is None:
            return
        try:
            on_progress(stage.value, percent, message)
        except Exception:
            logger.warning("Progress callback raised; ignoring", exc_info=True)

    def _template_result(self, user_request: str, language: str, attempts: int,
                         plan: Optional[WebsitePlan] = None) -> GenerationResult:
        template = self.template_matcher(user_request)
        return GenerationResult.from_code(
            self.post_processor(template.to_code()),
            message=_msg("template", language),
            plan=plan,
            attempts=attempts,
            status=GenerationStatus.DEGRADED,
        )

    async def generate(self, user_request: str, on_progress: Optional[ProgressCallback] = None) -> GenerationResult:
        language = _detect_language(user_request)
        attempts = 0
        try:
            self._emit(on_progress, ProgressStage.PLANNING, 10, _msg("planning", language))
            plan = await self.planner.create_plan(user_request)
            language = plan.language.value
            logger.info("[planning] Plan: %s, %d sections", plan.type.value, len(plan.sections))
            self._emit(on_progress, ProgressStage.PLANNING, 30, _msg("planned", language))

            code: Optional[GeneratedCode] = None
            validation: Optional[ValidationResult] = None
            hints: Optional[CorrectionHints] = None

            while attempts < self.max_attempts:
                attempts += 1
                step = (attempts - 1) * 10
                self._emit(on_progress, ProgressStage.BUILDING, 40 + step,
                           f"{_msg('building', language)} ({attempts}/{self.max_attempts})")
                code = await self.builder.build(plan, user_request, previous=code, hints=hints)

                self._emit(on_progress, ProgressStage.VALIDATING, 70 + step, _msg("validating", language))
                validation = self.validator(code)
                logger.info("[validating] Attempt %d: score %d/100, valid=%s",
                            attempts, validation.score, validation.is_valid)

                if validation.is_valid:
                    self._emit(on_progress, ProgressStage.COMPLETE, 100, _msg("complete", language, score=validation.score))
                    return GenerationResult.from_code(
                        self.post_processor(code),
                        message=_msg("complete", language, score=validation.score),
                        plan=plan,
                        validation=validation,
                        attempts=attempts,
                        status=GenerationStatus.COMPLETE,
                    )
                hints = CorrectionHints.from_validation(validation)

            if code is not None and len(code.html) > MIN_USABLE_HTML_LENGTH:
                logger.warning("Build attempts exhausted; returning best-effort output (score %d)", validation.score)
                self._emit(on_progress, ProgressStage.COMPLETE, 100, _msg("degraded", language, score=validation.score))
                return GenerationResult.from_code(
                    self.post_processor(code),
                    message=_msg("degraded", language, score=validation.score),
                    plan=plan,
                    validation=validation,
                    attempts=attempts,
                    status=GenerationStatus.DEGRADED,
                )

            logger.warning("Build attempts exhausted with unusable output; using static template")
            self._emit(on_progress, ProgressStage.COMPLETE, 100, _msg("template", language))
            return self._template_result(user_request, language, attempts, plan=plan)

        except Exception:
            logger.exception("Generation failed; using static template")
            self._emit(on_progress, ProgressStage.ERROR, 0, _msg("error", language))
            return self._template_result(user_request, language, attempts)

    async def refine(
        self,
        user_request: str,
        current_code: GeneratedCode,
        on_progress: Optional[ProgressCallback] = None,
    ) -> GenerationResult:
        """Apply one requested change. Never returns anything worse than `current_code`."""
        language = _detect_language(current_code.html)
        try:
            self._emit(on_progress, ProgressStage.PLANNING, 10, _msg("planning", language))
            plan = WebsitePlan(
                type=PlatformType.LANDING,
                language=language,
                sections=get_default_sections(PlatformType.LANDING),
                tone="professional",
            )

            self._emit(on_progress, ProgressStage.BUILDING, 40, _msg("building", language))
            refined = await self.builder.refine(plan, user_request, current_code)

            self._emit(on_progress, ProgressStage.VALIDATING, 70, _msg("validating", language))
            validation = self.validator(refined)
            logger.info("[refine] score %d/100, valid=%s", validation.score, validation.is_valid)

            if validation.is_valid:
                self._emit(on_progress, ProgressStage.COMPLETE, 100, _msg("refined", language))
                return GenerationResult.from_code(
                    refined,
                    message=_msg("refined", language),
                    validation=validation,
                    attempts=1,
                    status=GenerationStatus.COMPLETE,
                )

            self._emit(on_progress, ProgressStage.COMPLETE, 100, _msg("kept", language))
            return GenerationResult.from_code(
                current_code,
                message=_msg("kept", language),
                attempts=1,
                status=GenerationStatus.DEGRADED,
            )

        except Exception:
            logger.exception("Refinement failed; keeping current code")
            self._emit(on_progress, ProgressStage.ERROR, 0, _msg("error", language))
            return GenerationResult.from_code(
                current_code,
                message=_msg("kept", language),
                attempts=1,
                status=GenerationStatus.DEGRADED,
            )
