"""Generation routes: build, refine, validate, code assistance."""

from fastapi import APIRouter, Request

from backend.generation.assistant import CodeAssistant
from backend.generation.models import GenerationResult
from backend.generation.pipeline import GenerationPipeline
from backend.models import (
    CodeAssistRequest,
    CodeAssistResponse,
    GenerateRequest,
    RefineRequest,
    ValidateRequest,
)
from engine.validator import GeneratedCode, ValidationResult, validate_generated_code

router = APIRouter()


def _get_pipeline(request: Request) -> GenerationPipeline:
    return request.app.state.pipeline


def _get_assistant(request: Request) -> CodeAssistant:
    return request.app.state.assistant


@router.post("/generate", response_model=GenerationResult)
async def generate_website(body: GenerateRequest, request: Request):
    """Generate a complete website from a natural-language request."""
    return await _get_pipeline(request).generate(body.prompt)


@router.post("/refine", response_model=GenerationResult)
async def refine_website(body: RefineRequest, request: Request):
    """Apply a change to existing code; the original is returned if the change does not validate."""
    current = GeneratedCode(html=body.code.html, css=body.code.css, js=body.code.js)
    return await _get_pipeline(request).refine(body.prompt, current)


@router.post("/validate", response_model=ValidationResult)
async def validate_code(body: ValidateRequest):
    return validate_generated_code(GeneratedCode(html=body.html, css=body.css, js=body.js))


@router.post("/code-assist", response_model=CodeAssistResponse)
async def code_assist(body: CodeAssistRequest, request: Request):
    reply = await _get_assistant(request).assist(
        body.prompt,
        code_context=body.code_context,
        file_name=body.file_name,
        language=body.language,
    )
    return CodeAssistResponse(response=reply)
