"""
INFERA Engine

Deterministic building blocks for website generation: quality validation,
JSON recovery for model output, the static template bank and post-processing.

Nothing here calls a model or touches the network.
"""

from engine.validator import GeneratedCode, ValidationIssue, ValidationResult, validate_generated_code
from engine.json_repair import extract_json_block, repair_truncated_json, loads_lenient, extract_string_field
from engine.templates import TemplateBundle, PREMIUM_TEMPLATES, find_best_template, get_template
from engine.postprocess import replace_emojis_with_svg, add_icon_styles, post_process_code

__version__ = "0.1.0"
