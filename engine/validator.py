"""
Rule-based quality scoring for generated websites.

Scores an HTML/CSS/JS bundle against a fixed, ordered list of heuristic rules.
Every rule that fails deducts a fixed number of points from a starting score
of 100 and records one issue with a fixed severity and category.

The result is deterministic: identical input always yields an identical
ValidationResult. No network calls, no clock, no randomness.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple


# Gate: minimum score, and categories whose critical issues block regardless of score
VALID_SCORE_THRESHOLD = 60
BLOCKING_CATEGORIES = frozenset({"icons", "design", "structure"})

MIN_CSS_LENGTH = 1000
MIN_SECTION_COUNT = 3

# "Many backgrounds, little markup": styled boxes with nothing in them
BACKGROUND_HEAVY_THRESHOLD = 15
SPARSE_MARKUP_THRESHOLD = 30

ARABIC_PATTERN = re.compile("[\u0600-\u06FF]")

EMOJI_PATTERN = re.compile(
    "["
    "\U0001F300-\U0001F9FF"  # symbols & pictographs, emoticons, transport
    "\U0001FA70-\U0001FAFF"  # symbols & pictographs extended-A
    "\U0001F000-\U0001F02F"  # mahjong
    "\U0001F0A0-\U0001F0FF"  # playing cards
    "\u2600-\u26FF"  # misc symbols
    "\u2700-\u27BF"  # dingbats
    "]"
)

_PLACEHOLDER_PATTERN = re.compile(r"lorem\s+ipsum|placeholder", re.IGNORECASE)
_TAG_PATTERN = re.compile(r"<[^>]+>")
_ELEMENT_PATTERN = re.compile(r"<[a-zA-Z][a-zA-Z0-9-]*")
_BACKGROUND_PATTERN = re.compile(r"background(?:-color)?\s*:", re.IGNORECASE)


@dataclass
class GeneratedCode:
    """The three raw text blobs a build produces."""
    html: str
    css: str = ""
    js: str = ""


@dataclass
class ValidationIssue:
    severity: str  # "critical", "warning", "info"
    category: str
    message: str


@dataclass
class ValidationResult:
    is_valid: bool
    score: int
    issues: List[ValidationIssue] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def categories(self) -> List[str]:
        """Categories with at least one issue, in first-failure order."""
        seen: List[str] = []
        for issue in self.issues:
            if issue.category not in seen:
                seen.append(issue.category)
        return seen


@dataclass(frozen=True)
class ValidationRule:
    """One scoring rule. `check` returns True when the code passes."""
    name: str
    severity: str
    category: str
    penalty: int
    message: str
    check: Callable[[GeneratedCode], bool]


# --- Checks ---

def _has_tag(html: str, tag: str) -> bool:
    return re.search(rf"<{tag}[\s>]", html, re.IGNORECASE) is not None


def _has_meta(html: str, attribute: str) -> bool:
    return re.search(rf"<meta[^>]*{attribute}", html, re.IGNORECASE) is not None


def _rtl_ok(code: GeneratedCode) -> bool:
    if not ARABIC_PATTERN.search(code.html):
        return True
    return re.search(r"dir\s*=\s*[\"']rtl[\"']", code.html, re.IGNORECASE) is not None


def _no_placeholder_text(code: GeneratedCode) -> bool:
    # Attributes like placeholder="Email" on inputs are fine; only visible text counts
    visible_text = _TAG_PATTERN.sub(" ", code.html)
    return _PLACEHOLDER_PATTERN.search(visible_text) is None


def _section_count(html: str) -> int:
    return len(re.findall(r"<section[\s>]", html, re.IGNORECASE))


def _uses_custom_properties(css: str) -> bool:
    return ":root" in css or "var(--" in css or re.search(r"--[\w-]+\s*:", css) is not None


def _uses_flex_or_grid(css: str) -> bool:
    return re.search(r"display\s*:\s*(?:inline-)?(?:flex|grid)", css, re.IGNORECASE) is not None


def _not_background_heavy(code: GeneratedCode) -> bool:
    backgrounds = len(_BACKGROUND_PATTERN.findall(code.css))
    elements = len(_ELEMENT_PATTERN.findall(code.html))
    return not (backgrounds >= BACKGROUND_HEAVY_THRESHOLD and elements < SPARSE_MARKUP_THRESHOLD)


def _js_balanced(js: str) -> bool:
    """Cheap sanity check: braces, brackets and parentheses balance outside strings."""
    if not js.strip():
        return True
    pairs = {"}": "{", "]": "[", ")": "("}
    stack: List[str] = []
    quote: Optional[str] = None
    escaped = False
    for ch in js:
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in "\"'`":
            quote = ch
        elif ch in "{[(":
            stack.append(ch)
        elif ch in pairs:
            if not stack or stack.pop() != pairs[ch]:
                return False
    return not stack


RULES: Tuple[ValidationRule, ...] = (
    ValidationRule("html_tag", "critical", "structure", 20, "Missing <html> tag",
                   lambda c: _has_tag(c.html, "html")),
    ValidationRule("head_tag", "critical", "structure", 15, "Missing <head> section",
                   lambda c: _has_tag(c.html, "head")),
    ValidationRule("body_tag", "critical", "structure", 15, "Missing <body> section",
                   lambda c: _has_tag(c.html, "body")),
    ValidationRule("charset_meta", "warning", "meta", 5, "Missing charset meta tag",
                   lambda c: _has_meta(c.html, "charset")),
    ValidationRule("viewport_meta", "warning", "responsive", 5, "Missing viewport meta tag",
                   lambda c: _has_meta(c.html, "viewport")),
    ValidationRule("rtl_direction", "critical", "rtl", 15, 'Arabic content without dir="rtl"',
                   _rtl_ok),
    ValidationRule("no_emoji", "critical", "icons", 30, "Contains emoji characters instead of SVG icons",
                   lambda c: EMOJI_PATTERN.search(c.html) is None),
    ValidationRule("no_placeholder", "warning", "content", 10, "Contains Lorem ipsum or placeholder text",
                   _no_placeholder_text),
    ValidationRule("nav_element", "warning", "structure", 5, "Missing <nav> element",
                   lambda c: _has_tag(c.html, "nav")),
    ValidationRule("footer_element", "warning", "structure", 5, "Missing <footer> element",
                   lambda c: _has_tag(c.html, "footer")),
    ValidationRule("section_count", "warning", "structure", 10,
                   f"Fewer than {MIN_SECTION_COUNT} <section> elements",
                   lambda c: _section_count(c.html) >= MIN_SECTION_COUNT),
    ValidationRule("css_variables", "warning", "design", 5, "CSS does not use custom properties",
                   lambda c: _uses_custom_properties(c.css)),
    ValidationRule("media_queries", "warning", "responsive", 10, "No @media queries",
                   lambda c: "@media" in c.css),
    ValidationRule("hover_transitions", "warning", "ux", 10, "Missing :hover effects or transitions",
                   lambda c: ":hover" in c.css and "transition" in c.css),
    ValidationRule("flex_grid_layout", "warning", "layout", 5, "CSS uses neither flexbox nor grid",
                   lambda c: _uses_flex_or_grid(c.css)),
    ValidationRule("css_length", "warning", "css", 10, "CSS is suspiciously short",
                   lambda c: len(c.css) >= MIN_CSS_LENGTH),
    ValidationRule("background_heavy", "critical", "design", 15,
                   "Many background declarations but very little markup",
                   _not_background_heavy),
    ValidationRule("js_syntax", "info", "js", 2, "JavaScript has unbalanced brackets",
                   lambda c: _js_balanced(c.js)),
)

SUGGESTIONS = {
    "structure": "Use a complete semantic document: html, head, body, nav, at least three sections and a footer.",
    "meta": "Declare <meta charset=\"UTF-8\"> in the head.",
    "responsive": "Add a viewport meta tag and @media breakpoints at 768px and 1280px.",
    "rtl": "Set dir=\"rtl\" on the html tag for Arabic content.",
    "icons": "Replace every emoji with an inline SVG icon.",
    "content": "Write real copy for the business instead of placeholder text.",
    "design": "Define the palette as CSS variables in :root and pair styling with real content.",
    "ux": "Give buttons and cards :hover states with a transition.",
    "layout": "Lay out sections with flexbox or CSS grid.",
    "css": "Provide a complete stylesheet covering every section.",
    "js": "Check the JavaScript for unbalanced braces or parentheses.",
}


def _clamp(score: int) -> int:
    return max(0, min(100, score))


def validate_generated_code(code: GeneratedCode) -> ValidationResult:
    """
    Score generated code against the fixed rule list.

    Args:
        code: HTML, CSS and JS produced by a build.

    Returns:
        ValidationResult with the clamped score, one issue per failed rule,
        suggestions per failing category, and the validity gate:
        score >= 60 and no critical issue in icons/design/structure.
    """
    score = 100
    issues: List[ValidationIssue] = []

    for rule in RULES:
        if rule.check(code):
            continue
        issues.append(ValidationIssue(rule.severity, rule.category, rule.message))
        score = _clamp(score - rule.penalty)

    blocked = any(
        issue.severity == "critical" and issue.category in BLOCKING_CATEGORIES
        for issue in issues
    )

    result = ValidationResult(
        is_valid=score >= VALID_SCORE_THRESHOLD and not blocked,
        score=score,
        issues=issues,
    )
    result.suggestions = [SUGGESTIONS[c] for c in result.categories() if c in SUGGESTIONS]
    return result
