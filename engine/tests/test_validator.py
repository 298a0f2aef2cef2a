"""
Tests for the rule-based website validator.

Validates:
1. Determinism: identical input gives an identical result
2. Gate asymmetry: blocking critical categories override the score
3. Individual rules deduct their fixed points
4. Score clamping and suggestion ordering
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from engine.validator import (
    GeneratedCode,
    RULES,
    VALID_SCORE_THRESHOLD,
    validate_generated_code,
)
from engine.templates import PREMIUM_TEMPLATES


FULL_HTML = (
    "<!DOCTYPE html><html><head><meta charset='utf-8'>"
    "<meta name='viewport' content='width=device-width'></head>"
    "<body><nav></nav><section></section><section></section><section></section>"
    "<footer></footer></body></html>"
)

EMOJI_HTML = (
    "<!DOCTYPE html><html><head><meta charset='utf-8'>"
    "<meta name='viewport' content='...'></head><body><nav></nav>"
    "<section></section><section></section><section></section><footer></footer>"
    "\U0001F389</body></html>"
)

RICH_CSS = (
    ":root{--primary:#6366f1} .btn{display:flex;transition:all .3s} "
    ".btn:hover{color:var(--primary)} @media (max-width:768px){.btn{display:block}}"
)


def _issue_messages(result):
    return [issue.message for issue in result.issues]


class TestDeterminism:
    """Same input, same output."""

    def test_identical_results(self):
        code = GeneratedCode(html=EMOJI_HTML, css=RICH_CSS, js="function a() { return [1, 2]; }")
        first = validate_generated_code(code)
        second = validate_generated_code(code)
        assert first == second

    def test_rule_order_is_fixed(self):
        """Issues appear in rule-table order."""
        result = validate_generated_code(GeneratedCode(html=""))
        names_by_message = {rule.message: i for i, rule in enumerate(RULES)}
        indices = [names_by_message[m] for m in _issue_messages(result)]
        assert indices == sorted(indices)


class TestGate:
    """Score threshold plus hard-blocking categories."""

    def test_emoji_blocks_despite_passing_score(self):
        result = validate_generated_code(GeneratedCode(html=EMOJI_HTML, css=RICH_CSS))
        # Emoji (-30) and short CSS (-10)
        assert result.score == 60
        assert result.score >= VALID_SCORE_THRESHOLD
        assert not result.is_valid
        assert "icons" in result.categories()

    def test_emoji_blocks_with_long_css(self):
        css = RICH_CSS + " " + ".x { color: red; }" * 80
        result = validate_generated_code(GeneratedCode(html=EMOJI_HTML, css=css))
        assert result.score == 70
        assert not result.is_valid

    def test_score_65_without_blocking_issues_is_valid(self):
        css = ":root { --primary: #000; } .a { color: var(--primary); }"
        result = validate_generated_code(GeneratedCode(html=FULL_HTML, css=css))
        # No @media (-10), no hover/transition (-10), no flex (-5), short CSS (-10)
        assert result.score == 65
        assert result.is_valid
        assert all(issue.severity != "critical" for issue in result.issues)

    def test_threshold_boundary(self):
        result = validate_generated_code(GeneratedCode(html=FULL_HTML, css=""))
        # css vars, media, hover, flex, length: 5 + 10 + 10 + 5 + 10
        assert result.score == 60
        assert result.is_valid

        no_nav = FULL_HTML.replace("<nav></nav>", "")
        result = validate_generated_code(GeneratedCode(html=no_nav, css=""))
        assert result.score == 55
        assert not result.is_valid

    def test_templates_pass(self):
        """Every static template passes on its own."""
        for template in PREMIUM_TEMPLATES:
            result = validate_generated_code(template.to_code())
            assert result.is_valid, (template.id, _issue_messages(result))
            assert result.score == 100, (template.id, _issue_messages(result))


class TestRules:
    """Individual rule behaviour."""

    def test_arabic_requires_rtl(self):
        html = FULL_HTML.replace("<nav></nav>", "<nav>مرحبا</nav>")
        result = validate_generated_code(GeneratedCode(html=html, css=RICH_CSS))
        rtl_issues = [i for i in result.issues if i.category == "rtl"]
        assert len(rtl_issues) == 1
        assert rtl_issues[0].severity == "critical"

        html_rtl = html.replace("<html>", '<html lang="ar" dir="rtl">')
        result = validate_generated_code(GeneratedCode(html=html_rtl, css=RICH_CSS))
        assert "rtl" not in result.categories()

    def test_rtl_is_not_blocking(self):
        html = FULL_HTML.replace("<nav></nav>", "<nav>مرحبا</nav>")
        css = RICH_CSS + " " + ".x { color: red; }" * 80
        result = validate_generated_code(GeneratedCode(html=html, css=css))
        assert result.score == 85
        assert result.is_valid

    def test_placeholder_text_in_visible_content(self):
        html = FULL_HTML.replace("<section></section>", "<section>Lorem ipsum dolor</section>", 1)
        result = validate_generated_code(GeneratedCode(html=html, css=RICH_CSS))
        assert "content" in result.categories()

    def test_placeholder_attribute_is_fine(self):
        html = FULL_HTML.replace("<section></section>", '<section><input placeholder="Email"></section>', 1)
        result = validate_generated_code(GeneratedCode(html=html, css=RICH_CSS))
        assert "content" not in result.categories()

    def test_too_few_sections(self):
        html = FULL_HTML.replace("<section></section>", "", 1)
        result = validate_generated_code(GeneratedCode(html=html, css=RICH_CSS))
        assert "Fewer than 3 <section> elements" in _issue_messages(result)

    def test_background_heavy_markup(self):
        css = RICH_CSS + "".join(f" .b{i} {{ background: #fff; }}" for i in range(15))
        result = validate_generated_code(GeneratedCode(html=FULL_HTML, css=css))
        design = [i for i in result.issues if i.category == "design"]
        assert len(design) == 1
        assert design[0].severity == "critical"
        assert not result.is_valid

    def test_unbalanced_js(self):
        code = GeneratedCode(html=FULL_HTML, css=RICH_CSS, js="function a() { return 1;")
        result = validate_generated_code(code)
        js_issues = [i for i in result.issues if i.category == "js"]
        assert len(js_issues) == 1
        assert js_issues[0].severity == "info"

    def test_brackets_inside_strings_ignored(self):
        code = GeneratedCode(html=FULL_HTML, css=RICH_CSS, js="var s = '{[('; console.log(s);")
        result = validate_generated_code(code)
        assert "js" not in result.categories()


class TestScoring:
    """Clamping and suggestions."""

    def test_empty_code_clamps_to_zero(self):
        result = validate_generated_code(GeneratedCode(html=""))
        assert result.score == 0
        assert not result.is_valid

    def test_suggestions_deduplicated_in_order(self):
        result = validate_generated_code(GeneratedCode(html=""))
        assert len(result.suggestions) == len(set(result.suggestions))
        assert len(result.suggestions) == len(result.categories())
        assert result.categories()[0] == "structure"

    def test_perfect_score_has_no_suggestions(self):
        result = validate_generated_code(PREMIUM_TEMPLATES[0].to_code())
        assert result.suggestions == []

    def test_penalties_match_table(self):
        penalties = [rule.penalty for rule in RULES]
        assert penalties == [20, 15, 15, 5, 5, 15, 30, 10, 5, 5, 10, 5, 10, 10, 5, 10, 15, 2]
        assert sum(1 for rule in RULES if rule.severity == "critical") == 6
