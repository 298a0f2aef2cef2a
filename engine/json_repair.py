"""
JSON extraction and repair for LLM responses.

Models often wrap JSON in markdown fences, surround it with prose, or stop
mid-document when they hit the token limit. These helpers recover a parseable
document where possible. They are pure string functions; callers decide what
to do when recovery still fails.
"""

import json
import re
from typing import Any, List, Optional

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OPEN_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*")
_TRAILING_NUMBER_PATTERN = re.compile(r"\d([.eE+-]+)$")
_LITERALS = ("true", "false", "null")


def _strip_fences(text: str) -> str:
    candidate = text.strip()
    match = _FENCE_PATTERN.search(candidate)
    if match:
        return match.group(1).strip()
    # Opening fence with no closing one (truncated output)
    return _OPEN_FENCE_PATTERN.sub("", candidate)


def extract_json_block(text: str) -> str:
    """
    Isolate the JSON object inside a model response.

    Strips a markdown code fence if present, then keeps the outermost
    `{...}` span. If there is an opening brace but no closing one, everything
    from the opening brace on is returned.

    Raises:
        ValueError: if the text contains no opening brace.
    """
    candidate = _strip_fences(text)
    start = candidate.find("{")
    if start == -1:
        raise ValueError("No JSON object found in response")
    end = candidate.rfind("}")
    if end < start:
        return candidate[start:]
    return candidate[start:end + 1]


def repair_truncated_json(text: str) -> str:
    """
    Close a JSON document that was cut off mid-stream.

    Walks the text tracking string state, escapes and the stack of open
    containers, then appends the minimal tokens needed to make it parse:
    closes an open string, trims a half-written number, completes a partial
    true/false/null literal, drops a dangling comma, gives a dangling key or
    colon a null value, and closes open objects/arrays in reverse order.

    Well-formed input is returned unchanged.
    """
    stack: List[str] = []
    # Per open object: expecting a key next / key read but colon not yet seen
    expect_key: List[bool] = []
    pending_colon: List[bool] = []
    in_string = False
    string_is_key = False
    escaped = False

    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
                if string_is_key:
                    pending_colon[-1] = True
            continue

        in_object = bool(stack) and stack[-1] == "{"
        if ch == '"':
            in_string = True
            string_is_key = in_object and expect_key[-1]
            if string_is_key:
                expect_key[-1] = False
        elif ch == "{":
            stack.append("{")
            expect_key.append(True)
            pending_colon.append(False)
        elif ch == "[":
            stack.append("[")
        elif ch in "}]":
            if stack and stack.pop() == "{":
                expect_key.pop()
                pending_colon.pop()
        elif ch == ":" and in_object:
            pending_colon[-1] = False
        elif ch == "," and in_object:
            expect_key[-1] = True

    repaired = text
    if in_string:
        if escaped:
            repaired = repaired[:-1]
        repaired += '"'
        if string_is_key:
            pending_colon[-1] = True

    repaired = repaired.rstrip()
    number_tail = _TRAILING_NUMBER_PATTERN.search(repaired)
    if number_tail:
        repaired = repaired[:number_tail.start(1)]
    if repaired.endswith("-"):
        repaired = repaired[:-1].rstrip()
    repaired = _complete_literal(repaired)

    if repaired.endswith(","):
        repaired = repaired[:-1].rstrip()
    if repaired.endswith(":"):
        repaired += " null"
    elif stack and stack[-1] == "{" and pending_colon[-1]:
        repaired += ": null"

    for opener in reversed(stack):
        repaired += "}" if opener == "{" else "]"
    return repaired


def _complete_literal(text: str) -> str:
    match = re.search(r"([a-z]+)$", text)
    if not match:
        return text
    fragment = match.group(1)
    for literal in _LITERALS:
        if literal.startswith(fragment) and fragment != literal:
            return text + literal[len(fragment):]
    return text


def loads_lenient(text: str) -> Any:
    """
    Parse a model response as JSON, repairing truncation if needed.

    Tries the outermost `{...}` span first, then the repaired tail from the
    first opening brace (truncated output), then the repaired span.

    Raises:
        ValueError: if no JSON object can be recovered.
    """
    block = extract_json_block(text)
    try:
        return json.loads(block)
    except json.JSONDecodeError:
        pass

    candidate = _strip_fences(text)
    tail = candidate[candidate.find("{"):]
    for attempt in (tail, block):
        try:
            return json.loads(repair_truncated_json(attempt))
        except json.JSONDecodeError:
            continue
    raise ValueError("Response is not valid JSON and could not be repaired")


def extract_string_field(content: str, field_name: str) -> Optional[str]:
    """
    Pull a single string value out of malformed JSON by key.

    Last resort when the document as a whole will not parse, for example
    because the model emitted raw newlines inside a string.
    Returns None if the key is absent.
    """
    pattern = re.compile(rf'"{re.escape(field_name)}"\s*:\s*"((?:[^"\\]|\\[\s\S])*)"')
    match = pattern.search(content)
    if not match:
        return None
    return (
        match.group(1)
        .replace("\\n", "\n")
        .replace("\\t", "\t")
        .replace('\\"', '"')
        .replace("\\\\", "\\")
    )
