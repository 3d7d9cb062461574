"""Best-effort JSON object extraction from noisy LLM output.

LLMs asked for "only JSON" still wrap answers in markdown fences, prepend
prose ("Here is the concept map:"), or leave trailing commas.  The parser
walks a fixed fallback chain and stops at the first stage that yields a
JSON object:

    1. strict     -- ``json.loads`` on the stripped text
    2. cleaned    -- code fences removed, trailing commas dropped
    3. extracted  -- first balanced ``{...}`` block found in the text
                     (string-literal aware), cleaned and parsed

If every stage fails, :class:`MalformedOutputError` is raised so the
caller can fall back to local generation.
"""

from __future__ import annotations

import json
import re
from typing import Any

from mindmarks.utils.errors import MalformedOutputError

_JSON_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def clean_json_text(text: str) -> str:
    """Strip markdown code fences and trailing commas from *text*."""
    cleaned = text.strip()
    fence_match = _JSON_FENCE_RE.search(cleaned)
    if fence_match:
        cleaned = fence_match.group(1).strip()
    elif cleaned.startswith("```"):
        # Unterminated fence: drop the fence lines only.
        lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()
    return _TRAILING_COMMA_RE.sub(r"\1", cleaned)


def iter_brace_blocks(text: str):
    """Yield every balanced ``{...}`` substring of *text*, in start order.

    Braces inside JSON string literals are ignored so a ``"}"`` in a label
    does not close the block early.
    """
    for start, char in enumerate(text):
        if char != "{":
            continue
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            current = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif current == "\\":
                    escaped = True
                elif current == '"':
                    in_string = False
                continue
            if current == '"':
                in_string = True
            elif current == "{":
                depth += 1
            elif current == "}":
                depth -= 1
                if depth == 0:
                    yield text[start : index + 1]
                    break


def extract_json_object(response: str, provider_name: str | None = None) -> dict[str, Any]:
    """Parse the first well-formed JSON object out of an LLM *response*.

    Raises
    ------
    MalformedOutputError
        If no stage of the fallback chain produces a JSON object.
    """
    if not response or not response.strip():
        raise MalformedOutputError("Provider returned an empty response", provider_name)

    parsed = _loads_object(response.strip())
    if parsed is not None:
        return parsed

    cleaned = clean_json_text(response)
    parsed = _loads_object(cleaned)
    if parsed is not None:
        return parsed

    for block in iter_brace_blocks(cleaned):
        parsed = _loads_object(_TRAILING_COMMA_RE.sub(r"\1", block))
        if parsed is not None:
            return parsed

    raise MalformedOutputError(
        f"No JSON object found in provider output ({len(response)} chars)",
        provider_name,
    )
