from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*\n?")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


@dataclass(frozen=True)
class DecodeResult:
    ok: bool
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def decode_model_json(text: str | None) -> DecodeResult:
    """Decode a JSON object from model output without raising.

    Model replies are untrusted: they may be wrapped in code fences, carry
    trailing commas or have prose around the object. A strict parse is tried
    first, then one bounded repair pass.
    """
    if not text or not text.strip():
        return DecodeResult(ok=False, error="empty model response")

    raw = text.strip()
    parsed = _loads_object(raw)
    if parsed is not None:
        return DecodeResult(ok=True, data=parsed)

    candidate = strip_trailing_commas(strip_code_fences(raw))
    parsed = _loads_object(candidate)
    if parsed is not None:
        return DecodeResult(ok=True, data=parsed)

    start = candidate.find("{")
    end = candidate.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return DecodeResult(ok=False, error="model did not return a JSON object")

    parsed = _loads_object(candidate[start : end + 1])
    if parsed is not None:
        return DecodeResult(ok=True, data=parsed)
    return DecodeResult(ok=False, error="model returned malformed JSON")
