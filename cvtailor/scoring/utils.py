from __future__ import annotations

import math
import re
from functools import lru_cache
from typing import Any


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: Any, default: int = 0) -> int:
    """Coerce `value` to an int score in [0, 100]."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return max(0, min(100, round_half_up(number)))


@lru_cache(maxsize=1024)
def _term_pattern(term: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![a-z0-9+#]){re.escape(term.lower())}(?![a-z0-9+#])")


def contains_term(text_lower: str, term: str) -> bool:
    """Whole-token containment; `text_lower` must already be lower-cased."""
    return bool(_term_pattern(term).search(text_lower))


def count_terms(text_lower: str, terms) -> int:
    return sum(1 for term in terms if contains_term(text_lower, term))
