from __future__ import annotations

import re
from dataclasses import dataclass

from .utils import round_half_up

KEYWORD_RE = re.compile(r"\b[a-zA-Z]{4,}\b")
_WORD3_RE = re.compile(r"\b[a-zA-Z]{3,}\b")

TECHNICAL_TERMS: tuple[tuple[str, ...], ...] = (
    # languages
    ("javascript", "python", "java", "c++", "c#", "php", "ruby", "go", "rust", "swift",
     "kotlin", "typescript", "scala", "r", "sql"),
    # frameworks and libraries
    ("react", "angular", "vue", "node", "express", "django", "flask", "spring", "laravel",
     "rails", "jquery", "bootstrap"),
    # tools and platforms
    ("git", "docker", "kubernetes", "aws", "azure", "gcp", "jenkins", "terraform", "ansible",
     "mongodb", "postgresql", "mysql", "redis"),
    # methodologies
    ("agile", "scrum", "kanban", "devops", "ci/cd", "tdd", "microservices", "rest", "api",
     "json", "xml"),
)

INDUSTRY_TERMS: tuple[tuple[str, ...], ...] = (
    ("fintech", "financial", "banking", "payment", "blockchain", "cryptocurrency", "trading",
     "investment", "insurance", "lending"),
    ("healthcare", "medical", "hospital", "patient", "clinical", "pharmaceutical", "biotech",
     "telemedicine", "hipaa"),
    ("e-commerce", "ecommerce", "retail", "marketplace", "shopping", "logistics", "fulfillment",
     "inventory"),
    ("saas", "enterprise", "b2b", "b2c", "crm", "erp", "analytics", "dashboard", "reporting",
     "automation"),
    ("startup", "mvp", "scale", "growth", "venture", "seed", "series", "funding", "pivot"),
    ("gaming", "game", "unity", "unreal", "3d", "graphics", "multiplayer", "mobile games"),
)

_PHRASE_PATTERNS = (
    re.compile(r"(?:experience with|proficient in|knowledge of|familiar with)\s+([^.]{10,50})"),
    re.compile(r"(?:must have|required|essential)\s+([^.]{10,50})"),
    re.compile(r"(?:responsible for|will be|duties include)\s+([^.]{10,50})"),
)
_REQUIREMENT_SECTION_RE = re.compile(
    r"(?:requirements?|qualifications?|skills?|experience)[:\s]+(.*?)(?=\n\n|\n[A-Z]|$)",
    re.IGNORECASE | re.DOTALL,
)
_SKILL_PHRASE_RE = re.compile(
    r"\b(?:experience with|knowledge of|proficient in|familiar with|expertise in)\s+([^.]{5,30})",
    re.IGNORECASE,
)
_MAX_IMPORTANT_PHRASES = 10


def _term_regex(terms: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(term) for term in sorted(terms, key=len, reverse=True))
    return re.compile(rf"(?<![A-Za-z0-9+#])({alternatives})(?![A-Za-z0-9+#])", re.IGNORECASE)


_TECHNICAL_PATTERNS = tuple(_term_regex(group) for group in TECHNICAL_TERMS)
_INDUSTRY_PATTERNS = tuple(_term_regex(group) for group in INDUSTRY_TERMS)


def _dedupe(items) -> list[str]:
    return list(dict.fromkeys(items))


def extract_keyword_set(job_description: str) -> tuple[str, ...]:
    """Lower-cased alphabetic tokens of 4+ letters, deduplicated in first-seen order."""
    tokens = KEYWORD_RE.findall(job_description or "")
    return tuple(_dedupe(token.lower() for token in tokens))


def keyword_match_score(matched_count: int, total: int) -> int:
    if total <= 0 or matched_count <= 0:
        return 0
    return round_half_up(100 * min(matched_count, total) / total)


@dataclass(frozen=True)
class KeywordAnalysis:
    keywords: tuple[str, ...]
    matched: tuple[str, ...]
    missing: tuple[str, ...]

    @property
    def total(self) -> int:
        return len(self.keywords)

    @property
    def match_score(self) -> int:
        return keyword_match_score(len(self.matched), self.total)


def analyze_keywords(cv_text: str, job_description: str) -> KeywordAnalysis:
    keywords = extract_keyword_set(job_description)
    cv_lower = (cv_text or "").lower()
    matched = tuple(keyword for keyword in keywords if keyword in cv_lower)
    matched_set = set(matched)
    missing = tuple(keyword for keyword in keywords if keyword not in matched_set)
    return KeywordAnalysis(keywords=keywords, matched=matched, missing=missing)


def extract_technical_terms(job_description: str) -> list[str]:
    terms: list[str] = []
    for pattern in _TECHNICAL_PATTERNS:
        terms.extend(match.lower() for match in pattern.findall(job_description or ""))
    return _dedupe(terms)


def extract_industry_terms(job_description: str) -> list[str]:
    terms: list[str] = []
    for pattern in _INDUSTRY_PATTERNS:
        terms.extend(match.lower() for match in pattern.findall(job_description or ""))
    return _dedupe(terms)


def extract_important_phrases(job_description: str) -> list[str]:
    text = (job_description or "").lower()
    phrases: list[str] = []
    for pattern in _PHRASE_PATTERNS:
        for match in pattern.finditer(text):
            phrase = match.group(1).strip()
            if phrase:
                phrases.append(phrase)
    return phrases[:_MAX_IMPORTANT_PHRASES]


def extract_job_keywords(job_description: str) -> list[str]:
    """Wider keyword net used for improvement hints: requirement sections, tech terms, skill phrases."""
    text = job_description or ""
    keywords: list[str] = []

    for section in _REQUIREMENT_SECTION_RE.finditer(text):
        keywords.extend(_WORD3_RE.findall(section.group(0)))

    keywords.extend(extract_technical_terms(text))

    for match in _SKILL_PHRASE_RE.finditer(text):
        keywords.extend(word for word in re.split(r"[,\s]+", match.group(1)) if len(word) > 2)

    return [keyword for keyword in _dedupe(k.lower() for k in keywords) if len(keyword) > 2]
