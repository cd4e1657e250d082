from __future__ import annotations

import re

from .keywords import extract_job_keywords, extract_technical_terms
from .utils import contains_term, round_half_up

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_RE = re.compile(r"\+?\d[\d\s().-]{8,}\d")
YEARS_RE = re.compile(r"(\d+)\s*\+?\s*(?:years?|yrs?)\b", re.IGNORECASE)

_BOLD_RE = re.compile(r"\*\*[^*]+\*\*")
_DATE_RES = (re.compile(r"\d{2}/\d{4}"), re.compile(r"\d{4}\s*-\s*\d{4}"))
_BULLET_RE = re.compile(r"•|·|-\s")
_FORMAT_EMAIL_RE = re.compile(r"@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_FORMAT_PHONE_RE = re.compile(r"\+?\d[\d\s\-()]{8,}")
_STRONG_HEADER_WORDS = ("PROFESSIONAL", "CORE", "TECHNICAL")

_QUANTIFIED_RE = re.compile(
    r"\d+[%$+]|\d+\s*(?:million|thousand|k\b|years?|months?|projects?|users?|clients?"
    r"|revenue|sales|growth|improvement|increase|decrease)",
    re.IGNORECASE,
)
_PROJECT_TITLE_RE = re.compile(r"\*\*[^*]+\*\*\s*\n[•\-]")
_PROJECT_BOLD_BULLET_RE = re.compile(r"[•\-]\s*\*\*[^*]+\*\*")
_NUMBER_RE = re.compile(r"\d+")

ESSENTIAL_SECTIONS = ("summary", "experience", "skills", "education")
# A header is a line of its own, optionally markdown-decorated ("## Skills", "**EDUCATION**:").
_HEADER_LINE = r"^[ \t#*]*(?:{})(?:[ \t]*(?:&|and|/)[ \t]*[a-z ]+)?[ \t]*\**[ \t]*:?[ \t\r]*$"
_SECTION_HEADER_RES = {
    section: re.compile(_HEADER_LINE.format(pattern), re.MULTILINE | re.IGNORECASE)
    for section, pattern in (
        ("summary", r"(?:(?:professional|career)[ \t]+)?(?:summary|objective|profile)"),
        (
            "experience",
            r"(?:(?:professional|work)[ \t]+)?experience|work(?:[ \t]+history)?|employment(?:[ \t]+history)?",
        ),
        ("skills", r"(?:(?:professional|technical|core|key)[ \t]+)?skills"),
        ("education", r"(?:professional[ \t]+)?education"),
    )
}
CANONICAL_SECTIONS = ("summary", "experience", "skills", "education", "projects", "certifications")

ACTION_VERBS = (
    "developed", "led", "managed", "created", "implemented", "improved", "designed",
    "built", "optimized", "delivered", "achieved", "increased", "reduced", "streamlined",
)
PROFESSIONAL_TERMS = (
    "responsible", "collaborated", "coordinated", "facilitated", "spearheaded",
    "executed", "strategic", "innovative", "successful",
)
EDUCATION_TERMS = (
    "bachelor", "master", "phd", "degree", "computer science", "engineering",
    "information technology", "mathematics", "software", "certification",
)


def has_section_header(cv_text: str, section: str) -> bool:
    return bool(_SECTION_HEADER_RES[section].search(cv_text))


def formatting_score(cv_text: str) -> int:
    score = 0.0

    found = sum(1 for section in ESSENTIAL_SECTIONS if has_section_header(cv_text, section))
    score += (found / len(ESSENTIAL_SECTIONS)) * 40

    indicators = (
        bool(_BOLD_RE.search(cv_text)),
        any(pattern.search(cv_text) for pattern in _DATE_RES),
        bool(_BULLET_RE.search(cv_text)),
        bool(_FORMAT_EMAIL_RE.search(cv_text)),
        bool(_FORMAT_PHONE_RE.search(cv_text)),
    )
    score += sum(indicators) * 10

    if any(word in cv_text for word in _STRONG_HEADER_WORDS):
        score += 10

    return min(round_half_up(score), 100)


def content_quality_score(cv_text: str, job_description: str) -> int:
    cv_lower = cv_text.lower()
    score = 0.0

    quantified = len(_QUANTIFIED_RE.findall(cv_text))
    score += min(quantified * 4, 25)

    verbs = sum(1 for verb in ACTION_VERBS if verb in cv_lower)
    score += min(verbs * 2, 20)

    technical_terms = extract_technical_terms(job_description)
    covered = sum(1 for term in technical_terms if contains_term(cv_lower, term))
    score += min((covered / max(len(technical_terms), 1)) * 20, 20)

    professional = sum(1 for term in PROFESSIONAL_TERMS if term in cv_lower)
    score += min(professional * 2, 15)

    project_titles = len(_PROJECT_TITLE_RE.findall(cv_text))
    bold_bullets = len(_PROJECT_BOLD_BULLET_RE.findall(cv_text))
    score += min(project_titles * 5 + bold_bullets * 2, 20)

    return min(round_half_up(score), 100)


def section_score(cv_text: str) -> int:
    cv_lower = cv_text.lower()
    found = sum(1 for section in CANONICAL_SECTIONS if section in cv_lower)
    return round_half_up(found / len(CANONICAL_SECTIONS) * 100)


def required_years(job_description: str) -> int:
    match = YEARS_RE.search(job_description)
    return int(match.group(1)) if match else 0


def max_years_found(cv_text: str) -> int:
    years = [int(value) for value in YEARS_RE.findall(cv_text)]
    return max(years) if years else 0


def experience_score(cv_text: str, job_description: str) -> int:
    required = required_years(job_description)
    if required == 0:
        return 80
    found = max_years_found(cv_text)
    if found >= required:
        return 100
    if found >= required * 0.8:
        return 85
    if found >= required * 0.6:
        return 70
    return 50


def education_score(cv_text: str, job_description: str) -> int:
    jd_terms = [term for term in EDUCATION_TERMS if term in job_description.lower()]
    if not jd_terms:
        return 80
    cv_terms = [term for term in EDUCATION_TERMS if term in cv_text.lower()]
    return min(round_half_up(len(cv_terms) / len(jd_terms) * 100), 100)


def contact_score(cv_text: str) -> int:
    has_email = bool(EMAIL_RE.search(cv_text))
    has_phone = bool(PHONE_RE.search(cv_text))
    if has_email and has_phone:
        return 100
    if has_email or has_phone:
        return 70
    return 30


def count_quantified_results(cv_text: str) -> int:
    return len(re.findall(r"\d+[%$]|\d+\s+(?:years?|months?)", cv_text, re.IGNORECASE))


def improvement_potential(cv_text: str, job_description: str) -> str:
    cv_lower = cv_text.lower()
    hints: list[str] = []

    cv_words = {word.lower() for word in re.findall(r"\b[a-zA-Z]{3,}\b", cv_text)}
    missing = [
        keyword
        for keyword in extract_job_keywords(job_description)
        if not any(keyword in word for word in cv_words)
    ]
    if missing:
        hints.append(f"Could add {len(missing)} key terms: {', '.join(missing[:3])}")

    if len(_NUMBER_RE.findall(cv_text)) < 5:
        hints.append("Add more quantified achievements with specific metrics")

    technical_terms = extract_technical_terms(job_description)
    covered = sum(1 for term in technical_terms if contains_term(cv_lower, term))
    if covered < len(technical_terms) * 0.7:
        hints.append("Highlight more technical skills and tools mentioned in job")

    return "; ".join(hints)
