from __future__ import annotations

import re

from cvtailor.schemas.tailor import EducationEntry, ExperienceEntry, ParsedCV, SkillSet
from cvtailor.scoring.heuristics import EMAIL_RE

TECH_SKILLS = (
    "javascript", "python", "java", "react", "node", "typescript", "html", "css",
    "sql", "git", "aws", "docker", "kubernetes", "angular", "vue", "c++", "c#",
    "php", "ruby", "go", "rust", "swift", "kotlin", "flutter", "mongodb", "postgresql",
    "mysql", "redis", "nginx", "apache", "linux", "windows", "macos", "figma", "photoshop",
)
SOFT_SKILLS = (
    "leadership", "communication", "teamwork", "problem solving", "analytical",
    "creative", "organized", "detail oriented", "time management", "adaptable",
)
EDUCATION_MARKERS = ("bachelor", "master", "phd", "degree", "university", "college")

_PHONE_RE = re.compile(r"\+?\d[\d \t().-]{8,}\d")
_HEADER_RE = re.compile(r"\b(?:resume|résumé|curriculum vitae|curriculum|cv)\b", re.IGNORECASE)
_EXPERIENCE_YEARS_RE = re.compile(r"(\d+)[+\s]*years?\s+(?:of\s+)?experience", re.IGNORECASE)
_SKILL_BOUNDARY = r"(?<![a-z0-9+#]){term}(?![a-z0-9+#])"


def _non_empty_lines(cv_text: str) -> list[str]:
    return [line.strip() for line in cv_text.splitlines() if line.strip()]


def _guess_name(lines: list[str]) -> str | None:
    for line in lines:
        if len(line) <= 2 or _HEADER_RE.search(line):
            continue
        if EMAIL_RE.search(line) or _PHONE_RE.fullmatch(line):
            continue
        return line
    return None


def _find_skills(cv_lower: str, table: tuple[str, ...]) -> list[str]:
    found = []
    for skill in table:
        if re.search(_SKILL_BOUNDARY.format(term=re.escape(skill)), cv_lower):
            found.append(" ".join(word[:1].upper() + word[1:] for word in skill.split(" ")))
    return found


def parse_cv_locally(cv_text: str) -> ParsedCV:
    """Regex-only structured parse used when the model is unavailable or returns garbage."""
    cv_text = cv_text or ""
    lines = _non_empty_lines(cv_text)
    cv_lower = cv_text.lower()

    email = EMAIL_RE.search(cv_text)
    phone = _PHONE_RE.search(cv_text)
    years = _EXPERIENCE_YEARS_RE.search(cv_text)

    technical = _find_skills(cv_lower, TECH_SKILLS)
    soft = _find_skills(cv_lower, SOFT_SKILLS)

    education = [
        EducationEntry(degree=line)
        for line in lines
        if any(marker in line.lower() for marker in EDUCATION_MARKERS)
    ]
    experience = [ExperienceEntry(skills_used=technical[:5])] if technical else []

    return ParsedCV(
        name=_guess_name(lines),
        email=email.group(0) if email else None,
        phone=phone.group(0).strip() if phone else None,
        experience=experience,
        skills=SkillSet(technical=technical, soft=soft),
        education=education,
        years_of_experience=years.group(1) if years else None,
    )
