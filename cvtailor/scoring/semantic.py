from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from cvtailor.ai.decode import decode_model_json
from cvtailor.ai.prompts import build_context_prompt, build_semantic_prompt
from cvtailor.core.config.scoring import get_scoring_value

from .keywords import extract_important_phrases, extract_industry_terms
from .utils import contains_term, count_terms, round_half_up

if TYPE_CHECKING:
    from cvtailor.ai.failover import FailoverCaller

logger = logging.getLogger(__name__)

ScoreSource = Literal["ai", "heuristic"]

TECH_DOMAINS: dict[str, tuple[str, ...]] = {
    "web development": ("html", "css", "javascript", "react", "angular", "vue", "node", "express",
                        "php", "django", "flask", "nextjs", "nuxt"),
    "data science": ("python", "r", "sql", "pandas", "numpy", "machine learning", "tensorflow",
                     "pytorch", "data analysis", "jupyter", "scikit", "keras"),
    "mobile development": ("ios", "android", "swift", "kotlin", "react native", "flutter", "xamarin",
                           "cordova", "ionic"),
    "devops": ("docker", "kubernetes", "aws", "azure", "jenkins", "terraform", "ansible", "chef",
               "puppet", "gitlab", "circleci"),
    "backend": ("api", "database", "server", "microservices", "rest", "graphql", "mongodb",
                "postgresql", "mysql", "redis"),
    "frontend": ("ui", "ux", "responsive", "design", "user interface", "user experience", "figma",
                 "sketch", "photoshop"),
    "cloud": ("aws", "azure", "gcp", "cloud", "serverless", "lambda", "s3", "ec2", "kubernetes",
              "docker"),
    "ai/ml": ("artificial intelligence", "machine learning", "deep learning", "neural networks",
              "nlp", "computer vision", "ai", "ml"),
}

SENIORITY_LEVELS: dict[str, tuple[str, ...]] = {
    "senior": ("senior", "lead", "principal", "architect", "manager", "director", "head", "chief"),
    "mid": ("developer", "engineer", "analyst", "specialist", "consultant", "coordinator"),
    "junior": ("junior", "associate", "intern", "entry", "graduate", "trainee", "assistant"),
}

_CONTEXT_PATTERNS = (
    re.compile(r"(\d+)\s*\+?\s*(years?|yrs?)\s*(of\s*)?(experience|exp)", re.IGNORECASE),
    re.compile(r"(react|angular|vue)\s*(and|with|&|\+)\s*(node|express|django)", re.IGNORECASE),
    re.compile(r"(agile|scrum|kanban|waterfall)", re.IGNORECASE),
    re.compile(r"(fintech|healthcare|e-commerce|saas|b2b|b2c)", re.IGNORECASE),
    re.compile(r"(large.scale|enterprise|startup|small.team)", re.IGNORECASE),
)


@dataclass(frozen=True)
class SubScore:
    score: int
    source: ScoreSource = "heuristic"
    insights: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


def _domain_score(cv_lower: str, jd_lower: str) -> float:
    total_domains = 0
    strength = 0.0
    for keywords in TECH_DOMAINS.values():
        if not any(contains_term(jd_lower, keyword) for keyword in keywords):
            continue
        total_domains += 1
        cv_matches = count_terms(cv_lower, keywords)
        if cv_matches:
            strength += min(cv_matches / len(keywords), 1) * 100
    return strength / total_domains if total_domains else 50.0


def _seniority_score(cv_lower: str, jd_lower: str) -> float:
    level_match = 0
    level_bonus = 0
    for terms in SENIORITY_LEVELS.values():
        jd_has = any(contains_term(jd_lower, term) for term in terms)
        cv_count = count_terms(cv_lower, terms)
        if jd_has and cv_count:
            level_match = 85
            level_bonus = min(cv_count * 5, 15)
            break
        if jd_has:
            level_match = 40
    return min(level_match + level_bonus, 100)


def _industry_score(cv_lower: str, job_description: str) -> float:
    terms = extract_industry_terms(job_description)
    if not terms:
        return 50.0
    return count_terms(cv_lower, terms) / len(terms) * 100


def tailored_floor(cv_text: str, score: int) -> int:
    """Legacy minimum for long, bold-formatted documents. Disabled unless configured."""
    if not get_scoring_value("semantic.tailored_floor.enabled", False):
        return score
    min_length = int(get_scoring_value("semantic.tailored_floor.min_length", 1000))
    min_score = int(get_scoring_value("semantic.tailored_floor.min_score", 65))
    if "**" in cv_text and len(cv_text) > min_length:
        return max(score, min_score)
    return score


def basic_semantic_relevance(cv_text: str, job_description: str) -> int:
    cv_lower = cv_text.lower()
    jd_lower = job_description.lower()

    weights = get_scoring_value("semantic.weights", {}) or {}
    final = round_half_up(
        _domain_score(cv_lower, jd_lower) * float(weights.get("domain", 0.5))
        + _seniority_score(cv_lower, jd_lower) * float(weights.get("seniority", 0.3))
        + _industry_score(cv_lower, job_description) * float(weights.get("industry", 0.2))
    )
    return min(tailored_floor(cv_text, final), 100)


def basic_context_match(cv_text: str, job_description: str) -> int:
    context_matches = 0
    for pattern in _CONTEXT_PATTERNS:
        jd_hits = sum(1 for _ in pattern.finditer(job_description))
        cv_hits = sum(1 for _ in pattern.finditer(cv_text))
        if jd_hits and cv_hits:
            context_matches += min(cv_hits, jd_hits)

    cv_lower = cv_text.lower()
    phrase_matches = sum(1 for phrase in extract_important_phrases(job_description) if phrase in cv_lower)

    return min(context_matches * 20 + phrase_matches * 10, 100)


def _score_from(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return max(0, min(100, round_half_up(number)))


async def _ai_sub_score(
    caller: FailoverCaller,
    prompt: str,
    *,
    label: str,
    score_key: str,
    insight_key: str,
) -> SubScore | None:
    try:
        text = await caller.generate(prompt)
    except Exception as exc:  # noqa: BLE001 - heuristic fallback is expected
        logger.warning("%s_ai_failed error=%s", label, exc)
        return None

    result = decode_model_json(text)
    if not result.ok:
        logger.warning("%s_ai_decode_failed error=%s", label, result.error)
        return None

    score = _score_from(result.data, score_key)
    if score is None:
        logger.warning("%s_ai_missing_score key=%s", label, score_key)
        return None

    logger.info("%s_ai_score score=%s", label, score)
    insights = str(result.data.get(insight_key) or f"AI {label} analysis completed")
    return SubScore(score=score, source="ai", insights=insights, details=result.data)


async def ai_semantic_relevance(caller: FailoverCaller, cv_text: str, job_description: str) -> SubScore:
    sub_score = await _ai_sub_score(
        caller,
        build_semantic_prompt(cv_text, job_description),
        label="semantic",
        score_key="semanticScore",
        insight_key="analysis",
    )
    if sub_score is not None:
        return sub_score
    return SubScore(score=basic_semantic_relevance(cv_text, job_description))


async def ai_context_match(caller: FailoverCaller, cv_text: str, job_description: str) -> SubScore:
    sub_score = await _ai_sub_score(
        caller,
        build_context_prompt(cv_text, job_description),
        label="context",
        score_key="contextScore",
        insight_key="insights",
    )
    if sub_score is not None:
        return sub_score
    return SubScore(score=basic_context_match(cv_text, job_description))
