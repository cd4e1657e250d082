from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cvtailor.core.config.scoring import get_scoring_value
from cvtailor.schemas.ats import AIInsights, ScoreReport, ScoreSources

from .heuristics import (
    contact_score,
    content_quality_score,
    education_score,
    experience_score,
    formatting_score,
    improvement_potential,
    section_score,
)
from .keywords import KeywordAnalysis, analyze_keywords
from .semantic import (
    SubScore,
    ai_context_match,
    ai_semantic_relevance,
    basic_context_match,
    basic_semantic_relevance,
)
from .utils import clamp_score

if TYPE_CHECKING:
    from cvtailor.ai.failover import FailoverCaller

logger = logging.getLogger(__name__)

_DEFAULT_WEIGHTS = {
    "keyword": 0.30,
    "semantic": 0.25,
    "context": 0.20,
    "formatting": 0.15,
    "aggregate": 0.10,
}


def overall_weights() -> dict[str, float]:
    configured = get_scoring_value("overall.weights", {}) or {}
    return {name: float(configured.get(name, default)) for name, default in _DEFAULT_WEIGHTS.items()}


def compute_overall(
    keyword: float,
    semantic: float,
    context: float,
    formatting: float,
    aggregate: float,
) -> int:
    weights = overall_weights()
    raw = (
        keyword * weights["keyword"]
        + semantic * weights["semantic"]
        + context * weights["context"]
        + formatting * weights["formatting"]
        + aggregate * weights["aggregate"]
    )
    return clamp_score(raw)


def _build_report(
    cv_text: str,
    job_description: str,
    analysis: KeywordAnalysis,
    semantic: SubScore,
    context: SubScore,
) -> ScoreReport:
    keyword = analysis.match_score
    formatting = formatting_score(cv_text)
    content = content_quality_score(cv_text, job_description)
    sections = section_score(cv_text)
    experience = experience_score(cv_text, job_description)
    education = education_score(cv_text, job_description)
    contact = contact_score(cv_text)
    aggregate = (content + sections + experience + education + contact) / 5

    return ScoreReport(
        overall=compute_overall(keyword, semantic.score, context.score, formatting, aggregate),
        keyword_match=keyword,
        semantic_relevance=clamp_score(semantic.score),
        context_match=clamp_score(context.score),
        formatting=formatting,
        content=content,
        sections=sections,
        experience=experience,
        skills=keyword,
        education=education,
        contact=contact,
        ai_insights=AIInsights(
            semantic=semantic.insights,
            context=context.insights,
            improvement=improvement_potential(cv_text, job_description),
        ),
        sources=ScoreSources(semantic=semantic.source, context=context.source),
    )


def score_resume_local(
    cv_text: str,
    job_description: str,
    analysis: KeywordAnalysis | None = None,
) -> ScoreReport:
    """Deterministic score that never calls the generation backend."""
    cv_text = cv_text or ""
    job_description = job_description or ""
    analysis = analysis or analyze_keywords(cv_text, job_description)
    semantic = SubScore(score=basic_semantic_relevance(cv_text, job_description))
    context = SubScore(score=basic_context_match(cv_text, job_description))
    return _build_report(cv_text, job_description, analysis, semantic, context)


async def score_resume(
    cv_text: str,
    job_description: str,
    caller: FailoverCaller | None = None,
    analysis: KeywordAnalysis | None = None,
) -> ScoreReport:
    """Score with model-assisted semantic and context sub-scores when a caller is given."""
    if caller is None:
        return score_resume_local(cv_text, job_description, analysis)

    cv_text = cv_text or ""
    job_description = job_description or ""
    analysis = analysis or analyze_keywords(cv_text, job_description)
    semantic = await ai_semantic_relevance(caller, cv_text, job_description)
    context = await ai_context_match(caller, cv_text, job_description)
    report = _build_report(cv_text, job_description, analysis, semantic, context)
    logger.info(
        "ats_score overall=%s keyword=%s semantic=%s(%s) context=%s(%s)",
        report.overall,
        report.keyword_match,
        report.semantic_relevance,
        semantic.source,
        report.context_match,
        context.source,
    )
    return report
