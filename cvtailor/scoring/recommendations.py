from __future__ import annotations

from typing import Sequence

from cvtailor.core.config.scoring import get_scoring_value
from cvtailor.schemas.ats import ScoreReport

from .heuristics import count_quantified_results

REVIEW_REMINDERS = (
    "Review the tailored content for accuracy",
    "Verify all achievements and dates are correct",
)
_IMPROVEMENT_VERBS = ("led", "managed", "developed", "created", "implemented", "improved")


def _threshold(name: str, default: int) -> int:
    return int(get_scoring_value(f"recommendations.{name}", default))


def generate_improvements(
    cv_text: str,
    missing_keywords: Sequence[str],
    newly_added: Sequence[str] = (),
) -> list[str]:
    improvements: list[str] = []

    if missing_keywords:
        improvements.append(
            f"Add {len(missing_keywords)} missing keywords: {', '.join(missing_keywords[:3])}"
        )

    if newly_added:
        improvements.append(f"Successfully added {len(newly_added)} relevant keywords")

    if count_quantified_results(cv_text) < 3:
        improvements.append("Add more quantified achievements (numbers, percentages, metrics)")

    cv_lower = cv_text.lower()
    if sum(1 for verb in _IMPROVEMENT_VERBS if verb in cv_lower) < 3:
        improvements.append("Use more action verbs to start bullet points")

    return improvements


def generate_recommendations(report: ScoreReport, missing_keywords: Sequence[str] = ()) -> list[str]:
    recommendations: list[str] = []

    if report.overall < _threshold("overall_below", 80):
        recommendations.append("Overall ATS score needs improvement")

    if report.keyword_match < _threshold("keyword_below", 70):
        recommendations.append("Increase keyword density with job-specific terms from the description")
        limit = _threshold("max_missing_keywords", 5)
        if missing_keywords:
            recommendations.append(f"Consider adding: {', '.join(missing_keywords[:limit])}")

    if report.formatting < _threshold("formatting_below", 70):
        recommendations.append(
            "Improve resume structure with clear section headers, bullet points and consistent dates"
        )

    if report.content < _threshold("content_below", 75):
        recommendations.append("Add more quantified achievements and action verbs")

    if report.experience < _threshold("experience_below", 80):
        recommendations.append("Make years of experience and relevant roles explicit for this job")

    if report.skills < _threshold("skills_below", 80):
        recommendations.append("List the technical skills and tools named in the job description")

    recommendations.extend(REVIEW_REMINDERS)
    return recommendations
