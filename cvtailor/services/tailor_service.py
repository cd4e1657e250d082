from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import ValidationError

from cvtailor.ai.decode import decode_model_json
from cvtailor.ai.errors import KeysExhaustedError
from cvtailor.ai.failover import FailoverCaller
from cvtailor.ai.prompts import build_contact_prompt, build_cv_parse_prompt, build_tailor_prompt
from cvtailor.schemas.ats import KeywordAnalysisPayload
from cvtailor.schemas.tailor import (
    ATSScoreResponse,
    ContactInfo,
    ParsedCV,
    TailorAnalysis,
    TailorResponse,
)
from cvtailor.scoring import (
    KeywordAnalysis,
    analyze_keywords,
    generate_improvements,
    generate_recommendations,
    score_resume,
    score_resume_local,
)
from cvtailor.services.cv_parser import parse_cv_locally

logger = logging.getLogger(__name__)

KEYWORD_FALLBACK_HINT = "Use /v1/ats/keyword-fallback for keyword-based optimization"
_KEY_PROJECTS_RE = re.compile(r"KEY PROJECTS", re.IGNORECASE)


class TailoringError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        code: str = "ai_tailoring_failed",
        status_code: int = 500,
        suggestion: str | None = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.extra = dict(extra or {})

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.suggestion:
            payload["suggestion"] = self.suggestion
        payload.update(self.extra)
        return payload


class CVParseError(TailoringError):
    def __init__(self, message: str = "Could not extract a name or email from the CV"):
        super().__init__(
            message,
            code="cv_parse_failed",
            status_code=422,
            suggestion="Check that the CV text contains your name and contact details.",
        )


def _exhausted_suggestion(exc: KeysExhaustedError) -> str:
    if exc.reason == "quota":
        return f"All {exc.keys_total} API key(s) have reached their usage limit. Check your provider quotas."
    if exc.reason == "rate_limit":
        return "All API keys are rate limited. Please wait and try again."
    return "Check the API key environment variables (GEMINI_API_KEY_1..N or OPENAI_API_KEY)."


def _require(value: str, field: str) -> str:
    if not value or not value.strip():
        raise TailoringError(
            f"{field} is required",
            code="missing_input",
            status_code=400,
            suggestion=f"Provide a non-empty {field}.",
        )
    return value


async def parse_contact(caller: FailoverCaller, cv_text: str) -> ContactInfo:
    """Best-effort contact extraction; any failure degrades to an empty contact."""
    try:
        text = await caller.generate(build_contact_prompt(cv_text))
    except Exception as exc:  # noqa: BLE001 - contact data is optional
        logger.warning("parse_contact_failed error=%s", exc)
        return ContactInfo()

    result = decode_model_json(text)
    if not result.ok:
        logger.warning("parse_contact_decode_failed error=%s", result.error)
        return ContactInfo()

    try:
        contact = ContactInfo.model_validate(result.data)
    except ValidationError as exc:
        logger.warning("parse_contact_invalid error=%s", exc)
        return ContactInfo()

    logger.info(
        "parse_contact_ok has_email=%s has_phone=%s has_location=%s",
        bool(contact.email),
        bool(contact.phone),
        bool(contact.location),
    )
    return contact


async def _parse_cv_with_model(caller: FailoverCaller, cv_text: str) -> ParsedCV | None:
    try:
        text = await caller.generate(build_cv_parse_prompt(cv_text))
    except Exception as exc:  # noqa: BLE001 - local parser takes over
        logger.warning("parse_cv_ai_failed error=%s", exc)
        return None

    result = decode_model_json(text)
    if not result.ok:
        logger.warning("parse_cv_decode_failed error=%s", result.error)
        return None

    try:
        return ParsedCV.model_validate(result.data)
    except ValidationError as exc:
        logger.warning("parse_cv_invalid error=%s", exc)
        return None


async def parse_cv(caller: FailoverCaller, cv_text: str) -> ParsedCV:
    parsed = await _parse_cv_with_model(caller, cv_text)
    source = "ai"
    if parsed is None or not (parsed.name or parsed.email):
        parsed = parse_cv_locally(cv_text)
        source = "local"

    if not (parsed.name or parsed.email):
        logger.warning("parse_cv_failed source=%s", source)
        raise CVParseError()

    logger.info(
        "parse_cv_ok source=%s experience=%s education=%s skills=%s",
        source,
        len(parsed.experience),
        len(parsed.education),
        len(parsed.skills.technical),
    )
    return parsed


def build_contact_line(contact: ContactInfo) -> str:
    location = contact.location
    if location and contact.country and contact.country.lower() not in location.lower():
        location = f"{location}, {contact.country}"
    parts = [part for part in (contact.email, contact.phone, location) if part]
    return " | ".join(parts) if parts else "[Contact Information]"


def _keyword_payload(analysis: KeywordAnalysis) -> KeywordAnalysisPayload:
    return KeywordAnalysisPayload(
        matched=list(analysis.matched),
        missing=list(analysis.missing),
        total=analysis.total,
    )


async def tailor_cv(caller: FailoverCaller, job_description: str, cv_text: str) -> TailorResponse:
    _require(job_description, "jobDescription")
    _require(cv_text, "cvText")

    contact = await parse_contact(caller, cv_text)

    original_analysis = analyze_keywords(cv_text, job_description)
    original_report = await score_resume(cv_text, job_description, caller, original_analysis)
    logger.info("tailor_original_score overall=%s", original_report.overall)

    prompt = build_tailor_prompt(job_description, cv_text, contact.name, build_contact_line(contact))
    try:
        tailored = await caller.generate(prompt)
    except KeysExhaustedError as exc:
        raise TailoringError(
            "All API keys exhausted",
            code=exc.code,
            status_code=503,
            suggestion=_exhausted_suggestion(exc),
            extra={
                "reason": exc.reason,
                "keysUsed": exc.keys_total,
                "fallback": KEYWORD_FALLBACK_HINT,
            },
        ) from exc
    except Exception as exc:
        logger.exception("tailor_generate_failed")
        raise TailoringError(
            "AI tailoring failed",
            suggestion="Try again later or use keyword-based optimization.",
            extra={"details": str(exc), "fallback": KEYWORD_FALLBACK_HINT},
        ) from exc

    if not _KEY_PROJECTS_RE.search(tailored):
        logger.warning("tailor_missing_key_projects length=%s", len(tailored))

    analysis = analyze_keywords(tailored, job_description)
    report = await score_resume(tailored, job_description, caller, analysis)
    newly_added = [keyword for keyword in original_analysis.missing if keyword not in analysis.missing]

    logger.info(
        "tailor_complete original=%s tailored=%s matched=%s/%s",
        original_report.overall,
        report.overall,
        len(analysis.matched),
        analysis.total,
    )
    return TailorResponse(
        tailored_cv=tailored,
        analysis=TailorAnalysis(
            match_score=analysis.match_score,
            keywords_matched=len(analysis.matched),
            total_keywords=analysis.total,
            matched_keywords=list(analysis.matched),
            missing_keywords=list(analysis.missing),
            ats_score=report,
            original_score=original_report,
            score_delta=report.overall - original_report.overall,
            improvements=generate_improvements(tailored, analysis.missing, newly_added),
            recommendations=generate_recommendations(report, analysis.missing),
            keyword_analysis=_keyword_payload(analysis),
        ),
    )


async def score_cv(
    caller: FailoverCaller | None,
    job_description: str,
    cv_text: str,
    use_ai: bool = False,
) -> ATSScoreResponse:
    _require(job_description, "jobDescription")
    _require(cv_text, "cvText")

    analysis = analyze_keywords(cv_text, job_description)
    if use_ai and caller is not None:
        report = await score_resume(cv_text, job_description, caller, analysis)
        mode = "ai"
    else:
        report = score_resume_local(cv_text, job_description, analysis)
        mode = "local"

    return ATSScoreResponse(
        mode=mode,
        match_score=analysis.match_score,
        ats_score=report,
        keyword_analysis=_keyword_payload(analysis),
        improvements=generate_improvements(cv_text, analysis.missing),
        recommendations=generate_recommendations(report, analysis.missing),
    )


def keyword_fallback_analysis(cv_text: str, job_description: str) -> ATSScoreResponse:
    """Backend-free analysis for when every credential is exhausted."""
    _require(job_description, "jobDescription")
    _require(cv_text, "cvText")

    analysis = analyze_keywords(cv_text, job_description)
    report = score_resume_local(cv_text, job_description, analysis)
    logger.info("keyword_fallback overall=%s matched=%s/%s", report.overall, len(analysis.matched), analysis.total)
    return ATSScoreResponse(
        mode="keyword_fallback",
        match_score=analysis.match_score,
        ats_score=report,
        keyword_analysis=_keyword_payload(analysis),
        improvements=generate_improvements(cv_text, analysis.missing),
        recommendations=generate_recommendations(report, analysis.missing),
    )
