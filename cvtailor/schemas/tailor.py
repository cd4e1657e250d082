from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from .ats import CamelModel, KeywordAnalysisPayload, ScoreReport


class TailorRequest(CamelModel):
    job_description: str = Field(default="", max_length=50000)
    cv_text: str = Field(default="", max_length=50000)


class CVTextRequest(CamelModel):
    cv_text: str = Field(default="", max_length=50000)


class ATSScoreRequest(CamelModel):
    job_description: str = Field(default="", max_length=50000)
    cv_text: str = Field(default="", max_length=50000)
    use_ai: bool = False


class ContactInfo(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    country: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class ExperienceEntry(BaseModel):
    title: str | None = None
    company: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    duration: str | None = None
    description: str | None = None
    skills_used: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)


class SkillSet(BaseModel):
    technical: list[str] = Field(default_factory=list)
    soft: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)


class EducationEntry(BaseModel):
    degree: str | None = None
    institution: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    year: str | None = None
    gpa: str | None = None
    relevant_courses: list[str] = Field(default_factory=list)


class ProjectEntry(BaseModel):
    name: str | None = None
    description: str | None = None
    technologies: list[str] = Field(default_factory=list)
    start_date: str | None = None
    end_date: str | None = None


class ParsedCV(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    country: str | None = None
    summary: str | None = None
    experience: list[ExperienceEntry] = Field(default_factory=list)
    skills: SkillSet = Field(default_factory=SkillSet)
    education: list[EducationEntry] = Field(default_factory=list)
    projects: list[ProjectEntry] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    years_of_experience: str | None = None

    @field_validator("skills", mode="before")
    @classmethod
    def _flat_skill_list(cls, value: Any) -> Any:
        # Models sometimes return a flat list instead of the grouped object.
        if isinstance(value, list):
            return {"technical": [str(item) for item in value if item]}
        return value

    @field_validator("years_of_experience", mode="before")
    @classmethod
    def _years_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class TailorAnalysis(CamelModel):
    match_score: int = Field(ge=0, le=100)
    keywords_matched: int = Field(ge=0)
    total_keywords: int = Field(ge=0)
    matched_keywords: list[str] = Field(default_factory=list)
    missing_keywords: list[str] = Field(default_factory=list)
    ats_score: ScoreReport
    original_score: ScoreReport
    score_delta: int
    improvements: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    keyword_analysis: KeywordAnalysisPayload


class TailorResponse(CamelModel):
    tailored_cv: str = Field(alias="tailoredCV")
    analysis: TailorAnalysis


class ParseContactResponse(CamelModel):
    contact: ContactInfo


class ParseCVResponse(CamelModel):
    cv_data: ParsedCV


class ATSScoreResponse(CamelModel):
    mode: Literal["ai", "local", "keyword_fallback"]
    match_score: int = Field(ge=0, le=100)
    ats_score: ScoreReport
    keyword_analysis: KeywordAnalysisPayload
    improvements: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
