from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Score = Annotated[int, Field(ge=0, le=100)]
ScoreSource = Literal["ai", "heuristic"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AIInsights(CamelModel):
    model_config = ConfigDict(frozen=True)

    semantic: str | None = None
    context: str | None = None
    improvement: str = ""


class ScoreSources(CamelModel):
    model_config = ConfigDict(frozen=True)

    semantic: ScoreSource = "heuristic"
    context: ScoreSource = "heuristic"


class ScoreReport(CamelModel):
    model_config = ConfigDict(frozen=True)

    overall: Score
    keyword_match: Score
    semantic_relevance: Score
    context_match: Score
    formatting: Score
    content: Score
    sections: Score
    experience: Score
    skills: Score
    education: Score
    contact: Score
    ai_insights: AIInsights = Field(default_factory=AIInsights)
    sources: ScoreSources = Field(default_factory=ScoreSources)


class KeywordAnalysisPayload(CamelModel):
    matched: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
