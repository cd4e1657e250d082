from .ats import compute_overall, score_resume, score_resume_local
from .keywords import KeywordAnalysis, analyze_keywords, extract_keyword_set, keyword_match_score
from .recommendations import generate_improvements, generate_recommendations
from .semantic import SubScore, basic_context_match, basic_semantic_relevance

__all__ = [
    "KeywordAnalysis",
    "analyze_keywords",
    "extract_keyword_set",
    "keyword_match_score",
    "compute_overall",
    "score_resume",
    "score_resume_local",
    "SubScore",
    "basic_semantic_relevance",
    "basic_context_match",
    "generate_improvements",
    "generate_recommendations",
]
