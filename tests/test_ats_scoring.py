import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cvtailor.core.config.scoring import get_scoring_config, get_scoring_value
from cvtailor.scoring import (
    analyze_keywords,
    compute_overall,
    extract_keyword_set,
    keyword_match_score,
    score_resume_local,
)
from cvtailor.scoring.heuristics import (
    contact_score,
    education_score,
    experience_score,
    formatting_score,
    has_section_header,
    section_score,
)
from cvtailor.scoring.utils import clamp_score, contains_term

SAMPLE_JD = (
    "Senior Python Engineer. We need 5+ years experience with Python, Django, PostgreSQL and Docker. "
    "Experience with AWS and agile teams in a SaaS company. Bachelor degree in computer science."
)
SAMPLE_CV = (
    "Jane Doe\n"
    "jane.doe@example.com | +1 555 123 4567\n\n"
    "PROFESSIONAL SUMMARY\n"
    "Senior software engineer with 6 years experience building SaaS platforms.\n\n"
    "PROFESSIONAL EXPERIENCE\n"
    "**Senior Engineer** | **Acme** | 01/2019 - 02/2024\n"
    "• Developed Django services on PostgreSQL, improved latency by 35%\n"
    "• Led migration to Docker and AWS for 2 million users\n\n"
    "SKILLS\n"
    "Python, Django, PostgreSQL, Docker, AWS, agile\n\n"
    "EDUCATION\n"
    "Bachelor of Science in Computer Science\n"
)


class ScoringConfigTests(unittest.TestCase):
    def test_loader_and_value_lookup(self):
        config = get_scoring_config()
        self.assertIsInstance(config, dict)
        self.assertEqual(get_scoring_value("overall.weights.keyword"), 0.30)
        self.assertFalse(get_scoring_value("semantic.tailored_floor.enabled"))
        self.assertEqual(get_scoring_value("missing.path", 7), 7)


class KeywordTests(unittest.TestCase):
    def test_single_repeated_keyword_matches_case_insensitively(self):
        analysis = analyze_keywords("I write python every day", "Python Python Python")
        self.assertEqual(analysis.keywords, ("python",))
        self.assertEqual(analysis.matched, ("python",))
        self.assertEqual(analysis.match_score, 100)

        report = score_resume_local("I write python every day", "Python Python Python")
        self.assertEqual(report.keyword_match, 100)
        self.assertEqual(report.skills, 100)

    def test_keyword_set_is_ordered_and_deduplicated(self):
        keywords = extract_keyword_set("Docker and Python; docker, AWS, Python and Kubernetes")
        self.assertEqual(keywords, ("docker", "python", "kubernetes"))

    def test_continuous_mapping(self):
        self.assertEqual(keyword_match_score(0, 0), 0)
        self.assertEqual(keyword_match_score(0, 10), 0)
        self.assertEqual(keyword_match_score(1, 3), 33)
        self.assertEqual(keyword_match_score(1, 2), 50)
        self.assertEqual(keyword_match_score(3, 3), 100)

    def test_adding_a_missing_keyword_never_lowers_the_score(self):
        before = analyze_keywords(SAMPLE_CV, SAMPLE_JD)
        self.assertTrue(before.missing)
        improved_cv = SAMPLE_CV + "\n" + before.missing[0]
        after = analyze_keywords(improved_cv, SAMPLE_JD)
        self.assertGreaterEqual(after.match_score, before.match_score)
        self.assertNotIn(before.missing[0], after.missing)

    def test_word_boundary_term_matching(self):
        self.assertTrue(contains_term("experience with ai tooling", "ai"))
        self.assertFalse(contains_term("trained the team", "ai"))
        self.assertTrue(contains_term("c++ and c#", "c++"))


class HeuristicTests(unittest.TestCase):
    def test_unstructured_text_has_zero_formatting(self):
        self.assertEqual(formatting_score("i enjoy cooking pasta and reading novels on weekends"), 0)

    def test_section_words_in_prose_are_not_headers(self):
        self.assertEqual(formatting_score("Worked at Acme building computer networks for a bank"), 0)
        self.assertEqual(formatting_score("I have experience in skills like cooking"), 0)
        self.assertFalse(has_section_header("Summary of my work: lots of experience", "summary"))

    def test_markdown_and_titled_headers_are_detected(self):
        cv = "## Career Summary\n**WORK HISTORY**\nTechnical Skills:\nEducation & Training\r\n"
        for section in ("summary", "experience", "skills", "education"):
            with self.subTest(section=section):
                self.assertTrue(has_section_header(cv, section))
        self.assertEqual(formatting_score(cv), 50)

    def test_structured_cv_formatting(self):
        self.assertEqual(formatting_score(SAMPLE_CV), 100)

    def test_experience_bands(self):
        jd = "Requires 5 years of backend work"
        self.assertEqual(experience_score("6 years", jd), 100)
        self.assertEqual(experience_score("4 years", jd), 85)
        self.assertEqual(experience_score("3 years", jd), 70)
        self.assertEqual(experience_score("1 year", jd), 50)
        self.assertEqual(experience_score("1 year", "no requirement"), 80)

    def test_contact_sections_and_education(self):
        self.assertEqual(contact_score("jane@example.com +1 555 123 4567"), 100)
        self.assertEqual(contact_score("jane@example.com"), 70)
        self.assertEqual(contact_score("no contact here"), 30)
        self.assertEqual(contact_score("find me as @janedoe on social media"), 30)
        self.assertEqual(section_score("summary experience skills"), 50)
        self.assertEqual(education_score("anything", "no formal requirements"), 80)
        self.assertEqual(education_score("Bachelor degree", "bachelor degree required"), 100)

    def test_clamp_score(self):
        self.assertEqual(clamp_score(150), 100)
        self.assertEqual(clamp_score(-5), 0)
        self.assertEqual(clamp_score("72.5"), 73)
        self.assertEqual(clamp_score("n/a", default=40), 40)


class ScoreReportTests(unittest.TestCase):
    def test_empty_job_description_is_driven_by_other_components(self):
        report = score_resume_local(SAMPLE_CV, "")
        self.assertEqual(report.keyword_match, 0)
        self.assertEqual(report.skills, 0)
        aggregate = (report.content + report.sections + report.experience + report.education + report.contact) / 5
        expected = compute_overall(
            0,
            report.semantic_relevance,
            report.context_match,
            report.formatting,
            aggregate,
        )
        self.assertEqual(report.overall, expected)

    def test_local_score_is_deterministic_and_bounded(self):
        first = score_resume_local(SAMPLE_CV, SAMPLE_JD)
        second = score_resume_local(SAMPLE_CV, SAMPLE_JD)
        self.assertEqual(first, second)
        for name in (
            "overall",
            "keyword_match",
            "semantic_relevance",
            "context_match",
            "formatting",
            "content",
            "sections",
            "experience",
            "skills",
            "education",
            "contact",
        ):
            value = getattr(first, name)
            self.assertGreaterEqual(value, 0, name)
            self.assertLessEqual(value, 100, name)
        self.assertEqual(first.sources.semantic, "heuristic")
        self.assertEqual(first.sources.context, "heuristic")

    def test_overall_is_clamped(self):
        self.assertEqual(compute_overall(100, 100, 100, 100, 100), 100)
        self.assertEqual(compute_overall(0, 0, 0, 0, 0), 0)
        self.assertEqual(compute_overall(500, 500, 500, 500, 500), 100)

    def test_report_serializes_with_camel_case(self):
        payload = score_resume_local(SAMPLE_CV, SAMPLE_JD).model_dump(by_alias=True)
        self.assertIn("keywordMatch", payload)
        self.assertIn("semanticRelevance", payload)
        self.assertIn("aiInsights", payload)


if __name__ == "__main__":
    unittest.main()
