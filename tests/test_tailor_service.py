import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cvtailor.ai.errors import BackendError, KeysExhaustedError
from cvtailor.schemas.tailor import ContactInfo
from cvtailor.services.cv_parser import parse_cv_locally
from cvtailor.services.tailor_service import (
    CVParseError,
    TailoringError,
    build_contact_line,
    keyword_fallback_analysis,
    parse_contact,
    parse_cv,
    score_cv,
    tailor_cv,
)

JD = (
    "Senior Python Engineer. 5+ years experience with Python, Django, PostgreSQL and Docker. "
    "Agile team building a SaaS platform."
)
CV = (
    "Jane Doe\n"
    "jane.doe@example.com | +1 555 123 4567\n"
    "Software engineer with 4 years experience in Python and Flask.\n"
    "Bachelor of Science, State University\n"
)
TAILORED = (
    "**Jane Doe**\n"
    "jane.doe@example.com | +1 555 123 4567 | Berlin, Germany\n\n"
    "PROFESSIONAL SUMMARY\n"
    "Senior Python engineer with 5 years experience building SaaS platforms in agile teams.\n\n"
    "PROFESSIONAL EXPERIENCE\n"
    "**Software Engineer** | **Acme** | 01/2019 - 02/2024\n"
    "• Developed Django services on PostgreSQL and Docker, improved throughput by 40%\n\n"
    "KEY PROJECTS\n"
    "**Billing Platform**\n"
    "• Built a Python billing engine for 20 clients\n"
)

_ROUTES = {
    "Extract basic contact information": "contact",
    "Extract detailed structured data": "parse",
    "You are an expert ATS analyzer": "semantic",
    "You are an expert recruiter": "context",
    "You are an expert resume writer": "tailor",
}


class RoutingCaller:
    """Answers each prompt kind from a fixed table; exceptions in the table are raised."""

    def __init__(self, **answers):
        self.answers = answers
        self.kinds = []

    async def generate(self, prompt, config=None, max_retries=None):
        kind = next(name for prefix, name in _ROUTES.items() if prompt.startswith(prefix))
        self.kinds.append(kind)
        answer = self.answers.get(kind, BackendError("unexpected prompt", status=500))
        if isinstance(answer, BaseException):
            raise answer
        return answer


def _exhausted(reason="quota"):
    return KeysExhaustedError("All 2 API key(s) failed", reason=reason, attempts=2, keys_total=2)


class ParseContactTests(unittest.IsolatedAsyncioTestCase):
    async def test_contact_from_model_json(self):
        caller = RoutingCaller(
            contact='{"name": "Jane Doe", "email": "jane.doe@example.com", "phone": "", "location": "Berlin"}'
        )
        contact = await parse_contact(caller, CV)
        self.assertEqual(contact.name, "Jane Doe")
        self.assertIsNone(contact.phone)
        self.assertEqual(contact.location, "Berlin")

    async def test_failures_degrade_to_empty_contact(self):
        for answer in ("not json", _exhausted(), BackendError("boom", status=500)):
            with self.subTest(answer=answer):
                contact = await parse_contact(RoutingCaller(contact=answer), CV)
                self.assertEqual(contact, ContactInfo())

    def test_contact_line(self):
        contact = ContactInfo(email="a@b.io", phone="+49 30 1234567", location="Berlin", country="Germany")
        self.assertEqual(build_contact_line(contact), "a@b.io | +49 30 1234567 | Berlin, Germany")
        self.assertEqual(build_contact_line(ContactInfo()), "[Contact Information]")


class ParseCVTests(unittest.IsolatedAsyncioTestCase):
    async def test_model_parse(self):
        caller = RoutingCaller(
            parse='{"name": "Jane Doe", "email": "jane.doe@example.com", "skills": ["Python", "Flask"], '
            '"years_of_experience": 4}'
        )
        parsed = await parse_cv(caller, CV)
        self.assertEqual(parsed.name, "Jane Doe")
        self.assertEqual(parsed.skills.technical, ["Python", "Flask"])
        self.assertEqual(parsed.years_of_experience, "4")

    async def test_local_fallback_on_bad_reply(self):
        parsed = await parse_cv(RoutingCaller(parse="```oops```"), CV)
        self.assertEqual(parsed.name, "Jane Doe")
        self.assertEqual(parsed.email, "jane.doe@example.com")
        self.assertIn("Python", parsed.skills.technical)

    async def test_nothing_extractable_raises(self):
        with self.assertRaises(CVParseError) as ctx:
            await parse_cv(RoutingCaller(parse=_exhausted()), "cv\nresume")
        self.assertEqual(ctx.exception.code, "cv_parse_failed")
        self.assertEqual(ctx.exception.status_code, 422)

    def test_local_parser(self):
        text = (
            "Curriculum Vitae\n"
            "John Smith\n"
            "john@smith.dev  +44 20 7946 0958\n"
            "8 years of experience in Python, Docker and Go. Strong leadership and problem solving.\n"
            "Master of Engineering, Imperial College\n"
        )
        parsed = parse_cv_locally(text)
        self.assertEqual(parsed.name, "John Smith")
        self.assertEqual(parsed.email, "john@smith.dev")
        self.assertEqual(parsed.phone, "+44 20 7946 0958")
        self.assertEqual(parsed.years_of_experience, "8")
        self.assertEqual(parsed.skills.technical, ["Python", "Docker", "Go"])
        self.assertEqual(parsed.skills.soft, ["Leadership", "Problem Solving"])
        self.assertEqual([entry.degree for entry in parsed.education], ["Master of Engineering, Imperial College"])
        self.assertIsNone(parse_cv_locally("").name)


class TailorCVTests(unittest.IsolatedAsyncioTestCase):
    async def test_full_tailoring_flow(self):
        caller = RoutingCaller(
            contact='{"name": "Jane Doe", "email": "jane.doe@example.com", "location": "Berlin", "country": "Germany"}',
            semantic='{"semanticScore": 70, "analysis": "ok"}',
            context='{"contextScore": 60, "insights": "ok"}',
            tailor=TAILORED,
        )
        result = await tailor_cv(caller, JD, CV)

        self.assertEqual(result.tailored_cv, TAILORED)
        self.assertEqual(caller.kinds, ["contact", "semantic", "context", "tailor", "semantic", "context"])
        analysis = result.analysis
        self.assertEqual(analysis.score_delta, analysis.ats_score.overall - analysis.original_score.overall)
        self.assertGreater(analysis.ats_score.keyword_match, analysis.original_score.keyword_match)
        self.assertEqual(analysis.keywords_matched, len(analysis.matched_keywords))
        self.assertEqual(analysis.total_keywords, analysis.keyword_analysis.total)
        self.assertEqual(analysis.missing_keywords, analysis.keyword_analysis.missing)
        self.assertEqual(analysis.recommendations[-1], "Verify all achievements and dates are correct")

        payload = result.model_dump(by_alias=True)
        self.assertIn("tailoredCV", payload)
        self.assertIn("originalScore", payload["analysis"])

    async def test_missing_input_is_rejected_before_any_call(self):
        caller = RoutingCaller()
        with self.assertRaises(TailoringError) as ctx:
            await tailor_cv(caller, "", CV)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(caller.kinds, [])

    async def test_exhaustion_maps_to_503(self):
        caller = RoutingCaller(tailor=_exhausted("quota"))
        with self.assertRaises(TailoringError) as ctx:
            await tailor_cv(caller, JD, CV)

        payload = ctx.exception.to_payload()
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(payload["code"], "all_keys_exhausted")
        self.assertEqual(payload["reason"], "quota")
        self.assertIn("usage limit", payload["suggestion"])
        self.assertIn("keyword-fallback", payload["fallback"])

    async def test_other_errors_map_to_500(self):
        caller = RoutingCaller(tailor=BackendError("model overloaded", status=500))
        with self.assertRaises(TailoringError) as ctx:
            await tailor_cv(caller, JD, CV)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.code, "ai_tailoring_failed")
        self.assertTrue(ctx.exception.suggestion)


class AtsServiceTests(unittest.IsolatedAsyncioTestCase):
    async def test_local_and_ai_modes(self):
        local = await score_cv(None, JD, CV, use_ai=True)
        self.assertEqual(local.mode, "local")

        caller = RoutingCaller(
            semantic='{"semanticScore": 55, "analysis": "partial"}',
            context='{"contextScore": 45, "insights": "partial"}',
        )
        ai = await score_cv(caller, JD, CV, use_ai=True)
        self.assertEqual(ai.mode, "ai")
        self.assertEqual(ai.ats_score.semantic_relevance, 55)

    def test_keyword_fallback_never_calls_a_backend(self):
        result = keyword_fallback_analysis(CV, JD)
        self.assertEqual(result.mode, "keyword_fallback")
        self.assertEqual(result.match_score, result.ats_score.keyword_match)
        self.assertEqual(len(result.keyword_analysis.matched) + len(result.keyword_analysis.missing),
                         result.keyword_analysis.total)


if __name__ == "__main__":
    unittest.main()
