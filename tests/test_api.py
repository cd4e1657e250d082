import os
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep API tests deterministic and fast by default.
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from fastapi.testclient import TestClient

from cvtailor.ai.errors import BackendError
from cvtailor.ai.failover import FailoverCaller
from cvtailor.ai.keys import CredentialPool
from cvtailor.ai.types import GenerationConfig
from cvtailor.api.deps import get_failover_caller
from cvtailor.main import app

KEYS = ("AIzaSy-first-key-000000000001", "AIzaSy-second-key-00000000002")

JD = "Python backend engineer with Django, PostgreSQL and Docker. 3+ years experience."
CV = (
    "Jane Doe\n"
    "jane@example.com | +1 555 222 1111\n"
    "Python developer with 4 years experience building Django APIs.\n"
)


async def _no_sleep(_delay):
    return None


class StaticBackend:
    def __init__(self, api_key, reply=None, error=None):
        self.api_key = api_key
        self.reply = reply
        self.error = error

    async def generate(self, prompt, config):
        if self.error is not None:
            raise self.error
        return self.reply


def _caller(factory):
    return FailoverCaller(
        CredentialPool(KEYS),
        factory,
        default_config=GenerationConfig(model="test-model"),
        backoff_s=0,
        timeout_s=5,
        sleep=_no_sleep,
    )


def _quota_caller():
    return _caller(lambda key: StaticBackend(key, error=BackendError("Quota exceeded for project", status=429)))


def _reply_caller(reply):
    return _caller(lambda key: StaticBackend(key, reply=reply))


class ApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def _use(self, caller):
        app.dependency_overrides[get_failover_caller] = lambda: caller
        return caller

    def test_health_reports_key_summary(self):
        self._use(_reply_caller("OK"))
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["apiKeys"]["total"], 2)
        self.assertEqual(body["apiKeys"]["current"], 1)
        self.assertNotIn(KEYS[0], response.text)

    def test_api_status_probes_every_key(self):
        def factory(key):
            if key == KEYS[0]:
                return StaticBackend(key, error=BackendError("API key not valid", status=400))
            return StaticBackend(key, reply="OK")

        self._use(_caller(factory))
        body = self.client.get("/v1/api-status").json()
        self.assertEqual(body["total"], 2)
        self.assertEqual(body["working"], 1)
        self.assertEqual(body["keys"][0]["status"], "failed")
        self.assertEqual(body["keys"][0]["reason"], "invalid_key")
        self.assertEqual(body["keys"][1]["status"], "working")

    def test_api_status_reuses_cached_backends(self):
        built = []

        def factory(key):
            built.append(key)
            return StaticBackend(key, reply="OK")

        caller = self._use(_caller(factory))
        self.client.get("/v1/api-status")
        self.client.get("/v1/api-status")
        self.client.post("/v1/parse-contact", json={"cvText": CV})

        self.assertEqual(built, list(KEYS))
        self.assertIs(caller.backend_for(0), caller.backend_for(0))

    def test_switch_key(self):
        caller = self._use(_reply_caller("OK"))
        body = self.client.post("/v1/switch-key").json()
        self.assertTrue(body["success"])
        self.assertEqual((body["oldKey"], body["newKey"]), (1, 2))
        self.assertEqual(caller.current_index, 1)

    def test_tailor_requires_both_inputs(self):
        self._use(_reply_caller("unused"))
        response = self.client.post("/v1/ai/tailor-cv", json={"cvText": CV})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "missing_input")

    def test_tailor_all_keys_exhausted(self):
        self._use(_quota_caller())
        response = self.client.post("/v1/ai/tailor-cv", json={"jobDescription": JD, "cvText": CV})
        self.assertEqual(response.status_code, 503)
        body = response.json()
        self.assertEqual(body["code"], "all_keys_exhausted")
        self.assertEqual(body["reason"], "quota")
        self.assertIn("suggestion", body)
        self.assertIn("fallback", body)

    def test_tailor_success_uses_camel_case_payload(self):
        self._use(_reply_caller("**Jane Doe**\nPROFESSIONAL SUMMARY\nPython Django PostgreSQL Docker engineer"))
        response = self.client.post("/v1/ai/tailor-cv", json={"jobDescription": JD, "cvText": CV})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertIn("tailoredCV", body)
        analysis = body["analysis"]
        for key in ("matchScore", "keywordsMatched", "totalKeywords", "atsScore", "originalScore", "scoreDelta"):
            self.assertIn(key, analysis)
        self.assertIn("keywordMatch", analysis["atsScore"])

    def test_parse_contact_never_fails_after_validation(self):
        self._use(_quota_caller())
        response = self.client.post("/v1/parse-contact", json={"cvText": CV})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["contact"]["email"], None)

    def test_parse_cv_falls_back_locally_and_rejects_empty(self):
        self._use(_quota_caller())
        response = self.client.post("/v1/parse-cv", json={"cvText": CV})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["cvData"]["email"], "jane@example.com")

        response = self.client.post("/v1/parse-cv", json={"cvText": "CV"})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["code"], "cv_parse_failed")

        response = self.client.post("/v1/parse-cv", json={})
        self.assertEqual(response.status_code, 400)

    def test_ats_score_and_keyword_fallback(self):
        self._use(_quota_caller())
        response = self.client.post("/v1/ats/score", json={"jobDescription": JD, "cvText": CV, "useAi": False})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["mode"], "local")

        response = self.client.post("/v1/ats/keyword-fallback", json={"jobDescription": JD, "cvText": CV})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["mode"], "keyword_fallback")
        self.assertIn("overall", body["atsScore"])
        self.assertIn("Review the tailored content for accuracy", body["recommendations"])


if __name__ == "__main__":
    unittest.main()
