"""
Route tests through the FastAPI application factory
"""

import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import AsyncMock, Mock, patch

from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from factories import make_settings
from app import create_app
from data.db import SQLiteDocumentStore
from data.document_store import DocumentStore, StoreError
from data.tool_repository import ToolRepository
from jobs.run_jobs import seed_store
from schemas.domain import ToolQuery


class APITestCase(unittest.TestCase):
    """Application over a temporary SQLite store seeded with the built-in dataset"""

    seed = True
    llm_client = None

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.store = SQLiteDocumentStore(os.path.join(self.tmpdir, "api.db"))
        self.repository = ToolRepository(self.store)
        if self.seed:
            seed_store(self.repository)
        self.settings = make_settings()
        self.app = create_app(settings=self.settings, store=self.store, llm_client=self.llm_client)
        self.client = TestClient(self.app)

    def tearDown(self):
        self.store.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)


class TestHealth(APITestCase):
    seed = False

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["service"], "Findora API")
        self.assertTrue(body["timestamp"].endswith("Z"))

    def test_unknown_route_has_error_body(self):
        response = self.client.get("/api/nothing-here")
        self.assertEqual(response.status_code, 404)
        self.assertIn("error", response.json())


class TestToolRoutes(APITestCase):

    def test_list_tools_sorted_and_paged(self):
        response = self.client.get("/api/tools", params={"sort": "rising", "limit": 3})
        self.assertEqual(response.status_code, 200)
        body = response.json()

        self.assertEqual([t["id"] for t in body["tools"]], ["runway", "claude", "suno"])
        self.assertEqual(body["total"], 11)
        self.assertTrue(body["hasMore"])
        self.assertEqual(body["tier"], "primary")
        self.assertIn("freeTier", body["tools"][0]["pricing"])

    def test_store_sort_names_are_accepted(self):
        response = self.client.get("/api/tools", params={"sort": "trending", "limit": 1})
        self.assertEqual(response.json()["tools"][0]["id"], "runway")

    def test_filters(self):
        body = self.client.get("/api/tools", params={"truly_free": "true", "limit": 50}).json()
        self.assertEqual(body["total"], 6)
        self.assertNotIn("runway", [t["id"] for t in body["tools"]])

        body = self.client.get(
            "/api/tools",
            params=[("category", "Audio/Music"), ("category", "3D/Design")],
        ).json()
        self.assertEqual(sorted(t["id"] for t in body["tools"]), ["elevenlabs", "spline-ai", "suno"])

        body = self.client.get("/api/tools", params={"pricing": "paid,trial_only", "limit": 50}).json()
        self.assertEqual(sorted(t["id"] for t in body["tools"]), ["midjourney", "notion-ai", "spline-ai"])

    def test_invalid_parameters_are_rejected(self):
        for params in ({"sort": "popular"}, {"category": "Games"}, {"freshness": "1y"}, {"offset": -1}):
            response = self.client.get("/api/tools", params=params)
            self.assertEqual(response.status_code, 400, params)
            self.assertIn("error", response.json())

    def test_get_tool(self):
        response = self.client.get("/api/tools/claude")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["officialUrl"], "https://claude.ai")

        response = self.client.get("/api/tools/not-a-tool")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Tool not found: not-a-tool"})

    def test_trust_score(self):
        body = self.client.get("/api/tools/claude/trust").json()
        self.assertEqual(body["toolId"], "claude")
        self.assertEqual(body["badge"]["label"], "High Trust")

    def test_compare(self):
        response = self.client.get("/api/tools/compare", params={"ids": "claude,midjourney"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([row["tool"]["id"] for row in body["tools"]], ["claude", "midjourney"])
        self.assertEqual(body["highlights"]["cheapest"], "claude")

        response = self.client.get("/api/tools/compare", params={"ids": "claude"})
        self.assertEqual(response.status_code, 400)

    def test_categories(self):
        body = self.client.get("/api/categories").json()
        counts = {c["name"]: c["count"] for c in body["categories"]}
        self.assertEqual(counts["Audio/Music"], 2)
        self.assertEqual(sum(counts.values()), 11)
        self.assertEqual(body["categories"][0]["count"], 2)

    def test_browse_session_lifecycle(self):
        response = self.client.post("/api/tools/sessions")
        self.assertEqual(response.status_code, 201)
        session_id = response.json()["sessionId"]

        response = self.client.get("/api/tools", headers={"X-Browse-Session": session_id})
        self.assertEqual(response.json()["tier"], "primary")

        self.assertEqual(self.client.delete(f"/api/tools/sessions/{session_id}").status_code, 200)
        response = self.client.get("/api/tools", headers={"X-Browse-Session": session_id})
        self.assertEqual(response.status_code, 404)

    def test_filtered_empty_result_over_stocked_store_stays_primary(self):
        body = self.client.get("/api/tools", params={"category": "Audio/Music", "pricing": "trial_only"}).json()
        self.assertEqual(body["tier"], "primary")
        self.assertEqual(body["total"], 0)

    def test_superseded_request_is_flagged(self):
        session_id = self.client.post("/api/tools/sessions").json()["sessionId"]
        latest = self.client.get("/api/tools", params={"limit": 2}, headers={"X-Browse-Session": session_id}).json()
        self.assertFalse(latest["superseded"])

        session = self.app.state.browse_sessions.get(session_id)
        with patch.object(session, "load", AsyncMock(return_value=None)):
            body = self.client.get(
                "/api/tools", params={"offset": 5}, headers={"X-Browse-Session": session_id}
            ).json()

        self.assertTrue(body["superseded"])
        self.assertEqual([t["id"] for t in body["tools"]], [t["id"] for t in latest["tools"]])

    def test_superseded_request_without_accepted_page_conflicts(self):
        session_id = self.client.post("/api/tools/sessions").json()["sessionId"]
        session = self.app.state.browse_sessions.get(session_id)

        with patch.object(session, "load", AsyncMock(return_value=None)):
            response = self.client.get("/api/tools", headers={"X-Browse-Session": session_id})

        self.assertEqual(response.status_code, 409)
        self.assertIn("error", response.json())


class TestEmptyStore(APITestCase):
    seed = False

    def test_stateless_request_on_empty_store_falls_back(self):
        body = self.client.get("/api/tools").json()
        self.assertEqual(body["tier"], "fallback")
        self.assertEqual(body["total"], 11)
        self.assertFalse(body["superseded"])

    def test_session_falls_back_on_first_empty_load(self):
        session_id = self.client.post("/api/tools/sessions").json()["sessionId"]
        body = self.client.get("/api/tools", headers={"X-Browse-Session": session_id}).json()
        self.assertEqual(body["tier"], "fallback")
        self.assertEqual(body["total"], 11)

    def test_tool_lookup_uses_fallback(self):
        self.assertEqual(self.client.get("/api/tools/chatgpt").json()["id"], "chatgpt")


class TestStoreFailure(unittest.TestCase):

    def setUp(self):
        store = Mock(spec=DocumentStore)
        store.query.side_effect = StoreError("connection refused")
        store.get.side_effect = StoreError("connection refused")
        self.client = TestClient(create_app(settings=make_settings(), store=store))

    def test_listing_and_categories_fall_back(self):
        body = self.client.get("/api/tools", params={"limit": 2}).json()
        self.assertEqual(body["tier"], "fallback")
        self.assertEqual(len(body["tools"]), 2)

        counts = self.client.get("/api/categories").json()["categories"]
        self.assertEqual(sum(c["count"] for c in counts), 11)

    def test_trust_falls_back(self):
        self.assertEqual(self.client.get("/api/tools/suno/trust").json()["overall"], 62)


class TestSearchAndWorkflows(APITestCase):

    def test_task_search_uses_keywords_without_claude(self):
        response = self.client.post("/api/search/tasks", json={"task": "compose music for my video"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["method"], "keyword")
        self.assertIn("suno", body["toolIds"])
        self.assertEqual(len(body["tools"]), len(body["toolIds"]))

    def test_task_search_requires_task(self):
        response = self.client.post("/api/search/tasks", json={"task": ""})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Invalid request")

    def test_suggestions(self):
        self.assertEqual(len(self.client.get("/api/search/suggestions").json()["suggestions"]), 8)

    def test_workflow_requires_goal(self):
        response = self.client.post("/api/workflows/generate", json={})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Goal is required"})

    def test_workflow_disabled_without_claude(self):
        response = self.client.post("/api/workflows/generate", json={"goal": "Start a podcast"})
        self.assertEqual(response.status_code, 503)

    def test_chat_disabled_without_claude(self):
        self.assertEqual(self.client.post("/api/chat/sessions").status_code, 503)


class TestChatRoutes(APITestCase):

    def setUp(self):
        self.llm_client = Mock()
        self.llm_client.messages.create.return_value = Mock(content=[Mock(text="Try Suno for music.")])
        super().setUp()

    def test_conversation(self):
        session_id = self.client.post("/api/chat/sessions").json()["sessionId"]

        response = self.client.post(f"/api/chat/sessions/{session_id}/messages", json={"message": "music?"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            "sessionId": session_id,
            "reply": "Try Suno for music.",
            "conversationLength": 2,
        })

        history = self.client.get(f"/api/chat/sessions/{session_id}").json()["messages"]
        self.assertEqual([m["role"] for m in history], ["user", "assistant"])

        self.assertEqual(self.client.delete(f"/api/chat/sessions/{session_id}").status_code, 200)
        response = self.client.post(f"/api/chat/sessions/{session_id}/messages", json={"message": "again"})
        self.assertEqual(response.status_code, 404)

    def test_workflow_generation(self):
        self.llm_client.messages.create.return_value = Mock(content=[Mock(
            text='{"steps": [{"stepNumber": 1, "name": "Record"}], "estimatedTime": "2 hours", "totalCost": "$0"}'
        )])
        response = self.client.post("/api/workflows/generate", json={"goal": "Start a podcast"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["workflow"]["steps"][0]["name"], "Record")


class TestAdminRoutes(APITestCase):

    def test_queue_analysis_and_read_job(self):
        response = self.client.post("/api/admin/analyze", json={"url": "https://newtool.ai", "toolName": "NewTool"})
        self.assertEqual(response.status_code, 202)
        body = response.json()
        self.assertEqual(body["status"], "queued")

        job = self.client.get(f"/api/admin/jobs/{body['jobId']}").json()
        self.assertEqual(job["status"], "pending")
        self.assertEqual(job["toolName"], "NewTool")

        self.assertEqual(self.client.get("/api/admin/jobs/missing").status_code, 404)

    def test_rejects_non_http_urls(self):
        response = self.client.post("/api/admin/analyze", json={"url": "ftp://files.example"})
        self.assertEqual(response.status_code, 400)

    def test_admin_key_enforced_when_configured(self):
        self.settings.ADMIN_API_KEY = "s3cret"

        response = self.client.post("/api/admin/analyze", json={"url": "https://newtool.ai"})
        self.assertEqual(response.status_code, 401)

        response = self.client.post(
            "/api/admin/analyze",
            json={"url": "https://newtool.ai"},
            headers={"X-Admin-Key": "s3cret"},
        )
        self.assertEqual(response.status_code, 202)



class TestErrorHandling(APITestCase):
    seed = False

    def test_unhandled_errors_get_error_body(self):
        def bad_input():
            raise ValueError("limit must be a number")

        def upstream_down():
            raise ConnectionError("reddit unreachable")

        def crash():
            raise RuntimeError("unexpected")

        def broken_model():
            ToolQuery(limit="many")

        self.app.add_api_route("/boom/value", bad_input)
        self.app.add_api_route("/boom/connection", upstream_down)
        self.app.add_api_route("/boom/crash", crash)
        self.app.add_api_route("/boom/model", broken_model)
        client = TestClient(self.app, raise_server_exceptions=False)

        response = client.get("/boom/value")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"], "limit must be a number")

        self.assertEqual(client.get("/boom/connection").status_code, 503)

        response = client.get("/boom/crash")
        self.assertEqual(response.status_code, 500)
        self.assertIn("error", response.json())

        response = client.get("/boom/model")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "Internal server error")


if __name__ == '__main__':
    unittest.main()
