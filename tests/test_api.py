"""
Tests for the DocPilot HTTP API.

Runs the FastAPI app in-process with an in-memory document store.
"""
import asyncio

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from api.main import create_app
from api.routes.documents import edit_section, publish_document
from api.schemas.requests import SectionEditRequest
from api.workspace import get_workspace
from docpilot.config import Settings
from docpilot.models import DocumentType
from docpilot.storage import InMemoryDocumentStore


FAQ_ANSWERS = {"app-purpose": "Cal AI counts calories from photos.", "is-free": True}


@pytest.fixture
def client():
    app = create_app(Settings(log_level="WARNING"), InMemoryDocumentStore())
    with TestClient(app) as c:
        yield c


def _start(client, document_type="faq", **body):
    response = client.post("/interviews", json={"document_type": document_type, **body})
    assert response.status_code == 201, response.text
    return response.json()


def _generate_faq(client):
    interview = _start(client, answers=FAQ_ANSWERS)
    response = client.post(f"/interviews/{interview['interview_id']}/advance")
    assert response.json()["outcome"] == "completed"
    return response.json()


class TestTemplates:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["healthy"] is True
        assert body["templates_loaded"] == 3

    def test_list_templates(self, client):
        templates = client.get("/templates").json()
        assert [t["type"] for t in templates] == ["privacy-policy", "terms-of-service", "faq"]
        assert all(t["status"] == "not_created" for t in templates)

    def test_template_detail(self, client):
        detail = client.get("/templates/privacy-policy").json()
        assert detail["steps"][0]["id"] == "app-classification"
        livestream = detail["steps"][0]["questions"][1]
        assert livestream["depends_on"] == {"question_id": "has-ugc", "value": True}

    def test_unknown_template(self, client):
        response = client.get("/templates/cookie-policy")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "DP_TEMPLATE_NOT_FOUND"


class TestInterviews:
    def test_start_uses_identity_overrides(self, client):
        interview = _start(client, app_name="Snap Calories")
        assert interview["status"] == "active"
        assert interview["step_index"] == 0
        assert interview["visible_question_ids"] == ["app-purpose", "is-free"]

    def test_visibility_follows_answers(self, client):
        interview = _start(client, "privacy-policy")
        url = f"/interviews/{interview['interview_id']}/answers"
        state = client.post(url, json={"question_id": "has-ugc", "value": True}).json()
        assert "has-livestream" in state["visible_question_ids"]
        state = client.post(url, json={"question_id": "has-ugc", "value": False}).json()
        assert "has-livestream" not in state["visible_question_ids"]

    def test_advance_blocked(self, client):
        interview = _start(client)
        body = client.post(f"/interviews/{interview['interview_id']}/advance").json()
        assert body["outcome"] == "blocked"
        assert body["missing"] == ["app-purpose", "is-free"]

    def test_complete_opens_document(self, client):
        body = _generate_faq(client)
        assert body["interview"]["status"] == "completed"
        assert body["document"]["title"] == "Cal AI FAQ"
        state = client.get("/documents/faq").json()
        assert state["status"] == "draft"
        assert state["has_unsaved_changes"] is False
        assert len(state["messages"]) == 1

    def test_invalid_answer(self, client):
        interview = _start(client, "privacy-policy")
        response = client.post(
            f"/interviews/{interview['interview_id']}/answers",
            json={"question_id": "age-rating", "value": "21+"},
        )
        assert response.status_code == 422

    def test_retreat_cancels_then_closed(self, client):
        interview = _start(client)
        body = client.post(f"/interviews/{interview['interview_id']}/retreat").json()
        assert body["outcome"] == "cancelled"
        response = client.post(
            f"/interviews/{interview['interview_id']}/answers",
            json={"question_id": "is-free", "value": True},
        )
        assert response.status_code == 409

    def test_unknown_interview(self, client):
        assert client.get("/interviews/nope").status_code == 404


class TestDocuments:
    def test_not_generated(self, client):
        response = client.get("/documents/privacy-policy")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "DP_DOCUMENT_NOT_FOUND"

    def test_propose_apply_save_publish(self, client):
        _generate_faq(client)

        state = client.post("/documents/faq/propose", json={"instruction": "Make this stricter for Apple review"}).json()
        diff = state["pending_diff"]
        assert diff["section_id"] == "what-is"
        assert state["can_propose"] is False

        response = client.post("/documents/faq/propose", json={"instruction": "more detail"})
        assert response.status_code == 409

        state = client.post("/documents/faq/apply", json={"diff_id": diff["id"]}).json()
        assert state["pending_diff"] is None
        assert state["has_unsaved_changes"] is True
        what_is = next(s for s in state["document"]["sections"] if s["id"] == "what-is")
        assert what_is["content"] == diff["new_content"]

        response = client.post("/documents/faq/publish")
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "DP_UNSAVED_CHANGES"

        saved = client.post("/documents/faq/save").json()
        assert saved["status"] == "draft"
        published = client.post("/documents/faq/publish").json()
        assert published["status"] == "ready"

        statuses = {t["type"]: t["status"] for t in client.get("/templates").json()}
        assert statuses["faq"] == "ready"

    def test_dismiss(self, client):
        _generate_faq(client)
        client.post("/documents/faq/propose", json={"instruction": "simplify"})
        state = client.post("/documents/faq/dismiss", json={}).json()
        assert state["pending_diff"] is None
        assert state["has_unsaved_changes"] is False
        assert state["messages"][-1]["diff"]["status"] == "dismissed"

    def test_clarification(self, client):
        _generate_faq(client)
        state = client.post("/documents/faq/propose", json={"instruction": "add cookies"}).json()
        assert state["pending_diff"] is None
        assert state["messages"][-1]["role"] == "assistant"

    def test_empty_instruction_rejected(self, client):
        _generate_faq(client)
        assert client.post("/documents/faq/propose", json={"instruction": ""}).status_code == 422

    def test_edit_and_select_section(self, client):
        _generate_faq(client)
        state = client.put("/documents/faq/sections/contact", json={"content": "Write to us."}).json()
        contact = next(s for s in state["document"]["sections"] if s["id"] == "contact")
        assert contact["content"] == "Write to us."
        assert client.put("/documents/faq/sections/cookies", json={"content": "x"}).status_code == 404
        state = client.post("/documents/faq/select", json={"section_id": "contact"}).json()
        assert state["selected_section_id"] == "contact"

    def test_reset(self, client):
        _generate_faq(client)
        client.post("/documents/faq/propose", json={"instruction": "stricter"})
        state = client.post("/documents/faq/reset").json()
        assert len(state["messages"]) == 1
        assert state["can_propose"] is True

    def test_markdown(self, client):
        _generate_faq(client)
        response = client.get("/documents/faq/markdown")
        assert response.status_code == 200
        assert response.text.startswith("# Cal AI FAQ")
        assert "Not Legal Advice" in response.text

    def test_conflicts(self, client):
        _generate_faq(client)
        response = client.post(
            "/documents/faq/conflicts",
            json={"answers": {"app-purpose": "Cal AI tracks workouts.", "is-free": True}},
        )
        conflicts = response.json()
        assert [(c["section_id"], c["schema_key"]) for c in conflicts] == [
            ("what-is", "custom_answers.app_purpose"),
        ]


class TestDocumentLock:
    def test_publish_sees_edit_queued_ahead_of_it(self, client):
        _generate_faq(client)
        assert client.post("/documents/faq/save").status_code == 200

        async def scenario():
            workspace = get_workspace()
            lock = workspace.locks[DocumentType.FAQ] = asyncio.Lock()
            await lock.acquire()
            edit = asyncio.create_task(
                edit_section("faq", "contact", SectionEditRequest(content="Write to us."))
            )
            publish = asyncio.create_task(publish_document("faq"))
            await asyncio.sleep(0)
            lock.release()
            await edit
            with pytest.raises(HTTPException) as excinfo:
                await publish
            return excinfo.value

        error = asyncio.run(scenario())
        assert error.status_code == 409
        assert error.detail["code"] == "DP_UNSAVED_CHANGES"
        assert client.get("/templates").json()[2]["status"] == "draft"
