"""End-to-end tests for the HTTP API."""

from __future__ import annotations

import json

import pytest

EMAIL = "Subject: Banner Follow Up - 3/7\n\nHi Sarah and Mike,\n\nThanks for the time.\n\nJames"


def _sent_body(httpserver, index=0):
    request, _ = httpserver.log[index]
    return json.loads(request.data)


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.get_json() == {"success": True, "status": "ok", "apiKeyConfigured": True}

    def test_health_without_key(self, make_app):
        response = make_app(ANTHROPIC_API_KEY=None).test_client().get("/api/health")
        assert response.get_json()["apiKeyConfigured"] is False

    def test_base_path(self, make_app):
        client = make_app(BASE_PATH="/salesdesk").test_client()
        assert client.get("/salesdesk/api/health").status_code == 200
        assert client.get("/api/health").status_code == 404

    def test_wrong_method_is_json(self, client):
        response = client.get("/api/generate-agenda")
        assert response.status_code == 405
        assert response.get_json()["success"] is False


class TestGenerateAgenda:
    def test_success(self, client, httpserver, llm_reply, transcript, account):
        httpserver.expect_request("/v1/messages", method="POST").respond_with_json(llm_reply("## Agenda"))

        response = client.post("/api/generate-agenda", json={"transcript": transcript, "account": account})

        assert response.status_code == 200
        assert response.get_json() == {"success": True, "content": "## Agenda"}
        request, _ = httpserver.log[0]
        assert request.headers["x-api-key"] == "test-key"
        body = _sent_body(httpserver)
        assert body["model"] == "claude-sonnet-4-20250514"
        assert body["max_tokens"] == 2000
        assert body["temperature"] == 0
        assert "Suggested Next Call Type: demo" in body["messages"][0]["content"]

    @pytest.mark.parametrize("payload", [{}, {"transcript": {"callType": "demo"}}, {"account": {}}])
    def test_missing_fields(self, client, httpserver, payload):
        response = client.post("/api/generate-agenda", json=payload)
        assert response.status_code == 400
        assert response.get_json() == {"success": False, "error": "Transcript and account are required"}
        assert len(httpserver.log) == 0

    def test_non_json_body(self, client):
        response = client.post("/api/generate-agenda", data="hello", content_type="text/plain")
        assert response.status_code == 400

    def test_missing_key(self, make_app, transcript, account):
        client = make_app(ANTHROPIC_API_KEY=None).test_client()
        response = client.post("/api/generate-agenda", json={"transcript": transcript, "account": account})
        assert response.status_code == 500
        assert response.get_json() == {"success": False, "error": "API key not configured"}

    def test_upstream_status_passed_through(self, client, httpserver, transcript, account):
        httpserver.expect_request("/v1/messages").respond_with_json(
            {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}, status=429
        )
        response = client.post("/api/generate-agenda", json={"transcript": transcript, "account": account})
        assert response.status_code == 429
        assert response.get_json() == {"success": False, "error": "Overloaded"}

    def test_unreachable_provider(self, make_app, transcript, account):
        client = make_app().test_client()
        response = client.post("/api/generate-agenda", json={"transcript": transcript, "account": account})
        assert response.status_code == 500
        assert response.get_json() == {"success": False, "error": "Failed to generate meeting agenda"}


class TestFollowUpLearning:
    def test_follow_up_without_history(self, client, httpserver, llm_reply, transcript):
        httpserver.expect_request("/v1/messages").respond_with_json(llm_reply(EMAIL))

        response = client.post("/api/generate-follow-up", json={"transcript": transcript})

        assert response.get_json() == {"success": True, "content": EMAIL}
        body = _sent_body(httpserver)
        assert body["max_tokens"] == 1500
        assert "USER STYLE PREFERENCES" not in body["system"]

    def test_follow_up_requires_transcript(self, client):
        response = client.post("/api/generate-follow-up", json={"account": {}})
        assert response.status_code == 400
        assert response.get_json()["error"] == "Transcript is required"

    def test_saved_edit_shapes_next_follow_up(self, client, httpserver, llm_reply, transcript, edits_file):
        edited = EMAIL.replace("Hi Sarah and Mike,", "Hi team,")
        response = client.post("/api/save-email-edit", json={
            "original": EMAIL,
            "edited": edited,
            "transcriptId": "t1",
            "accountName": "Acme Residential",
            "callType": "discovery",
        })
        assert response.get_json() == {
            "success": True,
            "message": "Email edit saved for learning",
            "patternsDetected": 1,
        }
        stored = json.loads(edits_file.read_text())
        assert stored[0]["accountName"] == "Acme Residential"

        httpserver.expect_request("/v1/messages").respond_with_json(llm_reply("ok"))
        client.post("/api/generate-follow-up", json={"transcript": transcript})

        system = _sent_body(httpserver)["system"]
        assert 'Greeting style:\n- User changed "Hi Sarah and Mike," to "Hi team,"' in system
        assert "Example 1 (discovery call):\n" + edited in system


class TestEmailPatterns:
    def test_empty(self, client):
        response = client.get("/api/get-email-patterns")
        assert response.get_json() == {
            "success": True,
            "hasPatterns": False,
            "totalEdits": 0,
            "styleGuide": "",
            "patterns": None,
        }

    def test_after_edits(self, client):
        client.post("/api/save-email-edit", json={"original": "a" * 100, "edited": "a" * 50})
        data = client.get("/api/get-email-patterns").get_json()
        assert data["hasPatterns"] is True
        assert data["totalEdits"] == 1
        assert data["patterns"]["lengthPreference"] == "shorter"

    @pytest.mark.parametrize("payload", [{}, {"original": "x"}, {"original": "", "edited": "y"}])
    def test_save_requires_both_texts(self, client, payload):
        response = client.post("/api/save-email-edit", json=payload)
        assert response.status_code == 400
        assert response.get_json() == {"success": False, "error": "Original and edited content required"}


class TestAnalyzeTranscript:
    def test_fenced_json(self, client, httpserver, llm_reply):
        reply = '```json\n{"summary": "Good call", "nextSteps": []}\n```'
        httpserver.expect_request("/v1/messages").respond_with_json(llm_reply(reply))

        response = client.post("/api/analyze-transcript", json={"transcript": "Hi there"})

        assert response.get_json() == {"success": True, "analysis": {"summary": "Good call", "nextSteps": []}}
        body = _sent_body(httpserver)
        assert body["max_tokens"] == 8000
        assert "temperature" not in body

    def test_unparseable_reply(self, client, httpserver, llm_reply):
        httpserver.expect_request("/v1/messages").respond_with_json(llm_reply("Sorry, no JSON"))

        response = client.post("/api/analyze-transcript", json={"transcript": "Hi there"})

        assert response.get_json() == {
            "success": False,
            "parseError": True,
            "rawAnalysis": "Sorry, no JSON",
            "analysis": None,
        }

    def test_upstream_error_prefix(self, client, httpserver):
        httpserver.expect_request("/v1/messages").respond_with_data("", status=502)
        response = client.post("/api/analyze-transcript", json={"transcript": "Hi there"})
        assert response.status_code == 502
        assert response.get_json()["error"] == "Anthropic API error: 502"

    def test_missing_key_message(self, make_app):
        client = make_app(ANTHROPIC_API_KEY=None).test_client()
        response = client.post("/api/analyze-transcript", json={"transcript": "Hi there"})
        assert response.status_code == 500
        assert response.get_json() == {
            "success": False,
            "error": "API key not configured. Please check your API key.",
        }

    def test_transcript_must_be_text(self, client):
        response = client.post("/api/analyze-transcript", json={"transcript": {"text": "x"}})
        assert response.status_code == 400


class TestNextActions:
    def test_actions(self, client, httpserver, llm_reply, account):
        actions = [{"action": "Book demo", "reason": "Momentum", "priority": "high", "category": "follow_up"}]
        httpserver.expect_request("/v1/messages").respond_with_json(llm_reply(json.dumps(actions)))

        response = client.post("/api/generate-next-actions", json={"account": account})

        assert response.get_json() == {"success": True, "actions": actions}
        assert _sent_body(httpserver)["max_tokens"] == 1000

    def test_unparseable_reply_is_empty_list(self, client, httpserver, llm_reply, account):
        httpserver.expect_request("/v1/messages").respond_with_json(llm_reply("Call them tomorrow."))
        response = client.post("/api/generate-next-actions", json={"account": account})
        assert response.get_json() == {"success": True, "actions": []}

    def test_requires_account(self, client):
        response = client.post("/api/generate-next-actions", json={})
        assert response.get_json() == {"success": False, "error": "Account data is required"}


class TestCoachingFeedback:
    def test_feedback(self, client, httpserver, llm_reply, transcript, account):
        httpserver.expect_request("/v1/messages").respond_with_json(llm_reply("**Multi-thread**"))
        response = client.post(
            "/api/generate-coaching-feedback", json={"transcript": transcript, "account": account}
        )
        assert response.get_json() == {"success": True, "content": "**Multi-thread**"}

    def test_unreachable_provider(self, make_app, transcript, account):
        response = make_app().test_client().post(
            "/api/generate-coaching-feedback", json={"transcript": transcript, "account": account}
        )
        assert response.status_code == 500
        assert response.get_json()["error"] == "Failed to generate feedback"


class TestBusinessCase:
    def test_business_case(self, client, httpserver, llm_reply, account):
        httpserver.expect_request("/v1/messages").respond_with_json(llm_reply("# CapEx Process Evaluation"))

        response = client.post("/api/generate-business-case", json={"account": account})

        assert response.get_json() == {"success": True, "content": "# CapEx Process Evaluation"}
        body = _sent_body(httpserver)
        assert body["max_tokens"] == 8000
        assert "temperature" not in body
        assert "Create a CapEx Process Evaluation for Acme Residential." in body["messages"][0]["content"]

    def test_requires_account(self, client, httpserver):
        response = client.post("/api/generate-business-case", json={})
        assert response.status_code == 400
        assert response.get_json() == {"success": False, "error": "Account data is required"}
        assert len(httpserver.log) == 0

    def test_unreachable_provider(self, make_app, account):
        response = make_app().test_client().post("/api/generate-business-case", json={"account": account})
        assert response.status_code == 500
        assert response.get_json()["error"] == "Failed to generate business case"


class TestAccountAssistant:
    def test_structured_reply(self, client, httpserver, llm_reply, account):
        reply = {
            "response": "Should I mark Tom as Economic Buyer?",
            "actions": [{"type": "update_stakeholder_role", "name": "Tom Park", "newRole": "Economic Buyer"}],
            "needsConfirmation": True,
            "confirmationQuestion": "Update Tom's role?",
        }
        httpserver.expect_request("/v1/messages").respond_with_json(
            llm_reply("```json\n" + json.dumps(reply) + "\n```")
        )

        response = client.post("/api/account-assistant", json={
            "message": "Tom controls the budget",
            "account": account,
            "context": {"activeTab": "stakeholders"},
        })

        assert response.get_json() == {"success": True, **reply}
        body = _sent_body(httpserver)
        assert body["max_tokens"] == 2000
        assert body["messages"] == [{"role": "user", "content": "Tom controls the budget"}]
        assert "CURRENT TAB: stakeholders" in body["system"]

    def test_plain_text_reply(self, client, httpserver, llm_reply, account):
        httpserver.expect_request("/v1/messages").respond_with_json(llm_reply("Sarah is the champion."))

        response = client.post("/api/account-assistant", json={"message": "Who?", "account": account})

        assert response.get_json() == {
            "success": True,
            "response": "Sarah is the champion.",
            "actions": [],
            "needsConfirmation": False,
        }

    @pytest.mark.parametrize("payload", [{"message": "hi"}, {"account": {"name": "Acme"}}, {"message": 5, "account": {}}])
    def test_requires_message_and_account(self, client, httpserver, payload):
        response = client.post("/api/account-assistant", json=payload)
        assert response.status_code == 400
        assert response.get_json() == {"success": False, "error": "Message and account data are required"}
        assert len(httpserver.log) == 0

    def test_upstream_error(self, client, httpserver, account):
        httpserver.expect_request("/v1/messages").respond_with_data("", status=500)
        response = client.post("/api/account-assistant", json={"message": "hi", "account": account})
        assert response.status_code == 500
        assert response.get_json()["error"] == "API error: 500"
