"""Shared fixtures for SalesDesk tests."""

from __future__ import annotations

import pytest

from salesdesk.application import create_app
from salesdesk.database.edit_store import EditStore


@pytest.fixture
def edits_file(tmp_path):
    """Path of an edit-history file inside a not-yet-created data directory."""
    return tmp_path / "data" / "email_edits.json"


@pytest.fixture
def edit_store(edits_file) -> EditStore:
    return EditStore(str(edits_file), max_edits=100)


@pytest.fixture
def make_app(tmp_path):
    """Factory for a test app; the LLM endpoint defaults to an unreachable URL."""

    def _make(**overrides):
        config = {
            "ANTHROPIC_API_KEY": "test-key",
            "ANTHROPIC_API_URL": "http://127.0.0.1:9",
            "DATA_DIR": str(tmp_path / "data"),
        }
        config.update(overrides)
        return create_app("testing", config)

    return _make


@pytest.fixture
def llm_app(make_app, httpserver):
    """App whose LLM calls go to the local test HTTP server."""
    return make_app(ANTHROPIC_API_URL=httpserver.url_for("").rstrip("/"))


@pytest.fixture
def client(llm_app):
    return llm_app.test_client()


@pytest.fixture
def account() -> dict:
    return {
        "name": "Acme Residential",
        "stage": "active_pursuit",
        "vertical": "Multifamily",
        "stakeholders": [
            {"name": "Sarah Lee", "title": "VP Construction", "role": "Champion"},
            {"name": "Tom Park", "title": "Analyst", "role": "Influencer"},
        ],
        "metrics": {
            "num_properties": {"value": 42},
            "num_units": {"value": None},
        },
        "informationGaps": [
            {"question": "How are budgets approved?", "category": "business", "status": "open"},
            {"question": "Who signs the contract?", "category": "sales", "status": "open"},
            {"question": "Which ERP do they use?", "category": "business", "status": "resolved"},
        ],
        "businessAreas": {
            "budgeting": {"painPoints": ["Spreadsheets everywhere", " "], "currentState": ["Excel"]},
            "invoicing": {"painPoints": ["Slow approvals"], "opportunities": []},
        },
        "meddicc": {"metrics": "Cut invoice cycle time in half", "decisionCriteria": "Yardi integration"},
    }


@pytest.fixture
def transcript() -> dict:
    return {
        "callType": "discovery",
        "date": "2024-03-07",
        "summary": "Walked through their capital planning process.",
        "attendees": ["Sarah Lee (Acme)", "Mike Chen", "James Smith"],
        "text": "Sarah: We track everything in Excel today.",
        "rawAnalysis": {"nextSteps": ["Send Yardi integration overview", "Schedule demo"]},
    }


@pytest.fixture
def llm_reply():
    """Builder for a minimal Messages API success body."""

    def _reply(text: str) -> dict:
        return {
            "id": "msg_test",
            "type": "message",
            "role": "assistant",
            "content": [{"type": "text", "text": text}],
        }

    return _reply
