"""Tests for deal context derived from account data."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from salesdesk.models.account import (
    CALL_TYPE_PROGRESSION,
    DealContext,
    collect_pain_points,
    get_stage_label,
    key_stakeholder_names,
    suggest_next_call_type,
)


class TestNextCallType:
    @pytest.mark.parametrize("previous, expected", sorted(CALL_TYPE_PROGRESSION.items()))
    def test_progression_table(self, previous, expected):
        assert suggest_next_call_type(previous) == expected

    def test_known_steps(self):
        assert suggest_next_call_type("intro") == "discovery"
        assert suggest_next_call_type("demo") == "pricing"
        assert suggest_next_call_type("negotiation") == "follow_up"

    @pytest.mark.parametrize("previous", [None, "", "webinar", 42])
    def test_unknown_defaults_to_discovery(self, previous):
        assert suggest_next_call_type(previous) == "discovery"


class TestDealContext:
    def test_from_account(self, account):
        context = DealContext.from_account(account)
        assert context.name == "Acme Residential"
        assert context.stage_label == "Active Pursuit"
        assert context.has_champion is True
        assert context.has_economic_buyer is False
        assert context.has_metrics is True
        assert [g["question"] for g in context.business_gaps] == ["How are budgets approved?"]
        assert [g["question"] for g in context.sales_gaps] == ["Who signs the contract?"]
        assert context.explored_areas == 1

    def test_empty_account(self):
        context = DealContext.from_account({})
        assert context.stage_label == "Unknown"
        assert context.has_champion is False
        assert context.has_metrics is False
        assert context.business_gaps == []
        assert context.last_transcript is None
        assert context.days_since_activity is None

    def test_metrics_without_values(self):
        context = DealContext.from_account({"metrics": {"num_units": {"value": None}, "bad": 5}})
        assert context.has_metrics is False

    def test_gap_without_category_is_business(self):
        context = DealContext.from_account({"informationGaps": [{"question": "Q?"}]})
        assert len(context.business_gaps) == 1
        assert context.sales_gaps == []

    def test_days_since_activity(self):
        account = {"transcripts": [{"addedAt": "2024-03-01T00:00:00Z"}, {"addedAt": "2024-03-05T12:00:00Z"}]}
        now = datetime(2024, 3, 10, 13, 0, tzinfo=timezone.utc)
        assert DealContext.from_account(account, now=now).days_since_activity == 5


def test_stage_label_unknown():
    assert get_stage_label("nope") == "Unknown"


def test_key_stakeholders_and_pain_points(account):
    assert key_stakeholder_names(account) == ["Sarah Lee"]
    assert collect_pain_points(account) == ["Spreadsheets everywhere", "Slow approvals"]
