"""Tests for per-generation request parameters."""

from __future__ import annotations

import pytest

from salesdesk.config.llm_config import GenerationConfig


@pytest.mark.parametrize("kind", ["agenda", "follow_up"])
def test_deterministic_kinds(kind):
    assert GenerationConfig.get_request_params(kind)["temperature"] == 0


@pytest.mark.parametrize(
    "kind",
    ["transcript_analysis", "next_actions", "coaching_feedback", "business_case", "account_assistant"],
)
def test_other_kinds_use_provider_default(kind):
    assert GenerationConfig.get_request_params(kind)["temperature"] is None


def test_token_budgets():
    assert GenerationConfig.get_max_tokens("business_case") == 8000
    assert GenerationConfig.get_max_tokens("account_assistant") == 2000
    assert GenerationConfig.get_max_tokens("unknown") == GenerationConfig.DEFAULT_MAX_TOKENS
