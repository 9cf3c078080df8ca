"""
Utility helper functions for SalesDesk.
"""
import json
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

_PARSE_FAILED = object()


def strip_code_fences(raw_text: str) -> str:
    """
    Extract the body of the first markdown code block, if any.

    Args:
        raw_text: LLM reply text

    Returns:
        Text inside the first ```json (or bare ```) block, else the input unchanged
    """
    if '```json' in raw_text:
        return raw_text.split('```json')[1].split('```')[0].strip()
    if '```' in raw_text:
        return raw_text.split('```')[1].split('```')[0].strip()
    return raw_text


def parse_llm_json(raw_text: str, fallback: Any = _PARSE_FAILED) -> Any:
    """
    Parse JSON from an LLM reply, tolerating markdown code fences.

    Args:
        raw_text: LLM reply text
        fallback: Value returned when parsing fails; when omitted the error is raised

    Returns:
        Parsed JSON value, or the fallback

    Raises:
        ValueError: The reply is not valid JSON and no fallback was given
    """
    try:
        return json.loads(strip_code_fences(raw_text or ''))
    except ValueError as e:
        if fallback is _PARSE_FAILED:
            raise
        logger.warning(f"Could not parse JSON from LLM reply: {e}")
        return fallback


def truncate_text(text: Optional[str], max_length: int = 80) -> str:
    """Shorten text for log messages."""
    if not text:
        return ''
    text = ' '.join(text.split())
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + '...'
