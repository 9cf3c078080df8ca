"""
Input validation utilities for SalesDesk API requests.
"""
import logging
from typing import Dict, Any, List, Tuple, Optional

logger = logging.getLogger(__name__)


def is_missing(value: Any) -> bool:
    """A field is missing when it is absent, null or an empty string."""
    return value is None or value == ''


def validate_json_body(data: Any) -> Tuple[bool, str]:
    """
    Validate that a request body is a JSON object.

    Args:
        data: Parsed request body

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(data, dict):
        return False, "Request body must be a JSON object"
    return True, "Valid body"


def validate_required_fields(data: Dict[str, Any], fields: List[str],
                             message: Optional[str] = None) -> Tuple[bool, str]:
    """
    Validate that required fields are present.

    Args:
        data: Request body
        fields: Names of required fields
        message: Optional error message overriding the generated one

    Returns:
        Tuple of (is_valid, error_message)
    """
    missing = [f for f in fields if is_missing(data.get(f))]
    if missing:
        logger.warning(f"Request rejected, missing fields: {', '.join(missing)}")
        return False, message or f"Missing required fields: {', '.join(missing)}"
    return True, "Valid request"


def validate_object_fields(data: Dict[str, Any], fields: List[str]) -> Tuple[bool, str]:
    """
    Validate that present fields hold JSON objects.

    Args:
        data: Request body
        fields: Names of fields that must be objects when present

    Returns:
        Tuple of (is_valid, error_message)
    """
    invalid = [f for f in fields if not is_missing(data.get(f)) and not isinstance(data.get(f), dict)]
    if invalid:
        return False, f"Fields must be JSON objects: {', '.join(invalid)}"
    return True, "Valid request"


def validate_string_fields(data: Dict[str, Any], fields: List[str]) -> Tuple[bool, str]:
    """Validate that present fields hold strings."""
    invalid = [f for f in fields if not is_missing(data.get(f)) and not isinstance(data.get(f), str)]
    if invalid:
        return False, f"Fields must be strings: {', '.join(invalid)}"
    return True, "Valid request"
