"""
LLM request configuration for SalesDesk generation endpoints.
Each generation kind has a fixed token budget. Agendas and follow-up emails run
at temperature 0; the other kinds leave sampling at the provider default.
"""

import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


class GenerationConfig:
    """Per-generation request parameters."""

    # Deterministic output for consistency
    TEMPERATURE = 0

    # Kinds sent at TEMPERATURE; the rest use the provider default
    DETERMINISTIC_KINDS = ('agenda', 'follow_up')

    MAX_TOKENS = {
        'agenda': 2000,
        'follow_up': 1500,
        'transcript_analysis': 8000,
        'next_actions': 1000,
        'coaching_feedback': 1500,
        'business_case': 8000,
        'account_assistant': 2000,
    }

    DEFAULT_MAX_TOKENS = 4000

    @classmethod
    def get_max_tokens(cls, kind: str) -> int:
        """
        Get the token budget for a generation kind.

        Args:
            kind: Generation kind (e.g. 'agenda', 'follow_up')

        Returns:
            Maximum tokens for the response
        """
        return cls.MAX_TOKENS.get(kind, cls.DEFAULT_MAX_TOKENS)

    @classmethod
    def get_temperature(cls, kind: str) -> Optional[float]:
        """Temperature for a generation kind, None to omit it from the request."""
        return cls.TEMPERATURE if kind in cls.DETERMINISTIC_KINDS else None

    @classmethod
    def get_request_params(cls, kind: str) -> Dict[str, Any]:
        """Get request parameters for a generation kind."""
        return {
            'max_tokens': cls.get_max_tokens(kind),
            'temperature': cls.get_temperature(kind),
        }


def validate_configuration() -> bool:
    """Validate the token budgets."""
    for kind, max_tokens in GenerationConfig.MAX_TOKENS.items():
        if max_tokens <= 0:
            logger.error(f"Invalid token budget for {kind}: {max_tokens}")
            return False
    return True


if not validate_configuration():
    logger.warning("Generation configuration contains invalid token budgets")
