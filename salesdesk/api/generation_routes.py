"""
Generation API routes for SalesDesk.
"""
import logging
from typing import Optional

from flask import Blueprint, request, jsonify

from salesdesk.ai.llm_client import LLMConfigurationError, LLMUpstreamError
from salesdesk.services.generation_service import GenerationService
from salesdesk.utils.validators import (
    validate_json_body,
    validate_object_fields,
    validate_required_fields,
    validate_string_fields,
)

logger = logging.getLogger(__name__)

ANALYSIS_CONFIG_ERROR = 'API key not configured. Please check your API key.'


def _error(message: str, status: int):
    return jsonify({'success': False, 'error': message}), status


def _read_body(required, message, object_fields=()):
    """
    Parse and validate a JSON request body.

    Returns:
        Tuple of (data, error_response); exactly one of them is None
    """
    data = request.get_json(silent=True)
    is_valid, error = validate_json_body(data)
    if not is_valid:
        return None, _error(message, 400)

    is_valid, error = validate_required_fields(data, required, message)
    if not is_valid:
        return None, _error(error, 400)

    is_valid, error = validate_object_fields(data, list(object_fields))
    if not is_valid:
        return None, _error(error, 400)

    return data, None


def _llm_failure(e: Exception, label: str, fallback_message: str, config_message: Optional[str] = None):
    """Translate a generation failure into a JSON error response."""
    if isinstance(e, LLMConfigurationError):
        logger.error(f"{label}: {e}")
        return _error(config_message or str(e), 500)
    if isinstance(e, LLMUpstreamError):
        logger.error(f"{label}: upstream returned {e.status_code}: {e.message}")
        return _error(e.message, e.status_code)
    logger.error(f"Error {label}: {e}", exc_info=True)
    return _error(fallback_message, 500)


def create_generation_blueprint(base_path: str, generation_service: GenerationService) -> Blueprint:
    """
    Create generation blueprint with routes.

    Args:
        base_path: Base path for routes (e.g. '' or '/salesdesk')
        generation_service: Generation service instance

    Returns:
        Flask Blueprint
    """
    generation_bp = Blueprint('generation', __name__)

    @generation_bp.route(f'{base_path}/api/generate-agenda', methods=['POST'])
    def generate_agenda():
        """Generate an agenda for the next meeting with an account."""
        data, error = _read_body(
            ['transcript', 'account'], 'Transcript and account are required',
            object_fields=('transcript', 'account')
        )
        if error:
            return error

        try:
            content = generation_service.generate_agenda(data['transcript'], data['account'])
            return jsonify({'success': True, 'content': content})
        except Exception as e:
            return _llm_failure(e, 'generating agenda', 'Failed to generate meeting agenda')

    @generation_bp.route(f'{base_path}/api/generate-follow-up', methods=['POST'])
    def generate_follow_up():
        """Generate a follow-up email for a call."""
        data, error = _read_body(
            ['transcript'], 'Transcript is required', object_fields=('transcript', 'account')
        )
        if error:
            return error

        try:
            content = generation_service.generate_follow_up(data['transcript'], data.get('account'))
            return jsonify({'success': True, 'content': content})
        except Exception as e:
            return _llm_failure(e, 'generating follow-up email', 'Failed to generate follow-up email')

    @generation_bp.route(f'{base_path}/api/analyze-transcript', methods=['POST'])
    def analyze_transcript():
        """Extract structured account data from a call transcript."""
        data, error = _read_body(['transcript'], 'Transcript is required')
        if error:
            return error

        is_valid, _ = validate_string_fields(data, ['transcript'])
        if not is_valid:
            return _error('Transcript is required', 400)

        existing_context = data.get('existingContext')
        if not isinstance(existing_context, dict):
            existing_context = {}

        try:
            result = generation_service.analyze_transcript(data['transcript'], existing_context)
            return jsonify(result)
        except Exception as e:
            return _llm_failure(
                e, 'analyzing transcript', 'Failed to process transcript',
                config_message=ANALYSIS_CONFIG_ERROR
            )

    @generation_bp.route(f'{base_path}/api/generate-next-actions', methods=['POST'])
    def generate_next_actions():
        """Generate prioritized next actions for an account."""
        data, error = _read_body(['account'], 'Account data is required', object_fields=('account',))
        if error:
            return error

        try:
            actions = generation_service.generate_next_actions(data['account'])
            return jsonify({'success': True, 'actions': actions})
        except Exception as e:
            return _llm_failure(e, 'generating next actions', 'Failed to generate next actions')

    @generation_bp.route(f'{base_path}/api/generate-coaching-feedback', methods=['POST'])
    def generate_coaching_feedback():
        """Generate coaching feedback for a recorded call."""
        data, error = _read_body(
            ['transcript', 'account'], 'Missing required fields: transcript, account',
            object_fields=('transcript', 'account')
        )
        if error:
            return error

        try:
            content = generation_service.generate_coaching_feedback(data['transcript'], data['account'])
            return jsonify({'success': True, 'content': content})
        except Exception as e:
            return _llm_failure(e, 'generating coaching feedback', 'Failed to generate feedback')

    @generation_bp.route(f'{base_path}/api/generate-business-case', methods=['POST'])
    def generate_business_case():
        """Generate a CapEx process evaluation for an account."""
        data, error = _read_body(['account'], 'Account data is required', object_fields=('account',))
        if error:
            return error

        try:
            content = generation_service.generate_business_case(data['account'])
            return jsonify({'success': True, 'content': content})
        except Exception as e:
            return _llm_failure(e, 'generating business case', 'Failed to generate business case')

    @generation_bp.route(f'{base_path}/api/account-assistant', methods=['POST'])
    def account_assistant():
        """Answer a question about an account or suggest account updates."""
        message = 'Message and account data are required'
        data, error = _read_body(['message', 'account'], message, object_fields=('account', 'context'))
        if error:
            return error

        is_valid, _ = validate_string_fields(data, ['message'])
        if not is_valid:
            return _error(message, 400)

        try:
            result = generation_service.ask_account_assistant(
                data['message'], data['account'], data.get('context')
            )
            return jsonify({'success': True, **result})
        except Exception as e:
            return _llm_failure(e, 'calling account assistant', 'Failed to process request')

    return generation_bp
