"""
Email feedback API routes for SalesDesk.
"""
import logging
from flask import Blueprint, request, jsonify

from salesdesk.services.feedback_service import FeedbackService
from salesdesk.utils.validators import validate_json_body, validate_required_fields, validate_string_fields

logger = logging.getLogger(__name__)


def create_feedback_blueprint(base_path: str, feedback_service: FeedbackService) -> Blueprint:
    """
    Create email feedback blueprint with routes.

    Args:
        base_path: Base path for routes
        feedback_service: Feedback service instance

    Returns:
        Flask Blueprint
    """
    feedback_bp = Blueprint('feedback', __name__)

    @feedback_bp.route(f'{base_path}/api/save-email-edit', methods=['POST'])
    def save_email_edit():
        """Record a user's edit of a generated email."""
        data = request.get_json(silent=True)
        message = 'Original and edited content required'

        is_valid, _ = validate_json_body(data)
        if is_valid:
            is_valid, _ = validate_required_fields(data, ['original', 'edited'])
        if is_valid:
            is_valid, _ = validate_string_fields(data, ['original', 'edited'])
        if not is_valid:
            return jsonify({'success': False, 'error': message}), 400

        try:
            record = feedback_service.save_email_edit(
                original=data['original'],
                edited=data['edited'],
                transcript_id=data.get('transcriptId'),
                account_id=data.get('accountId'),
                account_name=data.get('accountName'),
                call_type=data.get('callType'),
                timestamp=data.get('timestamp'),
            )
            return jsonify({
                'success': True,
                'message': 'Email edit saved for learning',
                'patternsDetected': len(record.patterns),
            })
        except Exception as e:
            logger.error(f"Error saving email edit: {e}", exc_info=True)
            return jsonify({'success': False, 'error': 'Failed to save email edit'}), 500

    @feedback_bp.route(f'{base_path}/api/get-email-patterns', methods=['GET'])
    def get_email_patterns():
        """Return style preferences learned from previous edits."""
        try:
            summary = feedback_service.get_email_patterns()
            return jsonify({'success': True, **summary})
        except Exception as e:
            logger.error(f"Error getting email patterns: {e}", exc_info=True)
            return jsonify({'success': False, 'error': 'Failed to get email patterns'}), 500

    return feedback_bp
