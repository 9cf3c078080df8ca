"""
Application factory for SalesDesk.
Builds the Flask app, wires services and registers every API blueprint.
"""
import logging
from typing import Optional, Dict, Any

from flask import Flask, jsonify

from salesdesk.ai.llm_client import initialize_ai_client
from salesdesk.api import register_all_routes
from salesdesk.config.settings import setup_flask_config
from salesdesk.database.edit_store import EditStore
from salesdesk.services.feedback_service import FeedbackService
from salesdesk.services.generation_service import GenerationService

logger = logging.getLogger(__name__)


def initialize_services(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Initialize all services and dependencies.

    Args:
        config: Flask config mapping

    Returns:
        Dictionary of service instances keyed by name
    """
    services = {}

    services['llm_client'] = initialize_ai_client(config)

    edit_store = EditStore(config['EMAIL_EDITS_FILE'], max_edits=config['MAX_STORED_EDITS'])
    services['edit_store'] = edit_store
    logger.info(f"Edit store initialized at {edit_store.file_path}")

    services['feedback_service'] = FeedbackService(
        edit_store,
        length_threshold=config['LENGTH_CHANGE_THRESHOLD'],
        pattern_window=config['PATTERN_WINDOW'],
        max_changes=config['MAX_CHANGES_PER_TYPE'],
        max_examples=config['MAX_EXAMPLES'],
        rendered_examples=config['RENDERED_EXAMPLES'],
    )
    services['generation_service'] = GenerationService(
        services['llm_client'], services['feedback_service']
    )

    logger.info("All services initialized successfully")
    return services


def register_core_routes(app: Flask, base_path: str, services: Dict[str, Any]):
    """Register health check and JSON error handlers."""

    @app.route(f'{base_path}/api/health', methods=['GET'])
    def health():
        """Report service status."""
        return jsonify({
            'success': True,
            'status': 'ok',
            'apiKeyConfigured': services['llm_client'].is_configured,
        })

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405


def create_app(config_name: Optional[str] = None,
               config_overrides: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration name ('development', 'production', 'testing')
        config_overrides: Optional settings applied over the selected configuration

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    setup_flask_config(app, config_name, config_overrides)
    app.json.sort_keys = False

    base_path = app.config['BASE_PATH']
    services = initialize_services(app.config)
    app.extensions['salesdesk'] = services

    register_core_routes(app, base_path, services)
    register_all_routes(app, base_path, services)

    logger.info(f"Flask app created with base path: '{base_path}'")
    return app
