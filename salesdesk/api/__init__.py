"""
API routes initialization for SalesDesk.
"""
import logging
from flask import Flask

from salesdesk.api.feedback_routes import create_feedback_blueprint
from salesdesk.api.generation_routes import create_generation_blueprint

logger = logging.getLogger(__name__)


def register_all_routes(app: Flask, base_path: str, services: dict):
    """
    Register all API route blueprints.

    Args:
        app: Flask application instance
        base_path: Base path for all routes (e.g. '' or '/salesdesk')
        services: Dictionary of service instances
    """
    try:
        generation_bp = create_generation_blueprint(base_path, services['generation_service'])
        app.register_blueprint(generation_bp)
        logger.info("Generation routes registered")

        feedback_bp = create_feedback_blueprint(base_path, services['feedback_service'])
        app.register_blueprint(feedback_bp)
        logger.info("Feedback routes registered")

        logger.info(f"All API routes registered with base path: '{base_path}'")

    except Exception as e:
        logger.error(f"Error registering routes: {e}")
        raise
