"""
Flask entry point for SalesDesk.
Configures logging and exposes the WSGI application as ``app``.
"""
import os
import logging

from salesdesk.config.settings import get_log_dir
from salesdesk.application import create_app

# Ensure logs directory exists
LOG_DIR = get_log_dir()
os.makedirs(LOG_DIR, exist_ok=True)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(os.path.join(LOG_DIR, 'flask_app.log')),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

_application = None


def get_application():
    """Get the Flask application instance, creating it on first use."""
    global _application

    if _application is None:
        _application = create_app()
        logger.info("Application initialized successfully")

    return _application


# WSGI servers import the app from module level
app = get_application()

# Development server entry point
if __name__ == '__main__':
    logger.info("Starting development server")
    app.run(debug=app.config.get('DEBUG', False))
