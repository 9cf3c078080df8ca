"""
Configuration management for SalesDesk.
Provides environment-based settings for the LLM provider and the edit-learning store.
"""
import os
from typing import Optional, Dict, Any

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def get_anthropic_api_key() -> Optional[str]:
    """Get the LLM provider credential. Returns None when unset or blank."""
    api_key = os.environ.get('ANTHROPIC_API_KEY', '').strip()
    return api_key or None


def get_anthropic_api_url() -> str:
    """Get the LLM provider base URL."""
    return os.environ.get('ANTHROPIC_API_URL', 'https://api.anthropic.com').rstrip('/')


def get_anthropic_model() -> str:
    """Get the model used for every generation request."""
    return os.environ.get('ANTHROPIC_MODEL', 'claude-sonnet-4-20250514')


def get_anthropic_version() -> str:
    """Get the provider API version header value."""
    return os.environ.get('ANTHROPIC_VERSION', '2023-06-01')


def get_request_timeout() -> float:
    """Get the LLM request timeout in seconds."""
    return float(os.environ.get('LLM_REQUEST_TIMEOUT', 120))


def get_base_path() -> str:
    """Get the URL prefix for all routes. Empty by default so routes live under /api."""
    return os.environ.get('BASE_PATH', '').rstrip('/')


def get_data_dir() -> str:
    """Get the directory holding the edit history file."""
    return os.environ.get('DATA_DIR', 'data')


def get_log_dir() -> str:
    """Get the log directory."""
    return os.environ.get('LOG_DIR', 'logs')


def _get_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


class Config:
    """Base configuration class."""

    # LLM provider settings
    ANTHROPIC_API_KEY = get_anthropic_api_key()
    ANTHROPIC_API_URL = get_anthropic_api_url()
    ANTHROPIC_MODEL = get_anthropic_model()
    ANTHROPIC_VERSION = get_anthropic_version()
    LLM_REQUEST_TIMEOUT = get_request_timeout()

    # Path settings
    BASE_PATH = get_base_path()

    # Storage settings
    DATA_DIR = get_data_dir()
    EMAIL_EDITS_FILENAME = 'email_edits.json'
    LOG_DIR = get_log_dir()

    # Edit-learning windows
    MAX_STORED_EDITS = _get_int('MAX_STORED_EDITS', 100)
    PATTERN_WINDOW = _get_int('PATTERN_WINDOW', 20)
    MAX_CHANGES_PER_TYPE = _get_int('MAX_CHANGES_PER_TYPE', 3)
    MAX_EXAMPLES = _get_int('MAX_EXAMPLES', 5)
    RENDERED_EXAMPLES = _get_int('RENDERED_EXAMPLES', 2)
    LENGTH_CHANGE_THRESHOLD = _get_int('LENGTH_CHANGE_THRESHOLD', 20)


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    ANTHROPIC_API_KEY = None


def get_config(config_name: Optional[str] = None) -> Config:
    """
    Get configuration class based on environment.

    Args:
        config_name: Configuration name ('development', 'production', 'testing', or None for auto-detect)

    Returns:
        Configuration class instance
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    config_map = {
        'development': DevelopmentConfig,
        'production': ProductionConfig,
        'testing': TestingConfig,
    }

    return config_map.get(config_name, DevelopmentConfig)()


def setup_flask_config(app, config_name: Optional[str] = None,
                       overrides: Optional[Dict[str, Any]] = None):
    """
    Setup Flask application configuration.

    Args:
        app: Flask application instance
        config_name: Optional configuration name
        overrides: Optional mapping applied on top of the selected configuration

    Returns:
        The selected configuration object
    """
    config = get_config(config_name)

    # Apply configuration to Flask app
    app.config.from_object(config)

    if overrides:
        app.config.update(overrides)

    # Set additional runtime configuration
    app.config['EMAIL_EDITS_FILE'] = os.path.join(
        app.config['DATA_DIR'], app.config['EMAIL_EDITS_FILENAME']
    )

    return config
