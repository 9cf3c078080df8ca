"""
LLM client module for SalesDesk.
Sends a system prompt and a single user message to the Anthropic Messages API
and returns the first text block of the reply.
"""
import logging
from typing import Optional, Dict, Any, List

import httpx

from salesdesk.config.settings import (
    get_anthropic_api_key,
    get_anthropic_api_url,
    get_anthropic_model,
    get_anthropic_version,
    get_request_timeout,
)

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base class for LLM client failures."""


class LLMConfigurationError(LLMError):
    """Raised when the provider credential is not configured."""


class LLMUpstreamError(LLMError):
    """Raised when the provider answers with a non-success status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class LLMRequestError(LLMError):
    """Raised on transport or response decoding failures."""


class AnthropicClient:
    """Thin client for the Anthropic Messages API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            api_key: Provider credential; requests are refused without one
            base_url: Provider base URL
            model: Model identifier
            api_version: Value of the anthropic-version header
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.api_key = api_key
        self.base_url = (base_url or get_anthropic_api_url()).rstrip('/')
        self.model = model or get_anthropic_model()
        self.api_version = api_version or get_anthropic_version()
        self.timeout = timeout if timeout is not None else get_request_timeout()
        self.transport = transport

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'AnthropicClient':
        """Build a client from a Flask config mapping."""
        return cls(
            api_key=config.get('ANTHROPIC_API_KEY'),
            base_url=config.get('ANTHROPIC_API_URL'),
            model=config.get('ANTHROPIC_MODEL'),
            api_version=config.get('ANTHROPIC_VERSION'),
            timeout=config.get('LLM_REQUEST_TIMEOUT'),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def ensure_configured(self):
        """Raise LLMConfigurationError when no credential is available."""
        if not self.is_configured:
            raise LLMConfigurationError('API key not configured')

    def _build_headers(self) -> Dict[str, str]:
        return {
            'Content-Type': 'application/json',
            'x-api-key': self.api_key,
            'anthropic-version': self.api_version,
        }

    def complete(
        self,
        system: str,
        messages: List[Dict[str, str]],
        max_tokens: int = 4000,
        temperature: Optional[float] = 0,
        error_prefix: str = 'API error'
    ) -> str:
        """
        Send one Messages API request.

        Args:
            system: System prompt
            messages: Conversation messages ({'role', 'content'})
            max_tokens: Maximum response tokens
            temperature: Sampling temperature, omitted from the request when None
            error_prefix: Prefix for the fallback upstream error message

        Returns:
            Text of the first content block, or an empty string

        Raises:
            LLMConfigurationError: No credential configured
            LLMUpstreamError: Provider returned a non-success status
            LLMRequestError: Transport failure or undecodable response
        """
        self.ensure_configured()

        body = {
            'model': self.model,
            'max_tokens': max_tokens,
            'system': system,
            'messages': messages,
        }
        if temperature is not None:
            body['temperature'] = temperature

        url = f'{self.base_url}/v1/messages'
        logger.info(f"Calling LLM model={self.model} max_tokens={max_tokens}")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(url, headers=self._build_headers(), json=body)
        except httpx.HTTPError as e:
            logger.error(f"LLM request failed: {e}")
            raise LLMRequestError(str(e)) from e

        if not response.is_success:
            message = self._extract_error_message(response) or f'{error_prefix}: {response.status_code}'
            logger.error(f"LLM returned status {response.status_code}: {message}")
            raise LLMUpstreamError(response.status_code, message)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"LLM response was not valid JSON: {e}")
            raise LLMRequestError('Invalid JSON in LLM response') from e

        return self._first_text_block(data)

    def generate(self, system: str, prompt: str, max_tokens: int = 4000,
                 temperature: Optional[float] = 0, error_prefix: str = 'API error') -> str:
        """Send a single user prompt with a system prompt."""
        return self.complete(
            system=system,
            messages=[{'role': 'user', 'content': prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
            error_prefix=error_prefix,
        )

    @staticmethod
    def _extract_error_message(response: httpx.Response) -> Optional[str]:
        try:
            payload = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        error = payload.get('error')
        if isinstance(error, dict):
            return error.get('message') or None
        return None

    @staticmethod
    def _first_text_block(data: Any) -> str:
        if not isinstance(data, dict):
            return ''
        content = data.get('content') or []
        if not content or not isinstance(content[0], dict):
            return ''
        return content[0].get('text') or ''


def initialize_ai_client(config: Optional[Dict[str, Any]] = None) -> AnthropicClient:
    """
    Create the application's LLM client.

    Args:
        config: Optional Flask config mapping; environment variables are used otherwise

    Returns:
        AnthropicClient instance (possibly unconfigured)
    """
    if config is not None:
        client = AnthropicClient.from_config(config)
    else:
        client = AnthropicClient(api_key=get_anthropic_api_key())

    if client.is_configured:
        logger.info(f"LLM client initialized for model {client.model}")
    else:
        logger.warning("ANTHROPIC_API_KEY environment variable not set")
    return client
