"""
Generation service for SalesDesk.
Turns account and transcript blobs into prompts and forwards them to the LLM.
LLM client errors propagate to the caller unchanged.
"""
import logging
from typing import List, Dict, Any, Optional

from salesdesk.ai.llm_client import AnthropicClient
from salesdesk.ai.prompts import SalesPromptBuilder
from salesdesk.config.llm_config import GenerationConfig
from salesdesk.services.feedback_service import FeedbackService
from salesdesk.utils.helpers import parse_llm_json, truncate_text

logger = logging.getLogger(__name__)


class GenerationService:
    """Service for LLM-backed content generation."""

    def __init__(self, llm_client: AnthropicClient, feedback_service: Optional[FeedbackService] = None):
        """
        Initialize generation service.

        Args:
            llm_client: LLM client instance
            feedback_service: Source of learned email style preferences (optional)
        """
        self.llm_client = llm_client
        self.feedback_service = feedback_service
        self.prompt_builder = SalesPromptBuilder()

    def _generate(self, kind: str, system_prompt: str, user_prompt: str,
                  error_prefix: str = 'API error') -> str:
        params = GenerationConfig.get_request_params(kind)
        logger.info(
            f"Generating {kind}: system={len(system_prompt)} chars, user={len(user_prompt)} chars"
        )
        content = self.llm_client.generate(
            system=system_prompt,
            prompt=user_prompt,
            max_tokens=params['max_tokens'],
            temperature=params['temperature'],
            error_prefix=error_prefix,
        )
        logger.info(f"Generated {kind}: {len(content)} chars")
        return content

    def generate_agenda(self, transcript: Dict[str, Any], account: Dict[str, Any]) -> str:
        """
        Generate the agenda for the next meeting.

        Args:
            transcript: Previous call transcript
            account: Account data

        Returns:
            Generated agenda text
        """
        self.llm_client.ensure_configured()
        system_prompt, user_prompt = self.prompt_builder.build_agenda_prompts(transcript, account)
        return self._generate('agenda', system_prompt, user_prompt)

    def get_learned_style_guide(self) -> str:
        """Learned style guide, or an empty string when unavailable."""
        if self.feedback_service is None:
            return ''
        try:
            return self.feedback_service.get_style_guide()
        except Exception as e:
            logger.error(f"Error fetching learned patterns: {e}")
            return ''

    def generate_follow_up(self, transcript: Dict[str, Any], account: Optional[Dict[str, Any]] = None) -> str:
        """
        Generate a follow-up email, applying learned style preferences.

        Args:
            transcript: Call transcript
            account: Optional account data

        Returns:
            Generated email text
        """
        self.llm_client.ensure_configured()
        style_guide = self.get_learned_style_guide()
        system_prompt, user_prompt = self.prompt_builder.build_follow_up_prompts(
            transcript, account, style_guide=style_guide
        )
        return self._generate('follow_up', system_prompt, user_prompt)

    def analyze_transcript(self, transcript_text: str,
                           existing_context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Extract structured account data from a new transcript.

        Args:
            transcript_text: Raw transcript text
            existing_context: Previously known account data

        Returns:
            {'success': True, 'analysis': ...} or, when the reply is not JSON,
            {'success': False, 'parseError': True, 'rawAnalysis': ..., 'analysis': None}
        """
        self.llm_client.ensure_configured()
        system_prompt, user_prompt = self.prompt_builder.build_analysis_prompts(
            transcript_text, existing_context
        )
        raw_text = self._generate(
            'transcript_analysis', system_prompt, user_prompt, error_prefix='Anthropic API error'
        )

        try:
            analysis = parse_llm_json(raw_text)
        except ValueError as e:
            logger.error(f"Failed to parse JSON response: {e}")
            return {
                'success': False,
                'parseError': True,
                'rawAnalysis': raw_text,
                'analysis': None,
            }

        return {'success': True, 'analysis': analysis}

    def generate_next_actions(self, account: Dict[str, Any]) -> List[Any]:
        """
        Generate prioritized next actions for an account.

        Returns:
            List of actions parsed from the reply, empty when unparseable
        """
        self.llm_client.ensure_configured()
        system_prompt, user_prompt = self.prompt_builder.build_next_actions_prompts(account)
        raw_text = self._generate('next_actions', system_prompt, user_prompt) or '[]'
        actions = parse_llm_json(raw_text, fallback=[])
        if not isinstance(actions, list):
            logger.warning(f"Next actions reply was not a list: {truncate_text(raw_text)}")
            return []
        return actions

    def generate_coaching_feedback(self, transcript: Dict[str, Any], account: Dict[str, Any]) -> str:
        """Generate three coaching points for a recorded call."""
        self.llm_client.ensure_configured()
        system_prompt, user_prompt = self.prompt_builder.build_coaching_prompts(transcript, account)
        return self._generate('coaching_feedback', system_prompt, user_prompt)

    def generate_business_case(self, account: Dict[str, Any]) -> str:
        """
        Generate a CapEx process evaluation document for an account.

        Args:
            account: Account data; business areas marked irrelevant are skipped

        Returns:
            Markdown evaluation document
        """
        self.llm_client.ensure_configured()
        system_prompt, user_prompt = self.prompt_builder.build_business_case_prompts(account)
        return self._generate('business_case', system_prompt, user_prompt)

    def ask_account_assistant(self, message: str, account: Dict[str, Any],
                              context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Answer a question about an account or suggest account updates.

        Args:
            message: User's message
            account: Account data
            context: UI context such as the active tab

        Returns:
            Dictionary with response, actions and needsConfirmation. A reply that
            is not a JSON object is returned as the plain response with no actions.
        """
        self.llm_client.ensure_configured()
        system_prompt, user_prompt = self.prompt_builder.build_account_assistant_prompts(
            message, account, context
        )
        raw_text = self._generate('account_assistant', system_prompt, user_prompt)

        result = parse_llm_json(raw_text, fallback=None)
        if not isinstance(result, dict):
            logger.info(f"Assistant reply was not JSON, returning it as text: {truncate_text(raw_text)}")
            return {'response': raw_text, 'actions': [], 'needsConfirmation': False}
        return result
