"""
Feedback service for SalesDesk.
Learns follow-up email style from user edits: every saved edit is diffed against
the generated original, and the most recent edits are rendered into a style
guide that is appended to future follow-up prompts.
"""
import re
import math
import time
import logging
from typing import List, Dict, Any, Optional

from salesdesk.database.edit_store import EditStore
from salesdesk.models.edit import (
    EditRecord,
    Pattern,
    SUBJECT_CHANGE,
    GREETING_CHANGE,
    SIGNOFF_CHANGE,
    LENGTH_CHANGE,
)

logger = logging.getLogger(__name__)

DEFAULT_LENGTH_CHANGE_THRESHOLD = 20
DEFAULT_PATTERN_WINDOW = 20
DEFAULT_MAX_CHANGES_PER_TYPE = 3
DEFAULT_MAX_EXAMPLES = 5
DEFAULT_RENDERED_EXAMPLES = 2

SIGNOFF_NAME = 'James'
SIGNOFF_PHRASES = ('Best regards,', 'Sincerely,', 'Thanks,', 'Cheers,')

SUBJECT_RE = re.compile(r'Subject:\s*(.+?)(?:\n|$)')
GREETING_RE = re.compile(r'^(Hi .+?,)', re.MULTILINE)
SIGNOFF_RE = re.compile(
    r'(?:' + '|'.join(re.escape(p) for p in SIGNOFF_PHRASES) + r')?\s*'
    + re.escape(SIGNOFF_NAME) + r'\s*\Z'
)
# Sign-offs end the text; only this many trailing characters are searched
SIGNOFF_WINDOW = 200

NO_PREFERENCE = 'no_preference'


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _match_group(pattern: re.Pattern, text: str, default: str = '') -> str:
    match = pattern.search(text)
    if not match:
        return default
    return match.group(1) if match.groups() else match.group(0)


def analyze_diff(original: str, edited: str,
                 length_threshold: float = DEFAULT_LENGTH_CHANGE_THRESHOLD) -> List[Pattern]:
    """
    Extract style changes between a generated email and the user's edited version.

    Args:
        original: Generated email text
        edited: Email text as the user sent it
        length_threshold: Percentage the length must change by, strictly, to be recorded

    Returns:
        Detected patterns, in subject/greeting/sign-off/length order
    """
    patterns = []

    original_subject = _match_group(SUBJECT_RE, original)
    edited_subject = _match_group(SUBJECT_RE, edited)
    if original_subject != edited_subject:
        patterns.append(Pattern.text_change(SUBJECT_CHANGE, original_subject, edited_subject))

    original_greeting = _match_group(GREETING_RE, original)
    edited_greeting = _match_group(GREETING_RE, edited)
    if original_greeting != edited_greeting:
        patterns.append(Pattern.text_change(GREETING_CHANGE, original_greeting, edited_greeting))

    original_signoff = _match_group(SIGNOFF_RE, original[-SIGNOFF_WINDOW:], default=SIGNOFF_NAME)
    edited_signoff = _match_group(SIGNOFF_RE, edited[-SIGNOFF_WINDOW:], default=SIGNOFF_NAME)
    if original_signoff != edited_signoff:
        patterns.append(Pattern.text_change(SIGNOFF_CHANGE, original_signoff, edited_signoff))

    if original:
        length_diff = (len(edited) - len(original)) * 100 / len(original)
        if abs(length_diff) > length_threshold:
            patterns.append(Pattern.length_change(
                percent_change=_round_half_up(length_diff),
                direction='longer' if length_diff > 0 else 'shorter',
            ))

    return patterns


def aggregate_patterns(
    edits: List[EditRecord],
    window: int = DEFAULT_PATTERN_WINDOW,
    max_changes: int = DEFAULT_MAX_CHANGES_PER_TYPE,
    max_examples: int = DEFAULT_MAX_EXAMPLES
) -> Optional[Dict[str, Any]]:
    """
    Aggregate the patterns of the most recent edits.

    Args:
        edits: Edit history, oldest first
        window: Number of most recent edits considered
        max_changes: Most recent subject/greeting/sign-off changes kept per type
        max_examples: Most recent full examples kept

    Returns:
        Aggregated patterns, or None for an empty history
    """
    if not edits:
        return None

    recent = edits[-window:] if window > 0 else []
    buckets = {SUBJECT_CHANGE: [], GREETING_CHANGE: [], SIGNOFF_CHANGE: []}
    directions = []
    examples = []

    for edit in recent:
        for pattern in edit.patterns:
            if pattern.type in buckets:
                buckets[pattern.type].append(pattern.to_dict())
            elif pattern.type == LENGTH_CHANGE:
                directions.append(pattern.direction)

        examples.append({
            'original': edit.original,
            'edited': edit.edited,
            'callType': edit.call_type,
        })

    def _last(items, n):
        return items[-n:] if n > 0 else []

    length_preference = None
    if directions:
        shorter = directions.count('shorter')
        longer = directions.count('longer')
        if shorter > longer:
            length_preference = 'shorter'
        elif longer > shorter:
            length_preference = 'longer'
        else:
            length_preference = NO_PREFERENCE

    return {
        'subjectChanges': _last(buckets[SUBJECT_CHANGE], max_changes),
        'greetingChanges': _last(buckets[GREETING_CHANGE], max_changes),
        'signoffChanges': _last(buckets[SIGNOFF_CHANGE], max_changes),
        'lengthPreference': length_preference,
        'examples': _last(examples, max_examples),
    }


def build_style_guide(patterns: Optional[Dict[str, Any]],
                      rendered_examples: int = DEFAULT_RENDERED_EXAMPLES) -> str:
    """
    Render aggregated patterns as a style guide for the follow-up system prompt.

    Args:
        patterns: Output of aggregate_patterns
        rendered_examples: Number of most recent examples written out in full

    Returns:
        Style guide text, or an empty string when there is nothing learned
    """
    if not patterns:
        return ''

    guide = '\n\nUSER STYLE PREFERENCES (learned from previous edits):\n'

    sections = (
        ('subjectChanges', 'Subject line style'),
        ('greetingChanges', 'Greeting style'),
        ('signoffChanges', 'Sign-off style'),
    )
    for key, title in sections:
        changes = patterns.get(key) or []
        if changes:
            guide += f'\n{title}:\n'
            for change in changes:
                guide += f'- User changed "{change.get("from")}" to "{change.get("to")}"\n'

    length_preference = patterns.get('lengthPreference')
    if length_preference and length_preference != NO_PREFERENCE:
        guide += f'\nLength: User prefers {length_preference} emails\n'

    examples = patterns.get('examples') or []
    if examples and rendered_examples > 0:
        guide += '\nSuccessful email examples (user sent these):\n'
        for i, example in enumerate(examples[-rendered_examples:], 1):
            guide += f'\nExample {i} ({example.get("callType") or "unknown"} call):\n{example.get("edited")}\n'

    return guide


class FeedbackService:
    """Service for recording email edits and serving learned style preferences."""

    def __init__(
        self,
        edit_store: EditStore,
        length_threshold: float = DEFAULT_LENGTH_CHANGE_THRESHOLD,
        pattern_window: int = DEFAULT_PATTERN_WINDOW,
        max_changes: int = DEFAULT_MAX_CHANGES_PER_TYPE,
        max_examples: int = DEFAULT_MAX_EXAMPLES,
        rendered_examples: int = DEFAULT_RENDERED_EXAMPLES
    ):
        """
        Initialize feedback service.

        Args:
            edit_store: Edit history store
            length_threshold: Length change percentage that must be exceeded
            pattern_window: Number of most recent edits aggregated
            max_changes: Changes kept per text pattern type
            max_examples: Full examples kept
            rendered_examples: Examples written into the style guide
        """
        self.edit_store = edit_store
        self.length_threshold = length_threshold
        self.pattern_window = pattern_window
        self.max_changes = max_changes
        self.max_examples = max_examples
        self.rendered_examples = rendered_examples

    def save_email_edit(
        self,
        original: str,
        edited: str,
        transcript_id: Optional[str] = None,
        account_id: Optional[str] = None,
        account_name: Optional[str] = None,
        call_type: Optional[str] = None,
        timestamp: Optional[str] = None
    ) -> EditRecord:
        """
        Diff an edited email against its original and append it to the history.

        Returns:
            The stored EditRecord
        """
        patterns = analyze_diff(original, edited, self.length_threshold)
        record = EditRecord(
            id=f'edit_{int(time.time() * 1000)}',
            original=original,
            edited=edited,
            transcript_id=transcript_id,
            account_id=account_id,
            account_name=account_name,
            call_type=call_type,
            timestamp=timestamp,
            patterns=patterns,
        )
        self.edit_store.append(record)
        logger.info(f"Saved email edit {record.id} with {len(patterns)} pattern(s)")
        return record

    def get_patterns(self, edits: Optional[List[EditRecord]] = None) -> Optional[Dict[str, Any]]:
        if edits is None:
            edits = self.edit_store.load()
        return aggregate_patterns(edits, self.pattern_window, self.max_changes, self.max_examples)

    def get_style_guide(self) -> str:
        """Style guide built from the stored history, empty when nothing was learned."""
        return build_style_guide(self.get_patterns(), self.rendered_examples)

    def get_email_patterns(self) -> Dict[str, Any]:
        """
        Summarize the learned preferences.

        Returns:
            Dictionary with hasPatterns, totalEdits, styleGuide and patterns
        """
        edits = self.edit_store.load()
        patterns = self.get_patterns(edits)
        return {
            'hasPatterns': patterns is not None,
            'totalEdits': len(edits),
            'styleGuide': build_style_guide(patterns, self.rendered_examples),
            'patterns': patterns,
        }
