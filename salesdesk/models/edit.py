"""
Email edit data models for SalesDesk.
Field names are serialized in camelCase to match the stored JSON history.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

SUBJECT_CHANGE = 'subject_change'
GREETING_CHANGE = 'greeting_change'
SIGNOFF_CHANGE = 'signoff_change'
LENGTH_CHANGE = 'length_change'


@dataclass
class Pattern:
    """A single change detected between a generated email and the user's edit."""
    type: str
    # Text changes
    from_text: Optional[str] = None
    to_text: Optional[str] = None
    # Length changes
    percent_change: Optional[int] = None
    direction: Optional[str] = None  # longer, shorter

    @classmethod
    def text_change(cls, change_type: str, from_text: str, to_text: str) -> 'Pattern':
        return cls(type=change_type, from_text=from_text, to_text=to_text)

    @classmethod
    def length_change(cls, percent_change: int, direction: str) -> 'Pattern':
        return cls(type=LENGTH_CHANGE, percent_change=percent_change, direction=direction)

    def to_dict(self) -> Dict[str, Any]:
        if self.type == LENGTH_CHANGE:
            return {
                'type': self.type,
                'percentChange': self.percent_change,
                'direction': self.direction,
            }
        return {'type': self.type, 'from': self.from_text, 'to': self.to_text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Pattern':
        return cls(
            type=data.get('type', ''),
            from_text=data.get('from'),
            to_text=data.get('to'),
            percent_change=data.get('percentChange'),
            direction=data.get('direction'),
        )


@dataclass
class CharacterCount:
    """Character counts of the original and edited emails."""
    original: int
    edited: int

    @property
    def diff(self) -> int:
        return self.edited - self.original

    def to_dict(self) -> Dict[str, int]:
        return {'original': self.original, 'edited': self.edited, 'diff': self.diff}


@dataclass
class EditRecord:
    """One saved edit of a generated follow-up email."""
    id: str
    original: str
    edited: str
    transcript_id: Optional[str] = None
    account_id: Optional[str] = None
    account_name: Optional[str] = None
    call_type: Optional[str] = None
    timestamp: Optional[str] = None
    patterns: List[Pattern] = field(default_factory=list)

    @property
    def character_count(self) -> CharacterCount:
        return CharacterCount(original=len(self.original), edited=len(self.edited))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'transcriptId': self.transcript_id,
            'accountId': self.account_id,
            'accountName': self.account_name,
            'callType': self.call_type,
            'timestamp': self.timestamp,
            'original': self.original,
            'edited': self.edited,
            'patterns': [p.to_dict() for p in self.patterns],
            'characterCount': self.character_count.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EditRecord':
        return cls(
            id=data.get('id', ''),
            original=data.get('original') or '',
            edited=data.get('edited') or '',
            transcript_id=data.get('transcriptId'),
            account_id=data.get('accountId'),
            account_name=data.get('accountName'),
            call_type=data.get('callType'),
            timestamp=data.get('timestamp'),
            patterns=[Pattern.from_dict(p) for p in data.get('patterns') or [] if isinstance(p, dict)],
        )
