"""
Account-derived deal context for SalesDesk.
Accounts and transcripts are client-supplied JSON blobs; nothing here validates
or owns them, it only reads the fields prompt construction needs.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Tuple

logger = logging.getLogger(__name__)

# Next call type keyed by the previous call type
CALL_TYPE_PROGRESSION = {
    'intro': 'discovery',
    'discovery': 'demo',
    'demo': 'pricing',
    'pricing': 'negotiation',
    'negotiation': 'follow_up',
    'follow_up': 'follow_up',
    'other': 'discovery',
}
DEFAULT_NEXT_CALL_TYPE = 'discovery'

STAGES = [
    {'id': 'qualifying', 'label': 'Qualifying', 'order': 1},
    {'id': 'active_pursuit', 'label': 'Active Pursuit', 'order': 2},
    {'id': 'solution_validation', 'label': 'Solution Validation', 'order': 3},
    {'id': 'proposal', 'label': 'Proposal', 'order': 4},
    {'id': 'legal', 'label': 'Legal', 'order': 5},
    {'id': 'closed_won', 'label': 'Closed Won', 'order': 6},
    {'id': 'closed_lost', 'label': 'Closed Lost', 'order': 7},
]

BUSINESS_AREAS = [
    {'id': 'budgeting', 'label': 'Budgeting', 'description': 'Site walks, budget creation, capital planning'},
    {'id': 'project_tracking', 'label': 'Project Tracking', 'description': 'Source of truth, trackers, project status'},
    {'id': 'project_design', 'label': 'Project Design', 'description': 'Scope documents, bid templates, specs'},
    {'id': 'bidding', 'label': 'Bidding', 'description': 'RFP process, bid leveling, vendor selection'},
    {'id': 'rfa_process', 'label': 'RFA Process', 'description': 'Request for approval creation and workflow'},
    {'id': 'contracting', 'label': 'Contracting', 'description': 'Contract creation, signatures, tracking'},
    {'id': 'project_management', 'label': 'Project Management', 'description': 'Scheduling, tasks, updates, meeting minutes'},
    {'id': 'invoicing', 'label': 'Invoicing', 'description': 'Invoice submission, review, approval, payment'},
    {'id': 'cm_fees', 'label': 'CM Fees', 'description': 'Construction management fee tracking and projection'},
    {'id': 'change_orders', 'label': 'Change Orders', 'description': 'Change order submission and approval'},
    {'id': 'project_closeout', 'label': 'Project Close Out', 'description': 'Close out process and documentation'},
    {'id': 'reporting', 'label': 'Reporting', 'description': 'Reports, analytics, dashboards'},
    {'id': 'unit_renos', 'label': 'Unit Renos', 'description': 'Unit renovation tracking and workflow'},
    {'id': 'data_loading', 'label': 'Data Loading', 'description': 'Data entry, imports, system updates'},
    {'id': 'due_diligence', 'label': 'Due Diligence', 'description': 'Acquisition DD process and budgeting'},
    {'id': 'asset_tracking', 'label': 'Asset Tracking', 'description': 'Asset inventory, warranties, conditions'},
]
BUSINESS_AREA_COUNT = len(BUSINESS_AREAS)

VERTICALS = [
    'multifamily', 'builder_developer', 'iwl', 'senior', 'student', 'hospitality',
    'healthcare_medical', 'office', 'retail', 'corporate', 'government', 'mixed_use',
]
OWNERSHIP_TYPES = ['own', 'own_and_manage', 'third_party_manage']
MEDDICC_CATEGORIES = [
    'metrics', 'economic_buyer', 'decision_criteria', 'decision_process',
    'identify_pain', 'champion', 'competition',
]

CHAMPION = 'Champion'
ECONOMIC_BUYER = 'Economic Buyer'
DECISION_MAKER = 'Decision Maker'
KEY_STAKEHOLDER_ROLES = (CHAMPION, DECISION_MAKER, ECONOMIC_BUYER)


def suggest_next_call_type(previous_call_type: Optional[str]) -> str:
    """Return the call type that should follow the previous one."""
    if not isinstance(previous_call_type, str):
        return DEFAULT_NEXT_CALL_TYPE
    return CALL_TYPE_PROGRESSION.get(previous_call_type, DEFAULT_NEXT_CALL_TYPE)


def get_stage_label(stage_id: Optional[str]) -> str:
    for stage in STAGES:
        if stage['id'] == stage_id:
            return stage['label']
    return 'Unknown'


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def split_open_gaps(account: Dict[str, Any]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Partition unresolved information gaps.

    Args:
        account: Account JSON blob

    Returns:
        Tuple of (business_gaps, sales_gaps)
    """
    gaps = [g for g in _as_list(account.get('informationGaps')) if isinstance(g, dict)]
    open_gaps = [g for g in gaps if g.get('status') != 'resolved']
    business_gaps = [g for g in open_gaps if g.get('category') != 'sales']
    sales_gaps = [g for g in open_gaps if g.get('category') == 'sales']
    return business_gaps, sales_gaps


def has_stakeholder_role(stakeholders: List[Any], role: str) -> bool:
    return any(isinstance(s, dict) and s.get('role') == role for s in stakeholders)


def has_metric_values(metrics: Dict[str, Any]) -> bool:
    """True when any metric carries a recorded value."""
    return any(isinstance(m, dict) and m.get('value') is not None for m in metrics.values())


def count_explored_areas(business_areas: Dict[str, Any]) -> int:
    explored = 0
    for data in business_areas.values():
        data = _as_dict(data)
        if _as_list(data.get('currentState')) or _as_list(data.get('opportunities')):
            explored += 1
    return explored


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, returning an aware datetime or None."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Unparseable timestamp: {value}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class DealContext:
    """Deal status derived from an account blob."""
    name: str
    stage_label: str
    has_champion: bool
    has_economic_buyer: bool
    has_metrics: bool
    business_gaps: List[Dict[str, Any]] = field(default_factory=list)
    sales_gaps: List[Dict[str, Any]] = field(default_factory=list)
    explored_areas: int = 0
    last_transcript: Optional[Dict[str, Any]] = None
    days_since_activity: Optional[int] = None

    @classmethod
    def from_account(cls, account: Dict[str, Any], now: Optional[datetime] = None) -> 'DealContext':
        account = _as_dict(account)
        stakeholders = _as_list(account.get('stakeholders'))
        business_gaps, sales_gaps = split_open_gaps(account)

        transcripts = [t for t in _as_list(account.get('transcripts')) if isinstance(t, dict)]
        last_transcript = transcripts[-1] if transcripts else None
        days_since_activity = None
        if last_transcript is not None:
            added_at = parse_timestamp(last_transcript.get('addedAt'))
            if added_at is not None:
                now = now or datetime.now(timezone.utc)
                days_since_activity = (now - added_at).days

        return cls(
            name=account.get('name') or '',
            stage_label=get_stage_label(account.get('stage')),
            has_champion=has_stakeholder_role(stakeholders, CHAMPION),
            has_economic_buyer=has_stakeholder_role(stakeholders, ECONOMIC_BUYER),
            has_metrics=has_metric_values(_as_dict(account.get('metrics'))),
            business_gaps=business_gaps,
            sales_gaps=sales_gaps,
            explored_areas=count_explored_areas(_as_dict(account.get('businessAreas'))),
            last_transcript=last_transcript,
            days_since_activity=days_since_activity,
        )


def key_stakeholder_names(account: Dict[str, Any], limit: int = 3) -> List[str]:
    """Names of champions, decision makers and economic buyers."""
    names = [
        s.get('name') for s in _as_list(_as_dict(account).get('stakeholders'))
        if isinstance(s, dict) and s.get('role') in KEY_STAKEHOLDER_ROLES
    ]
    return [n for n in names if n][:limit]


def collect_pain_points(account: Dict[str, Any]) -> List[str]:
    """Non-blank pain points across all business areas, in area order."""
    pain_points = []
    for data in _as_dict(_as_dict(account).get('businessAreas')).values():
        for point in _as_list(_as_dict(data).get('painPoints')):
            if isinstance(point, str) and point.strip():
                pain_points.append(point)
    return pain_points
