"""
Prompt templates for SalesDesk generation endpoints.
Every builder is deterministic: the same account and transcript always produce
the same (system, user) prompt pair.
"""

import logging
from datetime import date, datetime
from typing import List, Dict, Any, Optional, Tuple

from salesdesk.models.account import (
    BUSINESS_AREA_COUNT,
    BUSINESS_AREAS,
    MEDDICC_CATEGORIES,
    OWNERSHIP_TYPES,
    STAGES,
    VERTICALS,
    DealContext,
    collect_pain_points,
    key_stakeholder_names,
    suggest_next_call_type,
)

logger = logging.getLogger(__name__)

COMPANY_NAME = 'Banner'
SELLER_NAME = 'James'
MAX_GAPS_PER_CATEGORY = 5
MAX_PAIN_POINTS = 3
MAX_GREETING_NAMES = 3

MEDDICC_GUIDE = """MEDDICC Framework (identify what's missing and work it in):
- Metrics: Quantifiable measures of success
- Economic Buyer: Person with budget authority
- Decision Criteria: How they'll evaluate solutions
- Decision Process: Steps to make a purchase decision
- Identify Pain: Business problems and consequences
- Champion: Internal advocate for your solution
- Competition: Other solutions being evaluated"""

AGENDA_SYSTEM_PROMPT = f"""You are a sales professional at {COMPANY_NAME}, a CapEx management software company for multifamily real estate. Create meeting agendas that advance deals while gathering critical missing information.

Guidelines:
- Structure the agenda to advance the sale to the next stage
- Include time allocations for each section
- Work in questions to fill information gaps naturally
- Focus on value and outcomes, not features
- Include clear objectives and desired outcomes
- End with concrete next steps

{MEDDICC_GUIDE}"""

FOLLOW_UP_SYSTEM_PROMPT = f"""You are a senior sales professional at {COMPANY_NAME}, a CapEx management software company for commercial real estate. You write extremely concise, action-oriented follow-up emails.

{COMPANY_NAME}'s sales process stages:
1. Introduction call
2. Demo
3. Evaluation (business process review + {COMPANY_NAME} solution fit)
4. Proposal
5. Legal/Contract

YOUR STYLE:
- Ultra-concise - no fluff, no filler, get to the point
- Every sentence must add value or be deleted
- 2-3 short paragraphs maximum
- Crystal clear on next steps and what you need from them
- Professional but direct

FORMAT REQUIREMENTS:
- Subject line: "{COMPANY_NAME} Follow Up - [Date]" (use MM/DD format, start with "Subject: ")
- Greeting: If 3 or fewer attendees, use their first names ("Hi Sarah and Mike,"). If more than 3, use "Hi everybody,"
- Brief recap (2-3 bullets max) - only key points discussed
- Attachment section with simple list
- Next steps section - be VERY specific about what happens next and what you need from them
- Sign-off: Just "{SELLER_NAME}" (no "Best regards" or other formalities)

BULLET POINT STYLE - CRITICAL:
Use bullet points (•) for ALL lists throughout the email. NO hyphens (-), NO numbers (1. 2. 3.).

Examples:
Key takeaways from our call:
• Point one
• Point two

Attaching:
• Document one
• Document two

Next steps - I need from you:
• Action one
• Action two

ATTACHMENTS SECTION:
Based on the call, include a simple list of what you're attaching. Use this format with bullet points (•):

Attaching:
• Item 1 name
• Item 2 name
• Item 3 name

{COMPANY_NAME}'s actual sales collateral (reference these by name):
- "{COMPANY_NAME} 1-Page Overview" (we have versions for Multifamily, Commercial, Student, Senior, etc.)
- Integration overviews: "Yardi integration overview", "QuickBooks integration overview", "RealPage integration overview", etc.
- Case studies from customers like Livcor, Tourmaline, MAA, Olympus Property, etc.
- "Demo recording for team review" (if Gong link exists)
- Competitor comparisons: "{COMPANY_NAME} vs [competitor] comparison" (e.g., RealPage, Procore, Yardi CM)

Keep the list short (3-4 items max). Use simple bullet points, NOT checkboxes.

Match the collateral to what was discussed:
- If they mentioned a specific vertical → "{COMPANY_NAME} 1-Page Overview - [Vertical]"
- If they use specific systems → Include that integration overview
- If they mentioned competitors → Include comparison doc
- If it's a demo call → "Demo recording for team review"

IMPORTANT:
- The email should be ready to send as-is
- No meta-commentary, brackets (except checklist), or placeholders
- Focus heavily on next steps - what's happening next and what you need from them to get there
- Be specific about dates, times, who needs to be involved"""

NEXT_ACTIONS_SYSTEM_PROMPT = f'''You are a sales coach for {COMPANY_NAME}, a CapEx management software company. Generate 3-5 specific, actionable next steps for advancing this deal.

Each action should be:
- Specific and actionable (not vague)
- Prioritized by impact on deal progression
- Include the "why" - what will this accomplish

Format as a JSON array of objects with:
- action: The specific action to take (imperative verb)
- reason: Why this matters for the deal
- priority: "high", "medium", or "low"
- category: "meddicc", "discovery", "follow_up", or "content"'''

COACHING_SYSTEM_PROMPT = f"""You are a senior sales training consultant coaching experienced Account Executives at a Fortune 500 enterprise software company. You are reviewing a sales call transcript for {COMPANY_NAME}, a CapEx management software company selling to multifamily real estate companies.

Your role is to provide CONSTRUCTIVE, ACTIONABLE feedback that helps the rep improve their enterprise selling skills. Focus on strategic selling, discovery, relationship building, and deal progression - not basic sales tactics.

IMPORTANT: Provide EXACTLY 3 bullet points of feedback. Each bullet should follow this structure:

**[Clear, specific issue]**
- Why this matters: [Explain the business impact or risk]
- How to improve: [Specific, actionable guidance for next calls]

Focus on:
- Enterprise selling methodology (MEDDICC, multi-threading, value selling)
- Discovery depth and quality of questions
- Stakeholder engagement and relationship building
- Positioning and differentiation
- Deal control and qualification rigor
- Business case development
- Next steps clarity and momentum

Do NOT comment on:
- Basic communication skills unless truly problematic
- Minor formatting or trivial issues
- Things that were done well (this is coaching, not praise)

Be direct but supportive. This is for an experienced AE who can handle honest feedback.

Return ONLY the 3 bullet points in plain text, formatted exactly as shown above. No introduction, no conclusion, just the 3 bullets."""

BUSINESS_AREA_DEFINITIONS = {
    'budgeting': 'Site walks, budget creation, capital planning, how they build budgets',
    'project_tracking': 'Source of truth for projects, trackers, project status management',
    'project_design': 'Scope documents, bid templates, specifications',
    'bidding': 'RFP process, bid leveling, vendor selection, getting bids',
    'rfa_process': 'Request for approval creation and approval workflows',
    'contracting': 'Contract creation, signatures, DocuSign, contract tracking',
    'project_management': 'Scheduling, tasks, project updates, meeting minutes',
    'invoicing': 'Invoice submission, review, approval, payment tracking',
    'cm_fees': 'Construction management fee tracking, projection, billing',
    'change_orders': 'Change order submission, approval, tracking',
    'project_closeout': 'Close out process, documentation, handoff',
    'reporting': 'Reports, analytics, dashboards, owner reporting',
    'unit_renos': 'Unit renovation tracking, turn process, make-ready',
    'data_loading': 'Data entry into systems, imports, manual data work',
    'due_diligence': 'Acquisition due diligence process and budgeting',
    'asset_tracking': 'Asset inventory, warranties, equipment tracking',
}

ANALYSIS_METRICS = [
    'projects_per_year', 'construction_spend', 'num_regions', 'num_properties',
    'num_units', 'num_ftes', 'unit_renos_per_year', 'avg_project_value',
    'cm_fee_rate', 'avg_rent',
]


def _build_analysis_system_prompt() -> str:
    first_area, *other_areas = BUSINESS_AREA_DEFINITIONS
    area_lines = [
        f'    "{first_area}": {{\n'
        '      "currentState": ["observation 1", "observation 2"],\n'
        '      "opportunities": ["pain point or opportunity 1"],\n'
        '      "quotes": ["relevant direct quote if any"]\n'
        '    }'
    ]
    area_lines += [
        f'    "{area}": {{ "currentState": [], "opportunities": [], "quotes": [] }}'
        for area in other_areas
    ]
    areas_block = ',\n'.join(area_lines)
    metric_lines = ',\n'.join(f'    "{m}": null' for m in ANALYSIS_METRICS)
    definitions = '\n'.join(f'- {area}: {desc}' for area, desc in BUSINESS_AREA_DEFINITIONS.items())

    return f"""You are an expert sales analyst for {COMPANY_NAME}, a CapEx management software company serving multifamily real estate. Your job is to analyze sales call transcripts and extract structured information.

IMPORTANT: You are building INCREMENTALLY on existing knowledge. Do not contradict or remove existing information unless the new transcript explicitly corrects it. ADD new insights, REFINE existing ones, and EXPAND our understanding.

You must return ONLY valid JSON with no additional text. The JSON must follow this exact structure:

{{
  "callDate": "YYYY-MM-DD or null if not found",
  "summary": "2-3 sentence summary of the call",
  "stakeholders": [
    {{
      "name": "Full Name",
      "title": "Job Title or null",
      "department": "Department or null",
      "role": "Champion|Economic Buyer|Technical Buyer|User Buyer|Influencer|Blocker|Unknown",
      "notes": "Any relevant context about this person"
    }}
  ],
  "businessAreas": {{
{areas_block}
  }},
  "metrics": {{
{metric_lines}
  }},
  "metricsContext": {{
    "projects_per_year": "source/context for this number",
    "construction_spend": null
  }},
  "informationGaps": [
    {{
      "question": "Key question we still need to answer",
      "category": "business or sales"
    }}
  ],
  "nextSteps": ["Action item or follow-up mentioned"]
}}

Business Area Definitions:
{definitions}

Information Gap Categories:
- "business": Questions about their CapEx processes (how they budget, track projects, handle invoices, etc.) - things we need to understand to build a better evaluation
- "sales": MEDDICC-related questions - things we need to know to sell within the company:
  * Metrics: What metrics/KPIs matter to them? How do they measure success?
  * Economic Buyer: Who controls the budget? Who signs off on purchases?
  * Decision Criteria: What factors will they use to evaluate solutions?
  * Decision Process: What is their buying process? Timeline? Approvals needed?
  * Identify Pain: What are the consequences of not solving this problem?
  * Champion: Who is advocating internally for this solution?
  * Competition: Are they evaluating other solutions? What else are they considering?

YOU MUST generate both business AND sales gaps. Always identify what MEDDICC information is missing.

Example sales gaps:
- "Who is the economic buyer that will sign off on this purchase?"
- "What is their budget approval process and timeline?"
- "Who will be our internal champion to advocate for {COMPANY_NAME}?"
- "What other solutions are they evaluating?"
- "What metrics/ROI would they need to see to justify the purchase?"

Extract information explicitly stated or clearly implied in the transcript. Do not make assumptions. Leave arrays empty and metrics null if not mentioned. Focus on NEW information from this transcript while being aware of existing context."""


ANALYSIS_SYSTEM_PROMPT = _build_analysis_system_prompt()

# Standard solution talking points per business area
BANNER_SOLUTIONS = {
    'budgeting': [
        'Mobile app to create budgets during site walk',
        'Capital planning module to create multi-year capital plans',
        'Standardize process across owners/regions',
        'Clear visibility into future fee revenue',
    ],
    'project_tracking': [
        'Single source of truth for all project data',
        'Consistent project updates across owners',
        'Clear oversight and real-time status',
        'Key workflows auto-update trackers',
    ],
    'project_design': [
        f'Standard scope documents & bid templates stored within {COMPANY_NAME}',
        'Meeting minutes associated with projects',
        'Version control for project documents',
    ],
    'bidding': [
        'All bids obtained through standardized process with vendors',
        'Pre-leveled bids for easy comparison',
        'Simple process to get additional bids',
        'Manager oversight into bidding process',
    ],
    'rfa_process': [
        'One-click RFA creation from project data',
        'Standardized approval workflows',
        'Automated Docusign integration',
        'Full audit trail of approvals',
    ],
    'contracting': [
        'Auto-create contract at end of approval workflow',
        'Track Docusign status in central location',
        'Reduce contract queueing',
        'CM visibility into contract status',
    ],
    'project_management': [
        'Schedules, milestones, tasks tracked in one place',
        'Update key details from the field on mobile',
        'Meeting minutes stored with project',
        'Automated notifications and reminders',
    ],
    'invoicing': [
        'Streamlined portal submission process',
        'Integrated approval workflows',
        'Integration with accounting systems',
        'Easily collect waivers and documentation',
    ],
    'cm_fees': [
        'Robust CM Fee tracking & projection',
        'Simple process to create fee invoices post approval',
        'Tie out reports across all invoices',
        'Real-time fee revenue forecasting',
    ],
    'change_orders': [
        'Submitted directly by vendors through portal',
        'Approval triggers necessary signing documents',
        'Auto-update project trackers and budgets',
    ],
    'project_closeout': [
        'Standardized close-out checklist and process',
        'Centralized repository with owner access',
        'Automated handoff documentation',
    ],
    'reporting': [
        'Standardized owner reporting & updates',
        'Live reporting based on latest updates',
        'Built-in analytics and dashboards',
        'Custom report builder',
    ],
    'unit_renos': [
        'Standardized unit reno process across clients',
        'Easily change scopes & issue POs from mobile',
        'Integration with property management systems',
        'Simplified by-unit cost tracking',
    ],
    'data_loading': [
        'Data loaded on agreed SLA (e.g., 1 business day)',
        'Access to dedicated data resource',
        'Automated data imports where possible',
    ],
    'due_diligence': [
        'Create budget items from field with notes and photos',
        'Complete inspection checklist from mobile',
        'Single source of truth for DD budgets',
    ],
    'asset_tracking': [
        'Track all key assets with warranty dates and details',
        'Set up critical notifications',
        'Update asset condition from field',
    ],
}

BUSINESS_CASE_SYSTEM_PROMPT = f"""You are creating a CapEx Process Evaluation document for {COMPANY_NAME}, a CapEx management software company for multifamily real estate.

Your output should follow this exact structure:

1. EXECUTIVE SUMMARY (2-3 paragraphs)
   - Brief overview of the company and their CapEx challenges
   - Key findings from discovery calls
   - High-level opportunity areas

2. STAKEHOLDER DISCOVERY
   - List key stakeholders by department/role

3. CURRENT PROCESS EVALUATION
   For EACH business area with data, create a section with:
   - Process Name (e.g., "Budgeting", "Project Tracking")
   - Current State: Bullet points describing their current workflow
   - Observed Opportunities: Bullet points describing pain points and areas for improvement

4. POTENTIAL PROCESS WITH {COMPANY_NAME.upper()}
   For EACH business area, show:
   - Process Name
   - Current State (brief summary)
   - {COMPANY_NAME} Process: How {COMPANY_NAME} would improve this (use the provided {COMPANY_NAME} solutions)

Format as clean markdown with clear headers and bullet points. Be specific and detailed based on the data provided. If limited data exists for an area, note that more discovery is needed."""

ASSISTANT_RESPONSE_FORMAT = """Respond in JSON format:
{
  "response": "Your message to the user",
  "actions": [
    {"type": "update_stakeholder_role", "name": "Person Name", "newRole": "Champion"},
    {"type": "add_metric", "metric": "cm_fee_rate", "value": "5%", "context": "Mentioned by user"},
    {"type": "add_note", "category": "General", "content": "Note content"},
    {"type": "mark_area_irrelevant", "areaId": "cm_fees", "reason": "They don't do CM fees"},
    {"type": "unmark_area_irrelevant", "areaId": "cm_fees"},
    {"type": "set_area_priority", "areaId": "budgeting", "priority": "high"},
    {"type": "update_stage", "stage": "solution_validation"},
    {"type": "update_vertical", "vertical": "multifamily"},
    {"type": "update_ownership", "ownership": "own_and_manage"},
    {"type": "resolve_gap", "gapId": "gap_id_here", "resolution": "Answered in call"},
    {"type": "add_gap", "question": "What is their approval workflow?", "category": "decision_process"}
  ],
  "needsConfirmation": true,
  "confirmationQuestion": "Should I update John's role to Champion?"
}

If answering a question with no changes needed, return:
{
  "response": "Your answer here",
  "actions": [],
  "needsConfirmation": false
}"""


def _text(value: Any, default: str = '') -> str:
    if value is None or value == '':
        return default
    return str(value)


def _bullets(items: List[Any]) -> str:
    return '\n'.join(f'- {item}' for item in items)


def _gap_questions(gaps: List[Dict[str, Any]]) -> List[str]:
    return [_text(g.get('question')) for g in gaps[:MAX_GAPS_PER_CATEGORY]]


def _next_steps(transcript: Dict[str, Any]) -> List[Any]:
    raw_analysis = transcript.get('rawAnalysis')
    if not isinstance(raw_analysis, dict):
        return []
    steps = raw_analysis.get('nextSteps')
    return steps if isinstance(steps, list) else []


def _dicts(value: Any) -> List[Dict[str, Any]]:
    return [v for v in value if isinstance(v, dict)] if isinstance(value, list) else []


def _strings(value: Any) -> List[str]:
    return [str(v) for v in value] if isinstance(value, list) else []


def _metric_lines(metrics: Any, prefix: str = '', with_context: bool = False) -> List[str]:
    """Readable 'metric name: value' lines for metrics with a truthy value."""
    lines = []
    if not isinstance(metrics, dict):
        return lines
    for key, data in metrics.items():
        if not isinstance(data, dict) or not data.get('value'):
            continue
        line = f"{prefix}{key.replace('_', ' ')}: {data['value']}"
        if with_context and data.get('context'):
            line += f" ({data['context']})"
        lines.append(line)
    return lines


def format_subject_date(call_date: Any, today: Optional[date] = None) -> str:
    """
    Format a call date as M/D for the follow-up subject line.

    Args:
        call_date: ISO date or datetime string
        today: Fallback date when the call date is missing or unparseable

    Returns:
        Month/day string without zero padding, e.g. '3/7'
    """
    parsed = None
    if isinstance(call_date, str) and call_date.strip():
        try:
            parsed = datetime.fromisoformat(call_date.strip()[:10]).date()
        except ValueError:
            logger.debug(f"Could not parse call date '{call_date}', using today")
    if parsed is None:
        parsed = today or date.today()
    return f'{parsed.month}/{parsed.day}'


def external_first_names(attendees: List[Any]) -> List[str]:
    """First names of attendees who are not from the seller's side."""
    names = []
    for attendee in attendees:
        first = str(attendee).split(' ')[0].split('(')[0].strip()
        if COMPANY_NAME in first or first == SELLER_NAME:
            continue
        names.append(first)
    return names


class SalesPromptBuilder:
    """Builds (system, user) prompt pairs for every generation endpoint."""

    def build_agenda_prompts(self, transcript: Dict[str, Any], account: Dict[str, Any]) -> Tuple[str, str]:
        """
        Build the meeting-agenda prompts.

        Args:
            transcript: Previous call transcript blob
            account: Account blob

        Returns:
            Tuple of (system_prompt, user_prompt)
        """
        context = DealContext.from_account(account)
        next_call_type = suggest_next_call_type(transcript.get('callType'))

        next_steps = _next_steps(transcript)
        next_steps_section = ''
        if next_steps:
            next_steps_section = f"Agreed Next Steps from Last Call:\n{_bullets(next_steps)}\n"

        business_section = ''
        if context.business_gaps:
            business_section = (
                "BUSINESS PROCESS GAPS (work these into the conversation):\n"
                f"{_bullets(_gap_questions(context.business_gaps))}\n"
            )

        sales_section = ''
        if context.sales_gaps:
            sales_section = (
                "SALES/MEDDICC GAPS (must address):\n"
                f"{_bullets(_gap_questions(context.sales_gaps))}\n"
            )

        user_prompt = f"""Create an agenda for the next meeting with {context.name}.

Previous Call: {_text(transcript.get('callType'), 'sales')} call on {_text(transcript.get('date'))}
Suggested Next Call Type: {next_call_type}

Previous Call Summary:
{_text(transcript.get('summary'))}

{next_steps_section}

CURRENT DEAL STATUS:
- Champion identified: {'Yes' if context.has_champion else 'NO - Need to identify'}
- Economic Buyer identified: {'Yes' if context.has_economic_buyer else 'NO - Need to identify'}
- Key metrics captured: {'Yes' if context.has_metrics else 'NO - Need to gather'}

{business_section}

{sales_section}

Create a meeting agenda that advances this deal while addressing the gaps above. Include specific questions to ask."""

        return AGENDA_SYSTEM_PROMPT, user_prompt

    def build_follow_up_prompts(
        self,
        transcript: Dict[str, Any],
        account: Optional[Dict[str, Any]] = None,
        style_guide: str = '',
        today: Optional[date] = None
    ) -> Tuple[str, str]:
        """
        Build the follow-up email prompts.

        Args:
            transcript: Call transcript blob
            account: Optional account blob
            style_guide: Learned style preferences appended to the system prompt
            today: Fallback date for the subject line

        Returns:
            Tuple of (system_prompt, user_prompt)
        """
        account = account if isinstance(account, dict) else {}
        attendees = transcript.get('attendees') if isinstance(transcript.get('attendees'), list) else []
        next_steps = _next_steps(transcript)
        summary = _text(transcript.get('summary'))
        call_type = _text(transcript.get('callType'), 'sales')
        call_date = _text(transcript.get('date'), 'recent')
        account_name = _text(account.get('name'), 'the prospect')

        meddicc = account.get('meddicc') if isinstance(account.get('meddicc'), dict) else {}
        metrics_context = _text(meddicc.get('metrics'))
        decision_criteria = _text(meddicc.get('decisionCriteria'))

        key_stakeholders = key_stakeholder_names(account)
        pain_points = collect_pain_points(account)

        context_section = ''
        if key_stakeholders:
            context_section += f"\nKey Stakeholders: {', '.join(key_stakeholders)}"
        if pain_points:
            context_section += f"\n\nKnown Pain Points:\n{_bullets(pain_points[:MAX_PAIN_POINTS])}"
        if metrics_context:
            context_section += f"\n\nSuccess Metrics: {metrics_context}"
        if decision_criteria:
            context_section += f"\nDecision Criteria: {decision_criteria}"

        subject_date = format_subject_date(transcript.get('date'), today=today)
        external_names = external_first_names(attendees)
        if len(external_names) <= MAX_GREETING_NAMES:
            greeting = f'Use their first names: "Hi {" and ".join(external_names[:MAX_GREETING_NAMES])},"'
        else:
            greeting = 'Use "Hi everybody,"'

        attendee_list = ', '.join(str(a) for a in attendees) if attendees else 'Not specified'
        next_steps_section = f"Agreed Next Steps:\n{_bullets(next_steps)}" if next_steps else ''

        user_prompt = f"""Write a follow-up email for a {call_type} call with {account_name}.

Call Date: {call_date} (Use {subject_date} in subject line)
Attendees ({len(external_names)} external): {attendee_list}
{context_section}

Call Summary:
{summary}

{next_steps_section}

CRITICAL INSTRUCTIONS:
1. Use "{COMPANY_NAME} Follow Up - {subject_date}" as the subject line
2. Greeting: {greeting}
3. Be ultra-concise - no fluff or filler
4. Use BULLET POINTS (•) for ALL lists - key takeaways, attachments, next steps
5. NO hyphens (-), NO numbers (1. 2. 3.), only bullets (•)
6. Make next steps crystal clear - what happens next and what you need from them
7. Sign-off: Just "{SELLER_NAME}" (nothing else)

Write the follow-up email now."""

        return FOLLOW_UP_SYSTEM_PROMPT + (style_guide or ''), user_prompt

    def build_analysis_prompts(
        self,
        transcript_text: str,
        existing_context: Optional[Dict[str, Any]] = None
    ) -> Tuple[str, str]:
        """
        Build the incremental transcript-analysis prompts.

        Args:
            transcript_text: Raw text of the new transcript
            existing_context: Previously known transcripts, stakeholders, metrics and business areas

        Returns:
            Tuple of (system_prompt, user_prompt)
        """
        existing_context = existing_context if isinstance(existing_context, dict) else {}

        def _list(key):
            value = existing_context.get(key)
            return [v for v in value if isinstance(v, dict)] if isinstance(value, list) else []

        def _mapping(key):
            value = existing_context.get(key)
            return value if isinstance(value, dict) else {}

        previous_transcripts = _list('transcripts')
        stakeholders = _list('stakeholders')
        metrics = _mapping('metrics')
        business_areas = _mapping('businessAreas')

        prompt = "Analyze this NEW sales call transcript and extract structured data. Return ONLY valid JSON.\n\n"

        if previous_transcripts:
            prompt += "=== PREVIOUS CALL CONTEXT ===\n"
            prompt += f"We have {len(previous_transcripts)} previous transcript(s). Here are the summaries:\n\n"
            for i, t in enumerate(previous_transcripts, 1):
                prompt += (
                    f"Call {i} ({_text(t.get('date'), 'Unknown date')}):\n"
                    f"{_text(t.get('summary'), 'No summary available')}\n\n"
                )
            prompt += "\n"

        if stakeholders:
            prompt += "=== KNOWN STAKEHOLDERS ===\n"
            for s in stakeholders:
                prompt += (
                    f"- {_text(s.get('name'))} ({_text(s.get('title'), 'Unknown title')}) "
                    f"- Role: {_text(s.get('role'), 'Unknown')}\n"
                )
            prompt += "\n"

        known_metrics = [
            f"{key}: {data['value']}" for key, data in metrics.items()
            if isinstance(data, dict) and data.get('value') is not None
        ]
        if known_metrics:
            prompt += "=== KNOWN METRICS ===\n"
            prompt += '\n'.join(known_metrics) + '\n\n'

        areas_with_data = [
            area for area, data in business_areas.items()
            if isinstance(data, dict) and (data.get('currentState') or data.get('opportunities'))
        ]
        if areas_with_data:
            prompt += "=== AREAS WITH EXISTING DATA ===\n"
            prompt += f"We already have insights for: {', '.join(areas_with_data)}\n"
            prompt += "Build on this existing knowledge - add new insights, don't repeat what we know.\n\n"

        prompt += f"=== NEW TRANSCRIPT TO ANALYZE ===\n{transcript_text}"

        return ANALYSIS_SYSTEM_PROMPT, prompt

    def build_next_actions_prompts(self, account: Dict[str, Any]) -> Tuple[str, str]:
        """Build the next-actions prompts for an account."""
        context = DealContext.from_account(account)

        if context.days_since_activity is not None:
            days = str(context.days_since_activity)
        elif context.last_transcript is not None:
            days = 'Unknown'
        else:
            days = 'No calls yet'

        business = _bullets(_gap_questions(context.business_gaps)) or '- None identified'
        sales = _bullets(_gap_questions(context.sales_gaps)) or '- None identified'

        if context.last_transcript is not None:
            last_call = (
                "LAST CALL SUMMARY:\n"
                f"{_text(context.last_transcript.get('summary'), 'No summary available')}"
            )
        else:
            last_call = 'No calls recorded yet.'

        user_prompt = f"""Generate next actions for {context.name or 'this prospect'}.

CURRENT STATE:
- Stage: {context.stage_label}
- Days since last activity: {days}
- Champion identified: {'Yes' if context.has_champion else 'No'}
- Economic Buyer identified: {'Yes' if context.has_economic_buyer else 'No'}
- Business areas explored: {context.explored_areas}/{BUSINESS_AREA_COUNT}
- Key metrics captured: {'Yes' if context.has_metrics else 'Limited'}

OPEN BUSINESS GAPS:
{business}

OPEN SALES/MEDDICC GAPS:
{sales}

{last_call}

Generate 3-5 prioritized next actions. Return ONLY valid JSON array."""

        return NEXT_ACTIONS_SYSTEM_PROMPT, user_prompt

    def build_coaching_prompts(self, transcript: Dict[str, Any], account: Dict[str, Any]) -> Tuple[str, str]:
        """Build the call-coaching prompts."""
        attendees = transcript.get('attendees')
        attendee_text = ', '.join(str(a) for a in attendees) if isinstance(attendees, list) else 'unknown'

        call_context = f"""
Call Type: {_text(transcript.get('callType'), 'unknown')}
Date: {_text(transcript.get('date'), 'unknown')}
Attendees: {attendee_text}
Summary: {_text(transcript.get('summary'), 'No summary available')}

Account Context:
- Company: {_text(account.get('name'))}
- Stage: {_text(account.get('stage'), 'Not set')}
- Vertical: {_text(account.get('vertical'), 'Not set')}
"""

        user_prompt = f"""Review this sales call and provide 3 specific areas for coaching improvement:

{call_context}

TRANSCRIPT:
{_text(transcript.get('text'))}

Provide exactly 3 bullet points following the format specified."""

        return COACHING_SYSTEM_PROMPT, user_prompt

    def build_business_case_prompts(self, account: Dict[str, Any]) -> Tuple[str, str]:
        """
        Build the CapEx process evaluation prompts.

        Args:
            account: Account blob; businessAreas drives the per-area sections

        Returns:
            Tuple of (system_prompt, user_prompt)
        """
        business_areas = account.get('businessAreas') if isinstance(account.get('businessAreas'), dict) else {}

        area_sections = []
        undiscovered = []
        for area in BUSINESS_AREAS:
            data = business_areas.get(area['id'])
            data = data if isinstance(data, dict) else {}
            if data.get('irrelevant'):
                continue

            current_state = _strings(data.get('currentState'))
            opportunities = _strings(data.get('opportunities'))
            if not current_state and not opportunities:
                undiscovered.append(f"- {area['label']}: {area['description']}")
                continue

            quotes = _strings(data.get('quotes'))
            quote_lines = '\n'.join(f'> "{q}"' for q in quotes) or '- No direct quotes'
            area_sections.append(
                f"\n### {area['label']}\n"
                f"Current State:\n{_bullets(current_state) or '- No data captured'}\n\n"
                f"Opportunities:\n{_bullets(opportunities) or '- No opportunities identified'}\n\n"
                f"Quotes:\n{quote_lines}\n\n"
                f"{COMPANY_NAME} Solutions for this area:\n"
                f"{_bullets(BANNER_SOLUTIONS.get(area['id'], []))}\n"
            )

        stakeholders = '\n'.join(
            f"{_text(s.get('name'))} ({_text(s.get('title'), 'Unknown')}) - {_text(s.get('role'))}"
            for s in _dicts(account.get('stakeholders'))
        )
        metrics = '\n'.join(_metric_lines(account.get('metrics')))

        user_prompt = f"""Create a CapEx Process Evaluation for {_text(account.get('name'))}.

STAKEHOLDERS:
{stakeholders or 'No stakeholders identified yet'}

KEY METRICS:
{metrics or 'No metrics captured yet'}

BUSINESS AREAS WITH DATA:
{chr(10).join(area_sections)}

BUSINESS AREAS NEEDING MORE DISCOVERY:
{chr(10).join(undiscovered)}

Generate the evaluation document now. Make it professional, specific, and actionable."""

        return BUSINESS_CASE_SYSTEM_PROMPT, user_prompt

    def build_account_assistant_prompts(
        self,
        message: str,
        account: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None
    ) -> Tuple[str, str]:
        """
        Build the account assistant prompts.

        The account snapshot goes into the system prompt and the user's message
        is sent unchanged.

        Args:
            message: User's question or update
            account: Account blob
            context: UI context, e.g. {'activeTab': 'stakeholders'}

        Returns:
            Tuple of (system_prompt, user_prompt)
        """
        context = context if isinstance(context, dict) else {}

        transcripts = '\n'.join(
            f"Transcript {i} ({_text(t.get('date'), 'unknown date')}): {_text(t.get('summary'), 'No summary')}"
            for i, t in enumerate(_dicts(account.get('transcripts')), 1)
        )

        stakeholder_lines = []
        for s in _dicts(account.get('stakeholders')):
            line = (
                f"- {_text(s.get('name'))} ({_text(s.get('title'), 'Unknown title')}, "
                f"{_text(s.get('department'), 'Unknown dept')}) - Role: {_text(s.get('role'))}"
            )
            if s.get('notes'):
                line += f" - Notes: {s['notes']}"
            stakeholder_lines.append(line)

        metrics = '\n'.join(_metric_lines(account.get('metrics'), prefix='- ', with_context=True))
        gaps = '\n'.join(
            f"- [{_text(g.get('id'))}] {_text(g.get('question'))} ({_text(g.get('category'))})"
            for g in _dicts(account.get('informationGaps'))
            if g.get('status') != 'resolved'
        )

        system_prompt = f"""You are an AI assistant helping manage a sales account for {COMPANY_NAME}, a CapEx management software company. You help the user update account information, answer questions about the account, and track sales progress.

CURRENT ACCOUNT: {_text(account.get('name'))}
Stage: {_text(account.get('stage'), 'Not set')}
Vertical: {_text(account.get('vertical'), 'Not set')}
Ownership Type: {_text(account.get('ownershipType'), 'Not set')}

TRANSCRIPTS:
{transcripts or 'No transcripts yet'}

STAKEHOLDERS:
{chr(10).join(stakeholder_lines) or 'No stakeholders identified yet'}

METRICS:
{metrics or 'No metrics captured yet'}

OPEN INFORMATION GAPS:
{gaps or 'No gaps tracked'}

CURRENT TAB: {_text(context.get('activeTab'), 'overview')}

Your job is to:
1. ANSWER QUESTIONS about the account based on the data above
2. SUGGEST UPDATES when the user provides new information
3. BE CAUTIOUS - if you're unsure what action to take, ASK for clarification

IMPORTANT RULES:
- When suggesting updates, clearly state what will be changed
- For stakeholder role changes, use: Champion, Economic Buyer, Technical Buyer, User Buyer, Influencer, Blocker, Unknown
- For metric updates, extract the specific value
- If the user's intent is unclear, ask a clarifying question
- Always confirm destructive or significant changes before executing

VALID OPTIONS:
- Stages: {', '.join(s['id'] for s in STAGES)}
- Verticals: {', '.join(VERTICALS)}
- Ownership Types: {', '.join(OWNERSHIP_TYPES)}
- MEDDICC Categories: {', '.join(MEDDICC_CATEGORIES)}
- Business Areas (for priority/irrelevant): {', '.join(a['id'] for a in BUSINESS_AREAS)}
- Priority Levels: high, medium, low, none

{ASSISTANT_RESPONSE_FORMAT}"""

        return system_prompt, message
