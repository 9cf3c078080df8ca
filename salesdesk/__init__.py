# SalesDesk - Sales enablement API
"""
Sales-enablement backend: LLM-generated agendas, follow-up emails and call
analysis, plus a feedback loop that learns email style from user edits.
"""

__version__ = "1.0.0"
__author__ = "SalesDesk Team"
