# dna_screener/utils/__init__.py

"""
Utility package for the DNA customer screener.

Contains standalone, reusable helper modules:
- decision_rules: Deterministic PASS / FLAG / REVIEW policy and check merging.
- logger: Centralized logging configuration (structlog).
- sse: Server-sent-events framing of pipeline events.
- validators: Input and field helpers (customer info, ORCID iDs, years, DOIs).
"""

from .decision_rules import compute_decision, fallback_summary, merge_checks
from .logger import get_logger
from .validators import validate_customer_info

__all__ = [
    "compute_decision",
    "fallback_summary",
    "get_logger",
    "merge_checks",
    "validate_customer_info",
]
