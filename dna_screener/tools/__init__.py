# dna_screener/tools/__init__.py

"""
Research tools available to the completion loop.

- web_search: Tavily web search.
- screening_list: US Consolidated Screening List.
- epmc: Europe PMC article search.
- orcid: ORCID researcher profiles and works.
- registry: function schemas and name-based dispatch.
- citations: citation ids and audit rows.
"""

from .citations import CitationCounters, format_for_model, normalize_tool_calls
from .registry import TOOL_DEFINITIONS, ToolRegistry

__all__ = [
    "CitationCounters",
    "TOOL_DEFINITIONS",
    "ToolRegistry",
    "format_for_model",
    "normalize_tool_calls",
]
