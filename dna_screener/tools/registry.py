# dna_screener/tools/registry.py

"""
Tool registry: LLM-facing function schemas plus name-based dispatch.

The completion loop only ever sees tool names and JSON arguments; this
module maps them onto the concrete adapters.
"""

from typing import Any, Dict, List, Optional

from config.settings import Settings, get_settings
from dna_screener.models.schemas import ToolOutput
from dna_screener.tools.epmc import EuropePMCTool
from dna_screener.tools.orcid import ORCIDTool
from dna_screener.tools.screening_list import ScreeningListTool
from dna_screener.tools.web_search import WebSearchTool
from dna_screener.utils.logger import get_logger

logger = get_logger("ToolRegistry")

_ORCID_ID_PARAM = {
    "type": "string",
    "description": "The ORCID identifier in format XXXX-XXXX-XXXX-XXXX (e.g., '0000-0002-1825-0097')",
}

TOOL_DEFINITIONS: Dict[str, Dict[str, Any]] = {
    "search_web": {
        "description": (
            "Search the web for current information using Tavily. Use for real-time data "
            "like news, current events, or any information not available in other "
            "specialized tools."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "The search query string"},
            },
            "required": ["query"],
        },
    },
    "search_screening_list": {
        "description": (
            "Search the US Consolidated Screening List for sanctioned entities, denied "
            "parties, and other restricted persons or organizations. Use this to check if "
            "a person or organization is on any US sanctions list."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "queries": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": (
                        "List of keywords to match against the institution/person name. "
                        "Each query should be 2-5 distinct words. Multiple queries increase "
                        "correct match likelihood."
                    ),
                },
            },
            "required": ["queries"],
        },
    },
    "search_epmc": {
        "description": (
            "Search Europe PubMed Central (EPMC) for scientific articles and publications. "
            "Use this to find research papers by author, institution, topic, or ORCID identifier."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "orcid": {
                    "type": "string",
                    "description": "Author's ORCID identifier (e.g., '0000-0002-1825-0097')",
                },
                "author": {
                    "type": "string",
                    "description": (
                        "Author name to search for (e.g., 'John Smith'). "
                        "Skip middle names and initials."
                    ),
                },
                "affiliation": {
                    "type": "string",
                    "description": "Institution or affiliation to search for (e.g., 'Harvard University')",
                },
                "topic": {
                    "type": "string",
                    "description": "Topic or keywords to search for (e.g., 'CRISPR gene editing')",
                },
                "mode": {
                    "type": "string",
                    "enum": ["lite", "full"],
                    "description": (
                        "Search mode: 'lite' returns 25 results with title, author string, and "
                        "matching author details; 'full' returns 5 results with complete "
                        "metadata including abstracts."
                    ),
                },
            },
        },
    },
    "get_orcid_profile": {
        "description": (
            "Get researcher profile information from ORCID. Returns name, biography, "
            "affiliations, employment history, education, and up to 5 recent publications. "
            "Use this to get detailed information about a specific researcher."
        ),
        "parameters": {
            "type": "object",
            "properties": {"orcid_id": _ORCID_ID_PARAM},
            "required": ["orcid_id"],
        },
    },
    "search_orcid_works": {
        "description": (
            "Search a researcher's ORCID publications by keywords. Use this after "
            "get_orcid_profile when you need to find specific publications among a "
            "researcher's full publication list. Keywords are matched against title, "
            "journal name, and publication type."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "orcid_id": _ORCID_ID_PARAM,
                "keywords": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": (
                        "List of keywords to search for in publications. Each keyword is "
                        "matched case-insensitively against title, journal, and type."
                    ),
                },
            },
            "required": ["orcid_id", "keywords"],
        },
    },
}

EPMC_ARGS = ("orcid", "author", "affiliation", "topic", "mode")


def sanitize_arguments(args: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Drop None, empty-string and empty-list arguments."""
    return {
        key: value
        for key, value in (args or {}).items()
        if value is not None and value != "" and not (isinstance(value, list) and not value)
    }


class ToolRegistry:
    """
    Fixed set of research tools available to the completion loop.

    Adapters can be injected for testing; otherwise they are built from
    settings on first use.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        web_search: Optional[WebSearchTool] = None,
        screening_list: Optional[ScreeningListTool] = None,
        epmc: Optional[EuropePMCTool] = None,
        orcid: Optional[ORCIDTool] = None,
    ):
        self.settings = settings or get_settings()
        self.web_search = web_search or WebSearchTool(self.settings)
        self.screening_list = screening_list or ScreeningListTool(self.settings)
        self.epmc = epmc or EuropePMCTool(self.settings)
        self.orcid = orcid or ORCIDTool(self.settings)

    def get_tool_definitions(self, names: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """
        Function-calling schemas for the requested tools, in registry order.

        Args:
            names: Tool names to include; all tools when None.
        """
        definitions = []
        for name, definition in TOOL_DEFINITIONS.items():
            if names is not None and name not in names:
                continue
            definitions.append({
                "type": "function",
                "function": {
                    "name": name,
                    "description": definition["description"],
                    "parameters": definition["parameters"],
                },
            })
        return definitions

    async def execute_tool(self, name: str, args: Optional[Dict[str, Any]]) -> ToolOutput:
        """
        Dispatch one tool call. Unknown names yield an error result, never an exception.
        """
        filtered = sanitize_arguments(args)
        logger.debug("Executing tool", tool=name, args=filtered)

        if name == "search_web":
            return await self.web_search.search(str(filtered.get("query", "")))
        if name == "search_screening_list":
            queries = filtered.get("queries", [])
            if isinstance(queries, str):
                queries = [queries]
            return await self.screening_list.search(list(queries))
        if name == "search_epmc":
            return await self.epmc.search(**{k: v for k, v in filtered.items() if k in EPMC_ARGS})
        if name == "get_orcid_profile":
            return await self.orcid.get_profile(str(filtered.get("orcid_id", "")))
        if name == "search_orcid_works":
            keywords = filtered.get("keywords", [])
            if isinstance(keywords, str):
                keywords = [keywords]
            return await self.orcid.search_works(str(filtered.get("orcid_id", "")), list(keywords))

        logger.warning("Unknown tool requested", tool=name)
        return ToolOutput.failure(f"Unknown tool: {name}")
