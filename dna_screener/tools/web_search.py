# dna_screener/tools/web_search.py

"""
Web search adapter backed by Tavily.

Returns flat ``{url, title, content}`` records; results without a URL
are dropped.
"""

from typing import Any, Dict, List, Optional

from tavily import TavilyClient

from config.settings import Settings
from dna_screener.models.schemas import ToolOutput
from dna_screener.tools.base import BaseToolAdapter
from dna_screener.utils.logger import get_logger

logger = get_logger("WebSearch")

SEARCH_DEPTH = "advanced"
MAX_RESULTS = 10
CHUNKS_PER_SOURCE = 5


class WebSearchTool(BaseToolAdapter):
    """Searches the web for current information about a customer or institution."""

    display_name = "Web search"

    def __init__(self, settings: Settings, client: Optional[TavilyClient] = None, **kwargs):
        super().__init__(settings, **kwargs)
        self._client = client

    def _get_client(self) -> Optional[TavilyClient]:
        if self._client is None and self.settings.tavily_api_key:
            self._client = TavilyClient(api_key=self.settings.tavily_api_key)
        return self._client

    @staticmethod
    def _parse_results(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        items = []
        for result in data.get("results") or []:
            if not isinstance(result, dict) or not result.get("url"):
                continue
            items.append({
                "url": result["url"],
                "title": result.get("title") or "",
                "content": result.get("content") or "",
            })
        return items

    async def search(self, query: str) -> ToolOutput:
        """
        Run one web search.

        Args:
            query: The search query string.
        """
        client = self._get_client()
        if client is None:
            return ToolOutput.failure("TAVILY_API_KEY is required for web search")
        if not query:
            return ToolOutput.failure("A search query is required")

        return await self._guarded(self._search(client, query), query=query)

    async def _search(self, client: TavilyClient, query: str) -> ToolOutput:
        logger.info("Searching the web", query=query)
        data = await self._run_blocking(
            client.search,
            query,
            search_depth=SEARCH_DEPTH,
            max_results=MAX_RESULTS,
            chunks_per_source=CHUNKS_PER_SOURCE,
            timeout=int(self.timeout),
        )
        items = self._parse_results(data if isinstance(data, dict) else {})
        return ToolOutput(items=items, metadata={})
