# dna_screener/tools/screening_list.py

"""
US Consolidated Screening List adapter (data.trade.gov).

Each name query is searched with fuzzy matching; hits from all queries
are de-duplicated by entity name, first occurrence wins.
"""

import asyncio
from typing import Any, Dict, List

from dna_screener.models.schemas import ToolOutput
from dna_screener.tools.base import BaseToolAdapter
from dna_screener.utils.logger import get_logger

logger = get_logger("ScreeningList")


def parse_entity(entity: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten one screening list entity to ``{name, programs, source}``."""
    programs_raw = entity.get("programs")
    if isinstance(programs_raw, str):
        programs = [programs_raw] if programs_raw else []
    elif isinstance(programs_raw, list):
        programs = [p for p in programs_raw if p]
    else:
        programs = []

    return {
        "name": entity.get("name"),
        "programs": programs,
        "source": entity.get("source"),
    }


class ScreeningListTool(BaseToolAdapter):
    """Checks names against sanctioned, denied and restricted party lists."""

    display_name = "Screening list"

    async def _search_single(self, query: str) -> List[Dict[str, Any]]:
        """One fuzzy name search."""
        params = {
            "subscription-key": self.settings.screening_list_api_key,
            "name": query,
            "fuzzy_name": "true",
        }
        data = await self._get_json(f"{self.settings.screening_list_base_url}/search", params=params)
        results = data.get("results") if isinstance(data, dict) else None
        return [r for r in results or [] if isinstance(r, dict)]

    def _describe_failure(self, error: Exception) -> str:
        if isinstance(error, asyncio.TimeoutError):
            return f"timed out after {self.timeout:g} seconds"
        return str(error) or error.__class__.__name__

    async def search(self, queries: List[str]) -> ToolOutput:
        """
        Search the list for every query.

        Queries run concurrently, each under the tool timeout. A failed query
        is never reported as a clean miss: when every query fails the result
        is an error, otherwise the failed ones are listed in ``failed_queries``.

        Args:
            queries: Name keywords, each a few distinct words.
        """
        queries = [q for q in queries or [] if q]
        if not queries:
            return ToolOutput(
                items=[],
                metadata={
                    "status": "no_queries",
                    "message": "No search queries provided.",
                    "queries_searched": queries,
                },
            )

        if not self.settings.screening_list_api_key:
            return ToolOutput.failure(
                "SCREENING_LIST_API_KEY is required",
                queries_searched=queries,
            )

        return await self._guarded(self._search(queries), queries_searched=queries)

    async def _search(self, queries: List[str]) -> ToolOutput:
        outcomes = await asyncio.gather(
            *(self._search_single(query) for query in queries),
            return_exceptions=True,
        )

        hits: List[Dict[str, Any]] = []
        failed: List[str] = []
        errors: List[str] = []
        for query, outcome in zip(queries, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                failed.append(query)
                errors.append(self._describe_failure(outcome))
                logger.warning(f"Screening list query failed: {errors[-1]}", query=query)
                continue
            hits.extend(outcome)

        if len(failed) == len(queries):
            return ToolOutput.failure(
                f"Screening list lookup failed for all {len(queries)} queries: {errors[0]}",
                queries_searched=queries,
                failed_queries=queries,
            )

        seen = set()
        unique = []
        for entity in hits:
            name = entity.get("name")
            if name and name not in seen:
                seen.add(name)
                unique.append(parse_entity(entity))

        logger.info(
            "Screening list search finished",
            queries=queries,
            matches=len(unique),
            failed=len(failed),
        )

        metadata: Dict[str, Any] = {"queries_searched": queries}
        if failed:
            metadata["failed_queries"] = failed

        if not unique and failed:
            metadata.update(
                status="incomplete",
                message=(
                    f"No matches for the queries that completed, but {len(failed)} of "
                    f"{len(queries)} queries failed; the screening is incomplete."
                ),
            )
            return ToolOutput(items=[], metadata=metadata)

        if not unique:
            metadata.update(
                status="no_matches",
                message="No matches found in the US Consolidated Screening List.",
            )
            return ToolOutput(items=[], metadata=metadata)

        metadata.update(status="matches_found", total=len(unique))
        return ToolOutput(items=unique, metadata=metadata)
