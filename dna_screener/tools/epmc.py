# dna_screener/tools/epmc.py

"""
Europe PMC scholarly article search adapter.

Two verbosity modes:
- lite: up to 25 hits, each reduced to title, author string and the
  authors matching the searched name or ORCID iD.
- full: up to 5 hits with complete metadata including abstracts.
"""

import re
from typing import Any, Dict, List, Optional

import requests

from dna_screener.models.schemas import ToolOutput
from dna_screener.tools.base import BaseToolAdapter
from dna_screener.utils.logger import get_logger

logger = get_logger("EuropePMC")

MAX_RESULTS = {"lite": 25, "full": 5}
UNCLEAR_MATCH = "Unclear match"

_STRIP_CHARS = re.compile(r"[\"',.]")


def clean_term(value: str) -> str:
    """Remove characters that break Europe PMC query syntax."""
    return _STRIP_CHARS.sub("", value)


def build_search_query(
    orcid: Optional[str] = None,
    author: Optional[str] = None,
    affiliation: Optional[str] = None,
    topic: Optional[str] = None,
) -> str:
    parts = []
    if orcid:
        parts.append(f'AUTHORID:("{clean_term(orcid)}")')
    if author:
        parts.append(f'AUTHOR:("{clean_term(author)}")')
    if affiliation:
        parts.append(f"AFF:({clean_term(affiliation)})")
    if topic:
        parts.append(f"({clean_term(topic)})")
    return " AND ".join(parts) if parts else "*"


def _author_orcid(author: Dict[str, Any]) -> Optional[str]:
    author_id = author.get("authorId") or {}
    if isinstance(author_id, dict) and author_id.get("type") == "ORCID":
        return author_id.get("value")
    return None


def author_name_matches(author_search: Optional[str], author: Dict[str, Any]) -> bool:
    """True when any word of the searched name equals the first, last or full name."""
    if not author_search:
        return False
    names = {
        (author.get("firstName") or "").lower().strip(),
        (author.get("lastName") or "").lower().strip(),
        (author.get("fullName") or "").lower().strip(),
    }
    names.discard("")
    words = [w.lower() for w in author_search.split() if w.strip()]
    return any(word in names for word in words)


def author_orcid_matches(orcid_search: Optional[str], author: Dict[str, Any]) -> bool:
    return bool(orcid_search) and _author_orcid(author) == orcid_search


def get_author_affiliations(author: Dict[str, Any]) -> List[str]:
    details = author.get("authorAffiliationDetailsList") or {}
    affiliations = details.get("authorAffiliation") or []
    return [a["affiliation"] for a in affiliations if isinstance(a, dict) and a.get("affiliation")]


def _authors(article: Dict[str, Any]) -> List[Dict[str, Any]]:
    author_list = article.get("authorList") or {}
    return [a for a in author_list.get("author") or [] if isinstance(a, dict)]


def parse_article_lite(
    article: Dict[str, Any],
    orcid_search: Optional[str] = None,
    author_search: Optional[str] = None,
) -> Dict[str, Any]:
    matching = []
    for author in _authors(article):
        if not (author_orcid_matches(orcid_search, author) or author_name_matches(author_search, author)):
            continue
        info = {
            "first_name": author.get("firstName"),
            "last_name": author.get("lastName"),
            "affiliations": get_author_affiliations(author),
        }
        orcid = _author_orcid(author)
        if orcid:
            info["orcid"] = orcid
        matching.append(info)

    return {
        "title": article.get("title"),
        "author_string": article.get("authorString"),
        "matching_authors": matching or UNCLEAR_MATCH,
    }


def parse_article_full(article: Dict[str, Any]) -> Dict[str, Any]:
    authors = []
    for author in _authors(article):
        info = {
            "name": author.get("fullName"),
            "first_name": author.get("firstName"),
            "last_name": author.get("lastName"),
            "affiliations": get_author_affiliations(author),
        }
        orcid = _author_orcid(author)
        if orcid:
            info["orcid"] = orcid
        authors.append(info)

    journal = (article.get("journalInfo") or {}).get("journal") or {}
    return {
        "doi": article.get("doi"),
        "title": article.get("title"),
        "authors": authors,
        "author_string": article.get("authorString"),
        "journal": journal.get("title"),
        "pub_year": article.get("pubYear"),
        "abstract": article.get("abstractText"),
        "cited_by_count": article.get("citedByCount"),
    }


class EuropePMCTool(BaseToolAdapter):
    """Finds publications by author, affiliation, ORCID iD or topic."""

    display_name = "EPMC"

    async def search(
        self,
        orcid: Optional[str] = None,
        author: Optional[str] = None,
        affiliation: Optional[str] = None,
        topic: Optional[str] = None,
        mode: str = "lite",
    ) -> ToolOutput:
        if not (orcid or author or affiliation or topic):
            return ToolOutput.failure("At least one search parameter is required")
        if mode not in MAX_RESULTS:
            mode = "lite"

        query = build_search_query(orcid=orcid, author=author, affiliation=affiliation, topic=topic)
        return await self._guarded(
            self._search(query, mode, orcid=orcid, author=author),
            query=query,
        )

    async def _search(
        self,
        query: str,
        mode: str,
        orcid: Optional[str],
        author: Optional[str],
    ) -> ToolOutput:
        params = {
            "query": query,
            "resultType": "core",
            "pageSize": str(MAX_RESULTS[mode]),
            "format": "json",
        }
        logger.info("Searching Europe PMC", query=query, mode=mode)
        try:
            data = await self._get_json(f"{self.settings.epmc_base_url}/search", params=params)
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            return ToolOutput.failure(f"EPMC error: {status}", query=query)

        data = data if isinstance(data, dict) else {}
        results = [r for r in (data.get("resultList") or {}).get("result") or [] if isinstance(r, dict)]
        if mode == "lite":
            items = [parse_article_lite(a, orcid, author) for a in results]
        else:
            items = [parse_article_full(a) for a in results]

        return ToolOutput(
            items=items,
            metadata={"query": query, "mode": mode, "hit_count": data.get("hitCount") or 0},
        )
