# dna_screener/tools/orcid.py

"""
ORCID public API adapter.

``get_profile`` fetches person, works, educations and employments
concurrently and merges them into one profile record with at most five
works. ``search_works`` filters the full works list by keyword.
"""

import asyncio
from typing import Any, Dict, List, Optional

import requests

from dna_screener.models.schemas import ToolOutput
from dna_screener.tools.base import BaseToolAdapter
from dna_screener.utils.logger import get_logger
from dna_screener.utils.validators import is_valid_orcid_id, normalize_orcid_id

logger = get_logger("ORCID")

ORCID_HEADERS = {"Accept": "application/vnd.orcid+json"}
MAX_WORKS_IN_PROFILE = 5


def safe_get(data: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    current = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def extract_date(date_obj: Optional[Dict[str, Any]]) -> Optional[str]:
    """ORCID fuzzy date -> "YYYY[-MM[-DD]]"."""
    if not isinstance(date_obj, dict):
        return None
    parts = [safe_get(date_obj, part, "value") for part in ("year", "month", "day")]
    parts = [p for p in parts if p]
    return "-".join(parts) if parts else None


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def parse_person(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "given_name": safe_get(data, "name", "given-names", "value"),
        "family_name": safe_get(data, "name", "family-name", "value"),
        "credit_name": safe_get(data, "name", "credit-name", "value"),
        "biography": safe_get(data, "biography", "content"),
        "keywords": [
            kw.get("content") for kw in _as_list(safe_get(data, "keywords", "keyword"))
            if isinstance(kw, dict) and kw.get("content")
        ],
        "emails": [
            e.get("email") for e in _as_list(safe_get(data, "emails", "email"))
            if isinstance(e, dict) and e.get("email")
        ],
        "external_ids": [
            {
                "type": eid.get("external-id-type"),
                "value": eid.get("external-id-value"),
                "url": safe_get(eid, "external-id-url", "value"),
            }
            for eid in _as_list(safe_get(data, "external-identifiers", "external-identifier"))
            if isinstance(eid, dict)
        ],
        "urls": [
            {"name": u.get("url-name"), "url": safe_get(u, "url", "value")}
            for u in _as_list(safe_get(data, "researcher-urls", "researcher-url"))
            if isinstance(u, dict)
        ],
    }


def parse_affiliations(data: Dict[str, Any], kind: str) -> List[Dict[str, Any]]:
    """Flatten an educations/employments response; ``kind`` is "education" or "employment"."""
    affiliations = []
    for group in _as_list(safe_get(data, "affiliation-group")):
        for summary in _as_list(safe_get(group, "summaries")):
            record = safe_get(summary, f"{kind}-summary")
            if not isinstance(record, dict):
                continue
            affiliations.append({
                "organization": safe_get(record, "organization", "name"),
                "department": record.get("department-name"),
                "role": record.get("role-title"),
                "city": safe_get(record, "organization", "address", "city"),
                "country": safe_get(record, "organization", "address", "country"),
                "start_date": extract_date(record.get("start-date")),
                "end_date": extract_date(record.get("end-date")),
            })
    return affiliations


def parse_works(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """One record per work group, using the group's first summary."""
    works = []
    for group in _as_list(safe_get(data, "group")):
        summaries = _as_list(safe_get(group, "work-summary"))
        if not summaries or not isinstance(summaries[0], dict):
            continue
        work = summaries[0]
        works.append({
            "title": safe_get(work, "title", "title", "value"),
            "type": work.get("type"),
            "publication_date": extract_date(work.get("publication-date")),
            "journal": safe_get(work, "journal-title", "value"),
            "url": safe_get(work, "url", "value"),
            "identifiers": [
                {"type": eid.get("external-id-type"), "value": eid.get("external-id-value")}
                for eid in _as_list(safe_get(group, "external-ids", "external-id"))
                if isinstance(eid, dict)
            ],
        })
    return works


class ORCIDTool(BaseToolAdapter):
    """Researcher profiles and publication lists from the ORCID registry."""

    display_name = "ORCID"

    async def _fetch(self, orcid_id: str, endpoint: str) -> Dict[str, Any]:
        data = await self._get_json(
            f"{self.settings.orcid_base_url}/{orcid_id}/{endpoint}",
            headers=ORCID_HEADERS,
        )
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _http_failure(error: requests.exceptions.HTTPError, orcid_id: str) -> ToolOutput:
        status = error.response.status_code if error.response is not None else None
        if status == 404:
            return ToolOutput.failure(f"ORCID ID not found: {orcid_id}")
        return ToolOutput.failure(f"ORCID error: API returned {status}")

    def _check_id(self, orcid_id: str) -> Optional[ToolOutput]:
        if not orcid_id:
            return ToolOutput.failure("An ORCID iD is required")
        if not is_valid_orcid_id(orcid_id):
            return ToolOutput.failure(
                f"Invalid ORCID iD: {orcid_id}. Expected format XXXX-XXXX-XXXX-XXXX"
            )
        return None

    async def get_profile(self, orcid_id: str) -> ToolOutput:
        """Merged person / education / employment / works profile."""
        orcid_id = normalize_orcid_id(orcid_id)
        invalid = self._check_id(orcid_id)
        if invalid:
            return invalid
        return await self._guarded(self._get_profile(orcid_id), orcid_id=orcid_id)

    async def _get_profile(self, orcid_id: str) -> ToolOutput:
        logger.info("Fetching ORCID profile", orcid_id=orcid_id)
        try:
            person, works, educations, employments = await asyncio.gather(
                self._fetch(orcid_id, "person"),
                self._fetch(orcid_id, "works"),
                self._fetch(orcid_id, "educations"),
                self._fetch(orcid_id, "employments"),
            )
        except requests.exceptions.HTTPError as e:
            return self._http_failure(e, orcid_id)

        all_works = parse_works(works)
        profile = {
            "orcid_id": orcid_id,
            "orcid_url": f"https://orcid.org/{orcid_id}",
            **parse_person(person),
            "education": parse_affiliations(educations, "education"),
            "employment": parse_affiliations(employments, "employment"),
            "total_works_count": len(all_works),
            "works": all_works[:MAX_WORKS_IN_PROFILE],
        }
        if len(all_works) > MAX_WORKS_IN_PROFILE:
            profile["works_note"] = (
                f"Showing {MAX_WORKS_IN_PROFILE} of {len(all_works)} works. "
                "Use search_orcid_works to search all publications by keyword."
            )

        return ToolOutput(items=[profile], metadata={})

    async def search_works(self, orcid_id: str, keywords: List[str]) -> ToolOutput:
        """Works whose title, journal or type contains any keyword (case-insensitive)."""
        orcid_id = normalize_orcid_id(orcid_id)
        invalid = self._check_id(orcid_id)
        if invalid:
            return invalid
        return await self._guarded(self._search_works(orcid_id, keywords or []), orcid_id=orcid_id)

    async def _search_works(self, orcid_id: str, keywords: List[str]) -> ToolOutput:
        try:
            works = await self._fetch(orcid_id, "works")
        except requests.exceptions.HTTPError as e:
            return self._http_failure(e, orcid_id)

        all_works = parse_works(works)
        keywords_lower = [kw.lower() for kw in keywords if kw]

        matching = []
        for work in all_works:
            text = " ".join(str(work[f]) for f in ("title", "journal", "type") if work.get(f)).lower()
            if any(kw in text for kw in keywords_lower):
                matching.append(work)

        logger.info("Searched ORCID works", orcid_id=orcid_id, keywords=keywords, matches=len(matching))
        return ToolOutput(
            items=matching,
            metadata={"orcid_id": orcid_id, "keywords": keywords, "total_works": len(all_works)},
        )
