# dna_screener/tools/citations.py

"""
Citation ids for tool results.

Every result shown to the model gets an id made of a per-tool prefix and
a run-wide counter (``web1``, ``screen2``, ``epmc3``...). The narratives
cite these ids; the audit trail is re-derived from the same JSON so the
ids line up.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

from dna_screener.models.outputs import NormalizedToolCall, ToolResultEvent
from dna_screener.models.schemas import RawToolCall, ToolOutput
from dna_screener.utils.logger import get_logger
from dna_screener.utils.validators import doi_to_url, parse_year

logger = get_logger("Citations")

TOOL_PREFIXES: Dict[str, str] = {
    "search_web": "web",
    "search_screening_list": "screen",
    "search_epmc": "epmc",
    "get_orcid_profile": "orcid",
    "search_orcid_works": "orcworks",
}

EMPTY_INSTRUCTION = "Cite using [id] format (e.g., [screen1])."
RESULTS_INSTRUCTION = "Cite using [id] format (e.g., [web1], [epmc2])."
SNIPPET_PREVIEW_LENGTH = 200


def tool_prefix(tool_name: str) -> str:
    return TOOL_PREFIXES.get(tool_name) or tool_name[:4]


class CitationCounters:
    """
    Per-run counter table, prefix -> last issued number.

    Owned by a single run and shared by its tool loops, so ids stay
    unique across stages.
    """

    def __init__(self, initial: Optional[Dict[str, int]] = None):
        self._counts: Dict[str, int] = dict(initial or {})

    def next_id(self, prefix: str) -> str:
        self._counts[prefix] = self._counts.get(prefix, 0) + 1
        return f"{prefix}{self._counts[prefix]}"

    def latest_id(self, prefix: str) -> str:
        return f"{prefix}{self._counts.get(prefix, 0)}"

    def get(self, prefix: str) -> int:
        return self._counts.get(prefix, 0)

    def as_dict(self) -> Dict[str, int]:
        return dict(self._counts)

    def __repr__(self) -> str:
        return f"CitationCounters({self._counts!r})"


def format_for_model(tool_name: str, output: ToolOutput, counters: CitationCounters) -> str:
    """
    Serialize a tool result for the model, assigning citation ids.

    An empty result consumes one id so that "nothing found" is citable too.
    """
    prefix = tool_prefix(tool_name)

    if not output.items:
        payload = {"instruction": EMPTY_INSTRUCTION, "id": counters.next_id(prefix), **output.metadata}
    else:
        annotated = [
            {"id": counters.next_id(prefix), **{k: v for k, v in item.items() if k != "id"}}
            for item in output.items
        ]
        payload = {"instruction": RESULTS_INSTRUCTION, "results": annotated, **output.metadata}

    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def parse_model_output(model_output: str) -> Dict[str, Any]:
    """Decode a ``model_output`` string; anything unparseable becomes ``{}``."""
    try:
        data = json.loads(model_output)
    except (TypeError, ValueError):
        logger.debug("Unparseable tool output", preview=str(model_output)[:80])
        return {}
    return data if isinstance(data, dict) else {}


def summarize_model_output(model_output: str) -> Tuple[str, int]:
    """
    Citation id of the last result and the number of results.

    For an empty result this is the empty-result id and a count of 1;
    unparseable output gives ``("", 0)``.
    """
    data = parse_model_output(model_output)
    results = data.get("results")
    if isinstance(results, list) and results:
        last = results[-1]
        last_id = last.get("id", "") if isinstance(last, dict) else ""
        return str(last_id or ""), len(results)
    if data.get("id"):
        return str(data["id"]), 1
    return "", 0


def tool_result_event(call: RawToolCall) -> ToolResultEvent:
    last_id, count = summarize_model_output(call.model_output)
    return ToolResultEvent(tool=call.tool_name, id=last_id, count=count)


# =============================================================================
# Audit rows
# =============================================================================


def build_query(tool_name: str, args: Dict[str, Any]) -> str:
    """Human-readable description of what a tool call searched for."""
    args = args or {}
    if tool_name == "search_epmc":
        parts = []
        if args.get("author"):
            parts.append(str(args["author"]))
        if args.get("affiliation"):
            parts.append(f"at {args['affiliation']}")
        subject = args.get("keyword") or args.get("topic")
        if subject:
            parts.append(f"about {subject}")
        return " ".join(parts) if parts else "EPMC search"
    if tool_name == "search_web":
        return str(args.get("query") or "web search")
    if tool_name == "search_screening_list":
        queries = args.get("queries") or []
        return ", ".join(str(q) for q in queries) if queries else "screening list search"
    if tool_name == "get_orcid_profile":
        return str(args.get("orcid_id") or "ORCID profile")
    if tool_name == "search_orcid_works":
        return str(args.get("orcid_id") or "ORCID works")
    return json.dumps(args, default=str)


def _web_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    snippet = (item.get("content") or "")[:SNIPPET_PREVIEW_LENGTH]
    return {"title": item.get("title") or "", "url": item.get("url") or "", "snippet": snippet or None}


def _epmc_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    authors = item.get("authors")
    if isinstance(authors, list):
        authors = [a.get("name") if isinstance(a, dict) else a for a in authors]
    else:
        authors = None
    return {
        "title": item.get("title") or "",
        "url": doi_to_url(item.get("doi")),
        "authors": authors,
        "year": parse_year(item.get("pub_year")),
    }


def _screening_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    return {"title": item.get("name") or "", "url": "", "programs": item.get("programs")}


def _orcid_profile_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    full_name = f"{item.get('given_name') or ''} {item.get('family_name') or ''}".strip()
    return {"title": item.get("credit_name") or full_name or "Unknown", "url": item.get("orcid_url") or ""}


def _orcid_works_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "title": item.get("title") or "",
        "url": item.get("url") or "",
        "year": parse_year(item.get("publication_date")),
    }


def _default_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    return {"title": item.get("title") or str(item), "url": item.get("url") or ""}


FIELD_EXTRACTORS = {
    "search_web": _web_fields,
    "search_epmc": _epmc_fields,
    "search_screening_list": _screening_fields,
    "get_orcid_profile": _orcid_profile_fields,
    "search_orcid_works": _orcid_works_fields,
}


def normalize_tool_calls(raw_calls: List[RawToolCall]) -> List[NormalizedToolCall]:
    """
    Flatten tool calls into audit rows, one per cited result.

    Rows are derived from ``model_output`` so their ids match the ids the
    model saw.
    """
    rows: List[NormalizedToolCall] = []
    for call in raw_calls:
        data = parse_model_output(call.model_output)
        query = build_query(call.tool_name, call.arguments)
        items = data.get("results") or []
        extractor = FIELD_EXTRACTORS.get(call.tool_name, _default_fields)

        if not items and data.get("id"):
            rows.append(NormalizedToolCall(
                tool=call.tool_name,
                query=query,
                id=str(data["id"]),
                title=data.get("message") or "No results",
                url="",
            ))
            continue

        for item in items:
            if not isinstance(item, dict):
                continue
            rows.append(NormalizedToolCall(
                tool=call.tool_name,
                query=query,
                id=str(item.get("id") or ""),
                **extractor(item),
            ))
    return rows
