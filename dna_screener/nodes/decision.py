# dna_screener/nodes/decision.py

from typing import Any, Dict, List, Optional

from config.prompts import NO_WORK_PLACEHOLDER, SUMMARY_PROMPT
from dna_screener.graph.state import ScreeningState
from dna_screener.models.outputs import BackgroundWorkItem, Decision
from dna_screener.models.schemas import BackgroundWork
from dna_screener.nodes.base import BaseNode
from dna_screener.utils.decision_rules import compute_decision, fallback_summary, merge_checks
from dna_screener.utils.logger import get_logger

logger = get_logger("DecisionNode")


def to_background_work_items(rows: List[BackgroundWork]) -> Optional[List[BackgroundWorkItem]]:
    """Reshape extracted rows for callers; None when there are no rows."""
    if not rows:
        return None
    return [
        BackgroundWorkItem(
            relevance=row.relevance_level,
            organism=row.organism,
            summary=row.work_summary,
            sources=row.sources,
        )
        for row in rows
    ]


def clean_summary(text: str) -> str:
    """Trim whitespace and one pair of surrounding quotes."""
    text = (text or "").strip()
    if text[:1] in ("'", '"'):
        text = text[1:]
    if text[-1:] in ("'", '"'):
        text = text[:-1]
    return text


class DecisionNode(BaseNode):
    """
    Stage 4: deterministic decision, merged checks and a one-sentence summary.
    A summary failure falls back to a canned sentence for the status.
    """

    step_name = "decide"

    async def _summarize(self, state: ScreeningState, status: str) -> str:
        prompt = SUMMARY_PROMPT.format(
            customer_info=state["run"].customer_info,
            verification_raw=state.get("verification") or "",
            work_raw=state.get("work") or NO_WORK_PLACEHOLDER,
        )
        try:
            return clean_summary(await self.client.generate_text(prompt))
        except Exception as e:
            logger.warning(f"Summary generation failed, using fallback: {e}")
            return fallback_summary(status)

    async def run(self, state: ScreeningState) -> Dict[str, Any]:
        logger.info("Generating summary...")

        determinations = state.get("determinations") or []
        status, flags_count = compute_decision(determinations)
        checks = merge_checks(state.get("evidence") or [], determinations)
        background_work = to_background_work_items(state.get("background_rows") or [])

        summary = await self._summarize(state, status)
        logger.info(f"Decision: {status}", flags_count=flags_count)

        return {
            "decision": Decision(status=status, flags_count=flags_count, summary=summary),
            "checks": checks,
            "background_work": background_work,
            "stage_tool_calls": [],
            "steps_completed": [self.step_name],
        }
