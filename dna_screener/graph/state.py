# dna_screener/graph/state.py

import operator
from dataclasses import dataclass, field
from typing import Annotated, List, Optional, TypedDict

from dna_screener.models.outputs import BackgroundWorkItem, Check, Decision
from dna_screener.models.schemas import BackgroundWork, Determination, Evidence, RawToolCall
from dna_screener.tools.citations import CitationCounters

# =============================================================================
# Run context
# =============================================================================


@dataclass
class ScreeningRun:
    """
    Per-invocation context shared by the stages of one screening run.

    Created fresh for every run; the citation counters are shared by both
    tool loops so ids never repeat within a run.
    """

    customer_info: str
    counters: CitationCounters = field(default_factory=CitationCounters)
    tool_calls: List[RawToolCall] = field(default_factory=list)


# =============================================================================
# State Definition
# =============================================================================


class ScreeningState(TypedDict, total=False):
    """
    The state object for the LangGraph workflow.
    Each node returns only the keys it changes.
    """
    # ------------------------------------
    # 1. Input
    # ------------------------------------
    run: ScreeningRun

    # ------------------------------------
    # 2. Research stages
    # ------------------------------------
    verification: Optional[str]
    work: Optional[str]  # None when the background work stage failed
    verification_tool_calls: List[RawToolCall]
    work_tool_calls: List[RawToolCall]

    # Tool calls made by the node that produced this update, for telemetry
    stage_tool_calls: List[RawToolCall]

    # ------------------------------------
    # 3. Extraction
    # ------------------------------------
    evidence: List[Evidence]
    determinations: List[Determination]
    background_rows: List[BackgroundWork]

    # ------------------------------------
    # 4. Decision
    # ------------------------------------
    decision: Optional[Decision]
    checks: List[Check]
    background_work: Optional[List[BackgroundWorkItem]]

    # ------------------------------------
    # 5. Control / Observability
    # ------------------------------------
    fatal_error: Optional[str]
    steps_completed: Annotated[List[str], operator.add]
