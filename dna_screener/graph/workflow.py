# dna_screener/graph/workflow.py

from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Literal, Optional

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph

from config.settings import Settings, get_settings
from dna_screener.graph.state import ScreeningRun, ScreeningState
from dna_screener.llm.completion import CompletionClient
from dna_screener.models.outputs import (
    AuditTrail,
    CompleteData,
    CompleteEvent,
    DeltaEvent,
    ErrorEvent,
    RawNarratives,
    SSEEvent,
    StatusEvent,
    ToolCallEvent,
)
from dna_screener.nodes.background_work import BackgroundWorkNode
from dna_screener.nodes.decision import DecisionNode
from dna_screener.nodes.extraction import StructuredExtractionNode
from dna_screener.nodes.verification import VerificationNode
from dna_screener.tools.citations import normalize_tool_calls, tool_result_event
from dna_screener.utils.logger import get_logger

logger = get_logger("Workflow")

VERIFY_STATUS = "Running verification checks..."
WORK_STATUS = "Searching for background work..."
EXTRACT_STATUS = "Extracting structured results..."
SUMMARY_STATUS = "Generating summary..."

# Status announced once a node has finished, i.e. the start of the next stage.
NEXT_STATUS = {
    "verify": WORK_STATUS,
    "research_work": EXTRACT_STATUS,
    "extract": SUMMARY_STATUS,
}

NOT_ANALYZED = "Not analyzed."


def build_delta_text(verification: str, work: Optional[str]) -> str:
    return f"## Verification Analysis\n\n{verification}\n\n## Background Work\n\n{work or NOT_ANALYZED}"


class ScreeningWorkflow:
    """
    The orchestrator for customer screening, implemented using LangGraph.

    verify -> research_work -> extract -> decide, ending early when a node
    records a fatal error. ``run`` turns the node updates into the ordered
    event stream.
    """

    def __init__(self, settings: Optional[Settings] = None, completion_client: Optional[CompletionClient] = None):
        """
        Initializes the workflow with dependencies and builds the graph.
        """
        self.settings = settings or get_settings()
        self.client = completion_client or CompletionClient(self.settings)
        self.graph = self._build_graph()

    # =========================================================================
    # Conditional Edges
    # =========================================================================

    @staticmethod
    def route_on_error(state: ScreeningState) -> Literal["continue", "end"]:
        if state.get("fatal_error"):
            logger.info("Fatal error recorded, ending workflow.")
            return "end"
        return "continue"

    # =========================================================================
    # Graph Builder
    # =========================================================================

    def _build_graph(self):
        workflow = StateGraph(ScreeningState)

        workflow.add_node("verify", VerificationNode(self.settings, self.client).run)
        workflow.add_node("research_work", BackgroundWorkNode(self.settings, self.client).run)
        workflow.add_node("extract", StructuredExtractionNode(self.settings, self.client).run)
        workflow.add_node("decide", DecisionNode(self.settings, self.client).run)

        workflow.set_entry_point("verify")
        workflow.add_conditional_edges(
            "verify",
            self.route_on_error,
            {"continue": "research_work", "end": END},
        )
        workflow.add_edge("research_work", "extract")
        workflow.add_conditional_edges(
            "extract",
            self.route_on_error,
            {"continue": "decide", "end": END},
        )
        workflow.add_edge("decide", END)

        return workflow.compile()

    # =========================================================================
    # Public Runner
    # =========================================================================

    @staticmethod
    def _complete_event(state: Dict[str, Any], run: ScreeningRun) -> CompleteEvent:
        return CompleteEvent(
            data=CompleteData(
                decision=state["decision"],
                checks=state.get("checks") or [],
                background_work=state.get("background_work"),
                audit=AuditTrail(
                    tool_calls=normalize_tool_calls(run.tool_calls),
                    raw=RawNarratives(
                        verification=state.get("verification") or "",
                        work=state.get("work") or None,
                    ),
                ),
            )
        )

    async def run(self, customer_info: str) -> AsyncIterator[SSEEvent]:
        """
        Screen one customer, yielding events in order.

        The stream always ends with exactly one ``complete`` or ``error`` event.
        """
        run = ScreeningRun(customer_info=customer_info)
        initial_state: ScreeningState = {"run": run, "steps_completed": []}
        state: Dict[str, Any] = dict(initial_state)

        started = datetime.now(timezone.utc)
        config: RunnableConfig = {
            "run_name": "dna_screening",
            "tags": [f"provider:{self.client.provider.value}"],
            "metadata": {"started_at": started.isoformat()},
        }
        logger.info("Starting screening run", customer_info_chars=len(customer_info))

        yield StatusEvent(message=VERIFY_STATUS)
        try:
            async for chunk in self.graph.astream(initial_state, config=config, stream_mode="updates"):
                for node_name, update in chunk.items():
                    update = update or {}
                    for call in update.get("stage_tool_calls") or []:
                        yield ToolCallEvent(tool=call.tool_name, args=call.arguments)
                        yield tool_result_event(call)

                    if update.get("fatal_error"):
                        yield ErrorEvent(message=update["fatal_error"])
                        return

                    state.update({k: v for k, v in update.items() if k != "steps_completed"})
                    next_status = NEXT_STATUS.get(node_name)
                    if next_status:
                        yield StatusEvent(message=next_status)
        except Exception as e:
            logger.error(f"Screening run crashed: {e}", exc_info=True)
            yield ErrorEvent(message=str(e) or e.__class__.__name__)
            return

        if state.get("decision") is None:
            yield ErrorEvent(message="Pipeline ended without a result")
            return

        duration = (datetime.now(timezone.utc) - started).total_seconds()
        logger.info(
            "Screening run finished",
            status=state["decision"].status,
            tool_calls=len(run.tool_calls),
            duration_s=round(duration, 2),
            usage=self.client.cost_tracker.get_metadata(),
        )
        yield DeltaEvent(content=build_delta_text(state.get("verification") or "", state.get("work")))
        yield self._complete_event(state, run)


async def run_pipeline(
    customer_info: str,
    workflow: Optional[ScreeningWorkflow] = None,
) -> AsyncIterator[SSEEvent]:
    """
    Screen one customer with a fresh run context.

    Args:
        customer_info: Free text describing the customer and the order.
        workflow: Pre-built workflow; one is built from settings when None.
    """
    workflow = workflow or ScreeningWorkflow()
    async for event in workflow.run(customer_info):
        yield event
