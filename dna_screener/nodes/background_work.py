# dna_screener/nodes/background_work.py

from typing import Any, Dict

from config.prompts import WORK_PROMPT
from dna_screener.graph.state import ScreeningState
from dna_screener.nodes.base import BaseNode
from dna_screener.utils.logger import get_logger

logger = get_logger("BackgroundWorkNode")


class BackgroundWorkNode(BaseNode):
    """
    Stage 2: the tool loop looking for the customer's prior laboratory work.
    Failure is not fatal; the run continues with ``work = None``.
    """

    step_name = "research_work"

    async def run(self, state: ScreeningState) -> Dict[str, Any]:
        run = state["run"]
        logger.info("Searching for background work...")

        on_tool_call, on_tool_result = self._tool_callbacks()
        try:
            result = await self.client.complete_with_tools(
                WORK_PROMPT.format(customer_info=run.customer_info),
                id_counters=run.counters,
                on_tool_call=on_tool_call,
                on_tool_result=on_tool_result,
            )
        except Exception as e:
            logger.warning(f"Background work search failed, continuing without it: {e}", exc_info=True)
            return {
                "work": None,
                "work_tool_calls": [],
                "stage_tool_calls": [],
                "steps_completed": [f"{self.step_name}_failed"],
            }

        run.tool_calls.extend(result.tool_calls)
        return {
            "work": result.text,
            "work_tool_calls": result.tool_calls,
            "stage_tool_calls": result.tool_calls,
            "steps_completed": [self.step_name],
        }
