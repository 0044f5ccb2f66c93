# dna_screener/nodes/verification.py

from typing import Any, Dict

from config.prompts import VERIFICATION_PROMPT
from dna_screener.graph.state import ScreeningState
from dna_screener.nodes.base import BaseNode
from dna_screener.utils.logger import get_logger

logger = get_logger("VerificationNode")


class VerificationNode(BaseNode):
    """
    Stage 1: the tool loop that researches the four verification criteria.
    Its failure ends the run.
    """

    step_name = "verify"

    async def run(self, state: ScreeningState) -> Dict[str, Any]:
        run = state["run"]
        logger.info("Running verification checks...")

        on_tool_call, on_tool_result = self._tool_callbacks()
        try:
            result = await self.client.complete_with_tools(
                VERIFICATION_PROMPT.format(customer_info=run.customer_info),
                id_counters=run.counters,
                on_tool_call=on_tool_call,
                on_tool_result=on_tool_result,
            )
        except Exception as e:
            return self._fail("Verification failed", e)

        run.tool_calls.extend(result.tool_calls)
        logger.info(f"Verification finished with {len(result.tool_calls)} tool calls.")

        return {
            "verification": result.text,
            "verification_tool_calls": result.tool_calls,
            "stage_tool_calls": result.tool_calls,
            "steps_completed": [self.step_name],
        }
