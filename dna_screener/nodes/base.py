# dna_screener/nodes/base.py

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from config.settings import Settings
from dna_screener.graph.state import ScreeningState
from dna_screener.llm.completion import CompletionClient, ToolCallCallback, ToolResultCallback
from dna_screener.utils.logger import get_logger

logger = get_logger("BaseNode")


class BaseNode(ABC):
    """
    Abstract base class for the stages of the screening workflow.
    Nodes return partial state updates; a fatal failure is reported through
    ``fatal_error`` so the graph can route to the end.
    """

    step_name = "node"

    def __init__(self, settings: Settings, completion_client: CompletionClient):
        self.settings = settings
        self.client = completion_client

    @abstractmethod
    async def run(self, state: ScreeningState) -> Dict[str, Any]:
        """
        The main execution method for the node. Must be implemented by subclasses.
        """

    def _tool_callbacks(self) -> Tuple[ToolCallCallback, ToolResultCallback]:
        """Callbacks that log tool activity of this stage as it happens."""

        def on_tool_call(tool: str, args: Dict[str, Any]) -> None:
            logger.info("Tool call", step=self.step_name, tool=tool, args=args)

        def on_tool_result(tool: str, latest_id: str, count: int) -> None:
            logger.info("Tool result", step=self.step_name, tool=tool, id=latest_id, count=count)

        return on_tool_call, on_tool_result

    def _fail(self, prefix: str, error: Exception) -> Dict[str, Any]:
        message = f"{prefix}: {error}"
        logger.error(message, step=self.step_name, exc_info=True)
        return {"fatal_error": message, "steps_completed": [f"{self.step_name}_failed"]}
