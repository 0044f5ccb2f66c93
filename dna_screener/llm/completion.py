# dna_screener/llm/completion.py

"""
Completion client.

Three ways of talking to the model:
- generate_text: plain prompt in, text out.
- extract_structured: narrative in, schema-validated object out.
- complete_with_tools: the agentic loop. The model may request tool calls;
  each is executed through the ToolRegistry, its result annotated with
  citation ids and fed back, until the model answers without requesting
  any tool or the iteration cap is reached.
"""

import json
import time
from typing import Any, Callable, Dict, List, Optional, Type

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage
from pydantic import BaseModel

from config.settings import LLMProvider, Settings, get_settings
from dna_screener.chains import create_structured_extraction_chain, create_text_generation_chain
from dna_screener.llm.cost_tracker import CostTracker
from dna_screener.llm.factory import LLMFactory
from dna_screener.models.schemas import CompletionResult, RawToolCall, ToolOutput
from dna_screener.tools.citations import CitationCounters, format_for_model, tool_prefix
from dna_screener.tools.registry import ToolRegistry
from dna_screener.utils.logger import get_logger

logger = get_logger("CompletionClient")

ToolCallCallback = Callable[[str, Dict[str, Any]], None]
ToolResultCallback = Callable[[str, str, int], None]

# Providers whose LangChain integration accepts an explicit structured output method.
_METHOD_AWARE_PROVIDERS = (LLMProvider.OPENROUTER, LLMProvider.OPENAI)


def message_text(message: BaseMessage) -> str:
    """Text content of a chat message, joining text blocks of multi-part content."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def parse_tool_arguments(raw: Any) -> Dict[str, Any]:
    """Decode raw tool arguments; anything that is not a JSON object becomes ``{}``."""
    if isinstance(raw, dict):
        return raw
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _requested_calls(response: AIMessage) -> List[Dict[str, Any]]:
    """
    Tool calls requested by a response, in order.

    Calls whose arguments could not be parsed are kept with empty arguments.
    """
    calls = [
        {"name": call["name"], "args": parse_tool_arguments(call.get("args")), "id": call.get("id")}
        for call in getattr(response, "tool_calls", None) or []
    ]
    for invalid in getattr(response, "invalid_tool_calls", None) or []:
        if not invalid.get("name"):
            continue
        logger.warning(
            "Malformed tool arguments, calling with none",
            tool=invalid.get("name"),
            error=invalid.get("error"),
        )
        calls.append({
            "name": invalid["name"],
            "args": parse_tool_arguments(invalid.get("args")),
            "id": invalid.get("id"),
        })
    return calls


class CompletionClient:
    """
    LLM gateway used by the screening pipeline.

    All methods raise on provider errors; callers decide whether a failure
    is fatal. Tool failures never raise, they come back as error results.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        llm_factory: Optional[LLMFactory] = None,
        registry: Optional[ToolRegistry] = None,
        cost_tracker: Optional[CostTracker] = None,
        provider: Optional[LLMProvider] = None,
        main_model: Optional[str] = None,
    ):
        self.settings = settings or get_settings()
        self.llm_factory = llm_factory or LLMFactory(self.settings)
        self.registry = registry or ToolRegistry(self.settings)
        self.cost_tracker = cost_tracker or CostTracker()
        self.provider = provider or self.settings.default_llm_provider
        self.main_model = main_model

    def _resolve_model(self, model: Optional[str], role: str) -> str:
        if not model and role == "main":
            model = self.main_model
        return model or self.settings.get_model_name(self.provider, role)

    def _get_llm(self, model_name: str) -> BaseChatModel:
        return self.llm_factory.get_llm(self.provider, model_name)

    async def generate_text(self, prompt: str, model: Optional[str] = None) -> str:
        """Single-turn completion returning the response text."""
        model_name = self._resolve_model(model, "extraction")
        chain = create_text_generation_chain(self._get_llm(model_name))

        start_time = time.perf_counter()
        text = await chain.ainvoke({"prompt": prompt})
        logger.debug(
            "Generated text",
            model=model_name,
            latency_ms=round((time.perf_counter() - start_time) * 1000, 1),
        )
        return text

    async def extract_structured(
        self,
        text: str,
        instruction_prompt: str,
        schema: Type[BaseModel],
        model: Optional[str] = None,
    ) -> BaseModel:
        """
        Extract a ``schema`` instance from ``text`` following ``instruction_prompt``.

        Raises:
            ValueError: If the model returned nothing that validates against the schema.
        """
        model_name = self._resolve_model(model, "extraction")
        method = (
            self.settings.structured_output_method
            if self.provider in _METHOD_AWARE_PROVIDERS
            else None
        )
        chain = create_structured_extraction_chain(self._get_llm(model_name), schema, method)

        start_time = time.perf_counter()
        result = await chain.ainvoke({"instructions": instruction_prompt, "text": text})
        latency_ms = (time.perf_counter() - start_time) * 1000

        if isinstance(result, dict) and "parsed" in result:
            if result.get("raw") is not None:
                self.cost_tracker.record_message_usage(
                    self.provider, model_name, result["raw"],
                    latency_ms=latency_ms, step_name=f"extract_{schema.__name__}",
                )
            if result.get("parsing_error") is not None:
                raise ValueError(f"Invalid {schema.__name__} output: {result['parsing_error']}")
            result = result.get("parsed")

        if result is None:
            raise ValueError(f"No structured output returned for {schema.__name__}")
        if not isinstance(result, schema):
            result = schema.model_validate(result)

        logger.debug("Extracted structured output", schema=schema.__name__, model=model_name)
        return result

    async def _execute(self, name: str, args: Dict[str, Any]) -> ToolOutput:
        try:
            return await self.registry.execute_tool(name, args)
        except Exception as e:
            logger.error(f"Tool {name} raised: {e}", exc_info=True)
            return ToolOutput.failure(f"{name} failed: {e}")

    async def complete_with_tools(
        self,
        prompt: str,
        model: Optional[str] = None,
        tool_names: Optional[List[str]] = None,
        id_counters: Optional[CitationCounters] = None,
        on_tool_call: Optional[ToolCallCallback] = None,
        on_tool_result: Optional[ToolResultCallback] = None,
    ) -> CompletionResult:
        """
        Run the tool-augmented completion loop.

        Args:
            prompt: The user prompt starting the conversation.
            model: Model override, main model by default.
            tool_names: Tools to offer, all registered tools when None.
            id_counters: Citation counters shared across the loops of one run.
            on_tool_call: Called with (tool name, arguments) before each tool runs.
            on_tool_result: Called with (tool name, latest citation id, item count) after.

        Returns:
            The final response text and every executed tool call, in order.
        """
        model_name = self._resolve_model(model, "main")
        counters = id_counters if id_counters is not None else CitationCounters()
        llm = self._get_llm(model_name).bind_tools(self.registry.get_tool_definitions(tool_names))

        messages: List[BaseMessage] = [HumanMessage(content=prompt)]
        tool_calls: List[RawToolCall] = []
        response: Optional[AIMessage] = None

        for iteration in range(1, self.settings.max_tool_iterations + 1):
            start_time = time.perf_counter()
            response = await llm.ainvoke(messages)
            self.cost_tracker.record_message_usage(
                self.provider, model_name, response,
                latency_ms=(time.perf_counter() - start_time) * 1000,
                step_name="tool_loop",
            )
            messages.append(response)

            requested = _requested_calls(response)
            if not requested:
                break

            logger.info("Model requested tools", iteration=iteration, tools=[c["name"] for c in requested])
            for call in requested:
                name, args = call["name"], call["args"]
                if on_tool_call:
                    on_tool_call(name, args)

                output = await self._execute(name, args)
                model_output = format_for_model(name, output, counters)
                prefix = tool_prefix(name)
                if on_tool_result:
                    on_tool_result(name, counters.latest_id(prefix), len(output.items))

                tool_calls.append(RawToolCall(
                    tool_name=name,
                    arguments=args,
                    output=output,
                    model_output=model_output,
                ))
                messages.append(ToolMessage(
                    content=model_output,
                    tool_call_id=call["id"] or f"{name}_{len(tool_calls)}",
                    name=name,
                ))
        else:
            logger.warning(
                "Tool loop hit the iteration cap, using the output so far",
                max_iterations=self.settings.max_tool_iterations,
                tool_calls=len(tool_calls),
            )

        text = message_text(response) if response is not None else ""
        logger.info("Tool loop finished", tool_calls=len(tool_calls), text_chars=len(text))
        return CompletionResult(text=text, tool_calls=tool_calls)

