# dna_screener/llm/cost_tracker.py

"""
LLM Cost Tracker.

Aggregates token usage across every provider call of a screening run
and estimates its cost from per-provider pricing.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from config.settings import LLMProvider
from dna_screener.utils.logger import get_logger

logger = get_logger("CostTracker")

# Prices are in USD per 1 Million (M) tokens, default models only.
# OpenRouter bills the upstream model's price; the figures below are a rough
# average across the models used for screening.
LLM_PRICING_USD_PER_M = {
    (LLMProvider.OPENROUTER, "input"): 1.25,
    (LLMProvider.OPENROUTER, "output"): 10.00,
    (LLMProvider.GROQ, "input"): 0.59,
    (LLMProvider.GROQ, "output"): 0.79,
    (LLMProvider.OPENAI, "input"): 2.50,
    (LLMProvider.OPENAI, "output"): 10.00,
    (LLMProvider.ANTHROPIC, "input"): 3.00,
    (LLMProvider.ANTHROPIC, "output"): 15.00,
    (LLMProvider.ANTHROPIC, "cache_read"): 0.30,
    (LLMProvider.ANTHROPIC, "cache_write"): 3.75,
}

M_TOKENS = 1_000_000


class CostTracker:
    """
    Tracks token usage and calculates estimated cost for LLM interactions.
    """

    def __init__(self):
        """Initialize all usage metrics to zero."""
        self.total_tokens = 0
        self.prompt_tokens = 0
        self.completion_tokens = 0
        self.cache_read_tokens = 0
        self.cache_write_tokens = 0
        self.total_cost_usd = 0.0
        self.llm_calls: list[Dict[str, Any]] = []

    def _calculate_cost(
        self,
        provider: LLMProvider,
        prompt_tokens: int,
        completion_tokens: int,
        cache_read_tokens: int,
        cache_write_tokens: int,
    ) -> float:
        """
        Calculate the estimated cost for a single LLM interaction.
        """
        def price(kind: str) -> float:
            return LLM_PRICING_USD_PER_M.get((provider, kind), 0)

        return (
            prompt_tokens / M_TOKENS * price("input")
            + completion_tokens / M_TOKENS * price("output")
            + cache_read_tokens / M_TOKENS * price("cache_read")
            + cache_write_tokens / M_TOKENS * price("cache_write")
        )

    def record_usage(
        self,
        provider: LLMProvider,
        model_name: str,
        prompt_tokens: int,
        completion_tokens: int,
        latency_ms: float = 0.0,
        cache_read_tokens: int = 0,
        cache_write_tokens: int = 0,
        step_name: Optional[str] = None,
    ):
        """
        Records the token usage, calculates cost, and updates totals.
        """
        cost = self._calculate_cost(
            provider,
            prompt_tokens,
            completion_tokens,
            cache_read_tokens,
            cache_write_tokens,
        )

        self.prompt_tokens += prompt_tokens
        self.completion_tokens += completion_tokens
        self.cache_read_tokens += cache_read_tokens
        self.cache_write_tokens += cache_write_tokens
        self.total_tokens = self.prompt_tokens + self.completion_tokens
        self.total_cost_usd += cost

        self.llm_calls.append(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "step": step_name,
                "provider": provider.value,
                "model": model_name,
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "cache_read_tokens": cache_read_tokens,
                "cache_write_tokens": cache_write_tokens,
                "cost_usd": cost,
                "latency_ms": latency_ms,
            }
        )

    def record_message_usage(
        self,
        provider: LLMProvider,
        model_name: str,
        message: Any,
        latency_ms: float = 0.0,
        step_name: Optional[str] = None,
    ):
        """
        Records usage from a LangChain AIMessage's ``usage_metadata``.

        Messages without usage metadata (some providers, test doubles) are skipped.
        """
        usage = getattr(message, "usage_metadata", None)
        if not isinstance(usage, dict):
            logger.debug("No usage metadata on response", step=step_name, model=model_name)
            return

        details = usage.get("input_token_details") or {}
        self.record_usage(
            provider,
            model_name,
            prompt_tokens=int(usage.get("input_tokens") or 0),
            completion_tokens=int(usage.get("output_tokens") or 0),
            latency_ms=latency_ms,
            cache_read_tokens=int(details.get("cache_read") or 0),
            cache_write_tokens=int(details.get("cache_creation") or 0),
            step_name=step_name,
        )

    def get_metadata(self) -> Dict[str, Any]:
        """
        Returns the aggregated token usage and cost as a dictionary.
        """
        return {
            "llm_calls": len(self.llm_calls),
            "total_tokens": self.total_tokens,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "cache_read_tokens": self.cache_read_tokens,
            "cache_write_tokens": self.cache_write_tokens,
            "estimated_cost_usd": round(self.total_cost_usd, 6),
        }
