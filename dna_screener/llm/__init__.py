# dna_screener/llm/__init__.py

"""
LLM Management Package.

Contains the logic for initializing chat model clients (factory), the
completion client driving the tool loops (completion) and token
usage / cost tracking (cost_tracker).
"""

from .completion import CompletionClient
from .cost_tracker import CostTracker
from .factory import LLMFactory

__all__ = ["CompletionClient", "CostTracker", "LLMFactory"]
