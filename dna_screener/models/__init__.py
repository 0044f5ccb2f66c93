# dna_screener/models/__init__.py

"""
Data models for the DNA customer screening system.

Defines Pydantic models for inputs, tool results, extraction schemas,
the final payload and the event stream.
"""

from .inputs import ScreeningRequest
from .schemas import (
    ToolOutput,
    RawToolCall,
    CompletionResult,
    Evidence,
    Determination,
    BackgroundWork,
    EvidenceExtraction,
    DeterminationExtraction,
    BackgroundWorkExtraction,
)
from .outputs import (
    Decision,
    Check,
    BackgroundWorkItem,
    NormalizedToolCall,
    CompleteData,
    StatusEvent,
    ToolCallEvent,
    ToolResultEvent,
    DeltaEvent,
    CompleteEvent,
    ErrorEvent,
    SSEEvent,
)

# Public API for the models package
__all__ = [
    "ScreeningRequest",
    "ToolOutput",
    "RawToolCall",
    "CompletionResult",
    "Evidence",
    "Determination",
    "BackgroundWork",
    "EvidenceExtraction",
    "DeterminationExtraction",
    "BackgroundWorkExtraction",
    "Decision",
    "Check",
    "BackgroundWorkItem",
    "NormalizedToolCall",
    "CompleteData",
    "StatusEvent",
    "ToolCallEvent",
    "ToolResultEvent",
    "DeltaEvent",
    "CompleteEvent",
    "ErrorEvent",
    "SSEEvent",
]
