# dna_screener/models/outputs.py

"""
Pydantic models for the final screening payload and the event stream.

Every run produces an ordered sequence of events ending in exactly one
``complete`` or ``error`` event. ``to_dict`` gives the wire shape.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from dna_screener.models.schemas import FlagStatus

# =============================================================================
# Final payload
# =============================================================================


class Decision(BaseModel):
    """Overall verdict derived from the determinations."""

    status: Literal["PASS", "FLAG", "REVIEW"]
    flags_count: int = Field(ge=0)
    summary: str = ""


class Check(BaseModel):
    """Evidence and determination merged for one criterion."""

    criterion: str
    status: FlagStatus
    evidence: str
    sources: List[str] = Field(default_factory=list)


class BackgroundWorkItem(BaseModel):
    """Background work row as presented to callers."""

    relevance: int
    organism: str
    summary: str
    sources: List[str] = Field(default_factory=list)


class NormalizedToolCall(BaseModel):
    """Audit row for one cited tool result."""

    model_config = ConfigDict(extra="allow")

    tool: str
    query: str
    id: str
    title: str = ""
    url: str = ""


class RawNarratives(BaseModel):
    verification: str
    work: Optional[str] = None


class AuditTrail(BaseModel):
    tool_calls: List[NormalizedToolCall] = Field(
        default_factory=list, serialization_alias="toolCalls"
    )
    raw: RawNarratives


class CompleteData(BaseModel):
    """Payload of the terminal ``complete`` event."""

    decision: Decision
    checks: List[Check] = Field(default_factory=list)
    background_work: Optional[List[BackgroundWorkItem]] = Field(
        default=None, serialization_alias="backgroundWork"
    )
    audit: AuditTrail


# =============================================================================
# Events
# =============================================================================


class _Event(BaseModel):
    def to_dict(self) -> Dict[str, Any]:
        """Wire representation (camelCase keys where callers expect them)."""
        return self.model_dump(by_alias=True, mode="json")


class StatusEvent(_Event):
    type: Literal["status"] = "status"
    message: str


class ToolCallEvent(_Event):
    type: Literal["tool_call"] = "tool_call"
    tool: str
    args: Dict[str, Any] = Field(default_factory=dict)


class ToolResultEvent(_Event):
    type: Literal["tool_result"] = "tool_result"
    tool: str
    id: str = ""
    count: int = 0


class DeltaEvent(_Event):
    type: Literal["delta"] = "delta"
    content: str


class CompleteEvent(_Event):
    type: Literal["complete"] = "complete"
    data: CompleteData


class ErrorEvent(_Event):
    type: Literal["error"] = "error"
    message: str


SSEEvent = Annotated[
    Union[StatusEvent, ToolCallEvent, ToolResultEvent, DeltaEvent, CompleteEvent, ErrorEvent],
    Field(discriminator="type"),
]

TERMINAL_EVENT_TYPES = frozenset({"complete", "error"})
