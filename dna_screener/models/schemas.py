# dna_screener/models/schemas.py

"""
Shared Pydantic models for tool results and structured extraction.

The extraction models double as the JSON schemas handed to the provider
for schema-constrained output.
"""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

Criterion = Literal[
    "Customer Institutional Affiliation",
    "Institution Type and Biomedical Focus",
    "Email Domain Verification",
    "Sanctions and Export Control Screening",
]

FlagStatus = Literal["FLAG", "NO FLAG", "UNDETERMINED"]


# =============================================================================
# Tool results
# =============================================================================


class ToolOutput(BaseModel):
    """Uniform result of every research tool adapter."""

    items: List[Dict[str, Any]] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def failure(cls, message: str, **metadata: Any) -> "ToolOutput":
        """An empty result carrying an in-band error marker."""
        return cls(items=[], metadata={"error": True, "message": message, **metadata})

    @property
    def is_error(self) -> bool:
        return bool(self.metadata.get("error"))


class RawToolCall(BaseModel):
    """One executed tool call inside a completion loop."""

    model_config = ConfigDict(protected_namespaces=())

    tool_name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)
    output: ToolOutput
    model_output: str = Field(
        description="JSON text shown to the model, with citation ids injected."
    )


class CompletionResult(BaseModel):
    """Final text and tool activity of one tool-augmented completion loop."""

    text: str = ""
    tool_calls: List[RawToolCall] = Field(default_factory=list)


# =============================================================================
# Structured extraction (narrative -> rows)
# =============================================================================


class Evidence(BaseModel):
    """One row of the verification Evidence table."""

    criterion: Criterion
    sources: List[str] = Field(description="Tool citation IDs like web1, screen1")
    evidence_summary: str


class Determination(BaseModel):
    """One row of the verification Determinations table."""

    criterion: Criterion
    flag: FlagStatus


class BackgroundWork(BaseModel):
    """One row of the background laboratory work table."""

    relevance_level: int = Field(
        description="5=customer/same organism, 4=customer/related, 3=customer/any, "
        "2=institution/same, 1=institution/related"
    )
    organism: str
    sources: List[str]
    work_summary: str


class EvidenceExtraction(BaseModel):
    """Structured output schema for the Evidence table."""

    rows: List[Evidence]


class DeterminationExtraction(BaseModel):
    """Structured output schema for the Determinations table."""

    rows: List[Determination]


class BackgroundWorkExtraction(BaseModel):
    """Structured output schema for the background work table."""

    rows: List[BackgroundWork] = Field(
        description="Up to 5 work rows, empty when no work was found."
    )
