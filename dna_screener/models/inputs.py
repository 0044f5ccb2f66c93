# dna_screener/models/inputs.py

"""
Pydantic models for system inputs.

Defines the structure of the customer information submitted by the
caller for screening.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from config.settings import LLMProvider


class ScreeningRequest(BaseModel):
    """Input for one customer screening run."""

    model_config = ConfigDict(extra="forbid")

    customer_info: str = Field(
        min_length=1,
        description="Free-text information about the customer and their order.",
    )

    # Optional overrides
    provider: Optional[LLMProvider] = Field(
        default=None, description="Optional override for the default LLM provider."
    )
    model: Optional[str] = Field(
        default=None, description="Optional override for the research model name."
    )
