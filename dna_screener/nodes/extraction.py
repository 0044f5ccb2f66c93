# dna_screener/nodes/extraction.py

import asyncio
from typing import Any, Dict

from config.prompts import (
    EXTRACTION_PROMPT_DETERMINATIONS,
    EXTRACTION_PROMPT_EVIDENCE,
    EXTRACTION_PROMPT_WORK,
    format_tool_context,
)
from dna_screener.graph.state import ScreeningState
from dna_screener.models.schemas import (
    BackgroundWorkExtraction,
    DeterminationExtraction,
    EvidenceExtraction,
)
from dna_screener.nodes.base import BaseNode
from dna_screener.utils.logger import get_logger

logger = get_logger("ExtractionNode")


class StructuredExtractionNode(BaseNode):
    """
    Stage 3: turns the research narratives into tables.

    Evidence and determinations come from the verification narrative; the
    background work table is extracted only when stage 2 produced a narrative.
    All extractions run concurrently and any failure ends the run.
    """

    step_name = "extract"

    def _context(self, text: str, tool_calls) -> str:
        return text + format_tool_context(tool_calls, self.settings.tool_context_truncation)

    async def run(self, state: ScreeningState) -> Dict[str, Any]:
        logger.info("Extracting structured results...")

        verification_context = self._context(
            state.get("verification") or "", state.get("verification_tool_calls") or []
        )
        tasks = [
            self.client.extract_structured(
                verification_context, EXTRACTION_PROMPT_EVIDENCE, EvidenceExtraction
            ),
            self.client.extract_structured(
                verification_context, EXTRACTION_PROMPT_DETERMINATIONS, DeterminationExtraction
            ),
        ]

        work = state.get("work")
        if work is not None:
            work_context = self._context(work, state.get("work_tool_calls") or [])
            tasks.append(
                self.client.extract_structured(work_context, EXTRACTION_PROMPT_WORK, BackgroundWorkExtraction)
            )

        try:
            results = await asyncio.gather(*tasks)
        except Exception as e:
            return self._fail("Extraction failed", e)

        evidence, determinations = results[0], results[1]
        background_rows = results[2].rows if len(results) > 2 else []

        logger.info(
            "Extraction finished",
            evidence=len(evidence.rows),
            determinations=len(determinations.rows),
            background_rows=len(background_rows),
        )
        return {
            "evidence": evidence.rows,
            "determinations": determinations.rows,
            "background_rows": background_rows,
            "stage_tool_calls": [],
            "steps_completed": [self.step_name],
        }
