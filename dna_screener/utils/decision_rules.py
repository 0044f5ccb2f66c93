# dna_screener/utils/decision_rules.py

"""
Deterministic decision logic over the extracted determinations.

Policy: the sanctions / export-control criterion is privileged. A FLAG on
it forces an overall FLAG by itself. The other three criteria can at most
send the order to manual REVIEW, whether they are FLAG or UNDETERMINED.
An UNDETERMINED sanctions result does not escalate on its own.
"""

from typing import Iterable, List, Tuple

from config.prompts import SANCTIONS_CRITERION
from dna_screener.models.outputs import Check
from dna_screener.models.schemas import Determination, Evidence
from dna_screener.utils.logger import get_logger

logger = get_logger("DecisionRules")

FALLBACK_SUMMARIES = {
    "PASS": "All verification criteria passed.",
    "FLAG": "Sanctions screening flagged - requires immediate review.",
}
DEFAULT_FALLBACK_SUMMARY = "Some criteria require manual review."


def compute_decision(determinations: Iterable[Determination]) -> Tuple[str, int]:
    """
    Maps the per-criterion determinations to an overall status.

    Returns:
        (status, flags_count) where status is "PASS", "FLAG" or "REVIEW".
    """
    sanctions_flag = False
    other_issues = 0

    for determination in determinations:
        if determination.criterion == SANCTIONS_CRITERION:
            if determination.flag == "FLAG":
                sanctions_flag = True
        elif determination.flag in ("FLAG", "UNDETERMINED"):
            other_issues += 1

    if sanctions_flag:
        return "FLAG", 1
    if other_issues:
        return "REVIEW", other_issues
    return "PASS", 0


def merge_checks(
    evidence: Iterable[Evidence],
    determinations: Iterable[Determination],
) -> List[Check]:
    """
    Inner-joins evidence and determinations by criterion, in evidence order.

    A criterion missing from either side is dropped rather than padded,
    so an incomplete extraction shows up as a shorter checklist.
    """
    evidence_by_criterion = {row.criterion: row for row in evidence}
    determination_by_criterion = {row.criterion: row for row in determinations}

    checks = []
    for criterion, row in evidence_by_criterion.items():
        determination = determination_by_criterion.get(criterion)
        if determination is None:
            logger.debug("Dropping criterion without determination", criterion=criterion)
            continue
        checks.append(
            Check(
                criterion=criterion,
                status=determination.flag,
                evidence=row.evidence_summary,
                sources=row.sources,
            )
        )

    for criterion in determination_by_criterion.keys() - evidence_by_criterion.keys():
        logger.debug("Dropping criterion without evidence", criterion=criterion)

    return checks


def fallback_summary(status: str) -> str:
    """Canned one-sentence summary used when summary generation fails."""
    return FALLBACK_SUMMARIES.get(status, DEFAULT_FALLBACK_SUMMARY)
