"""Builders for the screening data shared across tests."""

from dna_screener.models.schemas import (
    BackgroundWork,
    BackgroundWorkExtraction,
    Determination,
    DeterminationExtraction,
    Evidence,
    EvidenceExtraction,
    RawToolCall,
)
from dna_screener.tools.citations import format_for_model

CUSTOMER_INFO = (
    "Name: Jane Doe\n"
    "Email: jane.doe@example.edu\n"
    "Institution: Example University, Department of Microbiology\n"
    "Order: 3 gene fragments encoding GFP variants for E. coli expression"
)

AFFILIATION = "Customer Institutional Affiliation"
INSTITUTION = "Institution Type and Biomedical Focus"
EMAIL = "Email Domain Verification"
SANCTIONS = "Sanctions and Export Control Screening"


def make_tool_call(tool_name, arguments, output, counters):
    """A RawToolCall whose model_output went through the real citation formatting."""
    return RawToolCall(
        tool_name=tool_name,
        arguments=arguments,
        output=output,
        model_output=format_for_model(tool_name, output, counters),
    )


def determinations(affiliation="NO FLAG", institution="NO FLAG", email="NO FLAG", sanctions="NO FLAG"):
    return DeterminationExtraction(rows=[
        Determination(criterion=AFFILIATION, flag=affiliation),
        Determination(criterion=INSTITUTION, flag=institution),
        Determination(criterion=EMAIL, flag=email),
        Determination(criterion=SANCTIONS, flag=sanctions),
    ])


def evidence():
    return EvidenceExtraction(rows=[
        Evidence(criterion=AFFILIATION, sources=["web1", "orcid1"], evidence_summary="Listed on the department page."),
        Evidence(criterion=INSTITUTION, sources=["web1"], evidence_summary="Research university with a medical school."),
        Evidence(criterion=EMAIL, sources=["web1"], evidence_summary="example.edu belongs to the university."),
        Evidence(criterion=SANCTIONS, sources=["screen1"], evidence_summary="No matches on the screening list."),
    ])


def background_work():
    return BackgroundWorkExtraction(rows=[
        BackgroundWork(
            relevance_level=5,
            organism="Escherichia coli",
            sources=["epmc1"],
            work_summary="Expressed fluorescent reporters in E. coli.",
        )
    ])
