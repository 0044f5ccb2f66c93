import pytest

from dna_screener.models.schemas import Determination, Evidence
from dna_screener.tests.factories import AFFILIATION, EMAIL, INSTITUTION, SANCTIONS, determinations
from dna_screener.utils.decision_rules import compute_decision, fallback_summary, merge_checks


def test_all_no_flag_passes():
    assert compute_decision(determinations().rows) == ("PASS", 0)


def test_sanctions_flag_forces_flag_with_single_count():
    rows = determinations(sanctions="FLAG", affiliation="FLAG", email="UNDETERMINED").rows
    assert compute_decision(rows) == ("FLAG", 1)


@pytest.mark.parametrize(
    "kwargs, expected_count",
    [
        ({"affiliation": "FLAG"}, 1),
        ({"institution": "UNDETERMINED"}, 1),
        ({"affiliation": "FLAG", "email": "UNDETERMINED", "institution": "FLAG"}, 3),
    ],
)
def test_non_sanctions_issues_go_to_review(kwargs, expected_count):
    assert compute_decision(determinations(**kwargs).rows) == ("REVIEW", expected_count)


def test_undetermined_sanctions_alone_does_not_escalate():
    assert compute_decision(determinations(sanctions="UNDETERMINED").rows) == ("PASS", 0)


def test_empty_determinations_pass():
    assert compute_decision([]) == ("PASS", 0)


def test_merge_checks_inner_joins_in_evidence_order():
    evidence = [
        Evidence(criterion=SANCTIONS, sources=["screen1"], evidence_summary="No hits."),
        Evidence(criterion=AFFILIATION, sources=["web1"], evidence_summary="Staff page."),
        Evidence(criterion=EMAIL, sources=[], evidence_summary="Domain matches."),
    ]
    dets = [
        Determination(criterion=AFFILIATION, flag="NO FLAG"),
        Determination(criterion=SANCTIONS, flag="FLAG"),
        Determination(criterion=INSTITUTION, flag="UNDETERMINED"),
    ]

    checks = merge_checks(evidence, dets)

    assert [c.criterion for c in checks] == [SANCTIONS, AFFILIATION]
    assert checks[0].status == "FLAG"
    assert checks[0].evidence == "No hits."
    assert checks[0].sources == ["screen1"]
    assert checks[1].status == "NO FLAG"


def test_fallback_summaries():
    assert fallback_summary("PASS") == "All verification criteria passed."
    assert fallback_summary("FLAG") == "Sanctions screening flagged - requires immediate review."
    assert fallback_summary("REVIEW") == "Some criteria require manual review."
