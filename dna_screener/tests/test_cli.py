import json

import pytest
from click.testing import CliRunner

from dna_screener.main import cli
from dna_screener.models.outputs import (
    AuditTrail,
    CompleteData,
    CompleteEvent,
    Decision,
    ErrorEvent,
    RawNarratives,
    StatusEvent,
)


class FakeWorkflow:
    def __init__(self, events):
        self.events = events

    async def run(self, customer_info):
        for event in self.events:
            yield event


def complete_event():
    return CompleteEvent(data=CompleteData(
        decision=Decision(status="REVIEW", flags_count=1, summary="Email domain could not be verified."),
        checks=[],
        audit=AuditTrail(raw=RawNarratives(verification="narrative")),
    ))


@pytest.fixture
def runner():
    return CliRunner()


def test_empty_customer_info_is_rejected(runner):
    result = runner.invoke(cli, ["screen", "--customer-info", "   "])
    assert result.exit_code == 2
    assert "must not be empty" in result.output


def test_sse_output_and_saved_payload(runner, mocker, tmp_path):
    mocker.patch(
        "dna_screener.main.ScreeningWorkflow",
        return_value=FakeWorkflow([StatusEvent(message="Running verification checks..."), complete_event()]),
    )
    output_file = tmp_path / "result.json"

    result = runner.invoke(
        cli, ["screen", "--customer-info", "Jane Doe, Example University", "--sse", "--output", str(output_file)]
    )

    assert result.exit_code == 0, result.output
    frames = [f for f in result.output.split("\n\n") if f]
    assert frames[0] == 'data: {"type": "status", "message": "Running verification checks..."}'
    assert frames[-1] == "data: [DONE]"
    saved = json.loads(output_file.read_text())
    assert saved["decision"]["status"] == "REVIEW"
    assert saved["backgroundWork"] is None
    assert saved["audit"]["toolCalls"] == []


def test_error_event_exits_non_zero(runner, mocker, tmp_path):
    mocker.patch(
        "dna_screener.main.ScreeningWorkflow",
        return_value=FakeWorkflow([StatusEvent(message="Running verification checks..."),
                                   ErrorEvent(message="Verification failed: boom")]),
    )
    input_file = tmp_path / "customer.txt"
    input_file.write_text("Jane Doe\nExample University")

    result = runner.invoke(cli, ["screen", "--file", str(input_file)])

    assert result.exit_code == 1
    assert "Verification failed: boom" in result.output
