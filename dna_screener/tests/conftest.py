import pytest
from unittest.mock import AsyncMock, MagicMock

from config.settings import LLMProvider, Settings
from dna_screener.llm.cost_tracker import CostTracker
from dna_screener.models.schemas import (
    BackgroundWorkExtraction,
    CompletionResult,
    DeterminationExtraction,
    EvidenceExtraction,
    ToolOutput,
)
from dna_screener.tests.factories import background_work, determinations, evidence, make_tool_call
from dna_screener.tools.citations import CitationCounters


@pytest.fixture
def settings():
    """Settings isolated from the environment and any local .env file."""
    return Settings(
        _env_file=None,
        default_llm_provider=LLMProvider.OPENROUTER,
        openrouter_api_key="test-openrouter-key",
        tavily_api_key="test-tavily-key",
        screening_list_api_key="test-screening-key",
        max_tool_iterations=5,
        tool_timeout_seconds=2,
    )


@pytest.fixture
def verification_result():
    counters = CitationCounters()
    calls = [
        make_tool_call(
            "search_web",
            {"query": "Jane Doe Example University"},
            ToolOutput(items=[{"url": "https://example.edu/doe", "title": "Jane Doe", "content": "Professor"}]),
            counters,
        ),
        make_tool_call(
            "search_screening_list",
            {"queries": ["Jane Doe", "Example University"]},
            ToolOutput(items=[], metadata={"status": "no_matches", "message": "No matches found."}),
            counters,
        ),
    ]
    return CompletionResult(text="Jane Doe is affiliated with Example University [web1]. No sanctions hits [screen1].", tool_calls=calls)


@pytest.fixture
def work_result():
    counters = CitationCounters({"web": 1, "screen": 1})
    calls = [
        make_tool_call(
            "search_epmc",
            {"author": "Jane Doe", "topic": "GFP"},
            ToolOutput(items=[{"title": "GFP in E. coli", "author_string": "Doe J"}], metadata={"hit_count": 1}),
            counters,
        ),
    ]
    return CompletionResult(text="Doe published GFP expression work in E. coli [epmc1].", tool_calls=calls)


@pytest.fixture
def mock_client(verification_result, work_result):
    """A CompletionClient double scripted for a clean PASS run."""
    client = MagicMock()
    client.provider = LLMProvider.OPENROUTER
    client.cost_tracker = CostTracker()
    client.complete_with_tools = AsyncMock(side_effect=[verification_result, work_result])

    async def extract(text, instruction_prompt, schema, model=None):
        if schema is EvidenceExtraction:
            return evidence()
        if schema is DeterminationExtraction:
            return determinations()
        if schema is BackgroundWorkExtraction:
            return background_work()
        raise AssertionError(f"unexpected schema {schema}")

    client.extract_structured = AsyncMock(side_effect=extract)
    client.generate_text = AsyncMock(return_value='"Customer verified at Example University with no sanctions concerns."')
    return client
