import pytest
from unittest.mock import AsyncMock, MagicMock

from dna_screener.models.schemas import ToolOutput
from dna_screener.tools.registry import ToolRegistry, sanitize_arguments


@pytest.fixture
def registry(settings):
    adapters = {name: MagicMock() for name in ("web_search", "screening_list", "epmc", "orcid")}
    adapters["web_search"].search = AsyncMock(return_value=ToolOutput(items=[{"url": "u"}]))
    adapters["screening_list"].search = AsyncMock(return_value=ToolOutput())
    adapters["epmc"].search = AsyncMock(return_value=ToolOutput())
    adapters["orcid"].get_profile = AsyncMock(return_value=ToolOutput())
    adapters["orcid"].search_works = AsyncMock(return_value=ToolOutput())
    return ToolRegistry(settings, **adapters)


def test_definitions_are_function_schemas_in_registry_order(registry):
    definitions = registry.get_tool_definitions()
    assert [d["function"]["name"] for d in definitions] == [
        "search_web",
        "search_screening_list",
        "search_epmc",
        "get_orcid_profile",
        "search_orcid_works",
    ]
    assert all(d["type"] == "function" for d in definitions)
    assert definitions[1]["function"]["parameters"]["required"] == ["queries"]


def test_definitions_filtered_by_name(registry):
    definitions = registry.get_tool_definitions(["get_orcid_profile", "search_web"])
    assert [d["function"]["name"] for d in definitions] == ["search_web", "get_orcid_profile"]


def test_sanitize_drops_empty_values():
    assert sanitize_arguments({"a": None, "b": "", "c": [], "d": "x", "e": 0, "f": False}) == {
        "d": "x", "e": 0, "f": False
    }
    assert sanitize_arguments(None) == {}


@pytest.mark.asyncio
async def test_dispatches_by_name(registry):
    output = await registry.execute_tool("search_web", {"query": "jane doe"})
    assert output.items == [{"url": "u"}]
    registry.web_search.search.assert_awaited_once_with("jane doe")

    await registry.execute_tool("search_epmc", {"author": "Doe", "topic": "", "bogus": 1})
    registry.epmc.search.assert_awaited_once_with(author="Doe")

    await registry.execute_tool("search_orcid_works", {"orcid_id": "0000-0002-1825-0097", "keywords": "GFP"})
    registry.orcid.search_works.assert_awaited_once_with("0000-0002-1825-0097", ["GFP"])


@pytest.mark.asyncio
async def test_missing_arguments_become_defaults(registry):
    await registry.execute_tool("search_screening_list", {"queries": []})
    registry.screening_list.search.assert_awaited_once_with([])

    await registry.execute_tool("get_orcid_profile", {})
    registry.orcid.get_profile.assert_awaited_once_with("")


@pytest.mark.asyncio
async def test_unknown_tool_is_error_result(registry):
    output = await registry.execute_tool("launch_rocket", {"target": "moon"})
    assert output.items == []
    assert output.metadata == {"error": True, "message": "Unknown tool: launch_rocket"}
