import time

import pytest
import requests
from unittest.mock import MagicMock

from config.settings import Settings
from dna_screener.tools.epmc import EuropePMCTool, build_search_query
from dna_screener.tools.orcid import ORCIDTool
from dna_screener.tools.screening_list import ScreeningListTool
from dna_screener.tools.web_search import WebSearchTool

ORCID_ID = "0000-0002-1825-0097"


def json_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} error", response=response
        )
    return response


@pytest.fixture
def session():
    return MagicMock()


# --- Web search ---

@pytest.mark.asyncio
async def test_web_search_drops_results_without_url(settings):
    client = MagicMock()
    client.search.return_value = {
        "results": [
            {"url": "https://example.edu/doe", "title": "Jane Doe", "content": "Professor of Microbiology"},
            {"title": "No url here", "content": "..."},
        ]
    }
    tool = WebSearchTool(settings, client=client)

    output = await tool.search("Jane Doe Example University")

    assert output.items == [
        {"url": "https://example.edu/doe", "title": "Jane Doe", "content": "Professor of Microbiology"}
    ]
    _, kwargs = client.search.call_args
    assert kwargs["search_depth"] == "advanced"
    assert kwargs["max_results"] == 10


@pytest.mark.asyncio
async def test_web_search_without_key_is_in_band_error():
    tool = WebSearchTool(Settings(_env_file=None, tavily_api_key=None))
    output = await tool.search("anything")
    assert output.items == []
    assert output.is_error
    assert "TAVILY_API_KEY" in output.metadata["message"]


@pytest.mark.asyncio
async def test_web_search_client_exception_is_in_band(settings):
    client = MagicMock()
    client.search.side_effect = RuntimeError("upstream exploded")
    output = await WebSearchTool(settings, client=client).search("q")
    assert output.is_error
    assert "upstream exploded" in output.metadata["message"]


# --- Screening list ---

@pytest.mark.asyncio
async def test_screening_list_dedupes_and_normalizes(settings, session):
    responses = {
        "Acme Corp": json_response({"results": [
            {"name": "ACME CORP", "programs": "SDN", "source": "OFAC"},
            {"name": "ACME LTD", "programs": ["EAR", ""], "source": "BIS"},
        ]}),
        "Acme": json_response({"results": [{"name": "ACME CORP", "programs": ["OTHER"], "source": "X"}]}),
    }
    session.get.side_effect = lambda url, params=None, **kwargs: responses[params["name"]]
    tool = ScreeningListTool(settings, session=session)

    output = await tool.search(["Acme Corp", "Acme"])

    assert output.items == [
        {"name": "ACME CORP", "programs": ["SDN"], "source": "OFAC"},
        {"name": "ACME LTD", "programs": ["EAR"], "source": "BIS"},
    ]
    assert output.metadata == {"status": "matches_found", "total": 2, "queries_searched": ["Acme Corp", "Acme"]}
    sent = [call.kwargs["params"] for call in session.get.call_args_list]
    assert sorted(p["name"] for p in sent) == ["Acme", "Acme Corp"]
    assert all(p["fuzzy_name"] == "true" for p in sent)


@pytest.mark.asyncio
async def test_screening_list_all_queries_failing_is_in_band_error(settings, session):
    session.get.side_effect = requests.exceptions.ConnectionError("reset")

    output = await ScreeningListTool(settings, session=session).search(["a b", "c d"])

    assert output.items == []
    assert output.is_error
    assert "all 2 queries" in output.metadata["message"]
    assert "reset" in output.metadata["message"]
    assert output.metadata["failed_queries"] == ["a b", "c d"]
    assert output.metadata["queries_searched"] == ["a b", "c d"]


@pytest.mark.asyncio
async def test_screening_list_partial_failure_is_not_a_clean_miss(settings, session):
    def get(url, params=None, **kwargs):
        if params["name"] == "a b":
            raise requests.exceptions.ConnectionError("reset")
        return json_response({"results": []})

    session.get.side_effect = get

    output = await ScreeningListTool(settings, session=session).search(["a b", "c d"])

    assert output.items == []
    assert output.metadata["status"] == "incomplete"
    assert output.metadata["failed_queries"] == ["a b"]
    assert "1 of 2 queries failed" in output.metadata["message"]


@pytest.mark.asyncio
async def test_screening_list_partial_failure_keeps_matches(settings, session):
    def get(url, params=None, **kwargs):
        if params["name"] == "a b":
            raise requests.exceptions.HTTPError("502 error")
        return json_response({"results": [{"name": "ACME CORP", "programs": "SDN", "source": "OFAC"}]})

    session.get.side_effect = get

    output = await ScreeningListTool(settings, session=session).search(["a b", "Acme Corp"])

    assert [item["name"] for item in output.items] == ["ACME CORP"]
    assert output.metadata["status"] == "matches_found"
    assert output.metadata["failed_queries"] == ["a b"]


@pytest.mark.asyncio
async def test_screening_list_no_queries(settings, session):
    output = await ScreeningListTool(settings, session=session).search([])
    assert output.metadata["status"] == "no_queries"
    session.get.assert_not_called()


# --- Europe PMC ---

def test_epmc_query_building_strips_punctuation():
    query = build_search_query(orcid=ORCID_ID, author="O'Brien, J.", affiliation="MIT", topic="CRISPR, Cas9")
    assert query == f'AUTHORID:("{ORCID_ID}") AND AUTHOR:("OBrien J") AND AFF:(MIT) AND (CRISPR Cas9)'


@pytest.mark.asyncio
async def test_epmc_lite_matches_authors(settings, session):
    session.get.return_value = json_response({
        "hitCount": 2,
        "resultList": {"result": [
            {
                "title": "GFP folding",
                "authorString": "Doe J, Roe R.",
                "authorList": {"author": [
                    {"firstName": "Jane", "lastName": "Doe", "fullName": "Doe J",
                     "authorAffiliationDetailsList": {"authorAffiliation": [{"affiliation": "Example University"}]}},
                    {"firstName": "Rick", "lastName": "Roe", "fullName": "Roe R"},
                ]},
            },
            {"title": "Unrelated", "authorString": "Smith A.", "authorList": {"author": [{"lastName": "Smith"}]}},
        ]},
    })

    output = await EuropePMCTool(settings, session=session).search(author="Jane Doe")

    assert output.metadata == {"query": 'AUTHOR:("Jane Doe")', "mode": "lite", "hit_count": 2}
    assert output.items[0]["matching_authors"] == [
        {"first_name": "Jane", "last_name": "Doe", "affiliations": ["Example University"]}
    ]
    assert output.items[1]["matching_authors"] == "Unclear match"
    assert session.get.call_args.kwargs["params"]["pageSize"] == "25"


@pytest.mark.asyncio
async def test_epmc_full_mode(settings, session):
    session.get.return_value = json_response({"hitCount": 1, "resultList": {"result": [{
        "doi": "10.1/abc",
        "title": "Paper",
        "authorString": "Doe J.",
        "authorList": {"author": [{"fullName": "Doe J", "authorId": {"type": "ORCID", "value": ORCID_ID}}]},
        "journalInfo": {"journal": {"title": "J Bact"}},
        "pubYear": "2020",
        "abstractText": "Abstract.",
        "citedByCount": 4,
    }]}})

    output = await EuropePMCTool(settings, session=session).search(topic="GFP", mode="full")

    item = output.items[0]
    assert item["journal"] == "J Bact"
    assert item["authors"][0]["orcid"] == ORCID_ID
    assert item["cited_by_count"] == 4
    assert session.get.call_args.kwargs["params"]["pageSize"] == "5"


@pytest.mark.asyncio
async def test_epmc_requires_a_filter(settings, session):
    output = await EuropePMCTool(settings, session=session).search()
    assert output.is_error
    assert output.metadata["message"] == "At least one search parameter is required"


@pytest.mark.asyncio
async def test_epmc_http_error(settings, session):
    session.get.return_value = json_response({}, status_code=503)
    output = await EuropePMCTool(settings, session=session).search(author="Doe")
    assert output.is_error
    assert output.metadata["message"] == "EPMC error: 503"


# --- ORCID ---

def _orcid_payloads(work_count):
    return {
        "person": {
            "name": {"given-names": {"value": "Jane"}, "family-name": {"value": "Doe"}},
            "keywords": {"keyword": [{"content": "microbiology"}]},
        },
        "works": {"group": [
            {"work-summary": [{
                "title": {"title": {"value": f"Work {i} on GFP" if i % 2 else f"Work {i}"}},
                "type": "journal-article",
                "publication-date": {"year": {"value": "2020"}, "month": {"value": "05"}},
            }]}
            for i in range(work_count)
        ]},
        "educations": {"affiliation-group": [{"summaries": [{"education-summary": {
            "organization": {"name": "Example University", "address": {"city": "Boston", "country": "US"}},
            "role-title": "PhD",
            "start-date": {"year": {"value": "2010"}},
        }}]}]},
        "employments": {"affiliation-group": []},
    }


@pytest.fixture
def orcid_session(session):
    payloads = _orcid_payloads(7)

    def get(url, **kwargs):
        return json_response(payloads[url.rsplit("/", 1)[-1]])

    session.get.side_effect = get
    return session


@pytest.mark.asyncio
async def test_orcid_profile_caps_works(settings, orcid_session):
    output = await ORCIDTool(settings, session=orcid_session).get_profile(f"https://orcid.org/{ORCID_ID}")

    profile = output.items[0]
    assert profile["orcid_id"] == ORCID_ID
    assert profile["orcid_url"] == f"https://orcid.org/{ORCID_ID}"
    assert profile["given_name"] == "Jane"
    assert profile["keywords"] == ["microbiology"]
    assert profile["education"][0]["organization"] == "Example University"
    assert profile["education"][0]["start_date"] == "2010"
    assert profile["total_works_count"] == 7
    assert len(profile["works"]) == 5
    assert profile["works"][0]["publication_date"] == "2020-05"
    assert "works_note" in profile
    assert orcid_session.get.call_count == 4


@pytest.mark.asyncio
async def test_orcid_search_works_by_keyword(settings, orcid_session):
    output = await ORCIDTool(settings, session=orcid_session).search_works(ORCID_ID, ["gfp"])
    assert [w["title"] for w in output.items] == ["Work 1 on GFP", "Work 3 on GFP", "Work 5 on GFP"]
    assert output.metadata["total_works"] == 7


@pytest.mark.asyncio
async def test_orcid_not_found(settings, session):
    session.get.return_value = json_response({}, status_code=404)
    output = await ORCIDTool(settings, session=session).get_profile(ORCID_ID)
    assert output.is_error
    assert output.metadata["message"] == f"ORCID ID not found: {ORCID_ID}"


@pytest.mark.asyncio
async def test_orcid_invalid_id(settings, session):
    output = await ORCIDTool(settings, session=session).get_profile("not-an-id")
    assert output.is_error
    session.get.assert_not_called()


# --- Timeouts ---

def _hang(*args, **kwargs):
    time.sleep(0.5)
    return json_response({})


def _hung_web_search(settings, session):
    client = MagicMock()
    client.search.side_effect = _hang
    return WebSearchTool(settings, client=client, session=session).search("Jane Doe")


HUNG_ADAPTER_CALLS = {
    "web_search": _hung_web_search,
    "screening_list": lambda settings, session: ScreeningListTool(settings, session=session).search(
        ["a b", "c d", "e f", "g h"]
    ),
    "epmc": lambda settings, session: EuropePMCTool(settings, session=session).search(author="Doe"),
    "orcid_profile": lambda settings, session: ORCIDTool(settings, session=session).get_profile(ORCID_ID),
    "orcid_works": lambda settings, session: ORCIDTool(settings, session=session).search_works(ORCID_ID, ["gfp"]),
}


@pytest.mark.asyncio
@pytest.mark.parametrize("adapter", list(HUNG_ADAPTER_CALLS))
async def test_hung_upstream_times_out_in_band(session, adapter):
    settings = Settings(
        _env_file=None,
        tool_timeout_seconds=0.05,
        tavily_api_key="test-tavily-key",
        screening_list_api_key="test-screening-key",
    )
    session.get.side_effect = _hang
    started = time.monotonic()

    output = await HUNG_ADAPTER_CALLS[adapter](settings, session)

    assert time.monotonic() - started < 0.4
    assert output.items == []
    assert output.is_error
    assert "timed out" in output.metadata["message"]
