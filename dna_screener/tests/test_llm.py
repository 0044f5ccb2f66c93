import os

import pytest
from langchain_core.messages import AIMessage
from langchain_openai import ChatOpenAI

import config.settings as settings_module
from config.settings import LLMProvider, Settings, get_settings
from dna_screener.llm.cost_tracker import CostTracker
from dna_screener.llm.factory import LLMFactory
from dna_screener.observability.tracer import setup_tracing_environment


def test_openrouter_client_uses_openrouter_base_url(settings):
    llm = LLMFactory(settings).get_llm(LLMProvider.OPENROUTER)

    assert isinstance(llm, ChatOpenAI)
    assert llm.model_name == settings.openrouter_model
    assert llm.openai_api_base == settings.openrouter_base_url


def test_model_override(settings):
    llm = LLMFactory(settings).get_llm(LLMProvider.OPENROUTER, "openai/gpt-4o-mini")
    assert llm.model_name == "openai/gpt-4o-mini"


def test_missing_api_key_raises():
    factory = LLMFactory(Settings(_env_file=None, anthropic_api_key=None))
    with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
        factory.get_llm(LLMProvider.ANTHROPIC)


def test_extraction_model_role(settings):
    assert settings.get_model_name(LLMProvider.OPENROUTER, "extraction") == settings.openrouter_extraction_model
    assert settings.get_model_name(LLMProvider.OPENROUTER) == settings.openrouter_model


def test_cost_tracker_records_message_usage():
    tracker = CostTracker()
    message = AIMessage(
        content="ok",
        usage_metadata={"input_tokens": 1_000_000, "output_tokens": 100_000, "total_tokens": 1_100_000},
    )

    tracker.record_message_usage(LLMProvider.OPENROUTER, "google/gemini-3-pro-preview", message, step_name="tool_loop")
    tracker.record_message_usage(LLMProvider.OPENROUTER, "google/gemini-3-pro-preview", AIMessage(content="no usage"))

    meta = tracker.get_metadata()
    assert meta["llm_calls"] == 1
    assert meta["total_tokens"] == 1_100_000
    assert meta["estimated_cost_usd"] == pytest.approx(1.25 + 1.0)


def test_tracing_exports_langchain_environment(mocker, monkeypatch):
    for name in ("LANGCHAIN_TRACING_V2", "LANGCHAIN_API_KEY", "LANGCHAIN_PROJECT"):
        monkeypatch.setenv(name, "unset")
    mocker.patch(
        "dna_screener.observability.tracer.get_settings",
        return_value=Settings(_env_file=None, langsmith_tracing=True, langsmith_api_key="ls-key", langsmith_project="screening"),
    )

    assert setup_tracing_environment() is True
    assert os.environ["LANGCHAIN_TRACING_V2"] == "true"
    assert os.environ["LANGCHAIN_API_KEY"] == "ls-key"
    assert os.environ["LANGCHAIN_PROJECT"] == "screening"


def test_tracing_needs_an_api_key(mocker):
    mocker.patch(
        "dna_screener.observability.tracer.get_settings",
        return_value=Settings(_env_file=None, langsmith_tracing=True, langsmith_api_key=None),
    )
    assert setup_tracing_environment() is False


def test_get_settings_is_a_process_singleton(monkeypatch):
    monkeypatch.setattr(settings_module, "_settings", None)

    first = get_settings()

    assert get_settings() is first
    assert settings_module._settings is first
