# dna_screener/llm/factory.py

"""
LLM Client Factory.

Responsible for creating and configuring LangChain chat models
(OpenRouter, OpenAI, Anthropic, Groq) based on application settings.
OpenRouter speaks the OpenAI protocol, so it is served by ChatOpenAI
pointed at the OpenRouter base URL.
"""

from functools import lru_cache
from typing import Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_groq import ChatGroq
from langchain_openai import ChatOpenAI

from config.settings import LLMProvider, Settings


class LLMFactory:
    """
    Manages the creation and configuration of LangChain chat models.
    Every client shares the temperature, retry and timeout settings.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the factory with the application settings.
        """
        self.settings = settings

    def _get_openrouter_client(self, model_name: str) -> ChatOpenAI:
        """Create a ChatOpenAI client that talks to OpenRouter."""
        return ChatOpenAI(
            model=model_name,
            temperature=self.settings.llm_temperature,
            api_key=self.settings.openrouter_api_key,
            base_url=self.settings.openrouter_base_url,
            max_retries=self.settings.max_retries,
            timeout=self.settings.request_timeout,
            default_headers={
                "HTTP-Referer": self.settings.openrouter_referer,
                "X-Title": self.settings.openrouter_title,
            },
        )

    def _get_openai_client(self, model_name: str) -> ChatOpenAI:
        """Create and configure the ChatOpenAI client."""
        return ChatOpenAI(
            model=model_name,
            temperature=self.settings.llm_temperature,
            api_key=self.settings.openai_api_key,
            max_retries=self.settings.max_retries,
            timeout=self.settings.request_timeout,
        )

    def _get_anthropic_client(self, model_name: str) -> ChatAnthropic:
        """Create and configure the ChatAnthropic client."""
        return ChatAnthropic(
            model=model_name,
            temperature=self.settings.llm_temperature,
            api_key=self.settings.anthropic_api_key,
            max_retries=self.settings.max_retries,
            timeout=self.settings.request_timeout,
        )

    def _get_groq_client(self, model_name: str) -> ChatGroq:
        """Create and configure the ChatGroq client."""
        return ChatGroq(
            model_name=model_name,
            temperature=self.settings.llm_temperature,
            api_key=self.settings.groq_api_key,
            max_retries=self.settings.max_retries,
            timeout=self.settings.request_timeout,
        )

    @lru_cache(maxsize=8)
    def get_llm(
        self,
        provider: LLMProvider,
        model_name: Optional[str] = None,
    ) -> BaseChatModel:
        """
        Get a configured chat model. Caches clients for reuse.

        Args:
            provider: The LLMProvider enum specifying the required provider.
            model_name: Optional model name override. Defaults to settings.

        Returns:
            A configured LangChain chat model.

        Raises:
            ValueError: If the provider is invalid or not configured.
        """
        if not model_name:
            model_name = self.settings.get_model_name(provider)

        if not self.settings.validate_provider(provider):
            raise ValueError(
                f"{provider.value.upper()}_API_KEY is required for provider {provider.value}"
            )

        if provider == LLMProvider.OPENROUTER:
            return self._get_openrouter_client(model_name)
        elif provider == LLMProvider.OPENAI:
            return self._get_openai_client(model_name)
        elif provider == LLMProvider.ANTHROPIC:
            return self._get_anthropic_client(model_name)
        elif provider == LLMProvider.GROQ:
            return self._get_groq_client(model_name)
        else:
            raise ValueError(f"Unsupported LLM provider: {provider}")
