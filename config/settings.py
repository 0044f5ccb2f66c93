"""
Configuration settings for the DNA customer screening system.

Loads configuration from environment variables using Pydantic Settings.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProvider(str, Enum):
    """Supported LLM providers."""

    OPENROUTER = "openrouter"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GROQ = "groq"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # LLM Provider Configuration
    # -------------------------------------------------------------------------
    default_llm_provider: LLMProvider = Field(
        default=LLMProvider.OPENROUTER,
        description="Default LLM provider to use",
    )

    # API Keys
    openrouter_api_key: Optional[str] = Field(default=None, description="OpenRouter API key")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")
    groq_api_key: Optional[str] = Field(default=None, description="Groq API key")

    # OpenRouter speaks the OpenAI wire format
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenRouter API base URL",
    )
    openrouter_referer: str = Field(
        default="https://dna-screener.example.com",
        description="HTTP-Referer header sent to OpenRouter",
    )
    openrouter_title: str = Field(
        default="DNA Customer Screener",
        description="X-Title header sent to OpenRouter",
    )

    # Research (tool loop) models per provider
    openrouter_model: str = Field(default="google/gemini-3-pro-preview")
    openai_model: str = Field(default="gpt-4o-2024-11-20")
    anthropic_model: str = Field(default="claude-sonnet-4-20250514")
    groq_model: str = Field(default="llama-3.3-70b-versatile")

    # Extraction / summary models per provider
    openrouter_extraction_model: str = Field(default="google/gemini-3-flash-preview")
    openai_extraction_model: str = Field(default="gpt-4o-mini")
    anthropic_extraction_model: str = Field(default="claude-3-5-haiku-latest")
    groq_extraction_model: str = Field(default="llama-3.1-8b-instant")

    # -------------------------------------------------------------------------
    # LLM Behavior
    # -------------------------------------------------------------------------
    llm_temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="LLM temperature (0 = deterministic)",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum retries for failed LLM calls",
    )
    request_timeout: int = Field(
        default=120,
        ge=10,
        le=600,
        description="LLM request timeout in seconds",
    )
    max_tool_iterations: int = Field(
        default=20,
        ge=1,
        le=50,
        description="Maximum provider calls in one tool-augmented completion loop",
    )
    structured_output_method: Literal["json_schema", "function_calling", "json_mode"] = Field(
        default="json_schema",
        description="How structured extraction is enforced by the provider",
    )
    tool_context_truncation: int = Field(
        default=2000,
        ge=100,
        le=20000,
        description="Characters of each tool output kept in the extraction context",
    )

    # -------------------------------------------------------------------------
    # Research Tools
    # -------------------------------------------------------------------------
    tavily_api_key: Optional[str] = Field(default=None, description="Tavily web search API key")
    screening_list_api_key: Optional[str] = Field(
        default=None,
        description="data.trade.gov Consolidated Screening List subscription key",
    )
    screening_list_base_url: str = Field(
        default="https://data.trade.gov/consolidated_screening_list/v1",
    )
    epmc_base_url: str = Field(default="https://www.ebi.ac.uk/europepmc/webservices/rest")
    orcid_base_url: str = Field(default="https://pub.orcid.org/v3.0")
    user_agent: str = Field(
        default="DNAScreener/1.0 (compatible; KYC research)",
        description="User agent for research tool requests",
    )
    tool_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=300.0,
        description="Hard timeout for a single research tool call in seconds",
    )

    # -------------------------------------------------------------------------
    # Observability & Logging
    # -------------------------------------------------------------------------
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARN, ERROR)",
    )
    log_format: str = Field(
        default="json",
        description="Log format (json or text)",
    )

    # LangSmith
    langsmith_api_key: Optional[str] = Field(
        default=None,
        description="LangSmith API key for observability",
    )
    langsmith_project: str = Field(
        default="dna-customer-screening",
        description="LangSmith project name",
    )
    langsmith_tracing: bool = Field(
        default=False,
        description="Enable LangSmith tracing",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARN", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v_lower

    def get_available_providers(self) -> list[LLMProvider]:
        """
        Get list of providers with valid API keys.

        Returns:
            List of available LLM providers
        """
        return [p for p in LLMProvider if self.get_api_key(p)]

    def get_api_key(self, provider: LLMProvider) -> Optional[str]:
        """
        Get API key for specified provider.

        Args:
            provider: LLM provider

        Returns:
            API key if available, None otherwise
        """
        if provider == LLMProvider.OPENROUTER:
            return self.openrouter_api_key
        elif provider == LLMProvider.OPENAI:
            return self.openai_api_key
        elif provider == LLMProvider.ANTHROPIC:
            return self.anthropic_api_key
        elif provider == LLMProvider.GROQ:
            return self.groq_api_key
        return None

    def get_model_name(self, provider: LLMProvider, role: str = "main") -> str:
        """
        Get model name for specified provider.

        Args:
            provider: LLM provider
            role: "main" for the research tool loops, "extraction" for
                structured extraction and summaries

        Returns:
            Model name
        """
        suffix = "_extraction_model" if role == "extraction" else "_model"
        return getattr(self, f"{provider.value}{suffix}", "")

    def validate_provider(self, provider: LLMProvider) -> bool:
        """
        Check if provider is available (has valid API key).

        Args:
            provider: LLM provider to validate

        Returns:
            True if provider is available, False otherwise
        """
        return provider in self.get_available_providers()


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get singleton settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
