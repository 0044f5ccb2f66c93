# dna_screener/observability/tracer.py

import os

from config.settings import get_settings
from dna_screener.utils.logger import get_logger

logger = get_logger("Tracer")


def setup_tracing_environment() -> bool:
    """
    Exports the LangSmith settings to the process environment.

    LangChain and LangGraph read LANGCHAIN_TRACING_V2, LANGCHAIN_PROJECT and
    LANGCHAIN_API_KEY from the environment, so values loaded from ``.env``
    have to be exported before the first chain runs.

    Returns:
        True if tracing is enabled.
    """
    settings = get_settings()

    if settings.langsmith_tracing and settings.langsmith_api_key:
        os.environ["LANGCHAIN_TRACING_V2"] = "true"
        os.environ["LANGCHAIN_API_KEY"] = settings.langsmith_api_key
        os.environ["LANGCHAIN_PROJECT"] = settings.langsmith_project
        logger.info(f"LangSmith tracing is enabled for project: {settings.langsmith_project}")
        return True

    if settings.langsmith_tracing:
        logger.warning("LANGSMITH_TRACING is set but LANGSMITH_API_KEY is missing; tracing disabled.")
    else:
        logger.debug("LangSmith tracing is disabled.")
    return False
