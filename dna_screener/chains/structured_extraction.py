# dna_screener/chains/structured_extraction.py

from typing import Optional, Type

from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable
from pydantic import BaseModel


def create_structured_extraction_chain(
    llm: BaseChatModel,
    schema: Type[BaseModel],
    method: Optional[str] = None,
) -> Runnable:
    """
    Creates the Runnable that turns a narrative into a schema-constrained object.

    The instructions and the text go into a single user message, the model is
    bound to ``schema`` and the raw message is kept alongside the parsed object
    so token usage can be recorded.

    Args:
        llm: The configured chat model.
        schema: Pydantic model describing the expected output.
        method: Structured output method, provider default when None.

    Returns:
        A Runnable taking ``{"instructions", "text"}`` and returning
        ``{"raw", "parsed", "parsing_error"}``.
    """
    prompt = ChatPromptTemplate.from_messages([("human", "{instructions}\n\n{text}")])

    kwargs = {"include_raw": True}
    if method:
        kwargs["method"] = method

    return (
        prompt
        | llm.with_structured_output(schema, **kwargs)
    ).with_config(tags=["structured_extraction_chain", schema.__name__])
