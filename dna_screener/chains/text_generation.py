# dna_screener/chains/text_generation.py

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable


def create_text_generation_chain(llm: BaseChatModel) -> Runnable:
    """
    Creates the Runnable for one-shot text generation (e.g. the decision summary).

    Args:
        llm: The configured chat model.

    Returns:
        A Runnable that takes ``{"prompt": str}`` and returns the response text.
    """
    prompt = ChatPromptTemplate.from_messages([("human", "{prompt}")])

    return (
        prompt
        | llm
        | StrOutputParser()
    ).with_config(tags=["text_generation_chain"])
