# dna_screener/chains/__init__.py

"""
LangChain Runnables used by the completion client.
"""

from .structured_extraction import create_structured_extraction_chain
from .text_generation import create_text_generation_chain

__all__ = ["create_structured_extraction_chain", "create_text_generation_chain"]
