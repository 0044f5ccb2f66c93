# dna_screener/nodes/__init__.py

"""
Stages of the screening workflow.
"""

from .background_work import BackgroundWorkNode
from .decision import DecisionNode
from .extraction import StructuredExtractionNode
from .verification import VerificationNode

__all__ = [
    "BackgroundWorkNode",
    "DecisionNode",
    "StructuredExtractionNode",
    "VerificationNode",
]
