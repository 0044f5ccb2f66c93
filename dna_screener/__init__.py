# dna_screener/__init__.py

"""
Customer screening for a synthetic DNA provider.

Research tool loops, structured extraction and a deterministic decision,
streamed as an ordered sequence of events.
"""

# No high-level imports are needed here, as components are accessed via their
# specific sub-modules (e.g., dna_screener.graph, dna_screener.tools).
