# dna_screener/graph/__init__.py

"""
LangGraph state and workflow for a screening run.
"""
