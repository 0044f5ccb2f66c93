"""
Configuration module for the DNA customer screening system.

This module contains:
- settings.py: Environment configuration and application settings
- prompts.py: All LLM prompts and the fixed screening criteria
"""

from config.settings import Settings, LLMProvider, get_settings

__all__ = ["Settings", "LLMProvider", "get_settings"]
