"""
Configuration Module
====================

Environment variable management using pydantic-settings.
"""

from product_search.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
