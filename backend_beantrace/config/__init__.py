"""
Configuration management for Backend BeanTrace.

Loads and validates settings from environment variables and an optional .env
file. Exposes a single source of truth for store, indexer and sync settings.
"""

from backend_beantrace.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
