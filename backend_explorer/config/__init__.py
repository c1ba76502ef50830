"""
Configuration management for Backend Explorer.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for indexer, RPC, cache, and timeout settings.
"""

from backend_explorer.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
