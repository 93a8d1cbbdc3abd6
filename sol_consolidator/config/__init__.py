"""
Configuration management for the SOL consolidator.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for backend URL, bundle sizing and rate limits.
"""

from sol_consolidator.config.settings import ConsolidatorConfig, get_settings  # noqa: F401

__all__ = ["ConsolidatorConfig", "get_settings"]
