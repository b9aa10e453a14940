"""Configuration management with Pydantic Settings."""

from option_quoter.config.settings import QuoterSettings, clear_settings_cache, get_settings

__all__ = [
    "QuoterSettings",
    "clear_settings_cache",
    "get_settings",
]
