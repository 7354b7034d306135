"""aksdemo configuration package.

Centralized configuration management using Pydantic Settings.
"""

from aksdemo.config.settings import Settings, get_settings, load_settings

__all__: list[str] = ["Settings", "get_settings", "load_settings"]
