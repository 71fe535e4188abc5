"""Configuration package for esodm core."""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
