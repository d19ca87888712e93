"""Configuration system."""

from perp_analytics.config.loader import load_config
from perp_analytics.config.schema import AppConfig

__all__ = ["AppConfig", "load_config"]
