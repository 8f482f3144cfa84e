"""Configuration loading for orgdo."""

from orgdo.config.loader import load_config

__all__ = ["load_config"]
