"""Configuration module -- exports Settings and load_config."""

from mindmarks.config.loader import load_config
from mindmarks.config.settings import Settings

__all__ = ["Settings", "load_config"]
