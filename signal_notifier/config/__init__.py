"""
Configuration for the signal notifier.
"""
from .defaults import AppConfig, get_default_config
from .loader import ConfigLoader, load_config

__all__ = ["AppConfig", "ConfigLoader", "get_default_config", "load_config"]
