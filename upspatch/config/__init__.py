"""Configuration loading and validation."""

from .io import load_config, save_config
from .models import PatcherConfig, validate_config

__all__ = ["PatcherConfig", "load_config", "save_config", "validate_config"]
