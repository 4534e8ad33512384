"""
Configuration loading and file management.
"""

from .settings import (
    load_config,
    save_config,
    create_sample_config,
    validate_config_file,
    find_config_file
)

__all__ = [
    "load_config", "save_config", "create_sample_config",
    "validate_config_file", "find_config_file"
]
