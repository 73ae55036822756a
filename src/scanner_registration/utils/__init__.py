"""
Utility Functions Module

Common utilities used across the scanner registration project:
- Logging setup
- Typed YAML configuration
"""

from .logging import setup_logger, set_package_level
from .config import AppConfig, load_config

__all__ = [
    "setup_logger",
    "set_package_level",
    "AppConfig",
    "load_config",
]
