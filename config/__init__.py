"""
Configuration module for the Card Serial Reader.
"""

from .settings import (
    Settings,
    ReaderSettings,
    ProgramConfig,
    Organization,
    ConfigError,
    initialize_config
)

__all__ = [
    'Settings',
    'ReaderSettings',
    'ProgramConfig',
    'Organization',
    'ConfigError',
    'initialize_config'
]
