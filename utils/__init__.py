"""
Utility functions for the Card Serial Reader.
"""

from .logging import Logger

__all__ = ['Logger']
