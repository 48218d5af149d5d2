"""
Console module for the Card Serial Reader.
"""

from .app import ReaderApp, main

__all__ = ['ReaderApp', 'main']
