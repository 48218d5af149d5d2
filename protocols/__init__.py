"""
Protocol module for the Card Serial Reader.

This module contains reader protocol implementations:
- Card Polling Protocol (report each tap once)
"""

from .base import BaseProtocol, ProtocolResult, TapRecord, TAP_HISTORY
from .polling import CardPollingProtocol, PollingState, NO_CARD

__all__ = [
    'BaseProtocol',
    'ProtocolResult',
    'TapRecord',
    'TAP_HISTORY',
    'CardPollingProtocol',
    'PollingState',
    'NO_CARD'
]
