"""
Core module for the Card Serial Reader.

This module contains the hardware abstraction layer:
- Reader transport (ACR120U driver binding)
- Status code interpretation
- Serial number decoding
- Reader session management
- Identity event sinks
"""

from .transport import (
    ReaderTransport,
    ACR120UTransport,
    SelectResult,
    ReaderError,
    TransportLoadError,
    TransportConnectError
)
from .status import StatusInterpreter, StatusKind, Status, error_message
from .serial_decoder import decode_serial, DecodeError
from .session import SessionManager, INVALID_HANDLE
from .sinks import IdentitySink, KeyboardSink, ConsoleSink, MemorySink, SinkError

__all__ = [
    'ReaderTransport',
    'ACR120UTransport',
    'SelectResult',
    'ReaderError',
    'TransportLoadError',
    'TransportConnectError',
    'StatusInterpreter',
    'StatusKind',
    'Status',
    'error_message',
    'decode_serial',
    'DecodeError',
    'SessionManager',
    'INVALID_HANDLE',
    'IdentitySink',
    'KeyboardSink',
    'ConsoleSink',
    'MemorySink',
    'SinkError'
]
