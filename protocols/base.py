"""
Base Protocol interface for the Card Serial Reader.

This module defines the base protocol class and result structures.
"""

import threading
from collections import deque
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Deque, Optional, Callable
from datetime import datetime


# Most recent taps kept on a result; older ones only count towards `reported`
TAP_HISTORY = 100


@dataclass
class TapRecord:
    """A single reported card tap."""
    timestamp: str
    serial: str


@dataclass
class ProtocolResult:
    """Summary of a protocol run."""
    success: bool = True
    error_message: str = ""

    start_time: str = ""
    end_time: str = ""

    # Cycle counters
    cycles: int = 0
    no_tag_cycles: int = 0
    error_cycles: int = 0
    decode_errors: int = 0
    suppressed: int = 0
    reconnects: int = 0

    reported: int = 0
    taps: Deque[TapRecord] = field(default_factory=lambda: deque(maxlen=TAP_HISTORY))


class BaseProtocol(ABC):
    """
    Abstract base class for reader protocols.

    Protocols run on the calling thread and stop cooperatively: stop() sets
    an event that every blocking wait in the protocol observes.
    """

    def __init__(self, session, sink):
        """
        Initialize protocol with required components.

        Args:
            session: SessionManager instance
            sink: IdentitySink receiving reported serials
        """
        self.session = session
        self.sink = sink

        self._stop_event = threading.Event()
        self._status_callback: Optional[Callable[[str], None]] = None

    @property
    def stop_event(self) -> threading.Event:
        return self._stop_event

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def set_status_callback(self, callback: Callable[[str], None]):
        """
        Set callback for per-cycle status.

        Callback receives the currently known serial number, or the
        no-card value when the reader is empty.
        """
        self._status_callback = callback

    def _update_status(self, serial: str):
        """Report status to callback if set."""
        if self._status_callback:
            self._status_callback(serial)

    def stop(self):
        """Request protocol to stop."""
        self._stop_event.set()

    def _wait(self, seconds: float) -> bool:
        """Sleep up to seconds; returns True if a stop was requested."""
        return self._stop_event.wait(seconds)

    @abstractmethod
    def run(self, **kwargs) -> ProtocolResult:
        """
        Execute the protocol.

        Returns:
            ProtocolResult with execution results
        """
        pass

    def _get_timestamp(self) -> str:
        """Get current timestamp string."""
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
