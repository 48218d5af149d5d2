"""
Reader session management.

This module provides the SessionManager class which owns the reader handle
and its connect/disconnect lifecycle.
"""

import threading
import time
from typing import Optional

from utils.logging import Logger
from .status import error_message
from .transport import ReaderTransport, TransportConnectError


INVALID_HANDLE = -1


class SessionManager:
    """
    Owns the single live reader handle.

    This class provides:
    - Connect with retry until the driver hands out a valid handle
    - Unconditional disconnect that always invalidates the handle
    - Reconnect for callers recovering from transport errors
    """

    def __init__(
        self,
        transport: ReaderTransport,
        port: int = 0,
        logger: Optional[Logger] = None
    ):
        """
        Initialize session manager.

        Args:
            transport: Reader transport used for open/close
            port: Logical reader port (0 = first USB reader)
            logger: Logger for connection messages
        """
        self.transport = transport
        self.port = port
        self.logger = logger or Logger()

        self._handle: int = INVALID_HANDLE
        self._connected: bool = False
        self.attempts: int = 0

    @property
    def handle(self) -> int:
        return self._handle

    @property
    def is_connected(self) -> bool:
        return self._connected and self._handle >= 0

    def connect(
        self,
        max_attempts: Optional[int] = None,
        backoff_s: float = 0.0,
        max_backoff_s: float = 5.0,
        stop_event: Optional[threading.Event] = None
    ) -> int:
        """
        Open the reader, retrying until a valid handle is returned.

        Args:
            max_attempts: Give up after this many attempts (retry forever if None)
            backoff_s: Initial wait between attempts, doubled after each failure
            max_backoff_s: Upper bound for the wait between attempts
            stop_event: Cancels the retry loop when set

        Returns:
            The reader handle

        Raises:
            TransportConnectError: If attempts are exhausted or the loop is cancelled
        """
        # Never hold two handles at once
        self.disconnect()

        self.attempts = 0
        delay = backoff_s
        last_code = INVALID_HANDLE

        while max_attempts is None or self.attempts < max_attempts:
            if stop_event is not None and stop_event.is_set():
                raise TransportConnectError("Connect cancelled")

            self.attempts += 1
            handle = self.transport.open(self.port)

            if handle >= 0:
                self._handle = handle
                self._connected = True
                self.logger.info(f"Reader connected on port {self.port} (handle {handle})")
                return handle

            last_code = handle
            message = f"Connect attempt {self.attempts} failed: {error_message(handle)}"
            if self.attempts == 1:
                self.logger.warning(message)
            else:
                self.logger.debug(message)

            if delay > 0:
                if stop_event is not None:
                    if stop_event.wait(delay):
                        raise TransportConnectError("Connect cancelled")
                else:
                    time.sleep(delay)
                delay = min(delay * 2, max_backoff_s)

        raise TransportConnectError(
            f"Unable to open reader port {self.port} after {self.attempts} attempts: "
            f"{error_message(last_code)}"
        )

    def disconnect(self):
        """Close the reader. Always safe to call; the handle is invalid afterwards."""
        if self._handle >= 0:
            try:
                status = self.transport.close(self._handle)
                if status != 0:
                    self.logger.warning(f"Reader close failed: {error_message(status)}")
                else:
                    self.logger.debug(f"Reader handle {self._handle} closed")
            except Exception as e:
                self.logger.warning(f"Disconnect error: {e}")

        self._handle = INVALID_HANDLE
        self._connected = False

    def reconnect(self, **kwargs) -> int:
        """Drop the current handle and connect again."""
        self.logger.info("Reconnecting to reader...")
        return self.connect(**kwargs)
