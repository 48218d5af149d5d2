"""
Identity event sinks.

A sink receives one serial number per card tap. The keyboard sink types it
into whatever window has focus, the way a USB keyboard-wedge reader would.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from utils.logging import Logger


class SinkError(Exception):
    """Raised when a serial number cannot be delivered."""
    pass


class IdentitySink(ABC):
    """Consumer of reportable card taps."""

    @abstractmethod
    def report(self, serial: str):
        pass


class KeyboardSink(IdentitySink):
    """
    Types serial numbers as keystrokes using pyautogui.

    pyautogui needs a display, so it is imported when the sink is created
    rather than at module import.
    """

    def __init__(self, press_enter: bool = False, interval: float = 0.0):
        try:
            import pyautogui
        except Exception as e:
            raise SinkError(f"Keyboard output unavailable: {e}")

        self._kbd = pyautogui
        self.press_enter = press_enter
        self.interval = interval

    def report(self, serial: str):
        self._kbd.typewrite(serial.strip(), interval=self.interval)
        if self.press_enter:
            self._kbd.press("enter")


class ConsoleSink(IdentitySink):
    """Writes taps to the log instead of typing them."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or Logger()

    def report(self, serial: str):
        self.logger.info(f"TAP {serial.strip()}")


class MemorySink(IdentitySink):
    """Collects reported serials in order."""

    def __init__(self):
        self.serials: List[str] = []

    def report(self, serial: str):
        self.serials.append(serial.strip())
