"""
Logging utilities for the Card Serial Reader.
"""

from collections import deque
from datetime import datetime
from typing import Optional, Callable, List


class Logger:
    """
    Console logger with a bounded message history and callback support.
    """

    LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}

    def __init__(
        self,
        callback: Optional[Callable[[str], None]] = None,
        verbose: bool = False,
        history: int = 500,
        echo: bool = True
    ):
        """
        Initialize logger.

        Args:
            callback: Optional callback for formatted log lines
            verbose: Emit DEBUG messages when True
            history: Number of formatted lines kept in memory
            echo: Print formatted lines to stdout
        """
        self._callback = callback
        self._messages = deque(maxlen=history)
        self.verbose = verbose
        self.echo = echo

    def set_callback(self, callback: Callable[[str], None]):
        """Set callback for log messages."""
        self._callback = callback

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message.

        Args:
            message: Log message
            level: Log level (DEBUG, INFO, WARNING, ERROR)
        """
        level = level.upper()
        if level not in self.LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        if level == "DEBUG" and not self.verbose:
            return

        timestamp = datetime.now().strftime("%H:%M:%S")
        formatted = f"[{timestamp}] [{level}] {message}"

        self._messages.append(formatted)
        if self.echo:
            print(formatted)

        if self._callback:
            self._callback(formatted)

    def debug(self, message: str):
        """Log debug message (only when verbose)."""
        self.log(message, "DEBUG")

    def info(self, message: str):
        """Log info message."""
        self.log(message, "INFO")

    def warning(self, message: str):
        """Log warning message."""
        self.log(message, "WARNING")

    def error(self, message: str):
        """Log error message."""
        self.log(message, "ERROR")

    def get_messages(self, count: int = 100) -> List[str]:
        """Get recent log messages."""
        return list(self._messages)[-count:]

    def clear(self):
        """Clear log messages."""
        self._messages.clear()
