"""
Reader Transport for the Card Serial Reader.

This module wraps the vendor ACR120U driver library (ACR120U.DLL, shipped
with ACS ACR120/ACR128 family readers) behind a minimal interface: open a
logical port, close a handle, and select the tag currently in range.
"""

import ctypes
import ctypes.util
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


# Serial number buffer handed to ACR120_Select (10 bytes covers triple UIDs)
UID_BUFFER_SIZE = 10


class ReaderError(Exception):
    """Base exception for reader errors."""
    pass


class TransportLoadError(ReaderError):
    """Raised when the reader driver library cannot be loaded."""
    pass


class TransportConnectError(ReaderError):
    """Raised when a reader session cannot be opened."""
    pass


@dataclass(frozen=True)
class SelectResult:
    """Raw outcome of a single tag-select operation."""
    status: int
    tag_type: int = 0
    uid_length: int = 0
    uid: bytes = b""


class ReaderTransport(ABC):
    """
    Minimal hardware surface needed by the polling path.

    Implementations return raw driver status codes and never interpret them.
    """

    @abstractmethod
    def open(self, port: int) -> int:
        """Open a reader port. Returns a handle, negative on failure."""
        pass

    @abstractmethod
    def close(self, handle: int) -> int:
        """Close a handle. Returns a status code."""
        pass

    @abstractmethod
    def select(self, handle: int) -> SelectResult:
        """Select the tag in range and return its raw serial number."""
        pass


class ACR120UTransport(ReaderTransport):
    """
    ctypes binding of the ACR120U driver library.

    Only the three calls used by the polling path are bound.
    """

    LIBRARY_NAME = "ACR120U"

    def __init__(self, library_path: Optional[str] = None):
        """
        Load the driver library.

        Args:
            library_path: Explicit path to the library (searched if None)

        Raises:
            TransportLoadError: If the library cannot be found or loaded
        """
        self.library_path = library_path or self._find_library()
        if self.library_path is None:
            raise TransportLoadError(f"{self.LIBRARY_NAME} driver library not found")

        try:
            if sys.platform == "win32":
                self._lib = ctypes.WinDLL(self.library_path)
            else:
                self._lib = ctypes.CDLL(self.library_path)
        except OSError as e:
            raise TransportLoadError(f"Unable to load {self.library_path}: {e}")

        self._bind()

    @classmethod
    def _find_library(cls) -> Optional[str]:
        if sys.platform == "win32":
            return f"{cls.LIBRARY_NAME}.DLL"
        return ctypes.util.find_library(cls.LIBRARY_NAME)

    def _bind(self):
        byte_p = ctypes.POINTER(ctypes.c_ubyte)

        self._lib.ACR120_Open.argtypes = [ctypes.c_int]
        self._lib.ACR120_Open.restype = ctypes.c_int

        self._lib.ACR120_Close.argtypes = [ctypes.c_int]
        self._lib.ACR120_Close.restype = ctypes.c_int

        self._lib.ACR120_Select.argtypes = [ctypes.c_int, byte_p, byte_p, byte_p]
        self._lib.ACR120_Select.restype = ctypes.c_int

    def open(self, port: int) -> int:
        return int(self._lib.ACR120_Open(port))

    def close(self, handle: int) -> int:
        return int(self._lib.ACR120_Close(handle))

    def select(self, handle: int) -> SelectResult:
        tag_type = ctypes.c_ubyte(0)
        tag_length = ctypes.c_ubyte(0)
        uid = (ctypes.c_ubyte * UID_BUFFER_SIZE)()

        status = self._lib.ACR120_Select(
            handle,
            ctypes.byref(tag_type),
            ctypes.byref(tag_length),
            uid
        )

        return SelectResult(
            status=status,
            tag_type=tag_type.value,
            uid_length=tag_length.value,
            uid=bytes(uid)
        )
