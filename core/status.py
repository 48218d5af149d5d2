"""
Status code interpretation for ACR120U driver results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable


STATUS_OK = 0

ERR_INTERNAL_UNEXPECTED = -1000
ERR_PORT_INVALID = -2000
ERR_PORT_OCCUPIED = -2010
ERR_HANDLE_INVALID = -2020
ERR_INCORRECT_PARAM = -2030
ERR_READER_NO_TAG = -3000
ERR_READER_READ_FAIL_AFTER_OP = -3010
ERR_READER_NO_VALUE_BLOCK = -3020
ERR_READER_OP_FAILURE = -3030
ERR_READER_UNKNOWN = -3040
ERR_LOGIN_INVALID_STORED_KEY_FORMAT = -4010
ERR_WRITE_READ_AFTER_WRITE_ERROR = -4020
ERR_DEC_FAILURE_EMPTY = -4030

# Reported by ACR128 firmware when no tag answered within the select timeout
NO_TAG_TIMEOUT = 62536

UNDOCUMENTED_MESSAGE = "Error is not documented."

ERROR_MESSAGES: Dict[int, str] = {
    ERR_INTERNAL_UNEXPECTED: "Unexpected Internal Library Error",
    ERR_PORT_INVALID: "Invalid Port",
    ERR_PORT_OCCUPIED: "Port Occupied by Another Application",
    ERR_HANDLE_INVALID: "Invalid Handle",
    ERR_INCORRECT_PARAM: "Incorrect Parameter",
    ERR_READER_NO_TAG: "No TAG Selected or in Reachable Range",
    ERR_READER_READ_FAIL_AFTER_OP: "Read Failed after Operation",
    ERR_READER_NO_VALUE_BLOCK: "Block doesn't contain value",
    ERR_READER_OP_FAILURE: "Operation Failed",
    ERR_READER_UNKNOWN: "Unknown Reader Error",
    ERR_LOGIN_INVALID_STORED_KEY_FORMAT: "Invalid stored key format in login process",
    ERR_WRITE_READ_AFTER_WRITE_ERROR: "Reader can't read after write operation",
    ERR_DEC_FAILURE_EMPTY: "Decrement Failure (Empty)",
}


def error_message(code: int) -> str:
    """Human readable message for a driver status code, keeping the raw code."""
    text = ERROR_MESSAGES.get(code)
    if text is None:
        return f"{UNDOCUMENTED_MESSAGE} ({code})"
    return f"{text} : {code}"


class StatusKind(Enum):
    SUCCESS = "success"
    NO_TAG = "no_tag"
    ERROR = "error"


@dataclass(frozen=True)
class Status:
    """Classified driver status."""
    kind: StatusKind
    code: int
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.kind is StatusKind.SUCCESS


class StatusInterpreter:
    """
    Classifies raw driver status codes.

    The no-tag sentinel depends on reader firmware, so it is configurable.
    ERR_READER_NO_TAG always counts as "no tag".
    """

    def __init__(self, no_tag_codes: Iterable[int] = (NO_TAG_TIMEOUT,)):
        self.no_tag_codes = frozenset(no_tag_codes) | {ERR_READER_NO_TAG}

    def classify(self, code: int) -> Status:
        if code == STATUS_OK:
            return Status(StatusKind.SUCCESS, code)
        if code in self.no_tag_codes:
            return Status(StatusKind.NO_TAG, code, "No tag in range")
        return Status(StatusKind.ERROR, code, error_message(code))
