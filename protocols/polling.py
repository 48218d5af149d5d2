"""
Card Polling Protocol Implementation.

This module implements the continuous polling loop: every cycle it waits
for the polling interval, selects the tag in range, decodes its serial
number and reports it once per tap.

A card left on the reader is reported once. Taking it off (a "no tag"
cycle) re-arms reporting, so tapping the same card again is reported again.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from config.settings import Organization
from core.serial_decoder import DecodeError, decode_serial
from core.status import StatusInterpreter, StatusKind, ERR_INTERNAL_UNEXPECTED, error_message
from core.transport import ReaderError, TransportConnectError
from utils.logging import Logger
from .base import BaseProtocol, ProtocolResult, TapRecord


# Shown and remembered while no card is on the reader
NO_CARD = "0000000000"


class PollingState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    IDLE = "idle"
    CARD_PRESENT = "card_present"


@dataclass(frozen=True)
class TagPresent:
    raw_uid: bytes
    tag_type: int = 0


@dataclass(frozen=True)
class NoTag:
    code: int


@dataclass(frozen=True)
class TransportError:
    code: int
    message: str


PollResult = Union[TagPresent, NoTag, TransportError]


class CardPollingProtocol(BaseProtocol):
    """
    Card Polling Protocol.

    Polls a single reader until stopped and reports each tap to the sink.
    """

    def __init__(
        self,
        session,
        sink,
        organization: Organization = Organization.OTHER,
        polling_interval_ms: int = 250,
        interpreter: Optional[StatusInterpreter] = None,
        logger: Optional[Logger] = None,
        reconnect_after_errors: int = 5,
        connect_options: Optional[dict] = None
    ):
        """
        Initialize polling protocol.

        Args:
            session: SessionManager owning the reader handle
            sink: IdentitySink receiving one serial per tap
            organization: Organization used for serial formatting
            polling_interval_ms: Wait before each select, in milliseconds
            interpreter: Status interpreter (default no-tag codes if None)
            logger: Logger for per-cycle output
            reconnect_after_errors: Consecutive error cycles before reconnecting
                (0 never reconnects)
            connect_options: Keyword arguments for SessionManager.connect
        """
        super().__init__(session, sink)

        if int(polling_interval_ms) <= 0:
            raise ValueError(f"polling_interval_ms must be positive, got {polling_interval_ms}")
        if reconnect_after_errors < 0:
            raise ValueError("reconnect_after_errors must not be negative")

        self.organization = Organization.parse(organization)
        self.polling_interval_ms = int(polling_interval_ms)
        self.interpreter = interpreter or StatusInterpreter()
        self.logger = logger or Logger()
        self.reconnect_after_errors = reconnect_after_errors
        self.connect_options = dict(connect_options or {})

        self.last_seen: str = NO_CARD
        self.state = PollingState.IDLE if session.is_connected else PollingState.DISCONNECTED
        self._error_streak = 0

    def run(self, max_cycles: Optional[int] = None) -> ProtocolResult:
        """
        Execute the polling loop.

        Args:
            max_cycles: Stop after this many cycles (run until stop() if None)

        Returns:
            ProtocolResult with cycle counters and reported taps
        """
        result = ProtocolResult(start_time=self._get_timestamp())

        if not self.session.is_connected:
            if not self._connect(result):
                result.end_time = self._get_timestamp()
                return result

        interval_s = self.polling_interval_ms / 1000.0

        try:
            while max_cycles is None or result.cycles < max_cycles:
                if self._wait(interval_s):
                    break
                self.cycle(result)
        finally:
            result.end_time = self._get_timestamp()

        return result

    def poll_once(self) -> PollResult:
        """Select once and classify the driver status."""
        try:
            raw = self.session.transport.select(self.session.handle)
        except (OSError, ReaderError) as e:
            return TransportError(ERR_INTERNAL_UNEXPECTED, f"{error_message(ERR_INTERNAL_UNEXPECTED)} ({e})")

        status = self.interpreter.classify(raw.status)

        if status.kind is StatusKind.SUCCESS:
            return TagPresent(raw_uid=bytes(raw.uid), tag_type=raw.tag_type)
        if status.kind is StatusKind.NO_TAG:
            return NoTag(status.code)
        return TransportError(status.code, status.message)

    def cycle(self, result: ProtocolResult) -> PollResult:
        """Run one polling cycle (without the pacing wait)."""
        poll = self.poll_once()
        result.cycles += 1

        if isinstance(poll, TagPresent):
            self._error_streak = 0
            self._handle_tag(poll, result)
        elif isinstance(poll, NoTag):
            self._error_streak = 0
            self.last_seen = NO_CARD
            self.state = PollingState.IDLE
            result.no_tag_cycles += 1
            self._show(NO_CARD)
        else:
            result.error_cycles += 1
            self._error_streak += 1
            self.logger.error(poll.message)
            if self.reconnect_after_errors and self._error_streak >= self.reconnect_after_errors:
                self._reconnect(result)

        return poll

    def _handle_tag(self, poll: TagPresent, result: ProtocolResult):
        try:
            serial = decode_serial(poll.raw_uid, self.organization)
        except DecodeError as e:
            result.decode_errors += 1
            self.logger.warning(f"Skipping unreadable serial number: {e}")
            return

        self._show(serial)

        if serial == self.last_seen:
            result.suppressed += 1
            return

        try:
            self.sink.report(serial.strip())
        except Exception as e:
            # last_seen stays unchanged so the next cycle retries the report
            self.logger.error(f"Unable to report serial {serial}: {e}")
            return

        self.last_seen = serial
        self.state = PollingState.CARD_PRESENT
        result.reported += 1
        result.taps.append(TapRecord(timestamp=self._get_timestamp(), serial=serial))

    def _show(self, serial: str):
        self.logger.info(f"Serial Number: {serial}")
        self._update_status(serial)

    def _connect(self, result: ProtocolResult) -> bool:
        self.state = PollingState.CONNECTING
        self.logger.info("Connecting to reader...")
        try:
            self.session.connect(stop_event=self.stop_event, **self.connect_options)
        except TransportConnectError as e:
            self.state = PollingState.DISCONNECTED
            result.success = False
            result.error_message = str(e)
            self.logger.error(str(e))
            return False

        self.logger.info("Successful!")
        self.state = PollingState.IDLE
        return True

    def _reconnect(self, result: ProtocolResult):
        self.logger.warning(
            f"{self._error_streak} consecutive reader errors, reconnecting"
        )
        self._error_streak = 0
        self.last_seen = NO_CARD
        if self._connect(result):
            result.reconnects += 1
        elif self.stop_requested:
            # Cancelled while reconnecting, not a failure of the run
            result.success = True
            result.error_message = ""
