"""
Console application for the Card Serial Reader.

Wires configuration, reader session, polling protocol and output sink
together and runs until interrupted.
"""

import argparse
import signal
import sys
from typing import Optional

from config.settings import Settings, ConfigError, initialize_config, DEFAULT_CONFIG_FILE
from core.session import SessionManager
from core.sinks import ConsoleSink, KeyboardSink, SinkError
from core.status import StatusInterpreter
from core.transport import ACR120UTransport, ReaderError, TransportConnectError
from protocols.polling import CardPollingProtocol
from utils.logging import Logger


class ReaderApp:
    """
    Card Serial Reader application.

    Owns the hardware session for the lifetime of the process.
    """

    def __init__(self, settings: Settings, transport, sink, logger: Optional[Logger] = None):
        self.settings = settings
        self.logger = logger or Logger()

        reader = settings.reader
        self.session = SessionManager(transport, port=reader.port, logger=self.logger)
        self.protocol = CardPollingProtocol(
            self.session,
            sink,
            organization=settings.program.organization_choice,
            polling_interval_ms=settings.program.polling_interval_ms,
            interpreter=StatusInterpreter(reader.no_tag_codes),
            logger=self.logger,
            reconnect_after_errors=reader.reconnect_after_errors,
            connect_options={
                "backoff_s": reader.connect_backoff_s,
                "max_backoff_s": reader.connect_max_backoff_s
            }
        )

    def run(self, max_cycles: Optional[int] = None) -> int:
        """Connect, then poll until stopped. Returns a process exit code."""
        reader = self.settings.reader
        self.logger.info(f"Organization: {self.settings.program.organization_choice.name}")
        self.logger.info(f"Reader port: {reader.get_port_display()}")

        try:
            self.logger.info("Connecting to reader...")
            self.session.connect(
                backoff_s=reader.connect_backoff_s,
                max_backoff_s=reader.connect_max_backoff_s,
                stop_event=self.protocol.stop_event
            )
            self.logger.info("Successful!")

            if self.protocol.stop_event.wait(reader.startup_delay_ms / 1000.0):
                return 0

            result = self.protocol.run(max_cycles=max_cycles)
            self.logger.info(
                f"Stopped after {result.cycles} cycles, {result.reported} taps reported"
            )
            return 0 if result.success else 1

        except TransportConnectError as e:
            if self.protocol.stop_requested:
                return 0
            self.logger.error(str(e))
            return 1
        finally:
            self.session.disconnect()

    def stop(self):
        self.protocol.stop()


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Read contactless card serial numbers and type them as keystrokes"
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG_FILE,
                        help="Path to config.json (created on first run)")
    parser.add_argument("--port", type=int, default=None,
                        help="Reader port 0-7 (overrides config)")
    parser.add_argument("--library", default=None,
                        help="Path to the ACR120U driver library")
    parser.add_argument("--sink", choices=("keyboard", "console"), default="keyboard",
                        help="Where serial numbers are sent")
    parser.add_argument("--verbose", action="store_true", help="Show debug messages")
    return parser.parse_args(argv)


def _exit_program(logger: Logger, message: str):
    logger.error(message)
    logger.error("Unable to initialize program. Exiting.")
    sys.exit(1)


def main(argv=None):
    """Application entry point."""
    args = _parse_args(argv)
    logger = Logger(verbose=args.verbose)

    try:
        settings = initialize_config(args.config, logger=logger)
        if args.port is not None:
            settings.reader.port = args.port
        if args.library:
            settings.reader.library_path = args.library
        settings.reader.validate()
    except ConfigError as e:
        _exit_program(logger, str(e))

    try:
        transport = ACR120UTransport(settings.reader.library_path)
        if args.sink == "keyboard":
            sink = KeyboardSink(press_enter=settings.reader.press_enter)
        else:
            sink = ConsoleSink(logger)
    except (ReaderError, SinkError) as e:
        _exit_program(logger, str(e))

    app = ReaderApp(settings, transport, sink, logger=logger)

    def _on_signal(signum, frame):
        logger.info("Stopping...")
        app.stop()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    sys.exit(app.run())


if __name__ == "__main__":
    main()
