import threading

import pytest

from core.session import SessionManager, INVALID_HANDLE
from core.status import ERR_PORT_INVALID, ERR_PORT_OCCUPIED
from core.transport import TransportConnectError
from tests.fakes import ScriptedTransport


def test_connect_retries_until_success(logger):
    transport = ScriptedTransport(open_results=[ERR_PORT_INVALID, ERR_PORT_OCCUPIED, 3])
    session = SessionManager(transport, logger=logger)

    handle = session.connect()

    assert handle == 3
    assert session.handle == 3
    assert session.is_connected
    assert session.attempts == 3
    assert len(transport.open_calls) == 3


def test_failed_attempts_are_logged(logger):
    transport = ScriptedTransport(open_results=[ERR_PORT_OCCUPIED, 1])
    SessionManager(transport, logger=logger).connect()

    assert any("Port Occupied" in m for m in logger.get_messages())


def test_bounded_attempts_raise(logger):
    transport = ScriptedTransport(open_results=[ERR_PORT_INVALID])
    session = SessionManager(transport, logger=logger)

    with pytest.raises(TransportConnectError):
        session.connect(max_attempts=4)

    assert len(transport.open_calls) == 4
    assert not session.is_connected
    assert session.handle == INVALID_HANDLE


def test_stop_event_cancels_connect(logger):
    transport = ScriptedTransport(open_results=[ERR_PORT_INVALID])
    session = SessionManager(transport, logger=logger)
    stop = threading.Event()
    stop.set()

    with pytest.raises(TransportConnectError):
        session.connect(stop_event=stop)

    assert transport.open_calls == []


def test_backoff_wait_observes_stop_event(logger):
    transport = ScriptedTransport(open_results=[ERR_PORT_INVALID])
    session = SessionManager(transport, logger=logger)
    stop = threading.Event()
    timer = threading.Timer(0.05, stop.set)
    timer.start()

    try:
        with pytest.raises(TransportConnectError):
            session.connect(backoff_s=0.01, max_backoff_s=0.02, stop_event=stop)
    finally:
        timer.cancel()

    assert len(transport.open_calls) >= 1


def test_connect_twice_closes_previous_handle(logger):
    transport = ScriptedTransport(open_results=[5, 6])
    session = SessionManager(transport, logger=logger)

    session.connect()
    session.connect()

    assert transport.close_calls == [5]
    assert session.handle == 6


def test_disconnect_when_not_connected_is_safe(logger):
    transport = ScriptedTransport()
    session = SessionManager(transport, logger=logger)

    session.disconnect()

    assert transport.close_calls == []
    assert session.handle == INVALID_HANDLE
    assert not session.is_connected


def test_disconnect_resets_even_if_close_fails(logger):
    transport = ScriptedTransport(open_results=[2], close_status=RuntimeError("usb gone"))
    session = SessionManager(transport, logger=logger)
    session.connect()

    session.disconnect()

    assert transport.close_calls == [2]
    assert session.handle == INVALID_HANDLE
    assert not session.is_connected


def test_disconnect_resets_on_error_status(logger):
    transport = ScriptedTransport(open_results=[2], close_status=-2020)
    session = SessionManager(transport, logger=logger)
    session.connect()

    session.disconnect()

    assert session.handle == INVALID_HANDLE
    assert any("Invalid Handle" in m for m in logger.get_messages())
