import pytest

from core.session import SessionManager
from core.sinks import MemorySink
from utils.logging import Logger


@pytest.fixture
def logger():
    return Logger(echo=False, verbose=True)


@pytest.fixture
def sink():
    return MemorySink()


@pytest.fixture
def make_session(logger):
    def _make(transport, connect=True):
        session = SessionManager(transport, port=0, logger=logger)
        if connect:
            session.connect(max_attempts=1)
        return session
    return _make
