import threading

import pytest

from config.settings import Organization, ProgramConfig, ReaderSettings, Settings
import console.app as app_module
from console.app import ReaderApp, main
from core.sinks import MemorySink
from tests.fakes import ScriptedTransport, NO_TAG, tag


def make_settings(**reader):
    reader.setdefault("startup_delay_ms", 0)
    reader.setdefault("connect_backoff_s", 0.0)
    return Settings(
        program=ProgramConfig(Organization.UTEM, "1"),
        reader=ReaderSettings(**reader)
    )


def test_app_reports_taps_and_disconnects(logger):
    transport = ScriptedTransport(
        open_results=[-2010, 7],
        select_results=[tag(0, 0, 0, 0x0A), tag(0, 0, 0, 0x0A), NO_TAG, tag(0, 0, 0, 0x0A)]
    )
    sink = MemorySink()
    app = ReaderApp(make_settings(), transport, sink, logger=logger)

    code = app.run(max_cycles=4)

    assert code == 0
    assert sink.serials == ["10", "10"]
    assert transport.close_calls == [7]
    assert not app.session.is_connected


def test_app_stop_during_connect_exits_cleanly(logger):
    transport = ScriptedTransport(open_results=[-2000])
    app = ReaderApp(make_settings(connect_backoff_s=0.01), transport, MemorySink(), logger=logger)
    timer = threading.Timer(0.05, app.stop)
    timer.start()

    try:
        code = app.run()
    finally:
        timer.cancel()

    assert code == 0
    assert transport.close_calls == []


def test_main_exits_on_config_error(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text("{broken")

    with pytest.raises(SystemExit) as exc:
        main(["--config", str(path), "--sink", "console"])

    assert exc.value.code == 1


def test_main_exits_when_driver_missing(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text('{"organizationChoice": 1, "pollingRate": "250"}')
    monkeypatch.setattr(app_module.ACR120UTransport, "_find_library", classmethod(lambda cls: None))

    with pytest.raises(SystemExit) as exc:
        main(["--config", str(path), "--sink", "console"])

    assert exc.value.code == 1
