import pytest

import mac_screen_time.__main__ as _main
import mac_screen_time.core as _core

from datetime import date


@pytest.fixture
def on_macos(monkeypatch):
    monkeypatch.setattr(_main._sys, "platform", "darwin")
    monkeypatch.delenv("MAC_SCREEN_TIME_TZ", raising=False)


def test_refuses_other_platforms(monkeypatch, capsys):
    monkeypatch.setattr(_main._sys, "platform", "linux")
    with pytest.raises(SystemExit) as e:
        _main.main()
    assert e.value.code == 1
    assert "Expected macOS" in capsys.readouterr().err


def test_prints_report(on_macos, monkeypatch, capsys):
    totals = [_core.DailyTotal(date(2023, 3, 13), 10800)]
    monkeypatch.setattr(_core, "screen_time_report", lambda tz: totals)
    _main.main()
    out = capsys.readouterr().out
    assert out.startswith("Analyzing power logs")
    assert "2023-03-13 | Monday    | 03:00:00" in out


def test_no_events_exits(on_macos, monkeypatch, capsys):
    def no_events(tz):
        raise _core.NoEventsFound()

    monkeypatch.setattr(_core, "screen_time_report", no_events)
    with pytest.raises(SystemExit) as e:
        _main.main()
    assert e.value.code == 1
    captured = capsys.readouterr()
    assert "Could not find any display power events" in captured.err
    assert "Screen Time" not in captured.out


def test_missing_pmset_exits(on_macos, monkeypatch, capsys):
    def missing(tz):
        raise FileNotFoundError(2, "No such file or directory", "pmset")

    monkeypatch.setattr(_core, "screen_time_report", missing)
    with pytest.raises(SystemExit) as e:
        _main.main()
    assert e.value.code == 1
    captured = capsys.readouterr()
    assert captured.err.startswith("Error: ")
    assert "pmset" in captured.err
    assert "Traceback" not in captured.err
