"""
Simple module that parses the macOS `pmset -g log` to get the daily "screen on" time for the last week.

Note that this is an approximation and may change between versions of macOS.
"""
import io as _io
import re as _re
import logging as _logging
import subprocess as _subprocess
import collections.abc as _coll_types

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum

_log = _logging.getLogger(__name__)

_TS_FORMAT = "%Y-%m-%d %H:%M:%S"
_TIMESTAMP_PAT_STR = (
    r"(?P<timestamp>\d{4}-\d{2}-\d{2}\s\d{2}:\d{2}:\d{2})(?:\s(?P<offset>[+-]\d{4}))?"
)
_DISPLAY_PAT = _re.compile(
    _TIMESTAMP_PAT_STR + r".*?Display is turned (?P<state>\w+)", _re.IGNORECASE
)
# looser timestamp for lines that carry the marker but a mangled date
_MARKER_PAT = _re.compile(
    r"^(?P<timestamp>\S+\s\S+).*?Display is turned (?P<state>\w+)", _re.IGNORECASE
)

REPORT_DAYS = 7


class ScreenTimeError(Exception):
    pass


class NoEventsFound(ScreenTimeError):
    def __init__(self):
        super().__init__("Could not find any display power events in the system log.")


class UnparsableLine(ScreenTimeError):
    def __init__(self, line: str, reason: str):
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason


class NoSessionsFound(ScreenTimeError):
    def __init__(self):
        super().__init__("No complete screen time sessions were found in the log period.")


class DisplayState(Enum):
    OFF = 0
    ON = 1


@dataclass(frozen=True)
class DisplayEvent:
    ts: int
    state: DisplayState

    def __str__(self):
        return f"{ts_to_str(self.ts)}, Display {self.state.name}"


@dataclass(frozen=True)
class Session:
    """A maximal interval in epoch seconds during which the display was on."""

    start: int
    end: int

    @property
    def duration_secs(self) -> int:
        return self.end - self.start

    def __str__(self):
        return f"{ts_to_str(self.start)} - {ts_to_str(self.end)} ({format_secs(self.duration_secs)})"


@dataclass(frozen=True)
class DayWindow:
    """A local calendar day, `start` inclusive and `end` (the next local midnight) exclusive."""

    date: date
    start: int
    end: int

    @property
    def last_second(self) -> int:
        return self.end - 1

    @property
    def length_secs(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class DailyTotal:
    date: date
    total_secs: int

    def __str__(self):
        return format_row(self)


def ts_to_str(ts: int, tz: tzinfo | None = None) -> str:
    return datetime.fromtimestamp(ts, tz).strftime(_TS_FORMAT)


def _local_epoch(dt: datetime, tz: tzinfo | None) -> int:
    """Converts a naive wall-clock `datetime` to epoch seconds in `tz` (host local when `None`)."""
    if tz is not None:
        dt = dt.replace(tzinfo=tz)
    return int(dt.timestamp())


def parse_ts(ts_text: str, tz: tzinfo | None = None) -> int:
    """Parses the `pmset` log formatted timestamp into epoch seconds.

    The trailing UTC offset `pmset` writes is used when present, otherwise the wall-clock time is interpreted
    in `tz`, or in the host's local zone if `tz` is `None`.
    """
    parts = ts_text.split()
    if len(parts) == 3:
        return int(datetime.strptime(ts_text, _TS_FORMAT + " %z").timestamp())
    return _local_epoch(datetime.strptime(ts_text, _TS_FORMAT), tz)


def parse_line(line: str, tz: tzinfo | None = None) -> DisplayEvent | None:
    """Parses one log line into a `DisplayEvent`.

    Returns `None` for lines that are not display power lines and raises `UnparsableLine` for marker lines
    whose timestamp or state can't be understood.
    """
    match = _DISPLAY_PAT.match(line)
    if not match:
        if _MARKER_PAT.match(line):
            raise UnparsableLine(line, "Failed to parse date")
        return None
    state_text = match["state"].upper()
    if state_text not in DisplayState.__members__:
        raise UnparsableLine(line, f"Unknown display state {match['state']}")
    ts_text = match["timestamp"]
    if match["offset"]:
        ts_text = f"{ts_text} {match['offset']}"
    try:
        ts = parse_ts(ts_text, tz)
    except ValueError:
        raise UnparsableLine(line, f"Failed to parse date {ts_text}") from None
    return DisplayEvent(ts, DisplayState[state_text])


def parse_log(
    log_lines: _coll_types.Iterable[str],
    tz: tzinfo | None = None,
) -> _coll_types.Iterator[DisplayEvent]:
    for line in log_lines:
        try:
            event = parse_line(line.rstrip("\n"), tz)
        except UnparsableLine as e:
            _log.debug("%s", e)
            continue
        if event is not None:
            yield event


_GREP_ARGS = (
    "grep",
    "-i",
    "-e",
    "Display is turned",
)
_PMSET_LOG_ARGS = ("pmset", "-g", "log")


def pmset_log_proc() -> _subprocess.Popen:
    """Runs `pmset -g log` pre-filtering lines with `grep` and returns the `Popen` object"""
    pmset_proc = _subprocess.Popen(_PMSET_LOG_ARGS, stdout=_subprocess.PIPE)
    grep_proc = _subprocess.Popen(
        _GREP_ARGS, encoding="UTF-8", stdin=pmset_proc.stdout, stdout=_subprocess.PIPE
    )
    # allow pmset to get SIGPIPE if grep exits first
    pmset_proc.stdout.close()
    return grep_proc


@contextmanager
def pmset_log() -> _coll_types.Generator[_coll_types.Iterator[str], None, None]:
    with pmset_log_proc() as p:
        yield p.stdout


def clock_snapshot(tz: tzinfo | None = None) -> tuple[int, date]:
    """Returns the current epoch seconds and local date, read once so a run is internally consistent."""
    current = datetime.now(tz)
    return int(current.timestamp()), current.date()


def scan_sessions(
    events: _coll_types.Iterable[DisplayEvent],
) -> tuple[list[Session], int | None]:
    """Folds display events into closed sessions.

    Returns the closed sessions and the start of the session still open at the end of the events, if any.
    Repeated ON events while a session is open and OFF events with no open session are ignored.
    """
    sessions: list[Session] = []
    open_start = None
    for event in events:
        if event.state == DisplayState.ON:
            if open_start is None:
                _log.debug("Screen time session started: %s", event)
                open_start = event.ts
            else:
                _log.debug("Ignoring %s, session already open", event)
        elif open_start is None:
            _log.debug("Ignoring %s, no open session", event)
        else:
            # out of order notifications can't produce a negative session
            session = Session(open_start, max(event.ts, open_start))
            _log.debug("Screen time session ended: %s", session)
            sessions.append(session)
            open_start = None
    return sessions, open_start


def build_sessions(
    events: _coll_types.Iterable[DisplayEvent], now: int
) -> list[Session]:
    """Builds the sessions for the events, closing a session that is still on at `now`."""
    sessions, open_start = scan_sessions(events)
    if open_start is not None:
        session = Session(open_start, max(now, open_start))
        _log.debug("Ongoing session detected, closing at current time: %s", session)
        sessions.append(session)
    return sessions


def day_windows(
    end_date: date, days: int = REPORT_DAYS, tz: tzinfo | None = None
) -> list[DayWindow]:
    """Returns the `days` local calendar days ending with `end_date`, oldest first."""
    windows = []
    for i in range(days - 1, -1, -1):
        day = end_date - timedelta(days=i)
        start = _local_epoch(datetime.combine(day, time()), tz)
        end = _local_epoch(datetime.combine(day + timedelta(days=1), time()), tz)
        windows.append(DayWindow(day, start, end))
    return windows


def day_overlap(session: Session, window: DayWindow) -> int:
    return max(0, min(session.end, window.end) - max(session.start, window.start))


def aggregate_days(
    sessions: _coll_types.Sequence[Session],
    windows: _coll_types.Sequence[DayWindow],
) -> list[DailyTotal]:
    return [
        DailyTotal(window.date, sum(day_overlap(s, window) for s in sessions))
        for window in windows
    ]


_SECONDS_IN_HOUR = 3600
_SECONDS_IN_MINUTE = 60
_WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
_RULE = "-" * 49


def format_secs(total_secs: int) -> str:
    hours, min_secs = divmod(int(total_secs), _SECONDS_IN_HOUR)
    minutes, secs = divmod(min_secs, _SECONDS_IN_MINUTE)
    return f"{hours:02}:{minutes:02}:{secs:02}"


def weekday_name(day: date) -> str:
    """English weekday name independent of the process locale."""
    return _WEEKDAY_NAMES[day.weekday()]


def format_row(total: DailyTotal) -> str:
    return f"{total.date.isoformat()} | {weekday_name(total.date):<9} | {format_secs(total.total_secs)}"


def format_report(totals: _coll_types.Iterable[DailyTotal]) -> str:
    buf = _io.StringIO()
    print(_RULE, file=buf)
    print("        macOS Weekly Screen Time Report", file=buf)
    print(_RULE, file=buf)
    print("Date         | Day       | Screen Time (HH:MM:SS)", file=buf)
    print(_RULE, file=buf)
    for total in totals:
        print(format_row(total), file=buf)
    print(_RULE, file=buf)
    return buf.getvalue()


def weekly_screen_time(
    log_lines: _coll_types.Iterable[str],
    now: int,
    end_date: date,
    tz: tzinfo | None = None,
) -> list[DailyTotal]:
    """Runs the whole pipeline on log lines, `now` and `end_date` being the single clock snapshot for the run.

    Raises `NoEventsFound` if no display event could be parsed; an empty set of sessions only logs a warning.
    """
    events = list(parse_log(log_lines, tz))
    if not events:
        raise NoEventsFound()
    sessions = build_sessions(events, now)
    if not sessions:
        _log.warning("%s", NoSessionsFound())
    return aggregate_days(sessions, day_windows(end_date, REPORT_DAYS, tz))


def screen_time_report(tz: tzinfo | None = None) -> list[DailyTotal]:
    """Reads the `pmset` log of this machine and returns the daily totals for the last week"""
    with pmset_log() as log:
        now, end_date = clock_snapshot(tz)
        return weekly_screen_time(log, now, end_date, tz)
