"""Background refresh of the weekly rows for the menubar, kept free of any AppKit dependency."""
import concurrent.futures as _futures
import collections.abc as _coll_types

from datetime import datetime

from . import core as _core


def now_str() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def fetch_rows(tz) -> list[str]:
    totals = _core.screen_time_report(tz)
    lines = [_core.format_row(total) for total in totals]
    if len(lines) != _core.REPORT_DAYS:
        raise _core.ScreenTimeError(f"Malformed screen time report length: {len(lines)}")
    return lines


class BackgroundRefresh(object):
    """Runs `fetch` on a single worker thread, at most one run pending at a time."""

    def __init__(self, fetch: _coll_types.Callable[..., list[str]], *args):
        self.__fetch = fetch
        self.__args = args
        self.__pool = _futures.ThreadPoolExecutor(max_workers=1)
        self.__pending: _futures.Future | None = None

    @property
    def pending(self) -> bool:
        return self.__pending is not None

    def start(self) -> bool:
        """Spawns a fetch unless one is still outstanding, returns whether one was spawned."""
        if self.__pending is not None:
            return False
        self.__pending = self.__pool.submit(self.__fetch, *self.__args)
        return True

    def poll(self) -> tuple[list[str] | None, str] | None:
        """Returns `None` while a fetch is running, otherwise the rows (or `None` on failure) and a status line.

        Any failure of the fetch is reported in the status so the next `start` can retry.
        """
        if self.__pending is None or not self.__pending.done():
            return None
        try:
            return self.__pending.result(), f"Updated: {now_str()}"
        except Exception as e:
            return None, f"Error: {now_str()} - {str(e)}"
        finally:
            self.__pending = None

    def shutdown(self):
        self.__pool.shutdown(wait=True)
