import sys as _sys
import logging as _logging

from . import core as _core
from . import config as _config

_TARGET_PLATFORM = "darwin"


def main():
    if _sys.platform != _TARGET_PLATFORM:
        print(f"Expected macOS (darwin), found {_sys.platform}", file=_sys.stderr)
        _sys.exit(1)
    try:
        config = _config.Config.from_env()
    except _config.ConfigError as e:
        print(f"Error: {e}", file=_sys.stderr)
        _sys.exit(1)
    _logging.basicConfig(
        format="%(levelname)s: %(message)s",
        level=_logging.DEBUG if config.debug else _logging.WARNING,
    )
    print("Analyzing power logs for screen time (Display ON)...")
    try:
        totals = _core.screen_time_report(config.tz)
    except (_core.NoEventsFound, OSError) as e:
        print(f"Error: {e}", file=_sys.stderr)
        _sys.exit(1)
    print(_core.format_report(totals), end="")


if __name__ == "__main__":
    main()
