"""Runtime configuration read from the environment."""
import os as _os

from dataclasses import dataclass
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .core import ScreenTimeError

# compile time toggle for the per-line/per-session diagnostics
ENABLE_DEBUG = False

DEBUG_ENV = "MAC_SCREEN_TIME_DEBUG"
TZ_ENV = "MAC_SCREEN_TIME_TZ"
_TRUTHY = frozenset(("1", "true", "yes", "on"))


class ConfigError(ScreenTimeError):
    pass


@dataclass(frozen=True)
class Config:
    debug: bool = ENABLE_DEBUG
    # `None` is the host's local zone
    tz: tzinfo | None = None

    @classmethod
    def from_env(cls, environ=None) -> "Config":
        if environ is None:
            environ = _os.environ
        debug_text = environ.get(DEBUG_ENV)
        debug = ENABLE_DEBUG if debug_text is None else debug_text.strip().lower() in _TRUTHY
        tz_name = environ.get(TZ_ENV, "").strip()
        tz = None
        if tz_name:
            try:
                tz = ZoneInfo(tz_name)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ConfigError(f"Unknown time zone in {TZ_ENV}: {tz_name}") from e
        return cls(debug=debug, tz=tz)
