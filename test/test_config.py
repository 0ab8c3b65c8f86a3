import pytest

from mac_screen_time.config import *


def test_defaults():
    config = Config.from_env({})
    assert config.debug is ENABLE_DEBUG
    assert config.tz is None


@pytest.mark.parametrize(
    "text, debug",
    (("1", True), ("true", True), (" YES ", True), ("on", True), ("0", False), ("", False), ("nope", False)),
)
def test_debug_toggle(text: str, debug: bool):
    assert Config.from_env({DEBUG_ENV: text}).debug is debug


def test_tz():
    try:
        expected = ZoneInfo("UTC")
    except ZoneInfoNotFoundError:
        pytest.skip("no time zone database")
    assert Config.from_env({TZ_ENV: "UTC"}).tz == expected


def test_unknown_tz():
    with pytest.raises(ConfigError, match="Not/AZone"):
        Config.from_env({TZ_ENV: "Not/AZone"})
