"""Menubar application for macOS weekly screen time"""
import rumps as _rumps

from . import core as _core
from . import config as _config
from . import refresh as _refresh

# placeholder for day rows that haven't been loaded yet
_PLACEHOLDER_TEXT = " " * 40


def update_formatted_menu_item(menu_item: _rumps.MenuItem, text: str):
    """Updates the text of a menu item with fixed width text."""
    # Adapted from https://github.com/jaredks/rumps/issues/30#issuecomment-70348881
    from AppKit import NSAttributedString
    from PyObjCTools.Conversion import propertyListFromPythonCollection
    from Cocoa import (
        NSFont,
        NSColor,
        NSFontAttributeName,
        NSForegroundColorAttributeName,
    )

    font = NSFont.fontWithName_size_("Monaco", 12.0)
    color = NSColor.blueColor()
    attributes = propertyListFromPythonCollection(
        {NSFontAttributeName: font, NSForegroundColorAttributeName: color},
        conversionHelper=lambda x: x,
    )

    string = NSAttributedString.alloc().initWithString_attributes_(text, attributes)
    menu_item._menuitem.setAttributedTitle_(string)


def formatted_menu_item(text) -> _rumps.MenuItem:
    menu_item = _rumps.MenuItem("")
    update_formatted_menu_item(menu_item, text)
    return menu_item


class ScreenTimeApp(_rumps.App):
    def __init__(self, config: _config.Config):
        super(ScreenTimeApp, self).__init__(name="🖥")

        self.__status_menu_item = _rumps.MenuItem("Loading...")
        self.menu.add(self.__status_menu_item)
        self.menu.add(_rumps.separator)
        self.__day_menu_items = [
            formatted_menu_item(_PLACEHOLDER_TEXT) for _ in range(_core.REPORT_DAYS)
        ]
        for menu_item in self.__day_menu_items:
            self.menu.add(menu_item)

        # pmset is slow enough that it must stay off the UI thread
        self.__updater = _refresh.BackgroundRefresh(_refresh.fetch_rows, config.tz)
        self.__updater.start()

        self.__update_ui_timer = _rumps.Timer(self.__update_ui, 5)
        self.__update_ui_timer.start()

        self.__refresh_timer = _rumps.Timer(self.__refresh, 120)
        self.__refresh_timer.start()

    def __update_ui(self, _: _rumps.Timer):
        result = self.__updater.poll()
        if result is None:
            return
        lines, status = result
        if lines is not None:
            for line, menu_item in zip(lines, self.__day_menu_items):
                update_formatted_menu_item(menu_item, line)
        self.__status_menu_item.title = status

    def __refresh(self, _: _rumps.Timer):
        self.__updater.start()


def main():
    ScreenTimeApp(_config.Config.from_env()).run()


if __name__ == "__main__":
    main()
