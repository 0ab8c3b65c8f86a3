import sys

from setuptools import setup

APP = ["app/ScreenTime.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": True,
    "plist": {
        "LSUIElement": True,
    },
    "packages": ["rumps", "mac_screen_time"],
}

# the app bundle is only built on request, a plain install is just the package
py2app_args = {}
if "py2app" in sys.argv:
    py2app_args = dict(
        app=APP,
        data_files=DATA_FILES,
        options={"py2app": OPTIONS},
        setup_requires=["py2app"],
    )

setup(
    name="mac-screen-time",
    version="0.1.0",
    description="Daily screen on time for the last week from the macOS pmset log",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=["mac_screen_time"],
    install_requires=['rumps; sys_platform == "darwin"'],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "mac-screen-time=mac_screen_time.__main__:main",
        ],
        "gui_scripts": [
            "mac-screen-time-menubar=mac_screen_time.menubar:main",
        ],
    },
    **py2app_args,
)
