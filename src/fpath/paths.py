"""Platform-specific locations for settings and logs.

Nothing here touches the filesystem; writers create parents when they write.
"""

from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "fpath"


def dirs() -> PlatformDirs:
    return PlatformDirs(appname=APP_NAME, appauthor=False, roaming=False)


def settings_path() -> Path:
    return Path(dirs().user_config_path) / "settings.json"


def default_log_path() -> Path:
    return Path(dirs().user_state_path) / "logs" / "fpath.runtime.jsonl"
