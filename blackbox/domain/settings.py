from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .models import SoftwareGroupSource

APP_NAME = "Snigdha OS BlackBox"
APP_ICON_PATH = "/usr/share/pixmaps/snigdhaos-blackbox.svg"

INTERNET_CHECK_URL = "https://snigdha-os.github.io/"
CONNECTIVITY_TIMEOUT_MS = 5000

TERMINAL_LAUNCHER = "/usr/lib/snigdhaos/launch-terminal"
APPLY_SCRIPT = "/usr/lib/snigdhaos-blackbox/apply.sh"
SYSTEM_UPDATE_COMMAND = "sudo pacman -Syyu 2>&1"
ACKNOWLEDGE_COMMAND = "read -p 'Press Enter to Exit'"

GROUPS_DIR = "/usr/lib/snigdhaos-blackbox"
DEFAULT_GROUP_FILE = f"{GROUPS_DIR}/eshan.txt"
DEFAULT_GROUP_LABEL = "Eshan"

CHASSIS_TYPE_PATH = "/sys/class/dmi/id/chassis_type"
# SMBIOS chassis codes: desktop, low-profile desktop, mini tower, tower, mini PC, stick PC.
DESKTOP_CHASSIS_CODES: frozenset[str] = frozenset({"3", "4", "6", "7", "23", "24"})

SELFUPDATE_ENV = "SNIGDHAOS_BLACKBOX_SELFUPDATE"
DESKTOP_SESSION_ENV = "XDG_SESSION_DESKTOP"
GNOME_SESSION = "gnome"

LAUNCHER_ENV = "SNIGDHAOS_BLACKBOX_LAUNCHER"
APPLY_SCRIPT_ENV = "SNIGDHAOS_BLACKBOX_APPLY_SCRIPT"
GROUP_FILE_ENV = "SNIGDHAOS_BLACKBOX_GROUP_FILE"
CHASSIS_PATH_ENV = "SNIGDHAOS_BLACKBOX_CHASSIS_PATH"
LOG_FILE_ENV = "SNIGDHAOS_BLACKBOX_LOG_FILE"


def _default_log_file(environ: Mapping[str, str]) -> str:
    cache_home = environ.get("XDG_CACHE_HOME")
    base = Path(cache_home) if cache_home else Path.home() / ".cache"
    return str(base / "snigdhaos-blackbox" / "blackbox.log")


@dataclass(frozen=True)
class AppConfig:
    launcher: tuple[str, ...] = (TERMINAL_LAUNCHER,)
    apply_script: str = APPLY_SCRIPT
    group_file: str = DEFAULT_GROUP_FILE
    group_label: str = DEFAULT_GROUP_LABEL
    chassis_path: str = CHASSIS_TYPE_PATH
    check_url: str = INTERNET_CHECK_URL
    check_timeout_ms: int = CONNECTIVITY_TIMEOUT_MS
    log_file: str = ""

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        env = os.environ if environ is None else environ
        launcher = env.get(LAUNCHER_ENV, "").split()
        return cls(
            launcher=tuple(launcher) if launcher else (TERMINAL_LAUNCHER,),
            apply_script=env.get(APPLY_SCRIPT_ENV) or APPLY_SCRIPT,
            group_file=env.get(GROUP_FILE_ENV) or DEFAULT_GROUP_FILE,
            chassis_path=env.get(CHASSIS_PATH_ENV) or CHASSIS_TYPE_PATH,
            log_file=env.get(LOG_FILE_ENV) or _default_log_file(env),
        )

    def group_sources(self) -> tuple[SoftwareGroupSource, ...]:
        return (SoftwareGroupSource(self.group_file, self.group_label),)


def is_selfupdate_session(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return SELFUPDATE_ENV in env
