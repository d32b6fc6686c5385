from __future__ import annotations

import logging
import os
from typing import Mapping

from blackbox.domain.settings import CHASSIS_TYPE_PATH, DESKTOP_CHASSIS_CODES, DESKTOP_SESSION_ENV

log = logging.getLogger(__name__)


def detect_desktop_session(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    return env.get(DESKTOP_SESSION_ENV, "")


def read_chassis_type(path: str = CHASSIS_TYPE_PATH) -> str | None:
    """Return the first line of the DMI chassis type file, or None if unreadable."""
    try:
        with open(path, encoding="utf-8") as handle:
            return handle.readline().rstrip("\r\n")
    except OSError as exc:
        log.debug("Chassis type unavailable at %s: %s", path, exc)
        return None


def is_desktop_chassis(chassis: str | None) -> bool:
    return chassis is not None and chassis in DESKTOP_CHASSIS_CODES
