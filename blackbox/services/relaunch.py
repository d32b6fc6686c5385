from __future__ import annotations

import logging
import os
import sys
from typing import NoReturn

from blackbox.domain.models import RelaunchRequest

log = logging.getLogger(__name__)


def application_path() -> str:
    """Path of the file that started this process, as it would be re-executed."""
    return os.path.realpath(sys.argv[0]) if sys.argv and sys.argv[0] else os.path.realpath(sys.executable)


def file_mtime(path: str) -> int | None:
    try:
        return os.stat(path).st_mtime_ns
    except OSError:
        return None


def relaunch_argv(request: RelaunchRequest) -> list[str]:
    if request.binary_path.endswith(".py"):
        return [sys.executable, request.binary_path, *request.options, request.argument]
    return [request.binary_path, *request.options, request.argument]


def exec_relaunch(request: RelaunchRequest) -> NoReturn:
    """Replace the running process with a fresh copy of the application.

    Never returns. A failing exec raises OSError, which is left to terminate
    the process.
    """
    argv = relaunch_argv(request)
    log.info("Relaunching %s with %s", argv[0], request.argument)
    logging.shutdown()
    os.execv(argv[0], argv)
    raise AssertionError("os.execv returned")
