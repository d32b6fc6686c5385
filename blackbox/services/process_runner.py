from __future__ import annotations

import logging
import shlex
from typing import Callable, Sequence

from PyQt5 import QtCore

from blackbox.domain.settings import TERMINAL_LAUNCHER

log = logging.getLogger(__name__)

PROCESS_CRASHED_EXIT_CODE = -1
PROCESS_START_FAILED_EXIT_CODE = -2


def format_command(args: Sequence[str]) -> str:
    """Create a readable command line string for logging."""
    return shlex.join(args)


class ProcessRunner(QtCore.QObject):
    """Run shell commands through the privileged terminal launcher.

    The launcher opens a visible terminal so the user can follow and approve
    what happens. Completion is reported on the Qt event loop.
    """

    def __init__(self, launcher: Sequence[str] = (TERMINAL_LAUNCHER,), parent: QtCore.QObject | None = None) -> None:
        super().__init__(parent)
        if not launcher:
            raise ValueError("launcher must name a program")
        self._launcher = list(launcher)

    def start(self, command: str, on_finished: Callable[[int], None]) -> None:
        program, *prefix = self._launcher
        args = [*prefix, command]
        process = QtCore.QProcess(self)
        reported = False

        def report(exit_code: int) -> None:
            nonlocal reported
            if reported:
                return
            reported = True
            log.info("Process finished (exit %s): %s", exit_code, format_command([program, *args]))
            process.deleteLater()
            on_finished(exit_code)

        def on_process_finished(exit_code: int, status: QtCore.QProcess.ExitStatus) -> None:
            if status == QtCore.QProcess.CrashExit:
                report(PROCESS_CRASHED_EXIT_CODE)
            else:
                report(exit_code)

        def on_error(error: QtCore.QProcess.ProcessError) -> None:
            if error == QtCore.QProcess.FailedToStart:
                log.warning("Unable to start %s: %s", program, process.errorString())
                report(PROCESS_START_FAILED_EXIT_CODE)

        process.finished[int, QtCore.QProcess.ExitStatus].connect(on_process_finished)
        process.errorOccurred.connect(on_error)
        log.info("$ %s", format_command([program, *args]))
        process.start(program, args)
