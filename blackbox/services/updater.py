from __future__ import annotations

import logging
import os
import shlex
import tempfile
from typing import Callable, Mapping, Sequence

from blackbox.domain.errors import UpdateFailure
from blackbox.domain.models import RESUME_POST_UPDATE, RESUME_UPDATE_RETRY, RelaunchRequest
from blackbox.domain.settings import ACKNOWLEDGE_COMMAND, SYSTEM_UPDATE_COMMAND, is_selfupdate_session
from blackbox.services.process_runner import ProcessRunner
from blackbox.services.relaunch import application_path, file_mtime

log = logging.getLogger(__name__)


def build_update_command(sentinel_path: str) -> str:
    return f"{SYSTEM_UPDATE_COMMAND} && rm {shlex.quote(sentinel_path)}; {ACKNOWLEDGE_COMMAND}"


class UpdateRunner:
    """Run the full system upgrade in a terminal and report a resume token.

    The upgrade pipeline deletes a sentinel file only when pacman succeeds, so
    success requires both a zero exit code and the sentinel being gone.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        on_finished: Callable[[str], None],
        on_skipped: Callable[[], None],
        *,
        executable_path: str | None = None,
        environ: Mapping[str, str] | None = None,
        relaunch_options: Sequence[str] = (),
    ) -> None:
        self._runner = runner
        self._on_finished = on_finished
        self._on_skipped = on_skipped
        self._environ = environ
        self.relaunch_options = tuple(relaunch_options)
        self.executable_path = executable_path or application_path()
        self.startup_mtime = file_mtime(self.executable_path)

    def run(self) -> None:
        if is_selfupdate_session(self._environ):
            log.info("Self-update session, skipping system update")
            self._on_skipped()
            return

        fd, sentinel = tempfile.mkstemp(prefix="blackbox-update-")
        os.close(fd)
        self._runner.start(build_update_command(sentinel), lambda exit_code: self._finish(sentinel, exit_code))

    def _finish(self, sentinel: str, exit_code: int) -> None:
        try:
            if exit_code != 0:
                raise UpdateFailure(f"update command exited with {exit_code}")
            if os.path.exists(sentinel):
                raise UpdateFailure("update command did not complete")
        except UpdateFailure as exc:
            log.warning("System update failed: %s", exc)
            token = RESUME_UPDATE_RETRY
        else:
            token = RESUME_POST_UPDATE
        finally:
            if os.path.exists(sentinel):
                os.remove(sentinel)
        self._on_finished(token)

    def relaunch_request_for(self, token: str) -> RelaunchRequest | None:
        """Return a relaunch request when the upgrade replaced the application on disk."""
        current = file_mtime(self.executable_path)
        if current == self.startup_mtime:
            return None
        log.info("%s changed on disk during the update", self.executable_path)
        return RelaunchRequest(self.executable_path, token, self.relaunch_options)
