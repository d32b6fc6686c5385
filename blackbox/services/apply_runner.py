from __future__ import annotations

import logging
import os
import shlex
import tempfile
from typing import Callable, Iterable

from blackbox.domain.errors import ApplyFailure
from blackbox.domain.models import InstallationPlan, SoftwareItem, WizardState
from blackbox.domain.plan import build_installation_plan, serialize_plan
from blackbox.domain.settings import APPLY_SCRIPT
from blackbox.services.process_runner import ProcessRunner

log = logging.getLogger(__name__)

PLAN_FILE_PREFIXES = ("blackbox-prepare-", "blackbox-packages-", "blackbox-setup-")


def write_transient_file(prefix: str, content: str) -> str:
    fd, path = tempfile.mkstemp(prefix=prefix)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(content)
    return path


def build_apply_command(script: str, prepare_path: str, packages_path: str, setup_path: str) -> str:
    return " ".join(shlex.quote(part) for part in (script, prepare_path, packages_path, setup_path))


class ApplyPlanner:
    """Turn the checked software groups into one run of the apply script.

    The script receives three files: prepare commands, package names and setup
    commands. It deletes the package list once installation went through.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        on_finished: Callable[[WizardState], None],
        *,
        apply_script: str = APPLY_SCRIPT,
    ) -> None:
        self._runner = runner
        self._on_finished = on_finished
        self._apply_script = apply_script
        self.last_plan: InstallationPlan | None = None

    def apply(self, items: Iterable[SoftwareItem]) -> None:
        plan = build_installation_plan(items)
        self.last_plan = plan
        if plan.is_empty:
            log.info("Nothing selected, no packages to install")
            self._on_finished(WizardState.SUCCESS)
            return

        log.info("Installing %d package(s): %s", len(plan.packages), " ".join(plan.packages))
        paths = [
            write_transient_file(prefix, content)
            for prefix, content in zip(PLAN_FILE_PREFIXES, serialize_plan(plan))
        ]
        command = build_apply_command(self._apply_script, *paths)
        self._runner.start(command, lambda exit_code: self._finish(paths, exit_code))

    def _finish(self, paths: list[str], exit_code: int) -> None:
        packages_path = paths[1]
        try:
            if exit_code != 0:
                raise ApplyFailure(f"apply script exited with {exit_code}")
            if os.path.exists(packages_path):
                raise ApplyFailure("apply script did not consume the package list")
        except ApplyFailure as exc:
            log.warning("Applying selection failed: %s", exc)
            next_state = WizardState.APPLY_FAILED
        else:
            next_state = WizardState.SELECTING_SOFTWARE
        finally:
            for path in paths:
                if os.path.exists(path):
                    os.remove(path)
        self._on_finished(next_state)
