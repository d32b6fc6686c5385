import os
import shlex
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock

from blackbox.domain.models import ButtonKind, RelaunchRequest, WizardState
from blackbox.domain.settings import AppConfig
from blackbox.services.wizard import WizardStateMachine
from qt_helpers import ensure_app


def setUpModule() -> None:
    ensure_app()


class FakeSurface:
    def __init__(self) -> None:
        self.texts: list[str] = []
        self.selections = 0
        self.activations = 0
        self.quits = 0

    def show_text(self, screen) -> None:
        self.texts.append(screen.text)

    def show_selection(self, model) -> None:
        self.selections += 1

    def activate(self) -> None:
        self.activations += 1

    def quit_application(self) -> None:
        self.quits += 1


class FakeRunner:
    def __init__(self) -> None:
        self.commands: list[str] = []
        self._callbacks = []

    def start(self, command, on_finished) -> None:
        self.commands.append(command)
        self._callbacks.append(on_finished)

    def finish(self, exit_code: int) -> None:
        self._callbacks.pop(0)(exit_code)


def shell_words(command: str) -> list[str]:
    return list(shlex.shlex(command, posix=True, punctuation_chars=True))


class WizardTestCase(unittest.TestCase):
    group_text = "true\ndocker base-devel\nDeveloper Tools\nfalse\nfirefox\nBrowser\n"

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name)
        self.group_file = self.tmp / "eshan.txt"
        self.group_file.write_text(self.group_text, encoding="utf-8")
        self.executable = self.tmp / "snigdhaos-blackbox"
        self.executable.write_text("#!/bin/sh\n", encoding="utf-8")

        self.surface = FakeSurface()
        self.runner = FakeRunner()
        self.relaunch = Mock()
        self.environ: dict[str, str] = {}
        self.config = AppConfig(
            apply_script="/usr/lib/snigdhaos-blackbox/apply.sh",
            group_file=str(self.group_file),
            chassis_path=str(self.tmp / "chassis_type"),
        )
        self.machine = self._build_machine()

    def _build_machine(self) -> WizardStateMachine:
        machine = WizardStateMachine(
            self.surface,
            self.config,
            self.runner,
            network_manager=Mock(),
            environ=self.environ,
            executable_path=str(self.executable),
            relaunch=self.relaunch,
        )
        machine.prober = Mock()
        return machine

    def _touch_executable(self) -> None:
        stat = os.stat(self.executable)
        os.utime(self.executable, ns=(stat.st_atime_ns, stat.st_mtime_ns + 5_000_000_000))


class StateEntryTests(WizardTestCase):
    def test_resume_without_token_shows_welcome(self) -> None:
        self.machine.resume(None)
        self.assertEqual(WizardState.WELCOME, self.machine.current)
        self.assertEqual(1, self.surface.activations)
        self.assertIn("Welcome", self.surface.texts[-1])

    def test_entering_current_state_is_a_noop(self) -> None:
        self.machine.resume(None)
        self.machine.enter_state(WizardState.WELCOME)
        self.assertEqual(1, len(self.surface.texts))
        self.assertEqual(1, self.surface.activations)

    def test_welcome_ok_starts_connectivity_probe(self) -> None:
        self.machine.resume(None)
        self.machine.handle_button(WizardState.WELCOME, ButtonKind.OK)
        self.assertEqual(WizardState.CHECKING_CONNECTIVITY, self.machine.current)
        self.machine.prober.probe.assert_called_once_with()

    def test_cancel_asks_for_confirmation_then_quits(self) -> None:
        self.machine.resume(None)
        self.machine.handle_button(WizardState.WELCOME, ButtonKind.CANCEL)
        self.assertEqual(WizardState.CONFIRM_QUIT, self.machine.current)
        self.machine.handle_button(WizardState.CONFIRM_QUIT, ButtonKind.OK)
        self.assertEqual(1, self.surface.quits)

    def test_reset_on_quit_confirmation_starts_over(self) -> None:
        self.machine.resume(None)
        self.machine.handle_button(WizardState.WELCOME, ButtonKind.CANCEL)
        self.machine.handle_button(WizardState.CONFIRM_QUIT, ButtonKind.RESET)
        self.assertEqual(WizardState.WELCOME, self.machine.current)
        self.assertEqual(0, self.surface.quits)

    def test_unmapped_button_changes_nothing(self) -> None:
        self.machine.resume(None)
        self.machine.handle_button(WizardState.WELCOME, ButtonKind.RESET)
        self.assertEqual(WizardState.WELCOME, self.machine.current)
        self.assertEqual(1, len(self.surface.texts))

    def test_update_retry_token_resumes_on_failure_screen(self) -> None:
        self.machine.resume("UPDATE_RETRY")
        self.assertEqual(WizardState.UPDATE_FAILED, self.machine.current)
        self.machine.handle_button(WizardState.UPDATE_FAILED, ButtonKind.YES)
        self.assertEqual(WizardState.CHECKING_CONNECTIVITY, self.machine.current)


class UpdateFlowTests(WizardTestCase):
    def _start_update(self) -> str:
        self.machine.resume(None)
        self.machine.handle_button(WizardState.WELCOME, ButtonKind.OK)
        self.machine.on_online()
        self.assertEqual(WizardState.UPDATING, self.machine.current)
        self.assertEqual(1, len(self.runner.commands))
        words = shell_words(self.runner.commands[0])
        self.assertEqual(["sudo", "pacman", "-Syyu"], words[:3])
        sentinel = words[words.index("rm") + 1]
        self.assertTrue(os.path.exists(sentinel))
        return sentinel

    def test_successful_update_without_binary_change_resumes_in_process(self) -> None:
        sentinel = self._start_update()
        os.remove(sentinel)
        self.runner.finish(0)

        self.assertEqual(WizardState.SELECTING_SOFTWARE, self.machine.current)
        self.relaunch.assert_not_called()
        self.assertEqual(1, self.surface.selections)

    def test_successful_update_with_binary_change_relaunches(self) -> None:
        sentinel = self._start_update()
        os.remove(sentinel)
        self._touch_executable()
        self.runner.finish(0)

        self.relaunch.assert_called_once_with(RelaunchRequest(str(self.executable), "POST_UPDATE"))
        self.assertEqual(WizardState.UPDATING, self.machine.current)

    def test_nonzero_exit_is_a_failure_and_removes_sentinel(self) -> None:
        sentinel = self._start_update()
        self.runner.finish(1)

        self.assertEqual(WizardState.UPDATE_FAILED, self.machine.current)
        self.assertFalse(os.path.exists(sentinel))

    def test_surviving_sentinel_is_a_failure(self) -> None:
        sentinel = self._start_update()
        self.runner.finish(0)

        self.assertEqual(WizardState.UPDATE_FAILED, self.machine.current)
        self.assertFalse(os.path.exists(sentinel))

    def test_relaunch_request_carries_command_line_options(self) -> None:
        self.machine.updater.relaunch_options = ("--debug",)
        sentinel = self._start_update()
        os.remove(sentinel)
        self._touch_executable()
        self.runner.finish(0)

        self.relaunch.assert_called_once_with(
            RelaunchRequest(str(self.executable), "POST_UPDATE", ("--debug",))
        )

    def test_failed_update_with_binary_change_relaunches_for_retry(self) -> None:
        self._start_update()
        self._touch_executable()
        self.runner.finish(1)

        self.relaunch.assert_called_once_with(RelaunchRequest(str(self.executable), "UPDATE_RETRY"))

    def test_selfupdate_session_resumes_in_selection_without_probing(self) -> None:
        self.environ["SNIGDHAOS_BLACKBOX_SELFUPDATE"] = "1"
        self.machine.resume(None)

        self.assertEqual(WizardState.SELECTING_SOFTWARE, self.machine.current)
        self.machine.prober.probe.assert_not_called()
        self.assertEqual([], self.runner.commands)

    def test_selfupdate_session_ignores_resume_token(self) -> None:
        self.environ["SNIGDHAOS_BLACKBOX_SELFUPDATE"] = "1"
        self.machine.resume("UPDATE_RETRY")
        self.assertEqual(WizardState.SELECTING_SOFTWARE, self.machine.current)

    def test_selfupdate_session_never_runs_update_command(self) -> None:
        self.environ["SNIGDHAOS_BLACKBOX_SELFUPDATE"] = "1"
        self.machine.enter_state(WizardState.UPDATING)

        self.assertEqual(WizardState.SELECTING_SOFTWARE, self.machine.current)
        self.assertEqual([], self.runner.commands)


class ApplyFlowTests(WizardTestCase):
    def _apply_files(self) -> tuple[str, str, str]:
        words = shlex.split(self.runner.commands[-1])
        self.assertEqual("/usr/lib/snigdhaos-blackbox/apply.sh", words[0])
        return words[1], words[2], words[3]

    def test_selection_is_populated_once(self) -> None:
        self.machine.resume("POST_UPDATE")
        self.assertEqual(["Base", "Eshan"], [tab.label for tab in self.machine.selection.tabs])

        self.machine.handle_selection_button(ButtonKind.CANCEL)
        self.machine.handle_button(WizardState.CONFIRM_QUIT, ButtonKind.RESET)
        self.machine.enter_state(WizardState.SELECTING_SOFTWARE)
        self.assertEqual(2, len(self.machine.selection.tabs))
        self.assertEqual(2, self.surface.selections)

    def test_empty_selection_succeeds_without_running_anything(self) -> None:
        self.machine.resume("POST_UPDATE")
        for item in self.machine.selection.iter_items():
            item.checked = False
        self.machine.handle_selection_button(ButtonKind.OK)

        self.assertEqual(WizardState.SUCCESS, self.machine.current)
        self.assertEqual([], self.runner.commands)

    def test_apply_writes_plan_files_and_returns_to_selection(self) -> None:
        self.machine.resume("POST_UPDATE")
        self.machine.handle_selection_button(ButtonKind.OK)
        self.assertEqual(WizardState.APPLYING, self.machine.current)

        prepare_path, packages_path, setup_path = self._apply_files()
        self.assertEqual("docker base-devel", Path(packages_path).read_text(encoding="utf-8"))
        self.assertEqual("", Path(prepare_path).read_text(encoding="utf-8"))
        self.assertEqual(
            "systemctl enable --now docker.socket",
            Path(setup_path).read_text(encoding="utf-8"),
        )

        os.remove(packages_path)
        self.runner.finish(0)

        self.assertEqual(WizardState.SELECTING_SOFTWARE, self.machine.current)
        self.assertFalse(os.path.exists(prepare_path))
        self.assertFalse(os.path.exists(setup_path))

    def test_failed_apply_offers_retry_and_cleans_up(self) -> None:
        self.machine.resume("POST_UPDATE")
        self.machine.handle_selection_button(ButtonKind.OK)
        paths = self._apply_files()
        self.runner.finish(0)

        self.assertEqual(WizardState.APPLY_FAILED, self.machine.current)
        for path in paths:
            self.assertFalse(os.path.exists(path))

        self.machine.handle_button(WizardState.APPLY_FAILED, ButtonKind.YES)
        self.assertEqual(WizardState.APPLYING, self.machine.current)
        self.assertEqual(2, len(self.runner.commands))

    def test_reset_after_failed_apply_returns_to_selection(self) -> None:
        self.machine.resume("POST_UPDATE")
        self.machine.handle_selection_button(ButtonKind.OK)
        self.runner.finish(2)
        self.machine.handle_button(WizardState.APPLY_FAILED, ButtonKind.RESET)
        self.assertEqual(WizardState.SELECTING_SOFTWARE, self.machine.current)

    def test_success_ok_quits(self) -> None:
        self.machine.resume("POST_UPDATE")
        for item in self.machine.selection.iter_items():
            item.checked = False
        self.machine.handle_selection_button(ButtonKind.OK)
        self.machine.handle_button(WizardState.SUCCESS, ButtonKind.OK)
        self.assertEqual(1, self.surface.quits)


if __name__ == "__main__":
    unittest.main()
