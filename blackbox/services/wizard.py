from __future__ import annotations

import logging
from typing import Callable, Mapping, NoReturn, Protocol, Sequence

from PyQt5 import QtNetwork

from blackbox.domain.models import ButtonKind, RelaunchRequest, ScreenSpec, WizardState
from blackbox.domain.settings import AppConfig, is_selfupdate_session
from blackbox.domain.transitions import (
    SCREENS,
    is_terminating,
    next_state_for_button,
    next_state_for_selection_button,
    state_for_resume_token,
)
from blackbox.services.apply_runner import ApplyPlanner
from blackbox.services.connectivity import ConnectivityProber
from blackbox.services.process_runner import ProcessRunner
from blackbox.services.relaunch import exec_relaunch
from blackbox.services.selection import SelectionModel
from blackbox.services.updater import UpdateRunner

log = logging.getLogger(__name__)


class WizardSurface(Protocol):
    def show_text(self, screen: ScreenSpec) -> None: ...

    def show_selection(self, model: SelectionModel) -> None: ...

    def activate(self) -> None: ...

    def quit_application(self) -> None: ...


class WizardStateMachine:
    """Drive the first-boot wizard.

    Owns the current state. Every change goes through ``enter_state``, which
    runs the entry effect of the new state exactly once per change. The
    prober, update runner and apply planner report back through the
    ``on_*`` callbacks.
    """

    def __init__(
        self,
        surface: WizardSurface,
        config: AppConfig,
        runner: ProcessRunner,
        *,
        network_manager: QtNetwork.QNetworkAccessManager | None = None,
        environ: Mapping[str, str] | None = None,
        executable_path: str | None = None,
        relaunch_options: Sequence[str] = (),
        relaunch: Callable[[RelaunchRequest], NoReturn] = exec_relaunch,
    ) -> None:
        self.current: WizardState | None = None
        self._surface = surface
        self._config = config
        self._environ = environ
        self._relaunch = relaunch
        self.selection = SelectionModel()
        self.prober = ConnectivityProber(
            self.on_online,
            url=config.check_url,
            timeout_ms=config.check_timeout_ms,
            network_manager=network_manager,
        )
        self.updater = UpdateRunner(
            runner,
            self.on_update_finished,
            self.on_update_skipped,
            executable_path=executable_path,
            environ=environ,
            relaunch_options=relaunch_options,
        )
        self.planner = ApplyPlanner(runner, self.on_apply_finished, apply_script=config.apply_script)
        self._effects: dict[WizardState, Callable[[], None]] = {
            WizardState.CHECKING_CONNECTIVITY: self._start_probe,
            WizardState.UPDATING: self._start_update,
            WizardState.APPLYING: self._start_apply,
        }

    def enter_state(self, new: WizardState) -> None:
        if new == self.current:
            return
        log.info("State %s -> %s", self.current.name if self.current else "START", new.name)
        self.current = new
        self._surface.activate()

        if new == WizardState.SELECTING_SOFTWARE:
            self.selection.populate(
                self._config.group_sources(),
                environ=self._environ,
                chassis_path=self._config.chassis_path,
            )
            self._surface.show_selection(self.selection)
            return

        self._surface.show_text(SCREENS[new])
        effect = self._effects.get(new)
        if effect is not None:
            effect()

    def handle_button(self, state: WizardState, button: ButtonKind) -> None:
        if is_terminating(state, button):
            log.info("Quit requested from %s", state.name)
            self._surface.quit_application()
            return
        target = next_state_for_button(state, button)
        if target is not None:
            self.enter_state(target)

    def handle_selection_button(self, button: ButtonKind) -> None:
        self.enter_state(next_state_for_selection_button(button))

    def resume(self, token: str | None) -> None:
        if is_selfupdate_session(self._environ):
            log.info("Self-update session, going straight to software selection")
            self.enter_state(WizardState.SELECTING_SOFTWARE)
            return
        self.enter_state(state_for_resume_token(token))

    def relaunch_self(self, token: str) -> None:
        request = self.updater.relaunch_request_for(token)
        if request is None:
            self.resume(token)
            return
        self._relaunch(request)

    def on_online(self) -> None:
        self.enter_state(WizardState.UPDATING)

    def on_update_skipped(self) -> None:
        self.enter_state(WizardState.SELECTING_SOFTWARE)

    def on_update_finished(self, token: str) -> None:
        self.relaunch_self(token)

    def on_apply_finished(self, state: WizardState) -> None:
        self.enter_state(state)

    def _start_probe(self) -> None:
        self.prober.probe()

    def _start_update(self) -> None:
        self.updater.run()

    def _start_apply(self) -> None:
        self.planner.apply(self.selection.iter_items())
