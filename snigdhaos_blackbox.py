#!/usr/bin/env python3
"""Snigdha OS BlackBox

PyQt-based first-boot assistant.
- Waits for internet access and runs a full system upgrade.
- Lets the user pick optional software groups and installs them.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from PyQt5 import QtCore, QtGui, QtWidgets

from blackbox.domain.models import ButtonKind, ScreenSpec
from blackbox.domain.settings import APP_ICON_PATH, APP_NAME, AppConfig
from blackbox.services.log_setup import setup_logging
from blackbox.services.process_runner import ProcessRunner
from blackbox.services.selection import SelectionModel
from blackbox.services.wizard import WizardStateMachine

log = logging.getLogger("snigdhaos_blackbox")

STANDARD_BUTTONS: dict[ButtonKind, QtWidgets.QDialogButtonBox.StandardButton] = {
    ButtonKind.OK: QtWidgets.QDialogButtonBox.Ok,
    ButtonKind.YES: QtWidgets.QDialogButtonBox.Yes,
    ButtonKind.NO: QtWidgets.QDialogButtonBox.No,
    ButtonKind.CANCEL: QtWidgets.QDialogButtonBox.Cancel,
    ButtonKind.RESET: QtWidgets.QDialogButtonBox.Reset,
}
BUTTON_KINDS = {int(value): kind for kind, value in STANDARD_BUTTONS.items()}


class MainWindow(QtWidgets.QWidget):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle(APP_NAME)
        if Path(APP_ICON_PATH).exists():
            self.setWindowIcon(QtGui.QIcon(APP_ICON_PATH))
        self.setWindowFlags(self.windowFlags() & ~QtCore.Qt.WindowCloseButtonHint)
        self.resize(720, 520)
        self._machine: WizardStateMachine | None = None

        self.text_label = QtWidgets.QLabel()
        self.text_label.setWordWrap(True)
        self.text_label.setAlignment(QtCore.Qt.AlignCenter)
        self.text_buttons = QtWidgets.QDialogButtonBox()
        self.text_buttons.clicked.connect(self._on_text_button_clicked)

        text_page = QtWidgets.QWidget()
        text_layout = QtWidgets.QVBoxLayout(text_page)
        text_layout.addWidget(self.text_label, 1)
        text_layout.addWidget(self.text_buttons)

        self.select_tabs = QtWidgets.QTabWidget()
        self.select_buttons = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel
        )
        self.select_buttons.clicked.connect(self._on_select_button_clicked)

        select_page = QtWidgets.QWidget()
        select_layout = QtWidgets.QVBoxLayout(select_page)
        select_layout.addWidget(QtWidgets.QLabel("Select the software you want to install:"))
        select_layout.addWidget(self.select_tabs, 1)
        select_layout.addWidget(self.select_buttons)

        self.pages = QtWidgets.QStackedWidget()
        self.pages.addWidget(text_page)
        self.pages.addWidget(select_page)
        self._text_page = text_page
        self._select_page = select_page

        root = QtWidgets.QVBoxLayout(self)
        root.addWidget(self.pages)

    def bind(self, machine: WizardStateMachine) -> None:
        self._machine = machine

    def show_text(self, screen: ScreenSpec) -> None:
        self.text_label.setText(screen.text)
        buttons = QtWidgets.QDialogButtonBox.NoButton
        for kind in screen.buttons:
            buttons |= STANDARD_BUTTONS[kind]
        self.text_buttons.setStandardButtons(buttons)
        self.pages.setCurrentWidget(self._text_page)

    def show_selection(self, model: SelectionModel) -> None:
        self._clear_selection_pages()
        for tab in model.tabs:
            scroll = QtWidgets.QScrollArea(self.select_tabs)
            scroll.setWidgetResizable(True)
            content = QtWidgets.QWidget(scroll)
            layout = QtWidgets.QVBoxLayout(content)
            for item in tab.items:
                checkbox = QtWidgets.QCheckBox(item.display_label, content)
                checkbox.setChecked(bool(item.checked))
                checkbox.setVisible(item.visible)
                checkbox.setToolTip(" ".join(item.packages))
                checkbox.toggled.connect(lambda checked, item=item: setattr(item, "checked", checked))
                layout.addWidget(checkbox)
            layout.addStretch(1)
            scroll.setWidget(content)
            self.select_tabs.addTab(scroll, tab.label)
        self.pages.setCurrentWidget(self._select_page)

    def _clear_selection_pages(self) -> None:
        while self.select_tabs.count():
            page = self.select_tabs.widget(0)
            self.select_tabs.removeTab(0)
            page.deleteLater()

    def activate(self) -> None:
        self.show()
        self.activateWindow()
        self.raise_()

    def quit_application(self) -> None:
        QtWidgets.QApplication.quit()

    def _on_text_button_clicked(self, button: QtWidgets.QAbstractButton) -> None:
        kind = BUTTON_KINDS.get(int(self.text_buttons.standardButton(button)))
        if kind is None or self._machine is None or self._machine.current is None:
            return
        self._machine.handle_button(self._machine.current, kind)

    def _on_select_button_clicked(self, button: QtWidgets.QAbstractButton) -> None:
        kind = BUTTON_KINDS.get(int(self.select_buttons.standardButton(button)))
        if kind is None or self._machine is None:
            return
        self._machine.handle_selection_button(kind)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snigdhaos-blackbox")
    parser.add_argument(
        "state",
        nargs="?",
        default=None,
        help="Resume token passed on relaunch (POST_UPDATE or UPDATE_RETRY).",
    )
    parser.add_argument("--debug", action="store_true", help="Enable verbose logging.")
    parser.add_argument("--log-file", default=None, help="Override log file path.")
    return parser


def relaunch_options(args: argparse.Namespace) -> list[str]:
    """Command line options a relaunched copy should start with."""
    options: list[str] = []
    if args.debug:
        options.append("--debug")
    if args.log_file:
        options.extend(["--log-file", args.log_file])
    return options


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = AppConfig.from_environ()
    setup_logging(debug=bool(args.debug), log_file=args.log_file or config.log_file)
    log.info("Starting %s (resume=%s)", APP_NAME, args.state)

    app = QtWidgets.QApplication(sys.argv[:1])
    window = MainWindow()
    runner = ProcessRunner(config.launcher)
    machine = WizardStateMachine(window, config, runner, relaunch_options=relaunch_options(args))
    window.bind(machine)
    machine.resume(args.state)
    return app.exec_()


if __name__ == "__main__":
    raise SystemExit(main())
