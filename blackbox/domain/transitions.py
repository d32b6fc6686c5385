from __future__ import annotations

from .models import (
    RESUME_POST_UPDATE,
    RESUME_UPDATE_RETRY,
    ButtonKind,
    ScreenSpec,
    WizardState,
)

WAITING_TEXT = "Please wait while the operation completes..."

SCREENS: dict[WizardState, ScreenSpec] = {
    WizardState.WELCOME: ScreenSpec(
        "Welcome to Snigdha OS!\n\n"
        "This assistant checks your internet connection, brings the system up to date "
        "and lets you pick optional software to install.\n\n"
        "Press Ok to begin.",
        (ButtonKind.OK, ButtonKind.CANCEL),
    ),
    WizardState.CHECKING_CONNECTIVITY: ScreenSpec(
        "Waiting for an internet connection...",
        (),
    ),
    WizardState.UPDATING: ScreenSpec(WAITING_TEXT, ()),
    WizardState.UPDATE_FAILED: ScreenSpec(
        "The system update did not complete.\n\nDo you want to try again?",
        (ButtonKind.YES, ButtonKind.NO),
    ),
    WizardState.APPLYING: ScreenSpec(WAITING_TEXT, ()),
    WizardState.APPLY_FAILED: ScreenSpec(
        "Installing the selected software did not complete.\n\n"
        "Do you want to try again, or go back to the selection?",
        (ButtonKind.YES, ButtonKind.NO, ButtonKind.RESET),
    ),
    WizardState.SUCCESS: ScreenSpec(
        "Your system is ready.\n\nEnjoy Snigdha OS!",
        (ButtonKind.OK,),
    ),
    WizardState.CONFIRM_QUIT: ScreenSpec(
        "Are you sure you want to quit?\n\nPress Reset to start over.",
        (ButtonKind.OK, ButtonKind.RESET),
    ),
}

_BUTTON_ROUTES: dict[tuple[WizardState, ButtonKind], WizardState] = {
    (WizardState.WELCOME, ButtonKind.OK): WizardState.CHECKING_CONNECTIVITY,
    (WizardState.UPDATE_FAILED, ButtonKind.YES): WizardState.CHECKING_CONNECTIVITY,
    (WizardState.APPLY_FAILED, ButtonKind.YES): WizardState.APPLYING,
    (WizardState.APPLY_FAILED, ButtonKind.RESET): WizardState.SELECTING_SOFTWARE,
}

_TERMINATING: frozenset[tuple[WizardState, ButtonKind]] = frozenset(
    {
        (WizardState.SUCCESS, ButtonKind.OK),
        (WizardState.CONFIRM_QUIT, ButtonKind.OK),
        (WizardState.CONFIRM_QUIT, ButtonKind.NO),
    }
)

_QUIT_BUTTONS = frozenset({ButtonKind.NO, ButtonKind.CANCEL})


def is_terminating(state: WizardState, button: ButtonKind) -> bool:
    return (state, button) in _TERMINATING


def next_state_for_button(state: WizardState, button: ButtonKind) -> WizardState | None:
    """Return the state a button press leads to, or None when it is ignored.

    Terminating combinations are reported by ``is_terminating`` and must be
    checked first. Any other button on the quit confirmation returns to the
    welcome screen. No/Cancel is applied after the per-state routes and always
    ends on the quit confirmation.
    """
    if is_terminating(state, button):
        return None
    target = _BUTTON_ROUTES.get((state, button))
    if target is None and state == WizardState.CONFIRM_QUIT:
        target = WizardState.WELCOME
    if button in _QUIT_BUTTONS:
        target = WizardState.CONFIRM_QUIT
    return target


def next_state_for_selection_button(button: ButtonKind) -> WizardState:
    if button == ButtonKind.OK:
        return WizardState.APPLYING
    return WizardState.CONFIRM_QUIT


def state_for_resume_token(token: str | None) -> WizardState:
    if token == RESUME_POST_UPDATE:
        return WizardState.SELECTING_SOFTWARE
    if token == RESUME_UPDATE_RETRY:
        return WizardState.UPDATE_FAILED
    return WizardState.WELCOME
