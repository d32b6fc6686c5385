from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

RESUME_POST_UPDATE = "POST_UPDATE"
RESUME_UPDATE_RETRY = "UPDATE_RETRY"


class WizardState(Enum):
    WELCOME = "welcome"
    CHECKING_CONNECTIVITY = "checking_connectivity"
    UPDATING = "updating"
    UPDATE_FAILED = "update_failed"
    SELECTING_SOFTWARE = "selecting_software"
    APPLYING = "applying"
    APPLY_FAILED = "apply_failed"
    SUCCESS = "success"
    CONFIRM_QUIT = "confirm_quit"


class ButtonKind(Enum):
    OK = "ok"
    YES = "yes"
    NO = "no"
    CANCEL = "cancel"
    RESET = "reset"


@dataclass(frozen=True)
class SoftwareGroupSource:
    path: str
    label: str


@dataclass
class SoftwareItem:
    default_checked: bool
    display_label: str
    packages: list[str] = field(default_factory=list)
    prepare_commands: list[str] = field(default_factory=list)
    setup_commands: list[str] = field(default_factory=list)
    key: str = ""
    visible: bool = True
    checked: bool | None = None

    def __post_init__(self) -> None:
        if self.checked is None:
            self.checked = self.default_checked


@dataclass
class SelectionTab:
    label: str
    items: list[SoftwareItem] = field(default_factory=list)


@dataclass
class InstallationPlan:
    packages: list[str] = field(default_factory=list)
    prepare_commands: list[str] = field(default_factory=list)
    setup_commands: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.packages


@dataclass(frozen=True)
class RelaunchRequest:
    binary_path: str
    argument: str
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScreenSpec:
    text: str
    buttons: tuple[ButtonKind, ...]
