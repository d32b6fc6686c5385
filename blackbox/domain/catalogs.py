from __future__ import annotations

from dataclasses import dataclass

from .models import SoftwareItem

BASE_TAB_LABEL = "Base"

REQUIRES_GNOME = "gnome"
REQUIRES_DESKTOP_CHASSIS = "desktop_chassis"


@dataclass(frozen=True)
class BuiltinGroup:
    key: str
    label: str
    packages: tuple[str, ...]
    prepare_commands: tuple[str, ...] = ()
    setup_commands: tuple[str, ...] = ()
    default_checked: bool = False
    requires: str | None = None


BUILTIN_GROUPS: tuple[BuiltinGroup, ...] = (
    BuiltinGroup(
        "gnome",
        "GNOME tweaks and extensions",
        ("gnome-tweaks", "gnome-shell-extensions", "extension-manager"),
        requires=REQUIRES_GNOME,
    ),
    BuiltinGroup(
        "performance",
        "Performance tuning for desktop computers",
        ("ananicy-cpp", "irqbalance"),
        setup_commands=(
            "systemctl enable --now ananicy-cpp",
            "systemctl enable --now irqbalance",
        ),
        requires=REQUIRES_DESKTOP_CHASSIS,
    ),
    BuiltinGroup(
        "printing",
        "Printer support",
        ("cups", "cups-pdf", "system-config-printer"),
        setup_commands=("systemctl enable --now cups.socket",),
    ),
    BuiltinGroup(
        "flatpak",
        "Flatpak with the Flathub remote",
        ("flatpak",),
        setup_commands=(
            "flatpak remote-add --if-not-exists flathub https://dl.flathub.org/repo/flathub.flatpakrepo",
        ),
    ),
    BuiltinGroup(
        "gaming",
        "Steam and 32-bit libraries",
        ("steam",),
        prepare_commands=(
            "sed -i '/^#\\[multilib\\]/,/^#Include/ s/^#//' /etc/pacman.conf",
            "pacman -Sy",
        ),
    ),
    BuiltinGroup(
        "containers",
        "Docker container runtime",
        ("docker", "docker-compose"),
    ),
    BuiltinGroup(
        "virtualization",
        "Virtual machines",
        ("virt-manager-meta", "gnome-boxes"),
    ),
)


def build_builtin_items() -> list[SoftwareItem]:
    return [
        SoftwareItem(
            default_checked=group.default_checked,
            display_label=group.label,
            packages=list(group.packages),
            prepare_commands=list(group.prepare_commands),
            setup_commands=list(group.setup_commands),
            key=group.key,
        )
        for group in BUILTIN_GROUPS
    ]


def builtin_requirement(key: str) -> str | None:
    for group in BUILTIN_GROUPS:
        if group.key == key:
            return group.requires
    return None


def validate_builtin_catalog() -> None:
    seen_keys: set[str] = set()
    for group in BUILTIN_GROUPS:
        if group.key in seen_keys:
            raise ValueError(f"Duplicate builtin group key: {group.key}")
        seen_keys.add(group.key)
        if not group.packages:
            raise ValueError(f"Builtin group without packages: {group.key}")
