from __future__ import annotations

from typing import Iterable

from .models import InstallationPlan, SoftwareItem

# Package name -> command that enables the service it ships.
SERVICE_POLICIES: tuple[tuple[str, str], ...] = (
    ("docker", "systemctl enable --now docker.socket"),
    ("virt-manager-meta", "systemctl enable --now libvirtd"),
    ("gnome-boxes", "systemctl enable --now libvirtd"),
)


def unique_in_order(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def collect_plan(items: Iterable[SoftwareItem]) -> InstallationPlan:
    """Concatenate the lists of every checked, visible item in order."""
    plan = InstallationPlan()
    for item in items:
        if not (item.checked and item.visible):
            continue
        plan.packages += item.packages
        plan.prepare_commands += item.prepare_commands
        plan.setup_commands += item.setup_commands
    return plan


def augment_with_service_policies(plan: InstallationPlan) -> InstallationPlan:
    packages = set(plan.packages)
    injected: list[str] = []
    for package, command in SERVICE_POLICIES:
        if package in packages and command not in injected:
            injected.append(command)
    plan.setup_commands += injected
    return plan


def build_installation_plan(items: Iterable[SoftwareItem]) -> InstallationPlan:
    plan = collect_plan(items)
    if plan.is_empty:
        return plan
    augment_with_service_policies(plan)
    plan.packages = unique_in_order(plan.packages)
    return plan


def serialize_plan(plan: InstallationPlan) -> tuple[str, str, str]:
    """Return (prepare, packages, setup) file contents for the apply script."""
    return (
        "\n".join(plan.prepare_commands),
        " ".join(plan.packages),
        "\n".join(plan.setup_commands),
    )
