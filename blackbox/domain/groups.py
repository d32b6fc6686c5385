from __future__ import annotations

from typing import Iterable, Iterator

from .models import SoftwareItem


def _records(lines: Iterable[str]) -> Iterator[tuple[str, str, str]]:
    iterator = iter(lines)
    for default_flag in iterator:
        packages = next(iterator, "")
        display = next(iterator, "")
        yield default_flag, packages, display


def parse_group_definitions(text: str) -> list[SoftwareItem]:
    """Parse a group definition file into selectable items.

    The file is a sequence of 3-line records: ``true``/``false`` default flag,
    space separated package names, display label. A short final record is
    still turned into an item with the missing lines left empty. Empty tokens
    from repeated spaces are dropped.
    """
    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()

    items: list[SoftwareItem] = []
    for default_flag, packages, display in _records(lines):
        items.append(
            SoftwareItem(
                default_checked=default_flag.strip() == "true",
                display_label=display.strip(),
                packages=[name for name in packages.split(" ") if name],
            )
        )
    return items
