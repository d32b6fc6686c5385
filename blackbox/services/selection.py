from __future__ import annotations

import logging
from typing import Iterable, Iterator, Mapping

from blackbox.domain.catalogs import (
    BASE_TAB_LABEL,
    REQUIRES_DESKTOP_CHASSIS,
    REQUIRES_GNOME,
    build_builtin_items,
    builtin_requirement,
)
from blackbox.domain.errors import SourceFileMissing
from blackbox.domain.models import SelectionTab, SoftwareGroupSource, SoftwareItem
from blackbox.domain.settings import CHASSIS_TYPE_PATH, GNOME_SESSION
from blackbox.services.group_store import load_group_file
from blackbox.services.system_probes import detect_desktop_session, is_desktop_chassis, read_chassis_type

log = logging.getLogger(__name__)


class SelectionModel:
    """Tabs of selectable software groups shown on the selection screen.

    The first tab holds the built-in groups and always exists; loaded
    definition files add one tab each.
    """

    def __init__(self) -> None:
        self.tabs: list[SelectionTab] = [SelectionTab(BASE_TAB_LABEL, build_builtin_items())]

    def populate(
        self,
        sources: Iterable[SoftwareGroupSource],
        *,
        environ: Mapping[str, str] | None = None,
        chassis_path: str = CHASSIS_TYPE_PATH,
    ) -> bool:
        """Fill the model once. Returns False when it was already populated."""
        if len(self.tabs) > 1:
            return False

        on_gnome = detect_desktop_session(environ) == GNOME_SESSION
        on_desktop = is_desktop_chassis(read_chassis_type(chassis_path))
        for item in self.tabs[0].items:
            requirement = builtin_requirement(item.key)
            if requirement == REQUIRES_GNOME:
                item.visible = on_gnome
            elif requirement == REQUIRES_DESKTOP_CHASSIS:
                item.visible = on_desktop

        for source in sources:
            try:
                items = load_group_file(source)
            except SourceFileMissing as exc:
                log.debug("Skipping software group: %s", exc)
                continue
            self.tabs.append(SelectionTab(source.label, items))
            log.info("Loaded %d software groups from %s", len(items), source.path)
        return True

    def iter_items(self) -> Iterator[SoftwareItem]:
        for tab in self.tabs:
            yield from tab.items

    def checked_items(self) -> list[SoftwareItem]:
        return [item for item in self.iter_items() if item.checked and item.visible]
