from __future__ import annotations

from pathlib import Path

from blackbox.domain.errors import SourceFileMissing
from blackbox.domain.groups import parse_group_definitions
from blackbox.domain.models import SoftwareGroupSource, SoftwareItem


def load_group_file(source: SoftwareGroupSource) -> list[SoftwareItem]:
    path = Path(source.path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceFileMissing(f"{source.label}: cannot read {path}: {exc}") from exc
    return parse_group_definitions(raw)
