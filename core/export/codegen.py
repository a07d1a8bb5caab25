"""Generate a Python module that pre-seeds the short-name registry at import time."""

from __future__ import annotations

import logging
from pathlib import Path

from core.export.io import atomic_write_text
from core.naming.registry import MappingSnapshot

logger = logging.getLogger("twmerge.export")

_HEADER = '''"""Generated by twmerge. DO NOT EDIT."""

from __future__ import annotations

from core.merge.service import register_known_mappings

'''


def render_class_map_module(snapshot: MappingSnapshot) -> str:
    """Render ``CLASS_MAP`` and ``MERGED_CLASSES`` literals, keys sorted."""

    lines = [_HEADER, "CLASS_MAP: dict[str, str] = {\n"]
    for raw in sorted(snapshot.raw_to_name):
        lines.append(f"    {raw!r}: {snapshot.raw_to_name[raw]!r},\n")
    lines.append("}\n\nMERGED_CLASSES: dict[str, str] = {\n")
    for name in sorted(snapshot.name_to_merged):
        lines.append(f"    {name!r}: {snapshot.name_to_merged[name]!r},\n")
    lines.append("}\n\nregister_known_mappings(CLASS_MAP, MERGED_CLASSES)\n")
    return "".join(lines)


def write_class_map_module(path: Path, snapshot: MappingSnapshot) -> None:
    atomic_write_text(path, render_class_map_module(snapshot))
    logger.info("wrote class map module %s (%d entries)", path, len(snapshot.raw_to_name))
