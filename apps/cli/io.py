"""CLI input helpers for class-list and mapping files."""

from __future__ import annotations

import json
from pathlib import Path

from core.utils.errors import ExportError


def read_class_lines(path: Path) -> list[str]:
    """Read one class string per line; blank lines and ``#`` comments are skipped."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExportError(f"Error reading file: {path}: {exc}", path=path) from exc

    lines: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        lines.append(stripped)
    return lines


def read_mapping_file(path: Path) -> dict[str, str]:
    """Read a JSON object of raw class string to generated name."""

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ExportError(f"Error reading file: {path}: {exc}", path=path) from exc
    except json.JSONDecodeError as exc:
        raise ExportError(f"Invalid JSON in mapping file: {path}: {exc}", path=path) from exc

    if not isinstance(payload, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in payload.items()
    ):
        raise ExportError(f"Mapping file must contain a string-to-string object: {path}", path=path)
    return payload
