"""Atomic text file helpers shared by export collaborators."""

from __future__ import annotations

import tempfile
from pathlib import Path

from core.utils.errors import ExportError


def read_text_if_exists(path: Path) -> str | None:
    """Return file text, ``None`` when missing; other OS errors become ExportError."""

    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise ExportError(f"Error reading file: {path}: {exc}", path=path) from exc


def atomic_write_text(path: Path, content: str) -> None:
    """Write via a temporary sibling file and replace, so readers never see partial output."""

    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            prefix=f"{path.name}.",
            suffix=".tmp",
        ) as tmp:
            tmp_path = Path(tmp.name)
            tmp.write(content)
        tmp_path.replace(path)
    except OSError as exc:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
        raise ExportError(f"Error writing file: {path}: {exc}", path=path) from exc
