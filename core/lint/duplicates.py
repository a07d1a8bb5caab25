"""Find ``class="..."`` attributes that merge to the same utility set.

Two attributes whose raw strings differ but whose merged strings match are
candidates for a shared generated class name.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from core.utils.errors import ExportError

logger = logging.getLogger("twmerge.lint")

CLASS_ATTRIBUTE_PATTERN = re.compile(r"""class\s*=\s*["']([^"']+)["']""")

DEFAULT_EXTENSIONS: frozenset[str] = frozenset({".html", ".htm", ".jsx", ".tsx", ".vue", ".svelte", ".templ"})


class ClassOccurrence(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    line: int = Field(gt=0)
    raw: str


class DuplicateGroup(BaseModel):
    model_config = ConfigDict(extra="forbid")

    merged: str
    raw_variants: list[str]
    occurrences: list[ClassOccurrence]


def scan_class_attributes(text: str, *, path: str = "<string>") -> list[ClassOccurrence]:
    occurrences: list[ClassOccurrence] = []
    for match in CLASS_ATTRIBUTE_PATTERN.finditer(text):
        raw = match.group(1).strip()
        if not raw:
            continue
        line = text.count("\n", 0, match.start()) + 1
        occurrences.append(ClassOccurrence(path=path, line=line, raw=raw))
    return occurrences


def iter_source_files(
    paths: Iterable[Path], *, extensions: frozenset[str] = DEFAULT_EXTENSIONS
) -> list[Path]:
    """Expand directories recursively; explicit files are kept regardless of extension."""

    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(
                sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in extensions)
            )
        elif path.is_file():
            files.append(path)
        else:
            raise ExportError(f"Path not found: {path}", path=path)
    return files


def group_duplicates(
    occurrences: Iterable[ClassOccurrence],
    merge: Callable[[str], str],
    *,
    min_length: int = 0,
    min_occurrences: int = 2,
    min_class_count: int = 1,
) -> list[DuplicateGroup]:
    """Group by merged value and keep groups with more than one distinct raw string.

    Groups are also dropped when they occur fewer than ``min_occurrences``
    times, or when the merged string has fewer than ``min_class_count``
    classes or fewer than ``min_length`` characters.
    """

    by_merged: dict[str, list[ClassOccurrence]] = {}
    for occurrence in occurrences:
        merged = merge(occurrence.raw)
        if not merged:
            continue
        by_merged.setdefault(merged, []).append(occurrence)

    groups: list[DuplicateGroup] = []
    for merged in sorted(by_merged):
        items = by_merged[merged]
        variants = sorted({item.raw for item in items})
        if len(variants) < 2 or len(items) < min_occurrences:
            continue
        if len(merged.split()) < min_class_count or len(merged) < min_length:
            continue
        groups.append(DuplicateGroup(merged=merged, raw_variants=variants, occurrences=items))
    return groups


def find_duplicate_class_strings(
    paths: Iterable[Path],
    merge: Callable[[str], str],
    *,
    extensions: frozenset[str] = DEFAULT_EXTENSIONS,
    min_length: int = 0,
    min_occurrences: int = 2,
    min_class_count: int = 1,
) -> list[DuplicateGroup]:
    occurrences: list[ClassOccurrence] = []
    for file_path in iter_source_files(paths, extensions=extensions):
        try:
            text = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.warning("skipping non-utf8 file %s", file_path)
            continue
        except OSError as exc:
            raise ExportError(f"Error reading file: {file_path}: {exc}", path=file_path) from exc
        occurrences.extend(scan_class_attributes(text, path=str(file_path)))

    groups = group_duplicates(
        occurrences,
        merge,
        min_length=min_length,
        min_occurrences=min_occurrences,
        min_class_count=min_class_count,
    )
    logger.info("scanned %d class attributes, %d duplicate groups", len(occurrences), len(groups))
    return groups
