"""Render ``@apply`` rules for generated class names and splice them into stylesheets."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from core.export.io import atomic_write_text, read_text_if_exists
from core.export.markers import replace_between_markers, wrap_in_markers
from core.export.models import CSSExportOptions
from core.naming.registry import MappingSnapshot

logger = logging.getLogger("twmerge.export")

TAILWIND_BASE_DIRECTIVES = """@tailwind base;
@tailwind components;
@tailwind utilities;
"""

_HEADER_COMMENT = "/* Generated by twmerge. Do not edit between markers. */\n"


@dataclass(frozen=True)
class ApplyRule:
    name: str
    merged: str
    originals: tuple[str, ...]


def collect_apply_rules(
    snapshot: MappingSnapshot, merge: Callable[[str], str]
) -> list[ApplyRule]:
    """One rule per generated name, sorted by name for stable output.

    Names registered without a known merged value are merged from their raw
    input.
    """

    originals: dict[str, list[str]] = {}
    for raw, name in snapshot.raw_to_name.items():
        originals.setdefault(name, []).append(raw)

    merged_by_name = dict(snapshot.name_to_merged)
    for name, raws in originals.items():
        if name not in merged_by_name:
            merged_by_name[name] = merge(sorted(raws)[0])

    return [
        ApplyRule(
            name=name,
            merged=merged_by_name[name],
            originals=tuple(sorted(originals.get(name, []))),
        )
        for name in sorted(merged_by_name)
    ]


def render_apply_rules(rules: list[ApplyRule], options: CSSExportOptions | None = None) -> str:
    opts = options or CSSExportOptions()
    chunks: list[str] = []
    if opts.comments and not opts.minify:
        chunks.append(_HEADER_COMMENT)

    for rule in rules:
        selector = f".{opts.prefix}{rule.name}"
        comment_source = ", ".join(rule.originals)

        if opts.format == "scss":
            if opts.comments and comment_source:
                chunks.append(f"// Original: {comment_source}\n")
            chunks.append(f"{selector} {{\n  @apply {rule.merged};\n}}\n\n")
        elif opts.format == "less":
            if opts.comments and comment_source:
                chunks.append(f"// Original: {comment_source}\n")
            chunks.append(f"{selector} {{\n  .apply({rule.merged});\n}}\n\n")
        elif opts.minify:
            chunks.append(f"{selector}{{@apply {rule.merged};}}")
        else:
            if opts.comments and comment_source:
                chunks.append(f"/* Original: {comment_source} */\n")
            chunks.append(f"{selector} {{\n  @apply {rule.merged};\n}}\n\n")

    return "".join(chunks).rstrip("\n")


def write_css_to_file(path: Path, css: str, options: CSSExportOptions | None = None) -> None:
    """Create ``path`` with a marked block, or replace the marked block in place."""

    opts = options or CSSExportOptions()
    existing = read_text_if_exists(path)
    if existing is None:
        content = wrap_in_markers(css, begin_marker=opts.begin_marker, end_marker=opts.end_marker)
    else:
        content = replace_between_markers(
            existing,
            css,
            begin_marker=opts.begin_marker,
            end_marker=opts.end_marker,
        )
    atomic_write_text(path, content)
    logger.info("wrote generated css to %s", path)


def export_css(
    path: Path,
    snapshot: MappingSnapshot,
    merge: Callable[[str], str],
    options: CSSExportOptions | None = None,
) -> int:
    """Export all known generated classes into ``path``; returns the rule count."""

    rules = collect_apply_rules(snapshot, merge)
    write_css_to_file(path, render_apply_rules(rules, options), options)
    return len(rules)


def generate_tailwind_input(
    input_path: Path,
    output_path: Path,
    snapshot: MappingSnapshot,
    merge: Callable[[str], str],
    options: CSSExportOptions | None = None,
) -> None:
    """Write a Tailwind CLI input file: base stylesheet plus generated rules.

    A missing input file is replaced by the standard ``@tailwind`` directives.
    """

    opts = options or CSSExportOptions()
    base = read_text_if_exists(input_path)
    if base is None:
        base = TAILWIND_BASE_DIRECTIVES

    css = render_apply_rules(collect_apply_rules(snapshot, merge), opts)
    content = replace_between_markers(
        base,
        css,
        begin_marker=opts.begin_marker,
        end_marker=opts.end_marker,
    )
    atomic_write_text(output_path, content)
    logger.info("wrote tailwind input %s from %s", output_path, input_path)


def generate_postcss_config(path: Path) -> None:
    """Write a PostCSS config enabling Tailwind and autoprefixer."""

    payload = {"plugins": ["tailwindcss", "autoprefixer"]}
    atomic_write_text(path, json.dumps(payload, indent=2) + "\n")
