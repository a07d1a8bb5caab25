"""Marker-delimited text splicing for generated sections of build files."""

from __future__ import annotations

from core.export.models import CSS_BEGIN_MARKER, CSS_END_MARKER
from core.utils.errors import MarkerError


def replace_between_markers(
    content: str,
    replacement: str,
    *,
    begin_marker: str = CSS_BEGIN_MARKER,
    end_marker: str = CSS_END_MARKER,
) -> str:
    """Replace everything between the begin marker line and the end marker.

    Rules:
    - Text on the begin marker's line is kept; replacement starts on the next line.
    - When the begin marker is absent, a new marked block is appended.
    - A begin marker without a following end marker raises MarkerError.
    """

    begin_index = content.find(begin_marker)
    if begin_index == -1:
        return f"{content}\n\n{begin_marker}\n{replacement}\n{end_marker}"

    begin_line_end = begin_index + len(begin_marker)
    while begin_line_end < len(content) and content[begin_line_end] not in "\r\n":
        begin_line_end += 1
    if begin_line_end < len(content):
        begin_line_end += 1

    end_index = content.find(end_marker, begin_line_end)
    if end_index == -1:
        raise MarkerError(f"Found begin marker {begin_marker!r} but no end marker {end_marker!r}")

    return f"{content[:begin_line_end]}{replacement}\n{content[end_index:]}"


def wrap_in_markers(
    replacement: str,
    *,
    begin_marker: str = CSS_BEGIN_MARKER,
    end_marker: str = CSS_END_MARKER,
) -> str:
    return f"{begin_marker}\n{replacement}\n{end_marker}\n"
