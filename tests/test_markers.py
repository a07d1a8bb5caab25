from __future__ import annotations

import pytest

from core.export.markers import replace_between_markers, wrap_in_markers
from core.export.models import CSS_BEGIN_MARKER, CSS_END_MARKER
from core.utils.errors import ExportError, MarkerError


def test_replaces_content_between_markers() -> None:
    content = f"body {{}}\n{CSS_BEGIN_MARKER}\n.old {{}}\n{CSS_END_MARKER}\nfooter {{}}\n"

    result = replace_between_markers(content, ".new {}")

    assert result == f"body {{}}\n{CSS_BEGIN_MARKER}\n.new {{}}\n{CSS_END_MARKER}\nfooter {{}}\n"


def test_text_after_begin_marker_on_same_line_is_kept() -> None:
    content = f"{CSS_BEGIN_MARKER} keep me\nold\n{CSS_END_MARKER}"

    result = replace_between_markers(content, "new")

    assert result == f"{CSS_BEGIN_MARKER} keep me\nnew\n{CSS_END_MARKER}"


def test_missing_begin_marker_appends_block() -> None:
    result = replace_between_markers("body {}", ".a {}")

    assert result == f"body {{}}\n\n{CSS_BEGIN_MARKER}\n.a {{}}\n{CSS_END_MARKER}"


def test_begin_without_end_raises_marker_error() -> None:
    content = f"{CSS_BEGIN_MARKER}\n.old {{}}\n"

    with pytest.raises(MarkerError, match="no end marker"):
        replace_between_markers(content, ".new {}")


def test_marker_error_is_an_export_error() -> None:
    assert issubclass(MarkerError, ExportError)


def test_custom_markers() -> None:
    content = "// BEGIN\nold\n// END\n"

    result = replace_between_markers(content, "new", begin_marker="// BEGIN", end_marker="// END")

    assert result == "// BEGIN\nnew\n// END\n"


def test_wrap_in_markers() -> None:
    assert wrap_in_markers("x") == f"{CSS_BEGIN_MARKER}\nx\n{CSS_END_MARKER}\n"
