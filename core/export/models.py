"""Data models for CSS export options."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

CSS_BEGIN_MARKER = "/* twmerge:begin */"
CSS_END_MARKER = "/* twmerge:end */"

ExportFormat = Literal["css", "scss", "less"]


class CSSExportOptions(BaseModel):
    """How generated ``@apply`` rules are rendered and spliced into a file."""

    model_config = ConfigDict(extra="forbid")

    prefix: str = ""
    minify: bool = False
    format: ExportFormat = "css"
    comments: bool = True
    begin_marker: str = Field(default=CSS_BEGIN_MARKER, min_length=1)
    end_marker: str = Field(default=CSS_END_MARKER, min_length=1)
