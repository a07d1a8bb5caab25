"""Custom exceptions for core logic."""

from __future__ import annotations

from pathlib import Path


class ConfigError(ValueError):
    """Raised when merge configuration is missing, malformed or out of range."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class ExportError(Exception):
    """Raised when an export collaborator cannot read, write or build its target."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class MarkerError(ExportError):
    """Raised when a target file has a begin marker without a matching end marker."""
