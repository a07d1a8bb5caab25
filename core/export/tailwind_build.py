"""Invoke the external Tailwind CLI on a generated input stylesheet."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from core.utils.errors import ExportError

logger = logging.getLogger("twmerge.export")

DEFAULT_TAILWIND_EXECUTABLE = "tailwindcss"


def build_tailwind_command(
    input_path: Path,
    output_path: Path,
    *,
    executable: str = DEFAULT_TAILWIND_EXECUTABLE,
    minify: bool = False,
) -> list[str]:
    command = [executable, "-i", str(input_path), "-o", str(output_path)]
    if minify:
        command.append("--minify")
    return command


def run_tailwind_build(
    input_path: Path,
    output_path: Path,
    *,
    executable: str = DEFAULT_TAILWIND_EXECUTABLE,
    minify: bool = False,
    timeout_seconds: float = 120.0,
) -> None:
    """Run the Tailwind CLI; any failure is raised as ExportError."""

    resolved = shutil.which(executable)
    if resolved is None:
        raise ExportError(f"Tailwind executable not found: {executable}", path=input_path)

    command = build_tailwind_command(
        input_path, output_path, executable=resolved, minify=minify
    )
    logger.info("running tailwind build: %s", " ".join(command))
    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise ExportError(f"Tailwind build failed to run: {exc}", path=input_path) from exc

    if completed.returncode != 0:
        stderr = completed.stderr.strip()
        raise ExportError(
            f"Tailwind build exited with code {completed.returncode}: {stderr}",
            path=output_path,
        )
