"""Typer CLI entrypoint for twmerge."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, cast

import typer

from apps.cli.io import read_class_lines, read_mapping_file
from core.classes.config_loader import default_merge_config, load_merge_config
from core.export.codegen import write_class_map_module
from core.export.css_export import export_css, generate_postcss_config, generate_tailwind_input
from core.export.models import CSSExportOptions, ExportFormat
from core.export.tailwind_build import DEFAULT_TAILWIND_EXECUTABLE, run_tailwind_build
from core.lint.duplicates import DuplicateGroup, find_duplicate_class_strings
from core.merge.service import MergeService
from core.utils.errors import ConfigError, ExportError

app = typer.Typer(help="Tailwind utility class merge CLI", rich_markup_mode=None)

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        exists=True,
        dir_okay=False,
        file_okay=True,
        help="YAML config replacing the built-in class groups.",
    ),
]
ClassesOption = Annotated[
    Path | None,
    typer.Option(
        "--classes",
        exists=True,
        dir_okay=False,
        file_okay=True,
        help="Text file with one class string per line.",
    ),
]
MappingOption = Annotated[
    Path | None,
    typer.Option(
        "--mapping",
        exists=True,
        dir_okay=False,
        file_okay=True,
        help="JSON object of class string to existing generated name.",
    ),
]


@app.callback()
def cli_callback() -> None:
    """CLI root callback to keep subcommands explicit."""


@app.command("merge")
def merge_command(
    classes: Annotated[list[str], typer.Argument(help="Class names or class strings.")],
    config: ConfigOption = None,
) -> None:
    """Print the merged class string."""

    service = _build_service(config)
    typer.echo(service.merge(" ".join(classes)))


@app.command("classify")
def classify_command(
    base_class: Annotated[str, typer.Argument(help="Base class without variants.")],
    config: ConfigOption = None,
) -> None:
    """Print the class group id of a base class."""

    service = _build_service(config)
    found, group_id = service.classify(base_class)
    if not found:
        typer.echo(f"ERROR: no class group for {base_class!r}")
        raise typer.Exit(code=1)
    typer.echo(group_id)


@app.command("name")
def name_command(
    classes: Annotated[list[str], typer.Argument(help="Class names or class strings.")],
    config: ConfigOption = None,
    show_merged: Annotated[
        bool, typer.Option("--show-merged", help="Also print the merged class string.")
    ] = False,
) -> None:
    """Print the generated short class name."""

    service = _build_service(config)
    raw = " ".join(classes)
    if not raw.strip():
        typer.echo("ERROR: at least one class name is required.")
        raise typer.Exit(code=1)
    name = service.short_name(raw)
    if show_merged:
        typer.echo(f"{name}\t{service.registry.merged_for(name)}")
    else:
        typer.echo(name)


@app.command("export-css")
def export_css_command(
    out: Annotated[Path, typer.Argument(dir_okay=False, help="Stylesheet to create or update.")],
    classes_file: ClassesOption = None,
    mapping_file: MappingOption = None,
    config: ConfigOption = None,
    export_format: Annotated[str, typer.Option("--format")] = "css",
    minify: Annotated[bool, typer.Option("--minify")] = False,
    prefix: Annotated[str, typer.Option("--prefix")] = "",
    no_comments: Annotated[bool, typer.Option("--no-comments")] = False,
) -> None:
    """Write ``@apply`` rules for generated names between markers in OUT."""

    options = _build_export_options(export_format, minify=minify, prefix=prefix, comments=not no_comments)
    service = _build_service(config)
    _seed_registry(service, classes_file, mapping_file)
    try:
        count = export_css(out, service.snapshot(), service.merge, options)
    except ExportError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc
    typer.echo(f"INFO: wrote {count} rules to {out}")


@app.command("tailwind-input")
def tailwind_input_command(
    input_path: Annotated[Path, typer.Argument(dir_okay=False, help="Base stylesheet.")],
    output_path: Annotated[Path, typer.Argument(dir_okay=False, help="Generated input file.")],
    classes_file: ClassesOption = None,
    mapping_file: MappingOption = None,
    config: ConfigOption = None,
    postcss_config: Annotated[
        Path | None, typer.Option("--postcss-config", help="Also write a PostCSS config here.")
    ] = None,
    build: Annotated[
        Path | None, typer.Option("--build", help="Run the Tailwind CLI and write CSS here.")
    ] = None,
    executable: Annotated[str, typer.Option("--executable")] = DEFAULT_TAILWIND_EXECUTABLE,
    minify: Annotated[bool, typer.Option("--minify", help="Minify the built CSS.")] = False,
    export_format: Annotated[str, typer.Option("--format")] = "css",
    prefix: Annotated[str, typer.Option("--prefix")] = "",
    no_comments: Annotated[bool, typer.Option("--no-comments")] = False,
) -> None:
    """Write a Tailwind input file with generated rules, optionally building it."""

    # --minify applies to the Tailwind build output, not to the generated rules.
    options = _build_export_options(export_format, minify=False, prefix=prefix, comments=not no_comments)
    service = _build_service(config)
    _seed_registry(service, classes_file, mapping_file)
    try:
        generate_tailwind_input(
            input_path, output_path, service.snapshot(), service.merge, options
        )
        typer.echo(f"INFO: wrote tailwind input to {output_path}")
        if postcss_config is not None:
            generate_postcss_config(postcss_config)
            typer.echo(f"INFO: wrote postcss config to {postcss_config}")
        if build is not None:
            run_tailwind_build(output_path, build, executable=executable, minify=minify)
            typer.echo(f"INFO: built {build}")
    except ExportError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc


@app.command("codegen")
def codegen_command(
    out: Annotated[Path, typer.Argument(dir_okay=False, help="Python module to write.")],
    classes_file: ClassesOption = None,
    mapping_file: MappingOption = None,
    config: ConfigOption = None,
) -> None:
    """Write a Python module that pre-registers generated names at import."""

    service = _build_service(config)
    _seed_registry(service, classes_file, mapping_file)
    snapshot = service.snapshot()
    try:
        write_class_map_module(out, snapshot)
    except ExportError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc
    typer.echo(f"INFO: wrote {len(snapshot.raw_to_name)} mappings to {out}")


@app.command("find-duplicates")
def find_duplicates_command(
    paths: Annotated[list[Path], typer.Argument(help="Files or directories to scan.")],
    config: ConfigOption = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print groups as JSON.")] = False,
    fail_on_duplicates: Annotated[
        bool, typer.Option("--fail-on-duplicates", help="Exit 1 when any group is found.")
    ] = False,
    min_length: Annotated[
        int, typer.Option("--min-length", min=0, help="Skip merged strings shorter than this.")
    ] = 0,
    min_occurrences: Annotated[
        int, typer.Option("--min-occurrences", min=1, help="Skip groups seen fewer times.")
    ] = 2,
    min_class_count: Annotated[
        int, typer.Option("--min-class-count", min=0, help="Skip merged strings with fewer classes.")
    ] = 1,
) -> None:
    """Report class attributes that merge to the same value but are written differently."""

    service = _build_service(config)
    try:
        groups = find_duplicate_class_strings(
            paths,
            service.merge,
            min_length=min_length,
            min_occurrences=min_occurrences,
            min_class_count=min_class_count,
        )
    except ExportError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(json.dumps([group.model_dump(mode="json") for group in groups], indent=2))
    else:
        typer.echo(_render_duplicate_summary(groups))

    if groups and fail_on_duplicates:
        raise typer.Exit(code=1)


def _build_service(config_path: Path | None) -> MergeService:
    try:
        config = load_merge_config(config_path) if config_path is not None else default_merge_config()
    except ConfigError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc
    return MergeService(config)


def _seed_registry(
    service: MergeService, classes_file: Path | None, mapping_file: Path | None
) -> None:
    if classes_file is None and mapping_file is None:
        typer.echo("ERROR: provide --classes and/or --mapping.")
        raise typer.Exit(code=1)
    try:
        if mapping_file is not None:
            service.register_known_mappings(read_mapping_file(mapping_file))
        if classes_file is not None:
            for line in read_class_lines(classes_file):
                service.short_name(line)
    except ExportError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc


def _build_export_options(
    export_format: str, *, minify: bool, prefix: str, comments: bool
) -> CSSExportOptions:
    normalized = export_format.lower().strip()
    if normalized not in {"css", "scss", "less"}:
        typer.echo("ERROR: --format must be one of: css, scss, less.")
        raise typer.Exit(code=1)
    return CSSExportOptions(
        prefix=prefix,
        minify=minify,
        format=cast(ExportFormat, normalized),
        comments=comments,
    )


def _render_duplicate_summary(groups: list[DuplicateGroup]) -> str:
    if not groups:
        return "INFO: no duplicate class strings found"

    lines = [f"Found {len(groups)} duplicate group(s)"]
    for group in groups:
        lines.append(f"- merged: {group.merged}")
        for occurrence in group.occurrences:
            lines.append(f"    {occurrence.path}:{occurrence.line}: {occurrence.raw}")
    return "\n".join(lines)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
