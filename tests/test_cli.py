from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from apps.cli.main import app
from core.export.models import CSS_BEGIN_MARKER
from core.naming.registry import derive_short_name

runner = CliRunner()


def _write_classes(path: Path, *lines: str) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_merge_command_joins_arguments() -> None:
    result = runner.invoke(app, ["merge", "px-2 py-1", "p-4", "hover:p-2"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "p-4 hover:p-2"


def test_classify_command() -> None:
    result = runner.invoke(app, ["classify", "text-lg"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "font-size"


def test_classify_unknown_class_exits_1() -> None:
    result = runner.invoke(app, ["classify", "btn-primary"])

    assert result.exit_code == 1
    assert "ERROR: no class group" in result.stdout


def test_name_command() -> None:
    result = runner.invoke(app, ["name", "px-2", "p-4", "--show-merged"])

    assert result.exit_code == 0
    assert result.stdout.strip() == f"{derive_short_name('p-4')}\tp-4"


def test_invalid_config_exits_1(tmp_path: Path) -> None:
    config = tmp_path / "bad.yaml"
    config.write_text("class_groups: [unclosed", encoding="utf-8")

    result = runner.invoke(app, ["merge", "p-2", "--config", str(config)])

    assert result.exit_code == 1
    assert "ERROR: Invalid YAML" in result.stdout


def test_custom_config_is_used(tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("class_groups:\n  pad: [{pad: ['@number']}]\n", encoding="utf-8")

    result = runner.invoke(app, ["merge", "pad-1 pad-2 p-1 p-2", "--config", str(config)])

    assert result.exit_code == 0
    assert result.stdout.strip() == "pad-2 p-1 p-2"


def test_export_css_writes_rules(tmp_path: Path) -> None:
    classes = _write_classes(tmp_path / "classes.txt", "# buttons", "px-2 p-4", "", "m-2 m-4")
    out = tmp_path / "generated.css"

    result = runner.invoke(app, ["export-css", str(out), "--classes", str(classes), "--minify"])

    assert result.exit_code == 0
    assert "INFO: wrote 2 rules" in result.stdout
    text = out.read_text(encoding="utf-8")
    assert text.startswith(CSS_BEGIN_MARKER)
    assert f".{derive_short_name('p-4')}{{@apply p-4;}}" in text
    assert f".{derive_short_name('m-4')}{{@apply m-4;}}" in text


def test_export_css_with_mapping_file(tmp_path: Path) -> None:
    mapping = tmp_path / "mapping.json"
    mapping.write_text(json.dumps({"px-2 p-4": "btn"}), encoding="utf-8")
    out = tmp_path / "generated.scss"

    result = runner.invoke(
        app,
        ["export-css", str(out), "--mapping", str(mapping), "--format", "scss", "--no-comments"],
    )

    assert result.exit_code == 0
    assert ".btn {\n  @apply p-4;\n}" in out.read_text(encoding="utf-8")


def test_export_css_rejects_unknown_format(tmp_path: Path) -> None:
    classes = _write_classes(tmp_path / "classes.txt", "p-4")

    result = runner.invoke(
        app, ["export-css", str(tmp_path / "x.css"), "--classes", str(classes), "--format", "sass"]
    )

    assert result.exit_code == 1
    assert "ERROR: --format must be one of" in result.stdout


def test_export_css_requires_a_source(tmp_path: Path) -> None:
    result = runner.invoke(app, ["export-css", str(tmp_path / "x.css")])

    assert result.exit_code == 1
    assert "ERROR: provide --classes" in result.stdout


def test_export_css_reports_marker_error(tmp_path: Path) -> None:
    classes = _write_classes(tmp_path / "classes.txt", "p-4")
    out = tmp_path / "app.css"
    out.write_text(f"{CSS_BEGIN_MARKER}\n.stale {{}}\n", encoding="utf-8")

    result = runner.invoke(app, ["export-css", str(out), "--classes", str(classes)])

    assert result.exit_code == 1
    assert "ERROR: Found begin marker" in result.stdout


def test_invalid_mapping_file_exits_1(tmp_path: Path) -> None:
    mapping = tmp_path / "mapping.json"
    mapping.write_text("[1, 2]", encoding="utf-8")

    result = runner.invoke(app, ["codegen", str(tmp_path / "gen.py"), "--mapping", str(mapping)])

    assert result.exit_code == 1
    assert "string-to-string object" in result.stdout


def test_codegen_writes_module(tmp_path: Path) -> None:
    classes = _write_classes(tmp_path / "classes.txt", "px-2 p-4")
    out = tmp_path / "generated_classes.py"

    result = runner.invoke(app, ["codegen", str(out), "--classes", str(classes)])

    assert result.exit_code == 0
    text = out.read_text(encoding="utf-8")
    assert "CLASS_MAP" in text
    assert f"'px-2 p-4': '{derive_short_name('p-4')}'" in text


def test_tailwind_input_and_postcss_config(tmp_path: Path) -> None:
    classes = _write_classes(tmp_path / "classes.txt", "p-4")
    output = tmp_path / "build" / "input.css"
    postcss = tmp_path / "postcss.config.json"

    result = runner.invoke(
        app,
        [
            "tailwind-input",
            str(tmp_path / "missing.css"),
            str(output),
            "--classes",
            str(classes),
            "--postcss-config",
            str(postcss),
        ],
    )

    assert result.exit_code == 0
    assert output.read_text(encoding="utf-8").startswith("@tailwind base;")
    assert json.loads(postcss.read_text(encoding="utf-8"))["plugins"][0] == "tailwindcss"


def test_tailwind_input_applies_export_options(tmp_path: Path) -> None:
    classes = _write_classes(tmp_path / "classes.txt", "px-2 p-4")
    output = tmp_path / "input.css"

    result = runner.invoke(
        app,
        [
            "tailwind-input",
            str(tmp_path / "missing.css"),
            str(output),
            "--classes",
            str(classes),
            "--prefix",
            "ui-",
            "--no-comments",
        ],
    )

    assert result.exit_code == 0
    text = output.read_text(encoding="utf-8")
    assert f".ui-{derive_short_name('p-4')} {{\n  @apply p-4;\n}}" in text
    assert "Original:" not in text
    assert "Generated by twmerge" not in text


def test_tailwind_input_rejects_unknown_format(tmp_path: Path) -> None:
    classes = _write_classes(tmp_path / "classes.txt", "p-4")

    result = runner.invoke(
        app,
        [
            "tailwind-input",
            str(tmp_path / "base.css"),
            str(tmp_path / "input.css"),
            "--classes",
            str(classes),
            "--format",
            "sass",
        ],
    )

    assert result.exit_code == 1
    assert "ERROR: --format must be one of" in result.stdout


def test_tailwind_input_build_failure_exits_1(tmp_path: Path) -> None:
    classes = _write_classes(tmp_path / "classes.txt", "p-4")

    result = runner.invoke(
        app,
        [
            "tailwind-input",
            str(tmp_path / "base.css"),
            str(tmp_path / "input.css"),
            "--classes",
            str(classes),
            "--build",
            str(tmp_path / "out.css"),
            "--executable",
            "definitely-not-a-tailwind-binary",
        ],
    )

    assert result.exit_code == 1
    assert "ERROR: Tailwind executable not found" in result.stdout


def test_find_duplicates_human_and_json(tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    page.write_text('<a class="px-2 p-4"></a>\n<b class="p-4"></b>\n', encoding="utf-8")

    human = runner.invoke(app, ["find-duplicates", str(tmp_path)])
    as_json = runner.invoke(app, ["find-duplicates", str(page), "--json"])

    assert human.exit_code == 0
    assert "Found 1 duplicate group(s)" in human.stdout
    assert f"{page}:2: p-4" in human.stdout
    assert as_json.exit_code == 0
    payload = json.loads(as_json.stdout)
    assert payload[0]["merged"] == "p-4"
    assert payload[0]["raw_variants"] == ["p-4", "px-2 p-4"]


def test_find_duplicates_fail_flag(tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    page.write_text('<a class="p-2 p-4"></a><b class="p-4"></b>', encoding="utf-8")

    result = runner.invoke(app, ["find-duplicates", str(page), "--fail-on-duplicates"])

    assert result.exit_code == 1


def test_find_duplicates_threshold_options(tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    page.write_text(
        '<a class="px-2 p-4"></a><b class="p-4"></b>'
        '<c class="m-1 m-2 flex"></c><d class="m-2 flex"></d>',
        encoding="utf-8",
    )

    by_class_count = runner.invoke(
        app, ["find-duplicates", str(page), "--json", "--min-class-count", "2"]
    )
    by_length = runner.invoke(app, ["find-duplicates", str(page), "--min-length", "20"])
    by_occurrences = runner.invoke(
        app, ["find-duplicates", str(page), "--min-occurrences", "3", "--fail-on-duplicates"]
    )

    assert by_class_count.exit_code == 0
    assert [group["merged"] for group in json.loads(by_class_count.stdout)] == ["m-2 flex"]
    assert "INFO: no duplicate class strings found" in by_length.stdout
    assert by_occurrences.exit_code == 0


def test_find_duplicates_clean_tree(tmp_path: Path) -> None:
    (tmp_path / "page.html").write_text('<a class="p-4"></a>', encoding="utf-8")

    result = runner.invoke(app, ["find-duplicates", str(tmp_path), "--fail-on-duplicates"])

    assert result.exit_code == 0
    assert "INFO: no duplicate class strings found" in result.stdout
