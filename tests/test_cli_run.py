from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from i18n_apps.cli.main import app

runner = CliRunner()


def _write_source(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_cli_success_writes_three_outputs(tmp_path: Path) -> None:
    source = _write_source(tmp_path / "greeting.js", 'const msg = "Hello World";\n')
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["run", "--source", str(source), "--out-dir", str(out_dir), "--key-prefix", "home"],
    )

    assert result.exit_code == 0
    assert "INFO: extracted 1 keys from greeting.js (file_type=js)" in result.stdout
    assert "INFO: success" in result.stdout
    assert (out_dir / "greeting.out.js").read_text(encoding="utf-8") == (
        "const msg = this.$t('home.hello_world');\n"
    )
    catalog = json.loads((out_dir / "greeting.lang.json").read_text(encoding="utf-8"))
    assert catalog == {"home": {"hello_world": "Hello World"}}
    report = json.loads((out_dir / "greeting.warnings.json").read_text(encoding="utf-8"))
    assert report == {"file_type": "js", "warnings": []}


def test_cli_call_prefix_option_overrides_policy(tmp_path: Path) -> None:
    source = _write_source(tmp_path / "page.tsx", "export const P = () => <p>Hello World</p>;\n")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["run", "--source", str(source), "--out-dir", str(out_dir), "--call-prefix", "i18n.t"],
    )

    assert result.exit_code == 0
    output = (out_dir / "page.out.tsx").read_text(encoding="utf-8")
    assert output == "export const P = () => <p>{i18n.t('hello_world')}</p>;\n"


def test_cli_parse_error_returns_exit_2_and_writes_error_report(tmp_path: Path) -> None:
    source = _write_source(tmp_path / "broken.ts", "const = ;\n")
    out_dir = tmp_path / "out"

    result = runner.invoke(app, ["run", "--source", str(source), "--out-dir", str(out_dir)])

    assert result.exit_code == 2
    assert "ERROR: parse failed" in result.stdout
    assert not (out_dir / "broken.out.ts").exists()
    report = json.loads((out_dir / "broken.warnings.json").read_text(encoding="utf-8"))
    assert report["error"]["error_type"] == "ExtractionParseError"
    assert report["error"]["stage"] == "extract"


def test_cli_fail_on_warnings_returns_exit_3(tmp_path: Path) -> None:
    source = _write_source(tmp_path / "hello.js", "const msg = `Hello ${name}, welcome`;\n")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["run", "--source", str(source), "--out-dir", str(out_dir), "--fail-on-warnings"],
    )

    assert result.exit_code == 3
    assert "WARNING(review)" in result.stdout
    assert "interpolated_template=1" in result.stdout
    report = json.loads((out_dir / "hello.warnings.json").read_text(encoding="utf-8"))
    assert report["warnings"][0]["code"] == "interpolated_template"


def test_cli_warnings_without_gating_still_succeed(tmp_path: Path) -> None:
    source = _write_source(tmp_path / "hello.js", "const msg = `Hello ${name}, welcome`;\n")

    result = runner.invoke(app, ["run", "--source", str(source), "--out-dir", str(tmp_path / "out")])

    assert result.exit_code == 0
    assert "WARNING(review)" in result.stdout


def test_cli_no_overwrite_with_existing_outputs_returns_exit_1(tmp_path: Path) -> None:
    source = _write_source(tmp_path / "greeting.js", 'const msg = "Hello World";\n')
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    (out_dir / "greeting.lang.json").write_text("{}", encoding="utf-8")

    result = runner.invoke(
        app,
        ["run", "--source", str(source), "--out-dir", str(out_dir), "--no-overwrite"],
    )

    assert result.exit_code == 1
    assert "--no-overwrite" in result.stdout
    assert (out_dir / "greeting.lang.json").read_text(encoding="utf-8") == "{}"


def test_cli_force_and_no_overwrite_conflict(tmp_path: Path) -> None:
    source = _write_source(tmp_path / "greeting.js", 'const msg = "Hello World";\n')

    result = runner.invoke(
        app,
        ["run", "--source", str(source), "--out-dir", str(tmp_path), "--force", "--no-overwrite"],
    )

    assert result.exit_code == 1
    assert "cannot be used together" in result.stdout


def test_cli_unsupported_suffix_returns_exit_1(tmp_path: Path) -> None:
    source = _write_source(tmp_path / "notes.md", "# Hello World\n")
    out_dir = tmp_path / "out"

    result = runner.invoke(app, ["run", "--source", str(source), "--out-dir", str(out_dir)])

    assert result.exit_code == 1
    assert "Unsupported file type" in result.stdout
    report = json.loads((out_dir / "notes.warnings.json").read_text(encoding="utf-8"))
    assert report["error"]["stage"] == "args"


def test_cli_invalid_policy_returns_exit_1(tmp_path: Path) -> None:
    source = _write_source(tmp_path / "greeting.js", 'const msg = "Hello World";\n')
    policy = tmp_path / "policy.yaml"
    policy.write_text("min_length: nope\n", encoding="utf-8")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["run", "--source", str(source), "--out-dir", str(out_dir), "--policy", str(policy)],
    )

    assert result.exit_code == 1
    report = json.loads((out_dir / "greeting.warnings.json").read_text(encoding="utf-8"))
    assert report["error"]["stage"] == "load_policy"


def test_cli_vue_component(tmp_path: Path) -> None:
    source = _write_source(
        tmp_path / "Card.vue",
        "<template>\n  <h1>Card title</h1>\n</template>\n",
    )
    out_dir = tmp_path / "out"

    result = runner.invoke(app, ["run", "--source", str(source), "--out-dir", str(out_dir)])

    assert result.exit_code == 0
    assert (out_dir / "Card.out.vue").read_text(encoding="utf-8") == (
        "<template>\n  <h1>{{ $t('card_title') }}</h1>\n</template>\n"
    )


def test_cli_key_command_prints_key() -> None:
    result = runner.invoke(app, ["key", "Save changes", "--key-prefix", "form"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "form.save_changes"


def test_cli_key_command_ignores_surrounding_quotes() -> None:
    result = runner.invoke(app, ["key", "'Save changes'"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "save_changes"
