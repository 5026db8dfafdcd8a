"""Typer CLI entrypoint for i18n-extract."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Annotated

import typer

from i18n_apps.cli.io import (
    OutputPaths,
    build_output_paths,
    existing_output_files,
    write_extraction_atomic,
    write_fallback_json_atomic,
)
from i18n_core.keys.state import ExtractorState
from i18n_core.orchestrator.models import DocumentExtraction
from i18n_core.orchestrator.pipeline import extract_source, file_type_from_path
from i18n_core.policy.policy_loader import load_policy
from i18n_core.text.values import format_value
from i18n_core.utils.errors import ExtractionDepthError, ExtractionParseError
from i18n_core.walkers.models import WarningItem

app = typer.Typer(help="Extract translatable literals from JS/TS/JSX/Vue sources", rich_markup_mode=None)


@app.callback()
def cli_callback() -> None:
    """CLI root callback to keep `i18n-extract run` as explicit command form."""


@app.command("run")
def run_command(
    source: Annotated[Path, typer.Option(..., exists=True, dir_okay=False, file_okay=True)],
    out_dir: Annotated[Path, typer.Option()] = Path("."),
    key_prefix: Annotated[str, typer.Option(help="Namespace joined onto every generated key.")] = "",
    call_prefix: Annotated[
        str | None,
        typer.Option(help="Translation function for script/JSX files, e.g. i18n.t."),
    ] = None,
    policy: Annotated[Path | None, typer.Option()] = None,
    force: Annotated[
        bool, typer.Option("--force", help="Overwrite outputs when they already exist.")
    ] = False,
    no_overwrite: Annotated[
        bool,
        typer.Option(
            "--no-overwrite",
            help="Fail when outputs already exist.",
        ),
    ] = False,
    fail_on_warnings: Annotated[
        bool,
        typer.Option("--fail-on-warnings", help="Exit with code 3 when warnings were emitted."),
    ] = False,
) -> None:
    """Extract one source file and write the rewritten source, catalog and warnings."""

    paths = build_output_paths(out_dir, source)

    if force and no_overwrite:
        typer.echo("ERROR: --force and --no-overwrite cannot be used together.")
        _safe_write_exit1_fallback(paths, "ArgumentConflict", "conflicting overwrite flags", "args")
        raise typer.Exit(code=1)

    try:
        file_type = file_type_from_path(source)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}")
        _safe_write_exit1_fallback(paths, "ArgumentValidationError", str(exc), "args")
        raise typer.Exit(code=1) from None

    existing = existing_output_files(paths)
    if existing and no_overwrite:
        typer.echo("ERROR: outputs already exist and --no-overwrite is enabled.")
        raise typer.Exit(code=1)
    if existing:
        names = ", ".join(path.name for path in existing)
        typer.echo(f"INFO: overwriting existing outputs: {names}")

    extraction: DocumentExtraction | None = None
    exit_code = 1
    failure_stage = "unknown"

    try:
        failure_stage = "load_policy"
        policy_model = load_policy(policy)
        failure_stage = "read_source"
        text = source.read_text(encoding="utf-8")
        failure_stage = "extract"
        extraction = extract_source(
            text,
            file_type,
            key_prefix=key_prefix,
            call_prefix=call_prefix,
            policy=policy_model,
        )
        exit_code = 0
    except (ExtractionParseError, ExtractionDepthError) as exc:
        exit_code = 2
        typer.echo(f"ERROR: parse failed: {exc}")
        _safe_write_exit1_fallback(paths, type(exc).__name__, str(exc), failure_stage)
    except Exception as exc:  # noqa: BLE001
        exit_code = 1
        typer.echo(f"ERROR: {type(exc).__name__}: {exc}")
        _safe_write_exit1_fallback(paths, type(exc).__name__, str(exc), failure_stage)

    if extraction is not None:
        try:
            write_extraction_atomic(paths, extraction)
        except Exception as write_exc:  # noqa: BLE001
            exit_code = 1
            typer.echo(f"ERROR: write output failed: {write_exc}")
        else:
            typer.echo(
                f"INFO: extracted {len(extraction.text_map)} keys from {source.name} "
                f"(file_type={extraction.file_type})"
            )
            if extraction.warnings:
                typer.echo(
                    "WARNING(review): constructs left for manual review "
                    f"({_warning_summary(extraction.warnings)})."
                )
                if fail_on_warnings:
                    exit_code = 3

    if exit_code == 0:
        typer.echo("INFO: success")
    elif exit_code == 3:
        typer.echo("ERROR: warnings present and --fail-on-warnings is enabled")

    raise typer.Exit(code=exit_code)


@app.command("key")
def key_command(
    text: Annotated[str, typer.Argument(help="Text to turn into a key; surrounding quotes are ignored.")],
    key_prefix: Annotated[str, typer.Option()] = "",
    policy: Annotated[Path | None, typer.Option()] = None,
) -> None:
    """Print the key a fresh run would assign to TEXT."""

    try:
        policy_model = load_policy(policy)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from None

    state = ExtractorState(key_prefix=key_prefix, max_key_length=policy_model.max_key_length)
    typer.echo(state.generate_unique_key(format_value(text)))


def _safe_write_exit1_fallback(
    paths: OutputPaths,
    error_type: str,
    error_message: str,
    stage: str,
) -> None:
    try:
        write_fallback_json_atomic(
            paths,
            error_type=error_type,
            error_message=error_message,
            stage=stage,
        )
    except Exception:  # noqa: BLE001
        pass


def _warning_summary(warnings: list[WarningItem]) -> str:
    counter: Counter[str] = Counter(item.code for item in warnings)
    return ", ".join(f"{code}={counter[code]}" for code in sorted(counter))


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
