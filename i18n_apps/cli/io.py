"""CLI I/O helpers for atomic output writing."""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from i18n_core.orchestrator.models import DocumentExtraction


@dataclass(frozen=True)
class OutputPaths:
    """Fixed output artifact paths for one source file."""

    source: Path
    catalog: Path
    warnings: Path


def build_output_paths(out_dir: Path, source: Path) -> OutputPaths:
    """Build ``<stem>.out<suffix>``, ``<stem>.lang.json`` and ``<stem>.warnings.json``."""

    return OutputPaths(
        source=out_dir / f"{source.stem}.out{source.suffix}",
        catalog=out_dir / f"{source.stem}.lang.json",
        warnings=out_dir / f"{source.stem}.warnings.json",
    )


def existing_output_files(paths: OutputPaths) -> list[Path]:
    """Return existing output files among fixed artifact paths."""

    return [path for path in (paths.source, paths.catalog, paths.warnings) if path.exists()]


def write_extraction_atomic(paths: OutputPaths, extraction: DocumentExtraction) -> None:
    """Write the three artifacts using temporary files + replace."""

    paths.source.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write_text(paths.source, extraction.output)
    _atomic_write_json(paths.catalog, extraction.extracted, indent=2)
    _atomic_write_json(
        paths.warnings,
        {
            "file_type": extraction.file_type,
            "warnings": [item.model_dump(mode="json", exclude_none=True) for item in extraction.warnings],
        },
    )


def write_fallback_json_atomic(
    paths: OutputPaths,
    *,
    error_type: str,
    error_message: str,
    stage: str,
) -> None:
    """Write the warnings report with error metadata when a run fails."""

    paths.warnings.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write_json(
        paths.warnings,
        {
            "warnings": [],
            "error": {
                "error_type": error_type,
                "error_message": error_message,
                "stage": stage,
            },
        },
    )


def _atomic_write_json(path: Path, payload: dict[str, Any], indent: int | None = None) -> None:
    separators = (",", ": ") if indent is not None else (",", ":")
    _atomic_write_text(
        path,
        json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=indent, separators=separators),
    )


def _atomic_write_text(path: Path, text: str) -> None:
    fd, raw_tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f"{path.name}.",
        suffix=".tmp",
    )
    os.close(fd)
    tmp_path = Path(raw_tmp_path)

    try:
        tmp_path.write_text(text, encoding="utf-8", newline="")
        tmp_path.replace(path)
    except Exception:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
        raise
