"""Extraction entry points for scripts, templates and whole documents."""

from __future__ import annotations

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Any, get_args

from i18n_core.catalog.nesting import nest_text_map
from i18n_core.keys.state import ExtractorState
from i18n_core.orchestrator.models import DocumentExtraction, FileType, SfcBlock, SfcExtractionResult
from i18n_core.orchestrator.sfc_blocks import split_sfc
from i18n_core.policy.models import ExtractionPolicy, render_call
from i18n_core.policy.policy_loader import default_policy
from i18n_core.rewrite.models import ReplacementSpan
from i18n_core.rewrite.replacer import apply_replacements, sort_spans
from i18n_core.walkers.ecma import extract_ecma
from i18n_core.walkers.models import ExtractionResult, WarningItem
from i18n_core.walkers.parsing import grammar_for_lang
from i18n_core.walkers.template import extract_template

logger = logging.getLogger("i18n_extract.pipeline")

_SUFFIX_TO_FILE_TYPE: dict[str, FileType] = {
    ".vue": "vue",
    ".js": "js",
    ".mjs": "js",
    ".cjs": "js",
    ".ts": "ts",
    ".mts": "ts",
    ".cts": "ts",
    ".jsx": "jsx",
    ".tsx": "tsx",
}


def supported_file_types() -> list[str]:
    return list(get_args(FileType))


def file_type_from_path(path: Path | str) -> FileType:
    suffix = Path(path).suffix.lower()
    try:
        return _SUFFIX_TO_FILE_TYPE[suffix]
    except KeyError:
        raise ValueError(f"Unsupported file type: {path}") from None


def _resolve(
    key_prefix: str,
    state: ExtractorState | None,
    policy: ExtractionPolicy | None,
) -> tuple[ExtractorState, ExtractionPolicy]:
    effective_policy = policy or default_policy()
    if state is None:
        state = ExtractorState(key_prefix=key_prefix, max_key_length=effective_policy.max_key_length)
    return state, effective_policy


def extract_script(
    code: str,
    call_prefix: str | None = None,
    *,
    key_prefix: str = "",
    lang: str = "js",
    setup: bool = False,
    state: ExtractorState | None = None,
    policy: ExtractionPolicy | None = None,
) -> ExtractionResult:
    """Extract literals from a JavaScript or TypeScript module.

    Without ``call_prefix`` the policy picks one: setup and TypeScript code
    get ``$t``, plain scripts ``this.$t``.
    """

    state, policy = _resolve(key_prefix, state, policy)
    prefix = call_prefix or policy.calls.script_prefix(setup=setup, lang=lang)
    return extract_ecma(
        code,
        lambda key: render_call(prefix, key),
        state=state,
        policy=policy,
        grammar=grammar_for_lang(lang),
        call_prefix=prefix,
    )


def extract_jsx(
    code: str,
    call_prefix: str | None = None,
    *,
    key_prefix: str = "",
    lang: str = "jsx",
    state: ExtractorState | None = None,
    policy: ExtractionPolicy | None = None,
) -> ExtractionResult:
    """Extract literals, JSX text and JSX attribute values from a component module."""

    state, policy = _resolve(key_prefix, state, policy)
    prefix = call_prefix or policy.calls.jsx
    return extract_ecma(
        code,
        lambda key: render_call(prefix, key),
        state=state,
        policy=policy,
        grammar=grammar_for_lang(lang, jsx=True),
        jsx=True,
        call_prefix=prefix,
    )


def extract_template_text(
    template_text: str,
    call_prefix: str | None = None,
    *,
    key_prefix: str = "",
    state: ExtractorState | None = None,
    policy: ExtractionPolicy | None = None,
) -> ExtractionResult:
    state, policy = _resolve(key_prefix, state, policy)
    prefix = call_prefix or policy.calls.template
    return extract_template(
        template_text,
        lambda key, quote: render_call(prefix, key, quote),
        state=state,
        policy=policy,
        call_prefix=prefix,
    )


def extract_vue(
    source: str,
    *,
    key_prefix: str = "",
    state: ExtractorState | None = None,
    policy: ExtractionPolicy | None = None,
) -> SfcExtractionResult:
    state, policy = _resolve(key_prefix, state, policy)
    return extract_sfc(source, split_sfc(source), state=state, policy=policy)


def extract_sfc(
    source: str,
    blocks: list[SfcBlock],
    *,
    state: ExtractorState,
    policy: ExtractionPolicy,
) -> SfcExtractionResult:
    """Rewrite the template and script blocks of one component.

    Style and custom blocks, tags and the text between blocks are kept
    verbatim; each rewritten block replaces its original content in place.
    """

    text_map: dict[str, str] = {}
    warnings: list[WarningItem] = []
    spans: list[ReplacementSpan] = []
    rewritten_blocks: list[str] = []

    for block in sorted(blocks, key=lambda item: item.start):
        if block.type == "template":
            if (block.lang or "html").lower() != "html":
                continue
            result = extract_template_text(block.content, state=state, policy=policy)
        elif block.type == "script":
            lang = (block.lang or "js").lower()
            prefix = policy.calls.script_prefix(setup=block.setup, lang=lang)
            if lang in {"jsx", "tsx"}:
                result = extract_jsx(block.content, prefix, lang=lang, state=state, policy=policy)
            else:
                result = extract_script(
                    block.content,
                    prefix,
                    lang=lang,
                    setup=block.setup,
                    state=state,
                    policy=policy,
                )
        else:
            continue

        text_map.update(result.text_map)
        warnings.extend(result.warnings)
        rewritten_blocks.append(block.tag)
        if result.spans:
            spans.append(ReplacementSpan(block.start, block.end, result.rewritten_text))

    return SfcExtractionResult(
        text_map=text_map,
        rewritten_text=apply_replacements(source, sort_spans(spans)),
        warnings=warnings,
        blocks=rewritten_blocks,
    )


def extract_source(
    source: str,
    file_type: FileType,
    *,
    key_prefix: str = "",
    call_prefix: str | None = None,
    policy: ExtractionPolicy | None = None,
) -> DocumentExtraction:
    """Run one extraction over a whole document.

    ``call_prefix`` overrides the policy for script and JSX files; Vue
    components always use the per-block prefixes of the policy.
    """

    if file_type not in supported_file_types():
        raise ValueError(f"Unsupported file type: {file_type}")

    run_id = uuid.uuid4().hex
    started = time.perf_counter()
    state, policy = _resolve(key_prefix, None, policy)
    _log_event(logging.INFO, "start", run_id, file_type=file_type, source_chars=len(source))

    try:
        if file_type == "vue":
            sfc = extract_vue(source, state=state, policy=policy)
            output, text_map, warnings = sfc.rewritten_text, sfc.text_map, sfc.warnings
        elif file_type in {"jsx", "tsx"}:
            result = extract_jsx(source, call_prefix, lang=file_type, state=state, policy=policy)
            output, text_map, warnings = result.rewritten_text, result.text_map, result.warnings
        else:
            result = extract_script(source, call_prefix, lang=file_type, state=state, policy=policy)
            output, text_map, warnings = result.rewritten_text, result.text_map, result.warnings
        extracted = nest_text_map(text_map)
    except Exception as exc:
        _log_event(
            logging.ERROR,
            "error",
            run_id,
            file_type=file_type,
            error_type=type(exc).__name__,
            message=str(exc),
            duration_ms=_elapsed_ms(started),
        )
        raise

    _log_event(
        logging.INFO,
        "done",
        run_id,
        file_type=file_type,
        key_count=len(text_map),
        warning_count=len(warnings),
        duration_ms=_elapsed_ms(started),
    )
    return DocumentExtraction(
        file_type=file_type,
        output=output,
        text_map=text_map,
        extracted=extracted,
        warnings=warnings,
    )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _log_event(level: int, event: str, run_id: str, **fields: Any) -> None:
    payload = {"event": event, "run_id": run_id, **fields}
    logger.log(level, json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":")))
