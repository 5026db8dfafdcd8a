"""FastAPI wrapper for the i18n extraction pipeline."""

from __future__ import annotations

import importlib.metadata
import json
import logging
import os
import time
import uuid
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, ValidationError

from i18n_core.orchestrator.models import FileType
from i18n_core.orchestrator.pipeline import extract_source, supported_file_types
from i18n_core.policy.policy_loader import default_policy
from i18n_core.utils.errors import ExtractionDepthError, ExtractionParseError

app = FastAPI(title="i18n-extract API", version="0.1.0")
logger = logging.getLogger("i18n_extract.api")

_REQUEST_ID_HEADER = "X-I18n-Request-Id"
_DEFAULT_MAX_SOURCE_BYTES = 2 * 1024 * 1024


class ExtractRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str
    file_type: FileType
    key_prefix: str = ""
    call_prefix: str | None = None


class ApiRequestError(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.detail = detail or {}


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Ensure every response has a request id header."""

    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    try:
        response = await call_next(request)
    except Exception:  # noqa: BLE001
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            failure_stage="middleware",
        )
        response = _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"path": request.url.path},
        )
    response.headers.setdefault(_REQUEST_ID_HEADER, request_id)
    return response


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Liveness endpoint."""

    return {"status": "ok"}


@app.get("/v1/meta")
async def meta_v1(request: Request) -> JSONResponse:
    """Metadata endpoint for editor clients."""

    request_id = _request_id_from_request(request)
    calls = default_policy().calls
    payload = {
        "supported_file_types": supported_file_types(),
        "default_call_prefixes": calls.model_dump(mode="json"),
        "max_source_bytes": _max_source_bytes(),
        "version": app.version,
        "package_version": _package_version(),
    }
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content=payload,
    )


@app.post("/v1/extract", response_model=None)
async def extract_v1(request: Request) -> JSONResponse:
    """Extract one source document and return the rewritten code and catalog."""

    request_started = time.perf_counter()
    request_id = _request_id_from_request(request)
    failure_stage = "init"

    try:
        failure_stage = "read_body"
        body = await request.body()
        max_source_bytes = _max_source_bytes()
        if len(body) > max_source_bytes:
            raise ApiRequestError(
                status_code=413,
                error_code="PAYLOAD_TOO_LARGE",
                message="request body too large",
                detail={"max_source_bytes": max_source_bytes, "received_bytes": len(body)},
            )

        failure_stage = "validate_inputs"
        extract_request = _parse_extract_request(body)

        _log_event(
            logging.INFO,
            "start",
            request_id,
            file_type=extract_request.file_type,
            key_prefix=extract_request.key_prefix,
            call_prefix=extract_request.call_prefix,
            source_bytes=len(body),
        )

        failure_stage = "extract"
        extraction = extract_source(
            extract_request.code,
            extract_request.file_type,
            key_prefix=extract_request.key_prefix,
            call_prefix=extract_request.call_prefix,
        )

        failure_stage = "respond"
        _log_event(
            logging.INFO,
            "done",
            request_id,
            key_count=len(extraction.text_map),
            warning_count=len(extraction.warnings),
            total_ms=_elapsed_ms(request_started),
        )
        return JSONResponse(
            status_code=200,
            headers={_REQUEST_ID_HEADER: request_id},
            content={
                "output": extraction.output,
                "extracted": extraction.extracted,
                "warnings": [
                    item.model_dump(mode="json", exclude_none=True) for item in extraction.warnings
                ],
            },
        )
    except ApiRequestError as exc:
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code=exc.error_code,
            status_code=exc.status_code,
            failure_stage=failure_stage,
        )
        return _error_response(
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
            request_id=request_id,
            detail=exc.detail,
        )
    except (ExtractionParseError, ExtractionDepthError) as exc:
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="PARSE_ERROR",
            status_code=422,
            failure_stage=failure_stage,
        )
        detail: dict[str, Any] = {"error": str(exc)}
        if isinstance(exc, ExtractionParseError):
            detail["grammar"] = exc.grammar
            if exc.position is not None:
                detail["line"], detail["column"] = exc.position
        return _error_response(
            status_code=422,
            error_code="PARSE_ERROR",
            message="source could not be parsed",
            request_id=request_id,
            detail=detail,
        )
    except Exception as exc:  # noqa: BLE001
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            failure_stage=failure_stage,
        )
        return _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"error": str(exc), "total_ms": _elapsed_ms(request_started)},
        )


def _parse_extract_request(body: bytes) -> ExtractRequest:
    try:
        raw = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ApiRequestError(
            status_code=400,
            error_code="INVALID_JSON",
            message="request body must be valid JSON",
            detail={"error": str(exc)},
        ) from exc
    if not isinstance(raw, dict):
        raise ApiRequestError(
            status_code=400,
            error_code="INVALID_JSON",
            message="request body must be a JSON object",
        )
    try:
        return ExtractRequest.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ApiRequestError(
            status_code=400,
            error_code="INVALID_ARGUMENT",
            message="invalid extraction request",
            detail={"field": field, "error": first.get("msg", str(exc))},
        ) from exc


def _request_id_from_request(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    generated = uuid.uuid4().hex
    request.state.request_id = generated
    return generated


def _max_source_bytes() -> int:
    raw = os.getenv("I18N_MAX_SOURCE_BYTES")
    if raw is None:
        return _DEFAULT_MAX_SOURCE_BYTES
    try:
        parsed = int(raw)
    except ValueError:
        return _DEFAULT_MAX_SOURCE_BYTES
    return parsed if parsed > 0 else _DEFAULT_MAX_SOURCE_BYTES


def _package_version() -> str:
    try:
        return importlib.metadata.version("ast-i18n-extract")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _error_response(
    *,
    status_code: int,
    error_code: str,
    message: str,
    request_id: str,
    detail: dict[str, Any] | None = None,
) -> JSONResponse:
    payload_detail = dict(detail or {})
    payload_detail["request_id"] = request_id

    return JSONResponse(
        status_code=status_code,
        headers={_REQUEST_ID_HEADER: request_id},
        content={
            "error_code": error_code,
            "message": message,
            "detail": payload_detail,
        },
    )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _log_event(level: int, event: str, request_id: str, **fields: Any) -> None:
    payload = {
        "event": event,
        "request_id": request_id,
        **fields,
    }
    logger.log(level, _dump_json(payload))
