"""FastAPI wrapper for the class merge service."""

from __future__ import annotations

import importlib.metadata
import json
import logging
import os
import threading
import time
import uuid
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from core.classes.config_loader import load_merge_config
from core.merge.service import MergeService, get_default_service
from core.utils.errors import ConfigError

app = FastAPI(title="twmerge API", version="0.1.0")
logger = logging.getLogger("twmerge.api")

REQUEST_ID_HEADER = "X-Twmerge-Request-Id"
_CONFIG_ENV = "TWMERGE_CONFIG"
_DEFAULT_MAX_INPUT_CHARS = 64 * 1024


class MergeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    classes: str


class BatchMergeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: list[str] = Field(min_length=1)


class ClassifyRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    base_class: str


class ShortNameRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    classes: str


class RegisterMappingsRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mappings: dict[str, str] = Field(min_length=1)


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


_service_lock = threading.Lock()
_service_cache: tuple[str, MergeService] | None = None


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Ensure every response has a request id header."""

    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:  # noqa: BLE001
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            path=request.url.path,
        )
        response = _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"path": request.url.path},
        )
    response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    _log_event(
        logging.INFO,
        "request_done",
        request_id,
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        total_ms=_elapsed_ms(start),
    )
    return response


@app.exception_handler(ApiRequestError)
async def api_request_error_handler(request: Request, exc: ApiRequestError) -> JSONResponse:
    request_id = _request_id_from_request(request)
    _log_event(
        logging.WARNING,
        "error",
        request_id,
        error_code=exc.error_code,
        status_code=exc.status_code,
    )
    return _error_response(
        status_code=exc.status_code,
        error_code=exc.error_code,
        message=exc.message,
        request_id=request_id,
        detail=exc.detail,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    request_id = _request_id_from_request(request)
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": str(error.get("msg", ""))}
        for error in exc.errors()
    ]
    return _error_response(
        status_code=422,
        error_code="INVALID_REQUEST",
        message="request body failed validation",
        request_id=request_id,
        detail={"errors": errors},
    )


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Liveness endpoint."""

    return {"status": "ok"}


@app.get("/v1/meta")
async def meta_v1(request: Request) -> JSONResponse:
    request_id = _request_id_from_request(request)
    service = _get_service()
    settings = service.config.settings
    payload = {
        "version": _package_version(),
        "settings": settings.model_dump(mode="json"),
        "class_group_count": len(service.config.trie.group_ids()),
        "cache_size": len(service.cache),
    }
    return JSONResponse(status_code=200, headers={REQUEST_ID_HEADER: request_id}, content=payload)


@app.post("/v1/merge")
async def merge_v1(request: Request, body: MergeRequest) -> JSONResponse:
    request_id = _request_id_from_request(request)
    _check_input_size(body.classes, field_name="classes")
    merged = _get_service().merge(body.classes)
    return JSONResponse(
        status_code=200,
        headers={REQUEST_ID_HEADER: request_id},
        content={"input": body.classes, "merged": merged},
    )


@app.post("/v1/merge/batch")
async def merge_batch_v1(request: Request, body: BatchMergeRequest) -> JSONResponse:
    request_id = _request_id_from_request(request)
    service = _get_service()
    results = []
    for item in body.items:
        _check_input_size(item, field_name="items")
        results.append({"input": item, "merged": service.merge(item)})
    return JSONResponse(
        status_code=200,
        headers={REQUEST_ID_HEADER: request_id},
        content={"results": results},
    )


@app.post("/v1/classify")
async def classify_v1(request: Request, body: ClassifyRequest) -> JSONResponse:
    request_id = _request_id_from_request(request)
    _check_input_size(body.base_class, field_name="base_class")
    found, group_id = _get_service().classify(body.base_class)
    return JSONResponse(
        status_code=200,
        headers={REQUEST_ID_HEADER: request_id},
        content={"base_class": body.base_class, "found": found, "group_id": group_id or None},
    )


@app.post("/v1/short-name")
async def short_name_v1(request: Request, body: ShortNameRequest) -> JSONResponse:
    request_id = _request_id_from_request(request)
    _check_input_size(body.classes, field_name="classes")
    if not body.classes.strip():
        raise ApiRequestError(
            status_code=400,
            error_code="EMPTY_CLASSES",
            message="classes must contain at least one class name",
        )
    service = _get_service()
    name = service.short_name(body.classes)
    return JSONResponse(
        status_code=200,
        headers={REQUEST_ID_HEADER: request_id},
        content={
            "input": body.classes,
            "name": name,
            "merged": service.registry.merged_for(name),
        },
    )


@app.get("/v1/mappings")
async def list_mappings_v1(request: Request) -> JSONResponse:
    request_id = _request_id_from_request(request)
    snapshot = _get_service().snapshot()
    return JSONResponse(
        status_code=200,
        headers={REQUEST_ID_HEADER: request_id},
        content={
            "raw_to_name": dict(sorted(snapshot.raw_to_name.items())),
            "name_to_merged": dict(sorted(snapshot.name_to_merged.items())),
        },
    )


@app.post("/v1/mappings")
async def register_mappings_v1(request: Request, body: RegisterMappingsRequest) -> JSONResponse:
    request_id = _request_id_from_request(request)
    blank = sorted(raw for raw, name in body.mappings.items() if not raw.strip() or not name.strip())
    if blank:
        raise ApiRequestError(
            status_code=400,
            error_code="INVALID_MAPPING",
            message="mapping keys and names must be non-empty",
            detail={"entries": blank},
        )
    _get_service().register_known_mappings(body.mappings)
    _log_event(logging.INFO, "mappings_registered", request_id, count=len(body.mappings))
    return JSONResponse(
        status_code=200,
        headers={REQUEST_ID_HEADER: request_id},
        content={"registered": len(body.mappings)},
    )


def _get_service() -> MergeService:
    """Service for ``TWMERGE_CONFIG`` when set, otherwise the process default."""

    global _service_cache
    raw_path = os.getenv(_CONFIG_ENV, "").strip()
    if not raw_path:
        return get_default_service()

    with _service_lock:
        if _service_cache is not None and _service_cache[0] == raw_path:
            return _service_cache[1]
        try:
            config = load_merge_config(Path(raw_path))
        except ConfigError as exc:
            raise ApiRequestError(
                status_code=500,
                error_code="CONFIG_ERROR",
                message=str(exc),
                detail={"config_path": raw_path},
            ) from exc
        service = MergeService(config)
        _service_cache = (raw_path, service)
        return service


def _check_input_size(value: str, *, field_name: str) -> None:
    limit = _max_input_chars()
    if len(value) > limit:
        raise ApiRequestError(
            status_code=413,
            error_code="INPUT_TOO_LARGE",
            message=f"{field_name} exceeds {limit} characters",
            detail={"field": field_name, "max_chars": limit},
        )


def _max_input_chars() -> int:
    raw = os.getenv("TWMERGE_MAX_INPUT_CHARS")
    if raw is None:
        return _DEFAULT_MAX_INPUT_CHARS
    try:
        parsed = int(raw)
    except ValueError:
        return _DEFAULT_MAX_INPUT_CHARS
    return parsed if parsed > 0 else _DEFAULT_MAX_INPUT_CHARS


def _request_id_from_request(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    generated = uuid.uuid4().hex
    request.state.request_id = generated
    return generated


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _package_version() -> str:
    try:
        return importlib.metadata.version("twmerge")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


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
        headers={REQUEST_ID_HEADER: request_id},
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
