from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from normkit.api.models import ApiError, ConfigIn, NormalizeIn, NormalizeOut, ResolveIn, ResolveOut
from normkit.core.data import NormalizedData, NormalizerError
from normkit.core.normalization import NormalizationConfig, Normalizer, merge_overrides
from normkit.utils.json_safe import to_jsonable

log = logging.getLogger("normkit.api")


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Configuration for the API service.

    - normalization: base settings; requests may override them per call
    - max_body_bytes: requests declaring a larger Content-Length get 413

    """

    normalization: NormalizationConfig = field(default_factory=NormalizationConfig)
    max_body_bytes: int = 5 * 1024 * 1024


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on malformed values."""

    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        log.debug("ignoring malformed %s=%r", name, raw)
        return int(default)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request correlation, body size guard and access logging.

    Header:
      - X-Request-ID (client value accepted only when short, else generated)

    Access log records carry method, path, status and duration; never bodies.

    """

    def __init__(self, app, *, max_body_bytes: int, header_name: str = "X-Request-ID", max_len: int = 128):
        super().__init__(app)
        self._max_body_bytes = max_body_bytes
        self._header_name = header_name
        self._max_len = max_len

    async def dispatch(self, request: Request, call_next: Callable):
        rid = request.headers.get(self._header_name)
        if not rid or len(rid) > self._max_len:
            rid = uuid4().hex
        request.state.request_id = rid

        start = time.monotonic()
        response: Optional[Response] = None
        try:
            declared = request.headers.get("content-length", "")
            if declared.isdigit() and int(declared) > self._max_body_bytes:
                response = JSONResponse(
                    status_code=413,
                    content=ApiError(error="payload_too_large").model_dump(),
                )
            else:
                response = await call_next(request)
            response.headers[self._header_name] = rid
            return response
        finally:
            log.info(
                "api_request",
                extra={
                    "request_id": rid,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )


def _effective_config(base: NormalizationConfig, overrides: Optional[ConfigIn]) -> NormalizationConfig:
    if overrides is None:
        return base
    return merge_overrides(base, overrides.model_dump())


def create_app(*, config: Optional[ServiceConfig] = None) -> FastAPI:
    """Create the FastAPI app.

    Without an explicit config, settings come from the environment
    (``NORMKIT_*`` normalization variables, ``NORMKIT_MAX_BODY_BYTES``).
    """

    cfg = config or ServiceConfig(
        normalization=NormalizationConfig.from_env(),
        max_body_bytes=_env_int("NORMKIT_MAX_BODY_BYTES", 5 * 1024 * 1024),
    )

    log.setLevel(os.environ.get("NORMKIT_LOG_LEVEL", "INFO").upper())

    app = FastAPI(title="normkit API", version="0.1")
    app.state.cfg = cfg
    app.add_middleware(RequestContextMiddleware, max_body_bytes=cfg.max_body_bytes)

    @app.exception_handler(NormalizerError)
    async def normalizer_error_handler(request: Request, exc: NormalizerError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=ApiError(error=type(exc).__name__, detail=str(exc)).model_dump(),
        )

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"ok": True, "config": cfg.normalization.to_dict()}

    @app.post("/normalize", response_model=NormalizeOut)
    def normalize_endpoint(body: NormalizeIn) -> NormalizeOut:
        normalizer = Normalizer(_effective_config(cfg.normalization, body.config))
        result = normalizer.normalize(body.data)
        if isinstance(result, NormalizedData):
            return NormalizeOut(data=result.to_plain())
        return NormalizeOut(data=result)

    @app.post("/resolve", response_model=ResolveOut)
    def resolve_endpoint(body: ResolveIn) -> ResolveOut:
        normalizer = Normalizer(_effective_config(cfg.normalization, body.config))
        result = normalizer.normalize(body.data)
        if not isinstance(result, NormalizedData) or not result.has(body.path):
            return ResolveOut(path=body.path, found=False, value=None)
        return ResolveOut(path=body.path, found=True, value=to_jsonable(result.get(body.path)))

    return app
