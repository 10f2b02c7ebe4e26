from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tapcoin.api.config import load_api_config
from tapcoin.api.errors import ApiError
from tapcoin.api.routes_public import public_router
from tapcoin.api.security import RequestSizeLimitMiddleware
from tapcoin.api.structured_logging import RequestLogMiddleware
from tapcoin.runtime.errors import ApplyError
from tapcoin.runtime.executor_boot import build_executor as _build_executor


def build_executor():
    """Build a LedgerExecutor for API runtime.

    This wrapper exists so tests can monkeypatch `tapcoin.api.app.build_executor`
    without reaching into runtime modules.
    """
    return _build_executor()


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_json())


async def _apply_error_handler(request: Request, exc: ApplyError) -> JSONResponse:
    err = ApiError.from_apply_error(exc)
    return JSONResponse(status_code=err.status_code, content=err.to_json())


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{"loc": list(e.get("loc", ())), "msg": str(e.get("msg", "")), "type": str(e.get("type", ""))} for e in exc.errors()]
    err = ApiError.bad_request("bad_request", "request validation failed", {"errors": errors})
    return JSONResponse(status_code=err.status_code, content=err.to_json())


def create_app(*, boot_runtime: bool = True) -> FastAPI:
    """Create the FastAPI application.

    boot_runtime:
      - True (default): build the executor from chain config and attach it
      - False: keep lightweight for unit tests / import-time validation
    """
    cfg = load_api_config()

    # Disable docs in production.
    if cfg.mode == "prod":
        app = FastAPI(title="TapCoin Node API", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="TapCoin Node API")

    app.state.cfg = cfg
    app.state.executor = build_executor() if boot_runtime else None

    # --- Error shape: {"ok": false, "error": {code, message, details}} ---
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(ApplyError, _apply_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    # --- Middleware (last added runs first) ---
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=cfg.max_request_bytes)
    app.add_middleware(RequestLogMiddleware, enabled=cfg.log_requests)

    if cfg.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(cfg.cors_origins),
            allow_credentials="*" not in cfg.cors_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type"],
        )

    app.include_router(public_router)
    return app
