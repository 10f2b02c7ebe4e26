from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from tapcoin.api.errors import ApiError
from tapcoin.api.routes_public_parts.common import _executor, _int_param
from tapcoin.api.schemas import TxSubmitRequest
from tapcoin.runtime.errors import ApplyError

router = APIRouter()

Json = Dict[str, Any]


@router.post("/tx/submit")
def tx_submit(body: TxSubmitRequest, request: Request) -> Json:
    """Submit one tx envelope and apply it immediately.

    Returns:
      { ok, tx_type, result, events }

    Rejections map ApplyError.code to HTTP status (400/403/404/409) with the
    specific reason in error.code.
    """
    ex = _executor(request)
    try:
        return ex.submit_tx(body.to_envelope())
    except ApplyError as e:
        raise ApiError.from_apply_error(e) from e


@router.get("/tx/log")
def tx_log(request: Request) -> Json:
    """Most recent committed txs, newest first (empty when not persisted)."""
    ex = _executor(request)
    limit = min(500, max(1, _int_param(request.query_params.get("limit"), 50)))
    return {"ok": True, "items": ex.tx_log(limit=limit)}
