from __future__ import annotations

from typing import Any, Dict

from fastapi import Request

from tapcoin.api.errors import ApiError
from tapcoin.ledger.state import LedgerView

Json = Dict[str, Any]


def _executor(request: Request):
    ex = getattr(request.app.state, "executor", None)
    if ex is None:
        raise ApiError.internal("not_ready", "executor not attached to app.state", {})
    return ex


def _snapshot(request: Request) -> Json:
    """Return a deep-copied dict snapshot of committed ledger state."""
    st = _executor(request).read_state()
    if not isinstance(st, dict):
        raise ApiError.internal("bad_state", "executor state is not a dict", {})
    return st


def _ledger(request: Request) -> LedgerView:
    return _executor(request).ledger_view()


def _int_param(v: Any, default: int) -> int:
    """Parse an int-ish query param safely."""
    if v is None:
        return int(default)
    try:
        s = str(v).strip()
        if s == "":
            return int(default)
        return int(s)
    except ValueError:
        return int(default)
