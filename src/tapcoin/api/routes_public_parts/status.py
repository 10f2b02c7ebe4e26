from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from tapcoin.api.routes_public_parts.common import _executor, _snapshot
from tapcoin.ledger.state import LedgerView

router = APIRouter()

Json = Dict[str, Any]


@router.get("/status")
def status(request: Request) -> Json:
    """
    Public ledger status summary.

    Mounted under /v1 by routes_public.py, so the full path is:
      GET /v1/status
    """
    ex = _executor(request)
    st = _snapshot(request)
    ledger = LedgerView.from_ledger(st)

    return {
        "ok": True,
        "chain_id": str(st.get("chain_id") or ""),
        "tx_count": int(st.get("tx_count") or 0),
        "now": int(ex.now()),
        "params": dict(ledger.params),
        "ledger": ledger.summary(),
        "tx_types": ex.tx_index.names(),
    }
