from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from tapcoin.api.routes_public_parts.common import _executor, _int_param

router = APIRouter()


@router.get("/events")
def events(request: Request) -> Dict[str, Any]:
    """Ledger notifications with seq > since, oldest first.

    `next_since` is the cursor to pass back for the following page.
    """
    ex = _executor(request)
    page_max = int(getattr(request.app.state.cfg, "events_page_max", 500))

    since = max(0, _int_param(request.query_params.get("since"), 0))
    limit = min(page_max, max(1, _int_param(request.query_params.get("limit"), 100)))

    items = ex.events(since=since, limit=limit)
    next_since = int(items[-1]["seq"]) if items else since
    return {"ok": True, "items": items, "next_since": next_since}
