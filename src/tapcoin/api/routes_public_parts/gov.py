# src/tapcoin/api/routes_public_parts/gov.py
from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Request

from tapcoin.api.errors import ApiError
from tapcoin.api.routes_public_parts.common import _executor, _int_param, _snapshot
from tapcoin.runtime.apply.governance import get_proposal, list_proposals
from tapcoin.runtime.proposals import proposal_status

router = APIRouter()


def _with_status(pr: Dict[str, Any], *, now: int) -> Dict[str, Any]:
    out = dict(pr)
    out["status"] = proposal_status(pr, now=now)
    return out


@router.get("/gov/proposals")
def gov_proposals(request: Request) -> Dict[str, Any]:
    """List proposals in id order, each with its derived lifecycle status.

    Query params:
      - status: optional filter (open | closed_pending | executed)
    """
    now = int(_executor(request).now())
    st = _snapshot(request)
    want = str(request.query_params.get("status") or "").strip().lower()

    items: List[Dict[str, Any]] = [_with_status(pr, now=now) for pr in list_proposals(st)]
    if want:
        items = [pr for pr in items if pr["status"] == want]
    return {"ok": True, "now": now, "items": items}


@router.get("/gov/proposals/{proposal_id}")
def gov_proposal_get(proposal_id: str, request: Request) -> Dict[str, Any]:
    pid = _int_param(proposal_id, 0)
    if pid <= 0:
        raise ApiError.bad_request("bad_proposal_id", "proposal id must be a positive integer", {"proposal_id": proposal_id})

    now = int(_executor(request).now())
    st = _snapshot(request)
    pr = get_proposal(st, pid)
    if pr is None:
        raise ApiError.not_found("proposal_not_found", "not_found", {"proposal_id": pid})

    votes = st.get("gov_votes", {}).get(str(pid), {})
    return {"ok": True, "proposal": _with_status(pr, now=now), "votes": votes if isinstance(votes, dict) else {}}
