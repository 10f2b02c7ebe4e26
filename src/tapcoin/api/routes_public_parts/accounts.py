from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from tapcoin.api.routes_public_parts.common import _ledger

router = APIRouter()


@router.get("/accounts/{account}")
def account_get(account: str, request: Request) -> Dict[str, Any]:
    """Balance record for an account. Unknown accounts read as all-zero."""
    ledger = _ledger(request)
    acct = ledger.get_account(account)
    return {
        "ok": True,
        "account": account,
        "exists": bool(acct),
        "balance": ledger.balance_of(account),
        "loyalty_points": int(acct.get("loyalty_points") or 0),
        "referred_users": int(acct.get("referred_users") or 0),
    }
