# src/tapcoin/runtime/apply/ledger.py
from __future__ import annotations

"""Fungible ledger bookkeeping.

Plain balance storage used by the policy domains. Nothing here knows about
supply caps, burn rates, or pausing; those live in supply/transfer/access.
Every function mutates the given state in place and raises ApplyError on
insufficient funds so the executor can discard the working copy.
"""

from typing import Any, Dict

from tapcoin.runtime.errors import INSUFFICIENT_BALANCE, ApplyError

Json = Dict[str, Any]


def _as_int(v: Any, default: int = 0) -> int:
    try:
        return int(v)
    except Exception:
        return int(default)


def new_account() -> Json:
    # loyalty_points / referred_users are passive counters with no write path.
    return {"balance": 0, "loyalty_points": 0, "referred_users": 0}


def _accounts(state: Json) -> Json:
    accounts = state.get("accounts")
    if not isinstance(accounts, dict):
        accounts = {}
        state["accounts"] = accounts
    return accounts


def ensure_account(state: Json, account_id: str) -> Json:
    accounts = _accounts(state)
    acct = accounts.get(account_id)
    if not isinstance(acct, dict):
        acct = new_account()
        accounts[account_id] = acct
    return acct


def balance_of(state: Json, account_id: str) -> int:
    acct = _accounts(state).get(str(account_id))
    if not isinstance(acct, dict):
        return 0
    return _as_int(acct.get("balance"), 0)


def total_supply(state: Json) -> int:
    return _as_int(state.get("total_supply"), 0)


def _check_amount(amount: int) -> int:
    amt = _as_int(amount, -1)
    if amt < 0:
        raise ApplyError("invalid_payload", "bad_amount", {"amount": amount})
    return amt


def mint(state: Json, account_id: str, amount: int) -> None:
    amt = _check_amount(amount)
    acct = ensure_account(state, str(account_id))
    acct["balance"] = _as_int(acct.get("balance"), 0) + amt
    state["total_supply"] = total_supply(state) + amt


def burn(state: Json, account_id: str, amount: int) -> None:
    amt = _check_amount(amount)
    bal = balance_of(state, account_id)
    if bal < amt:
        raise ApplyError("forbidden", INSUFFICIENT_BALANCE, {"account": account_id, "balance": bal, "amount": amt})
    acct = ensure_account(state, str(account_id))
    acct["balance"] = bal - amt
    state["total_supply"] = total_supply(state) - amt


def move_value(state: Json, frm: str, to: str, amount: int) -> None:
    amt = _check_amount(amount)
    fb = balance_of(state, frm)
    if fb < amt:
        raise ApplyError("forbidden", INSUFFICIENT_BALANCE, {"account": frm, "balance": fb, "amount": amt})

    fa = ensure_account(state, str(frm))
    fa["balance"] = fb - amt
    ta = ensure_account(state, str(to))
    ta["balance"] = _as_int(ta.get("balance"), 0) + amt


__all__ = ["balance_of", "burn", "ensure_account", "mint", "move_value", "new_account", "total_supply"]
