# src/tapcoin/runtime/apply/supply.py
from __future__ import annotations

from typing import Any, Dict, Optional, Set, Tuple

from tapcoin.ledger.constants import BPS_DENOMINATOR
from tapcoin.runtime.apply import ledger
from tapcoin.runtime.apply.access import require_admin
from tapcoin.runtime.errors import CAP_EXCEEDED, ApplyError
from tapcoin.runtime.events import TOKENS_BURNED, TOKENS_MINTED, emit_event
from tapcoin.runtime.tx_admission_types import TxEnvelope

Json = Dict[str, Any]


def _as_str(v: Any) -> str:
    return str(v).strip() if isinstance(v, (str, int, float)) else ""


def _as_dict(v: Any) -> Json:
    return v if isinstance(v, dict) else {}


def _amount(env: TxEnvelope) -> int:
    payload = _as_dict(env.payload)
    amount = payload.get("amount")
    if amount is None:
        raise ApplyError("invalid_payload", "missing_amount", {"tx_type": env.tx_type})
    try:
        amt = int(amount)
    except Exception:
        raise ApplyError("invalid_payload", "bad_amount", {"amount": amount})
    if amt < 0:
        raise ApplyError("invalid_payload", "bad_amount", {"amount": amount})
    return amt


def compute_transfer_burn(amount: int, burn_rate_bps: int) -> Tuple[int, int]:
    """Split a transfer into (burn_amount, net_amount).

    burn = floor(amount * rate / 10000), net = amount - burn. Pure: does not
    touch total_burned_tokens.
    """
    amt = int(amount)
    rate = int(burn_rate_bps)
    if amt < 0:
        raise ValueError(f"amount must be >= 0; got: {amount}")
    if rate < 0 or rate > BPS_DENOMINATOR:
        raise ValueError(f"burn_rate_bps must be 0..{BPS_DENOMINATOR}; got: {burn_rate_bps}")

    burn_amount = (amt * rate) // BPS_DENOMINATOR
    return burn_amount, amt - burn_amount


def max_supply(state: Json) -> int:
    params = _as_dict(state.get("params"))
    return int(params.get("max_supply") or 0)


def _apply_mint(state: Json, env: TxEnvelope) -> Json:
    require_admin(state, env.signer)

    payload = _as_dict(env.payload)
    to = _as_str(payload.get("to"))
    if not to:
        raise ApplyError("invalid_payload", "missing_to", {"tx_type": env.tx_type})
    amt = _amount(env)

    cap = max_supply(state)
    supply = ledger.total_supply(state)
    if supply + amt > cap:
        raise ApplyError(
            "forbidden",
            CAP_EXCEEDED,
            {"total_supply": supply, "amount": amt, "max_supply": cap},
        )

    ledger.mint(state, to, amt)
    emit_event(state, TOKENS_MINTED, to=to, amount=amt)
    return {"applied": "MINT", "to": to, "amount": amt}


def _apply_burn(state: Json, env: TxEnvelope) -> Json:
    amt = _amount(env)
    caller = _as_str(env.signer)

    ledger.burn(state, caller, amt)
    state["total_burned_tokens"] = int(state.get("total_burned_tokens") or 0) + amt
    emit_event(state, TOKENS_BURNED, account=caller, amount=amt)
    return {"applied": "BURN", "account": caller, "amount": amt}


SUPPLY_TX_TYPES: Set[str] = {"MINT", "BURN"}


def apply_supply(state: Json, env: TxEnvelope) -> Optional[Json]:
    t = _as_str(env.tx_type).upper()
    if t not in SUPPLY_TX_TYPES:
        return None

    if t == "MINT":
        return _apply_mint(state, env)

    if t == "BURN":
        return _apply_burn(state, env)

    return None


__all__ = ["apply_supply", "compute_transfer_burn", "max_supply"]
