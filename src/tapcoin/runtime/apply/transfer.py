# src/tapcoin/runtime/apply/transfer.py
from __future__ import annotations

from typing import Any, Dict, Optional, Set

from tapcoin.runtime.apply import ledger
from tapcoin.runtime.apply.access import require_not_paused
from tapcoin.runtime.apply.supply import compute_transfer_burn
from tapcoin.runtime.errors import INSUFFICIENT_BALANCE, ApplyError
from tapcoin.runtime.events import ACTIVITY, SALE_AUTOMATED, TRANSFER_COMPLETED, emit_event
from tapcoin.runtime.tx_admission_types import TxEnvelope

Json = Dict[str, Any]


def _as_str(v: Any) -> str:
    return str(v).strip() if isinstance(v, (str, int, float)) else ""


def _as_dict(v: Any) -> Json:
    return v if isinstance(v, dict) else {}


def _burn_rate(state: Json) -> int:
    params = _as_dict(state.get("params"))
    return int(params.get("burn_rate_bps") or 0)


def transfer(state: Json, caller: str, recipient: str, amount: int) -> Json:
    """Burn-taxed value transfer from caller to recipient.

    Also invoked directly by TAP_TO_PAY inside the same unit of work.
    """
    require_not_paused(state, "TRANSFER")

    if not recipient:
        raise ApplyError("invalid_payload", "missing_recipient", {"tx_type": "TRANSFER"})
    amt = int(amount)
    if amt < 0:
        raise ApplyError("invalid_payload", "bad_amount", {"amount": amount})

    bal = ledger.balance_of(state, caller)
    if bal < amt:
        raise ApplyError("forbidden", INSUFFICIENT_BALANCE, {"balance": bal, "amount": amt})

    burn_amount, net_amount = compute_transfer_burn(amt, _burn_rate(state))

    # Transfer-time burns reduce supply but are not counted in total_burned_tokens.
    ledger.burn(state, caller, burn_amount)
    ledger.move_value(state, caller, recipient, net_amount)

    emit_event(
        state,
        TRANSFER_COMPLETED,
        sender=caller,
        recipient=recipient,
        amount=amt,
        burned=burn_amount,
        net=net_amount,
    )
    emit_event(state, ACTIVITY, account=caller, action="transfer", amount=amt)

    return {
        "applied": "TRANSFER",
        "sender": caller,
        "recipient": recipient,
        "amount": amt,
        "burned": burn_amount,
        "net": net_amount,
    }


def _apply_transfer(state: Json, env: TxEnvelope) -> Json:
    payload = _as_dict(env.payload)
    amount = payload.get("amount")
    if amount is None:
        raise ApplyError("invalid_payload", "missing_amount", {"tx_type": env.tx_type})
    return transfer(state, _as_str(env.signer), _as_str(payload.get("recipient")), int(amount))


def _apply_automate_sale(state: Json, env: TxEnvelope) -> Json:
    """Notification-only stub: no conversion happens and no balance moves."""
    require_not_paused(state, "AUTOMATE_SALE")
    payload = _as_dict(env.payload)

    user = _as_str(payload.get("user"))
    asset = _as_str(payload.get("asset"))
    amount = _as_str(payload.get("amount"))
    target = _as_str(payload.get("target_currency"))

    emit_event(state, SALE_AUTOMATED, user=user, asset=asset, amount=amount, target_currency=target)
    emit_event(state, ACTIVITY, account=_as_str(env.signer), action="automate_sale", amount=amount)
    return {"applied": "AUTOMATE_SALE", "user": user, "asset": asset, "amount": amount, "target_currency": target}


TRANSFER_TX_TYPES: Set[str] = {"TRANSFER", "AUTOMATE_SALE"}


def apply_transfer(state: Json, env: TxEnvelope) -> Optional[Json]:
    t = _as_str(env.tx_type).upper()
    if t not in TRANSFER_TX_TYPES:
        return None

    if t == "TRANSFER":
        return _apply_transfer(state, env)

    if t == "AUTOMATE_SALE":
        return _apply_automate_sale(state, env)

    return None


__all__ = ["apply_transfer", "transfer"]
