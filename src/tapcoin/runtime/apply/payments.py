# src/tapcoin/runtime/apply/payments.py
from __future__ import annotations

"""Tap-to-pay.

If the payer is short, the deficit is pulled from the contract reserve first
(untaxed), then the full amount goes through the ordinary burn-taxed transfer.
Both steps run in the caller's unit of work: if the transfer fails, the
executor discards the top-up with everything else.
"""

from typing import Any, Dict, Optional, Set

from tapcoin.ledger.constants import CONTRACT_ACCOUNT_ID
from tapcoin.runtime.apply import ledger
from tapcoin.runtime.apply.access import require_not_paused
from tapcoin.runtime.apply.transfer import transfer
from tapcoin.runtime.errors import RESERVE_INSUFFICIENT, ApplyError
from tapcoin.runtime.events import FALLBACK_CONVERSION, FALLBACK_PAYMENT_COMPLETED, emit_event
from tapcoin.runtime.tx_admission_types import TxEnvelope

Json = Dict[str, Any]

FALLBACK_CONVERSION_NOTE = "Reserve covered payment deficit"
FALLBACK_PAYMENT_NOTE = "Payment completed using secondary coin fallback"


def _as_str(v: Any) -> str:
    return str(v).strip() if isinstance(v, (str, int, float)) else ""


def _as_dict(v: Any) -> Json:
    return v if isinstance(v, dict) else {}


def contract_account(state: Json) -> str:
    params = _as_dict(state.get("params"))
    return _as_str(params.get("contract_account")) or CONTRACT_ACCOUNT_ID


def reserve_balance(state: Json) -> int:
    return ledger.balance_of(state, contract_account(state))


def tap_to_pay(state: Json, caller: str, recipient: str, amount: int, secondary_coin_label: str) -> Json:
    require_not_paused(state, "TAP_TO_PAY")

    amt = int(amount)
    if amt < 0:
        raise ApplyError("invalid_payload", "bad_amount", {"amount": amount})

    balance = ledger.balance_of(state, caller)
    if balance >= amt:
        out = transfer(state, caller, recipient, amt)
        return {"applied": "TAP_TO_PAY", "path": "direct", "deficit": 0, "transfer": out}

    deficit = amt - balance
    reserve = contract_account(state)
    available = ledger.balance_of(state, reserve)
    if available < deficit:
        raise ApplyError(
            "forbidden",
            RESERVE_INSUFFICIENT,
            {"deficit": deficit, "reserve": available},
        )

    # Top-up is a plain ledger move: no burn.
    ledger.move_value(state, reserve, caller, deficit)
    emit_event(state, FALLBACK_CONVERSION, account=caller, deficit=deficit, description=FALLBACK_CONVERSION_NOTE)

    out = transfer(state, caller, recipient, amt)

    emit_event(
        state,
        FALLBACK_PAYMENT_COMPLETED,
        account=caller,
        recipient=recipient,
        deficit=deficit,
        secondary_coin=secondary_coin_label,
        description=FALLBACK_PAYMENT_NOTE,
    )
    return {"applied": "TAP_TO_PAY", "path": "fallback", "deficit": deficit, "transfer": out}


def _apply_tap_to_pay(state: Json, env: TxEnvelope) -> Json:
    payload = _as_dict(env.payload)
    amount = payload.get("amount")
    if amount is None:
        raise ApplyError("invalid_payload", "missing_amount", {"tx_type": env.tx_type})

    return tap_to_pay(
        state,
        _as_str(env.signer),
        _as_str(payload.get("recipient")),
        int(amount),
        _as_str(payload.get("secondary_coin_label")),
    )


PAYMENT_TX_TYPES: Set[str] = {"TAP_TO_PAY"}


def apply_payments(state: Json, env: TxEnvelope) -> Optional[Json]:
    t = _as_str(env.tx_type).upper()
    if t not in PAYMENT_TX_TYPES:
        return None
    return _apply_tap_to_pay(state, env)


__all__ = ["apply_payments", "contract_account", "reserve_balance", "tap_to_pay"]
