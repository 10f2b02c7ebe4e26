# src/tapcoin/runtime/apply/access.py
from __future__ import annotations

from typing import Any, Dict, Optional, Set

from tapcoin.ledger.constants import BPS_DENOMINATOR
from tapcoin.runtime.errors import CONTRACT_PAUSED, UNAUTHORIZED, ApplyError
from tapcoin.runtime.events import BURN_RATE_SET, PAUSED, UNPAUSED, emit_event
from tapcoin.runtime.tx_admission_types import TxEnvelope

Json = Dict[str, Any]


def _as_str(v: Any) -> str:
    return str(v).strip() if isinstance(v, (str, int, float)) else ""


def _as_dict(v: Any) -> Json:
    return v if isinstance(v, dict) else {}


def _params(state: Json) -> Json:
    params = state.get("params")
    if not isinstance(params, dict):
        params = {}
        state["params"] = params
    return params


def admin_account(state: Json) -> str:
    return _as_str(_params(state).get("admin"))


def is_paused(state: Json) -> bool:
    return bool(_params(state).get("paused", False))


def require_admin(state: Json, signer: str) -> None:
    admin = admin_account(state)
    if not admin or _as_str(signer) != admin:
        raise ApplyError("forbidden", UNAUTHORIZED, {"signer": signer})


def require_not_paused(state: Json, tx_type: str) -> None:
    if is_paused(state):
        raise ApplyError("forbidden", CONTRACT_PAUSED, {"tx_type": tx_type})


def _apply_pause(state: Json, env: TxEnvelope, *, paused: bool) -> Json:
    require_admin(state, env.signer)
    params = _params(state)

    current = bool(params.get("paused", False))
    if current == paused:
        raise ApplyError("invalid_state", "pause_already_in_requested_state", {"paused": current})

    params["paused"] = paused
    emit_event(state, PAUSED if paused else UNPAUSED, account=env.signer)
    return {"applied": env.tx_type, "paused": paused}


def _apply_burn_rate_set(state: Json, env: TxEnvelope) -> Json:
    require_admin(state, env.signer)
    payload = _as_dict(env.payload)

    raw = payload.get("burn_rate_bps")
    if raw is None:
        raise ApplyError("invalid_payload", "missing_burn_rate_bps", {"tx_type": env.tx_type})
    rate = int(raw)
    if rate < 0 or rate > BPS_DENOMINATOR:
        raise ApplyError("invalid_payload", "bad_burn_rate", {"burn_rate_bps": rate, "max": BPS_DENOMINATOR})

    params = _params(state)
    previous = int(params.get("burn_rate_bps") or 0)
    params["burn_rate_bps"] = rate
    emit_event(state, BURN_RATE_SET, previous=previous, burn_rate_bps=rate)
    return {"applied": "BURN_RATE_SET", "burn_rate_bps": rate}


ACCESS_TX_TYPES: Set[str] = {"PAUSE", "UNPAUSE", "BURN_RATE_SET"}


def apply_access(state: Json, env: TxEnvelope) -> Optional[Json]:
    t = _as_str(env.tx_type).upper()
    if t not in ACCESS_TX_TYPES:
        return None

    if t == "PAUSE":
        return _apply_pause(state, env, paused=True)

    if t == "UNPAUSE":
        return _apply_pause(state, env, paused=False)

    if t == "BURN_RATE_SET":
        return _apply_burn_rate_set(state, env)

    return None


__all__ = ["admin_account", "apply_access", "is_paused", "require_admin", "require_not_paused"]
