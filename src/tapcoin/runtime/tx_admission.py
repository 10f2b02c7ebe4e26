from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

from tapcoin.ledger.state import LedgerView
from tapcoin.runtime.errors import CONTRACT_PAUSED, UNAUTHORIZED
from tapcoin.runtime.tx_admission_types import TxEnvelope, TxVerdict
from tapcoin.runtime.tx_schema import validate_payload
from tapcoin.tx.canon import TxIndex

Json = Dict[str, Any]


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None:
        return int(default)
    try:
        return int(str(v).strip())
    except Exception:
        return int(default)


def _json_size_bytes(obj: Any) -> int:
    """Compute JSON byte size. If not serializable, return -1 (unknown)."""
    try:
        return len(json.dumps(obj, separators=(",", ":"), ensure_ascii=False, sort_keys=True).encode("utf-8"))
    except (TypeError, ValueError):
        return -1


def _validate_payload_limits(payload: Any) -> Optional[TxVerdict]:
    """Generic payload validation (shape + size caps)."""
    if payload is None:
        return None
    if not isinstance(payload, dict):
        return TxVerdict.reject("invalid_payload", "payload_must_be_object", {"type": str(type(payload))})

    max_payload_bytes = _env_int("TAPCOIN_MAX_TX_PAYLOAD_BYTES", 16 * 1024)
    max_string_bytes = _env_int("TAPCOIN_MAX_TX_STRING_BYTES", 4 * 1024)

    payload_bytes = _json_size_bytes(payload)
    if payload_bytes < 0:
        return TxVerdict.reject("invalid_payload", "payload_not_json", {})
    if payload_bytes > int(max_payload_bytes):
        return TxVerdict.reject(
            "payload_too_large",
            "payload_exceeds_size_limit",
            {"bytes": int(payload_bytes), "max_bytes": int(max_payload_bytes)},
        )

    for k, v in payload.items():
        if isinstance(v, str):
            b = len(v.encode("utf-8", errors="ignore"))
            if b > int(max_string_bytes):
                return TxVerdict.reject(
                    "invalid_payload",
                    "string_too_large",
                    {"key": str(k), "bytes": int(b), "max_bytes": int(max_string_bytes)},
                )
    return None


def _check_gate(txdef: Dict[str, Any], env: TxEnvelope, ledger: Optional[LedgerView]) -> Optional[TxVerdict]:
    if ledger is None:
        return None

    if str(txdef.get("gate") or "any") == "admin" and env.signer != ledger.admin():
        return TxVerdict.reject("forbidden", UNAUTHORIZED, {"tx_type": env.tx_type, "signer": env.signer})

    if bool(txdef.get("pausable", False)) and ledger.is_paused():
        return TxVerdict.reject("forbidden", CONTRACT_PAUSED, {"tx_type": env.tx_type})

    return None


def admit_tx(
    tx: Any,
    ledger: Optional[LedgerView] = None,
    canon: Optional[TxIndex] = None,
) -> TxVerdict:
    """Cheap pre-apply checks: canon membership, signer, payload shape, gate.

    The apply layer re-checks gate and pause inside the unit of work; this
    only rejects early so obviously bad txs never touch a working copy.
    """
    try:
        env = TxEnvelope.from_json(tx)
    except (TypeError, ValueError) as e:
        return TxVerdict.reject("invalid_tx", "malformed_envelope", {"error": str(e)})

    t = env.tx_type
    if not t:
        return TxVerdict.reject("invalid_tx", "missing_tx_type", {})

    txdef: Optional[Dict[str, Any]] = None
    if canon is not None:
        txdef = canon.get(t)  # type: ignore[assignment]
        if txdef is None:
            return TxVerdict.reject("invalid_tx", "unknown_tx_type", {"tx_type": t})

    if not env.signer:
        return TxVerdict.reject("invalid_tx", "missing_signer", {"tx_type": t})

    raw_payload = tx.get("payload") if isinstance(tx, dict) else env.payload
    limit_err = _validate_payload_limits(raw_payload)
    if limit_err is not None:
        return limit_err

    ok, code, reason, details = validate_payload(tx_type=t, payload=raw_payload)
    if not ok:
        return TxVerdict.reject(code, reason, details)

    if txdef is not None:
        gate_err = _check_gate(txdef, env, ledger)
        if gate_err is not None:
            return gate_err

    return TxVerdict.admit()


__all__ = ["admit_tx"]
