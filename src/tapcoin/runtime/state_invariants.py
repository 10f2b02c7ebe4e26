# src/tapcoin/runtime/state_invariants.py
from __future__ import annotations

"""State invariants / normalization helpers.

TapCoin state is a nested JSON-like dict that is mutated deterministically by apply_* modules.
This module is the single place that:

  - validates the state is dict-like
  - ensures core top-level containers exist (so domain modules can rely on them)
  - checks the ledger-wide supply invariants before a unit of work is committed

Domain-specific containers (proposals, votes) remain the responsibility of the
corresponding apply_* module.
"""

from collections.abc import MutableMapping
from typing import Any, Dict

from tapcoin.runtime.errors import ApplyError

Json = Dict[str, Any]


def ensure_state(st: Any) -> Json:
    """Ensure `st` is a dict and contains core keys.

    Returns the (possibly mutated) dict.

    Raises:
        TypeError: if st is not a MutableMapping
    """
    if not isinstance(st, MutableMapping):
        raise TypeError(f"state must be MutableMapping, got {type(st)}")

    acc = st.get("accounts")
    if acc is None:
        st["accounts"] = {}
    elif not isinstance(acc, dict):
        # Fail closed: do not attempt to coerce arbitrary types.
        raise TypeError(f"state['accounts'] must be dict, got {type(acc)}")

    # Params carries admin identity, supply cap, burn rate, pause flag, etc.
    params = st.get("params")
    if params is None:
        st["params"] = {}
    elif not isinstance(params, dict):
        raise TypeError(f"state['params'] must be dict, got {type(params)}")

    for key in ("total_supply", "total_burned_tokens", "time"):
        v = st.get(key)
        if v is None:
            st[key] = 0
        elif not isinstance(v, int) or isinstance(v, bool):
            raise TypeError(f"state[{key!r}] must be int, got {type(v)}")

    return st  # type: ignore[return-value]


def check_supply_invariants(st: Json) -> None:
    """Raise ApplyError if balances and supply disagree or the cap is breached."""
    params = st.get("params") or {}
    total = int(st.get("total_supply") or 0)
    cap = params.get("max_supply")

    if total < 0:
        raise ApplyError("invalid_state", "negative_total_supply", {"total_supply": total})

    if isinstance(cap, int) and total > cap:
        raise ApplyError("invalid_state", "supply_cap_breached", {"total_supply": total, "max_supply": cap})

    summed = 0
    for account_id, acct in (st.get("accounts") or {}).items():
        bal = int(acct.get("balance", 0)) if isinstance(acct, dict) else 0
        if bal < 0:
            raise ApplyError("invalid_state", "negative_balance", {"account": account_id, "balance": bal})
        summed += bal

    if summed != total:
        raise ApplyError("invalid_state", "supply_mismatch", {"total_supply": total, "sum_of_balances": summed})


__all__ = ["ensure_state", "check_supply_invariants"]
