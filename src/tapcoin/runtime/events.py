# src/tapcoin/runtime/events.py
from __future__ import annotations

"""Structured notifications for off-chain observers.

During a unit of work, events are buffered in state["events"] on the working
copy. The executor drains that buffer before commit and appends it to the
event log, so committed state carries only the `event_seq` counter and a
rolled-back tx never leaves events behind.
"""

import bisect
from typing import Any, Dict, List

Json = Dict[str, Any]

TOKENS_MINTED = "tokens_minted"
TOKENS_BURNED = "tokens_burned"
TRANSFER_COMPLETED = "transfer_completed"
ACTIVITY = "activity"
SALE_AUTOMATED = "sale_automated"
PAUSED = "paused"
UNPAUSED = "unpaused"
BURN_RATE_SET = "burn_rate_set"
PROPOSAL_CREATED = "proposal_created"
VOTE_CAST = "vote_cast"
PROPOSAL_EXECUTED = "proposal_executed"
FALLBACK_CONVERSION = "fallback_conversion"
FALLBACK_PAYMENT_COMPLETED = "fallback_payment_completed"


def _ensure_events(state: Json) -> List[Json]:
    evs = state.get("events")
    if not isinstance(evs, list):
        evs = []
        state["events"] = evs
    return evs


def emit_event(state: Json, event: str, **fields: Any) -> Json:
    evs = _ensure_events(state)
    seq = int(state.get("event_seq") or 0) + 1
    state["event_seq"] = seq

    rec: Json = {"seq": seq, "event": str(event), "time": int(state.get("time") or 0)}
    rec.update(fields)
    evs.append(rec)
    return rec


def drain_events(state: Json) -> List[Json]:
    """Remove and return the events buffered on `state`."""
    evs = state.pop("events", None)
    if not isinstance(evs, list):
        return []
    return [e for e in evs if isinstance(e, dict)]


def events_since(evs: List[Json], since: int = 0, *, limit: int = 100) -> List[Json]:
    """Events with seq > since, oldest first. `evs` must already be in seq order."""
    start = bisect.bisect_right(evs, int(since), key=lambda e: int(e.get("seq") or 0))
    return evs[start : start + max(0, int(limit))]


__all__ = ["drain_events", "emit_event", "events_since"]
