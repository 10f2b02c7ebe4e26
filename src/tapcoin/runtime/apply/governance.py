# src/tapcoin/runtime/apply/governance.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from tapcoin.ledger.constants import VOTING_PERIOD_SECONDS
from tapcoin.runtime.apply import ledger
from tapcoin.runtime.errors import (
    ALREADY_EXECUTED,
    ALREADY_VOTED,
    PROPOSAL_NOT_FOUND,
    VOTING_CLOSED,
    VOTING_STILL_OPEN,
    ApplyError,
)
from tapcoin.runtime.events import PROPOSAL_CREATED, PROPOSAL_EXECUTED, VOTE_CAST, emit_event
from tapcoin.runtime.proposals import action_from_json, action_to_json, parse_proposal_action
from tapcoin.runtime.tx_admission_types import TxEnvelope

Json = Dict[str, Any]


def _d(x: Any) -> Dict[str, Any]:
    return x if isinstance(x, dict) else {}


def _s(x: Any) -> str:
    return x if isinstance(x, str) else ("" if x is None else str(x))


def _i(x: Any, default: int = 0) -> int:
    try:
        return int(x)
    except Exception:
        return int(default)


def _now(state: Json) -> int:
    return _i(state.get("time"), 0)


def _voting_period(state: Json) -> int:
    params = _d(state.get("params"))
    return max(1, _i(params.get("voting_period_s"), VOTING_PERIOD_SECONDS))


def _ensure_root(state: Json) -> Dict[str, Any]:
    root = state.get("gov_proposals_by_id")
    if not isinstance(root, dict):
        root = {}
        state["gov_proposals_by_id"] = root
    if not isinstance(state.get("gov_votes"), dict):
        state["gov_votes"] = {}
    if not isinstance(state.get("gov_next_proposal_id"), int):
        state["gov_next_proposal_id"] = 1
    return root


def _proposal_id(payload: Dict[str, Any]) -> int:
    raw = payload.get("proposal_id")
    if raw is None or isinstance(raw, bool):
        raise ApplyError("invalid_payload", "missing_proposal_id", {})
    pid = _i(raw, 0)
    if pid <= 0:
        raise ApplyError("invalid_payload", "bad_proposal_id", {"proposal_id": raw})
    return pid


def _proposal(root: Dict[str, Any], proposal_id: int) -> Dict[str, Any]:
    pr = root.get(str(proposal_id))
    if not isinstance(pr, dict):
        raise ApplyError("not_found", PROPOSAL_NOT_FOUND, {"proposal_id": proposal_id})
    return pr


def get_proposal(state: Json, proposal_id: int) -> Optional[Json]:
    pr = _d(state.get("gov_proposals_by_id")).get(str(int(proposal_id)))
    return pr if isinstance(pr, dict) else None


def list_proposals(state: Json) -> List[Json]:
    root = _d(state.get("gov_proposals_by_id"))
    out = [pr for pr in root.values() if isinstance(pr, dict)]
    out.sort(key=lambda pr: _i(pr.get("proposal_id"), 0))
    return out


def has_voted(state: Json, proposal_id: int, voter: str) -> bool:
    votes = _d(_d(state.get("gov_votes")).get(str(int(proposal_id))))
    return str(voter) in votes


def _apply_gov_proposal_create(state: Json, env: TxEnvelope) -> Dict[str, Any]:
    root = _ensure_root(state)
    p = _d(env.payload)

    if "description" not in p:
        raise ApplyError("invalid_payload", "missing_description", {})
    description = _s(p.get("description"))

    proposal_id = int(state["gov_next_proposal_id"])
    state["gov_next_proposal_id"] = proposal_id + 1

    now = _now(state)
    action = parse_proposal_action(description)

    root[str(proposal_id)] = {
        "proposal_id": proposal_id,
        "proposer": str(env.signer),
        "description": description,
        "action": action_to_json(action),
        "created_at": now,
        "deadline": now + _voting_period(state),
        "yes_votes": 0,
        "no_votes": 0,
        "executed": False,
        "passed": None,
        "executed_at": 0,
    }

    emit_event(
        state,
        PROPOSAL_CREATED,
        proposal_id=proposal_id,
        proposer=str(env.signer),
        description=description,
        deadline=root[str(proposal_id)]["deadline"],
    )
    return {"applied": "GOV_PROPOSAL_CREATE", "proposal_id": proposal_id}


def _apply_gov_vote_cast(state: Json, env: TxEnvelope) -> Dict[str, Any]:
    root = _ensure_root(state)
    p = _d(env.payload)
    proposal_id = _proposal_id(p)

    support = p.get("support")
    if not isinstance(support, bool):
        raise ApplyError("invalid_payload", "missing_support", {"proposal_id": proposal_id})

    pr = _proposal(root, proposal_id)
    now = _now(state)
    if now >= _i(pr.get("deadline"), 0):
        raise ApplyError("forbidden", VOTING_CLOSED, {"proposal_id": proposal_id, "deadline": pr.get("deadline")})

    voter = str(env.signer)
    if has_voted(state, proposal_id, voter):
        raise ApplyError("conflict", ALREADY_VOTED, {"proposal_id": proposal_id, "voter": voter})

    # Live balance at call time, not a snapshot.
    weight = ledger.balance_of(state, voter)
    if support:
        pr["yes_votes"] = _i(pr.get("yes_votes"), 0) + weight
    else:
        pr["no_votes"] = _i(pr.get("no_votes"), 0) + weight

    state["gov_votes"].setdefault(str(proposal_id), {})[voter] = {"support": support, "weight": weight, "time": now}

    emit_event(state, VOTE_CAST, proposal_id=proposal_id, voter=voter, support=support, weight=weight)
    return {"applied": "GOV_VOTE_CAST", "proposal_id": proposal_id, "weight": weight}


def _apply_gov_execute(state: Json, env: TxEnvelope) -> Dict[str, Any]:
    root = _ensure_root(state)
    p = _d(env.payload)
    proposal_id = _proposal_id(p)

    pr = _proposal(root, proposal_id)
    now = _now(state)
    if now < _i(pr.get("deadline"), 0):
        raise ApplyError("forbidden", VOTING_STILL_OPEN, {"proposal_id": proposal_id, "deadline": pr.get("deadline")})
    if bool(pr.get("executed", False)):
        raise ApplyError("conflict", ALREADY_EXECUTED, {"proposal_id": proposal_id})

    # Ties fail.
    passed = _i(pr.get("yes_votes"), 0) > _i(pr.get("no_votes"), 0)
    if passed:
        action_from_json(pr.get("action")).apply(state)

    pr["executed"] = True
    pr["passed"] = passed
    pr["executed_at"] = now

    emit_event(state, PROPOSAL_EXECUTED, proposal_id=proposal_id, passed=passed)
    return {"applied": "GOV_EXECUTE", "proposal_id": proposal_id, "passed": passed}


_GOV_HANDLERS = {
    "GOV_PROPOSAL_CREATE": _apply_gov_proposal_create,
    "GOV_VOTE_CAST": _apply_gov_vote_cast,
    "GOV_EXECUTE": _apply_gov_execute,
}


def apply_governance(state: Json, env: TxEnvelope) -> Optional[Json]:
    t = _s(env.tx_type).strip().upper()
    fn = _GOV_HANDLERS.get(t)
    if fn is None:
        return None
    return fn(state, env)


__all__ = ["apply_governance", "get_proposal", "has_voted", "list_proposals"]
