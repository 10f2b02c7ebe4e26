# src/tapcoin/runtime/proposals.py
from __future__ import annotations

"""Governance proposal actions and lifecycle status.

A proposal's effect is decided once, when it is created, and stored on the
proposal as a tagged action. Execution never re-reads the description.
"""

from dataclasses import dataclass
from typing import Any, Dict, Union

from tapcoin.ledger.constants import SET_DEFAULT_SECONDARY_COIN_PREFIX

Json = Dict[str, Any]

STATUS_OPEN = "open"
STATUS_CLOSED_PENDING = "closed_pending"
STATUS_EXECUTED = "executed"


@dataclass(frozen=True)
class NoOp:
    kind: str = "noop"

    def apply(self, state: Json) -> None:
        return None


@dataclass(frozen=True)
class SetDefaultSecondaryCurrency:
    value: str
    kind: str = "set_default_secondary_currency"

    def apply(self, state: Json) -> None:
        params = state.get("params")
        if not isinstance(params, dict):
            params = {}
            state["params"] = params
        params["default_secondary_currency"] = self.value


ProposalAction = Union[NoOp, SetDefaultSecondaryCurrency]


def parse_proposal_action(description: str) -> ProposalAction:
    """Map a free-text description to an action.

    Exact literal prefix match; the remainder is taken verbatim. An empty
    remainder is a NoOp.
    """
    text = description if isinstance(description, str) else ""
    if text.startswith(SET_DEFAULT_SECONDARY_COIN_PREFIX):
        remainder = text[len(SET_DEFAULT_SECONDARY_COIN_PREFIX) :]
        if remainder:
            return SetDefaultSecondaryCurrency(value=remainder)
    return NoOp()


def action_to_json(action: ProposalAction) -> Json:
    if isinstance(action, SetDefaultSecondaryCurrency):
        return {"kind": action.kind, "value": action.value}
    return {"kind": NoOp.kind}


def action_from_json(j: Any) -> ProposalAction:
    if isinstance(j, dict) and j.get("kind") == SetDefaultSecondaryCurrency.kind:
        value = j.get("value")
        if isinstance(value, str) and value:
            return SetDefaultSecondaryCurrency(value=value)
    return NoOp()


def proposal_status(proposal: Json, *, now: int) -> str:
    if bool(proposal.get("executed", False)):
        return STATUS_EXECUTED
    if int(now) < int(proposal.get("deadline") or 0):
        return STATUS_OPEN
    return STATUS_CLOSED_PENDING


__all__ = [
    "NoOp",
    "ProposalAction",
    "STATUS_CLOSED_PENDING",
    "STATUS_EXECUTED",
    "STATUS_OPEN",
    "SetDefaultSecondaryCurrency",
    "action_from_json",
    "action_to_json",
    "parse_proposal_action",
    "proposal_status",
]
