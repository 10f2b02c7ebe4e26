from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ApplyError(Exception):
    """Canonical error type for domain apply and dispatch failures."""

    code: str
    reason: str
    details: Any | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


# Distinct, caller-visible failure reasons.
CAP_EXCEEDED = "cap_exceeded"
INSUFFICIENT_BALANCE = "insufficient_balance"
CONTRACT_PAUSED = "contract_paused"
VOTING_CLOSED = "voting_closed"
VOTING_STILL_OPEN = "voting_still_open"
ALREADY_VOTED = "already_voted"
ALREADY_EXECUTED = "already_executed"
RESERVE_INSUFFICIENT = "reserve_insufficient"
UNAUTHORIZED = "unauthorized"
PROPOSAL_NOT_FOUND = "proposal_not_found"
