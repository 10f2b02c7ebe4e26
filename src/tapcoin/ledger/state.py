from __future__ import annotations

from dataclasses import dataclass, field
import copy
from typing import Any, Dict


Json = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class LedgerView:
    """
    Immutable read-only ledger view used by admission and the API.
    """

    accounts: Dict[str, Any] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    total_supply: int = 0
    total_burned_tokens: int = 0
    time: int = 0

    @classmethod
    def from_ledger(cls, state: Dict[str, Any]) -> "LedgerView":
        return cls(
            accounts=copy.deepcopy(state.get("accounts", {})) if isinstance(state.get("accounts"), dict) else {},
            params=copy.deepcopy(state.get("params", {})) if isinstance(state.get("params"), dict) else {},
            total_supply=int(state.get("total_supply", 0) or 0),
            total_burned_tokens=int(state.get("total_burned_tokens", 0) or 0),
            time=int(state.get("time", 0) or 0),
        )

    def get_account(self, account_id: str) -> Dict[str, Any]:
        acct = self.accounts.get(account_id)
        return acct if isinstance(acct, dict) else {}

    def balance_of(self, account_id: str) -> int:
        acct = self.get_account(account_id)
        try:
            return int(acct.get("balance", 0))
        except Exception:
            return 0

    def get_param(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)

    def admin(self) -> str:
        return str(self.params.get("admin") or "").strip()

    def contract_account(self) -> str:
        return str(self.params.get("contract_account") or "").strip()

    def is_paused(self) -> bool:
        return bool(self.params.get("paused", False))

    def reserve_balance(self) -> int:
        return self.balance_of(self.contract_account())

    def summary(self) -> Json:
        return {
            "total_supply": int(self.total_supply),
            "total_burned_tokens": int(self.total_burned_tokens),
            "max_supply": int(self.params.get("max_supply") or 0),
            "burn_rate_bps": int(self.params.get("burn_rate_bps") or 0),
            "paused": self.is_paused(),
            "default_secondary_currency": str(self.params.get("default_secondary_currency") or ""),
            "admin": self.admin(),
            "contract_account": self.contract_account(),
            "reserve_balance": self.reserve_balance(),
            "time": int(self.time),
        }
