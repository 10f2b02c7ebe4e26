from __future__ import annotations

import copy
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from tapcoin.ledger.state import LedgerView
from tapcoin.runtime.apply import ledger
from tapcoin.runtime.chain_config import ChainConfig, genesis_params, load_chain_config
from tapcoin.runtime.domain_dispatch import apply_tx
from tapcoin.runtime.errors import ApplyError
from tapcoin.runtime.events import drain_events, events_since
from tapcoin.runtime.sqlite_db import SqliteDB, SqliteLedgerStore
from tapcoin.runtime.state_invariants import check_supply_invariants, ensure_state
from tapcoin.runtime.tx_admission import admit_tx
from tapcoin.runtime.tx_admission_types import TxEnvelope
from tapcoin.structured_logging import log_event
from tapcoin.tx.canon import TxIndex

Json = Dict[str, Any]
Clock = Callable[[], int]

log = logging.getLogger("tapcoin.executor")


def _wall_clock() -> int:
    return int(time.time())


class ExecutorError(RuntimeError):
    pass


class LedgerExecutor:
    """Applies tx envelopes to the ledger one at a time, all-or-nothing.

    Each submission is admitted, applied to a deep copy of committed state,
    invariant-checked, persisted, and only then swapped in. Any failure leaves
    committed state untouched.
    """

    def __init__(
        self,
        cfg: ChainConfig,
        *,
        clock: Optional[Clock] = None,
        canon: Optional[TxIndex] = None,
    ) -> None:
        self.cfg = cfg
        self.chain_id = str(cfg.chain_id)
        self.tx_index = canon or TxIndex.load_from_file()

        self._clock: Clock = clock or _wall_clock
        self._lock = threading.RLock()

        # Event log for in-memory mode; a store keeps its own events table.
        self._events: List[Json] = []

        self._store: Optional[SqliteLedgerStore] = None
        if str(cfg.db_path or "").strip():
            self._store = SqliteLedgerStore(db=SqliteDB(path=cfg.db_path))

        if self._store is not None and self._store.exists():
            self.state = self._store.read()
        else:
            self.state = self._initial_state()
            if self._store is not None:
                self._store.write(self.state)

        ensure_state(self.state)

        # Fail-closed on chain_id mismatch once state is present.
        st_chain_id = str(self.state.get("chain_id") or "").strip()
        if st_chain_id != self.chain_id:
            raise ExecutorError(
                f"chain_id mismatch: db={st_chain_id!r} executor={self.chain_id!r}. Refuse to start."
            )

        check_supply_invariants(self.state)

    def _initial_state(self) -> Json:
        params = genesis_params(self.cfg)
        st: Json = {
            "chain_id": self.chain_id,
            "time": 0,
            "tx_count": 0,
            "params": params,
            "accounts": {},
            "total_supply": 0,
            "total_burned_tokens": 0,
            "gov_next_proposal_id": 1,
            "gov_proposals_by_id": {},
            "gov_votes": {},
            "event_seq": 0,
        }
        ledger.ensure_account(st, params["admin"])
        ledger.ensure_account(st, params["contract_account"])

        for account, amount in sorted(self.cfg.genesis_allocations.items()):
            ledger.mint(st, account, int(amount))
        return st

    # ----------------------------
    # Reads
    # ----------------------------

    def now(self) -> int:
        """Current clock reading, never behind the last committed time."""
        with self._lock:
            return max(int(self.state.get("time") or 0), int(self._clock()))

    def read_state(self) -> Json:
        with self._lock:
            return copy.deepcopy(self.state)

    def ledger_view(self) -> LedgerView:
        with self._lock:
            return LedgerView.from_ledger(self.state)

    def events(self, *, since: int = 0, limit: int = 100) -> List[Json]:
        if self._store is not None:
            return self._store.events_since(since, limit=limit)
        with self._lock:
            return copy.deepcopy(events_since(self._events, since, limit=limit))

    def tx_log(self, *, limit: int = 100) -> List[Json]:
        if self._store is None:
            return []
        return self._store.tx_log(limit=limit)

    # ----------------------------
    # Writes
    # ----------------------------

    def _reject(self, env: TxEnvelope, err: ApplyError) -> None:
        log_event(
            log,
            "tx_rejected",
            level=logging.WARNING,
            tx_type=env.tx_type,
            signer=env.signer,
            code=err.code,
            reason=err.reason,
            details=err.details,
        )

    def submit_tx(self, tx: Any) -> Json:
        """Admit and apply one tx envelope atomically.

        Raises ApplyError on any rejection; committed state is then unchanged.
        """
        if not isinstance(tx, (dict, TxEnvelope)):
            raise ApplyError("invalid_tx", "malformed_envelope", {"type": type(tx).__name__})
        try:
            env = TxEnvelope.from_json(tx)
        except (TypeError, ValueError) as e:
            raise ApplyError("invalid_tx", "malformed_envelope", {"error": str(e)}) from e

        with self._lock:
            now = max(int(self.state.get("time") or 0), int(self._clock()))

            raw = tx if isinstance(tx, dict) else env.to_json()
            verdict = admit_tx(raw, LedgerView.from_ledger(self.state), self.tx_index)
            if not verdict.ok:
                err = ApplyError(verdict.code, verdict.reason, verdict.details)
                self._reject(env, err)
                raise err

            working: Json = copy.deepcopy(self.state)
            working["time"] = now
            working["events"] = []

            try:
                result = apply_tx(working, env)
                check_supply_invariants(working)
            except ApplyError as e:
                self._reject(env, e)
                raise

            new_events = drain_events(working)
            working["tx_count"] = int(working.get("tx_count") or 0) + 1

            if self._store is not None:
                self._store.write(working, tx=env.to_json(), result=result, events=new_events)
            else:
                self._events.extend(copy.deepcopy(new_events))

            self.state = working

        log_event(log, "tx_applied", tx_type=env.tx_type, signer=env.signer, time=now, result=result)
        for ev in new_events:
            log_event(log, "ledger_event", notification=ev)

        return {"ok": True, "tx_type": env.tx_type, "result": result, "events": copy.deepcopy(new_events)}

    @classmethod
    def from_env(cls) -> "LedgerExecutor":
        return cls(load_chain_config())


__all__ = ["ExecutorError", "LedgerExecutor"]
