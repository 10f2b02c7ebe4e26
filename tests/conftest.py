from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

# Ensure local "src/" takes precedence over any globally-installed "tapcoin" package.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

src_str = str(SRC)
if src_str not in sys.path:
    sys.path.insert(0, src_str)

from tapcoin.runtime.chain_config import ChainConfig, chain_config_from_dict  # noqa: E402
from tapcoin.runtime.executor import LedgerExecutor  # noqa: E402

GENESIS_TIME = 1_700_000_000


class ManualClock:
    def __init__(self, start: int = GENESIS_TIME) -> None:
        self.now = int(start)

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += int(seconds)


def dev_config(**overrides: Any) -> ChainConfig:
    raw: Dict[str, Any] = {
        "chain_id": "tapcoin-test",
        "mode": "dev",
        "db_path": "",
        "genesis_allocations": {},
    }
    raw.update(overrides)
    return chain_config_from_dict(raw)


def tx(tx_type: str, signer: str, **payload: Any) -> Dict[str, Any]:
    return {"tx_type": tx_type, "signer": signer, "payload": payload}


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def make_executor(clock: ManualClock) -> Callable[..., LedgerExecutor]:
    def _make(**overrides: Any) -> LedgerExecutor:
        return LedgerExecutor(dev_config(**overrides), clock=clock)

    return _make
